# models/identity.py

from typing import List, Optional
from pydantic import BaseModel, Field


class Region(BaseModel):
    """One regional assignment of an admin: a country and a state/city name."""
    country: str
    name: str


class Identity(BaseModel):
    """
    The authenticated caller for the current dashboard session.
    Only a fresh login or an explicit permission refresh replaces it.
    """
    id: str
    email: str
    name: str
    role: Optional[str] = None

    # Only meaningful for the admin role; super_admin is never scoped
    regions: List[Region] = Field(default_factory=list)


def regions_from_metadata(raw) -> List[Region]:
    """
    Parse `user_metadata.regions` as written by the dashboard
    (a list of {country, name, zipCodes?}). Malformed entries are skipped.
    """
    if not isinstance(raw, list):
        return []

    regions = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        country = (entry.get("country") or "").strip()
        name = (entry.get("name") or "").strip()
        if country and name:
            regions.append(Region(country=country, name=name))
    return regions


def regions_from_assigned_location(location) -> List[Region]:
    """
    Convert `users.admin_assigned_location` ({country, city, district})
    to regions. The district is stored in the state column, so it wins
    over the city when both are present.
    """
    if not isinstance(location, dict):
        return []

    country = (location.get("country") or "").strip()
    name = (location.get("district") or location.get("city") or "").strip()
    if not country or not name:
        return []
    return [Region(country=country, name=name)]
