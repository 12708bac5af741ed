# core/location_scope.py

from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from core.permissions import Capability, capabilities_for
from models.address import Address
from models.enums import Role
from models.identity import Identity, Region
from core.roles import parse_role


T = TypeVar("T")


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


# -----------------------------------------------------
# Record ↔ scope matching
# -----------------------------------------------------
def matches(address: Address, scope: Sequence[Region]) -> bool:
    """
    True when the record's country + state (or country + city when the
    record has no state) equals any region in the scope.
    Comparison is exact after trimming and lower-casing.
    An empty scope matches nothing.
    """
    if not scope:
        return False

    country = _norm(address.country)
    if not country:
        return False

    region_field = _norm(address.state) or _norm(address.city)
    if not region_field:
        return False

    for region in scope:
        if _norm(region.country) == country and _norm(region.name) == region_field:
            return True
    return False


# -----------------------------------------------------
# Scope applied to result sets
# -----------------------------------------------------
def scope_rows(
    identity: Identity,
    rows: Iterable[T],
    address_of: Callable[[T], Address] = Address.from_record,
) -> List[T]:
    """
    Narrow rows to what the caller may see.
      • super_admin → every row, matches() is never consulted
      • admin       → rows inside the assigned regions (none assigned → none)
      • anyone else → nothing
    """
    caps = capabilities_for(identity.role)

    if Capability.view_all_locations in caps:
        return list(rows)

    if parse_role(identity.role) == Role.admin:
        return [row for row in rows if matches(address_of(row), identity.regions)]

    return []


def has_location_restrictions(identity: Identity) -> bool:
    return Capability.view_all_locations not in capabilities_for(identity.role)


def describe_scope(identity: Identity) -> str:
    if not has_location_restrictions(identity):
        return "Global Access"
    if not identity.regions:
        return "No Location Assigned"
    return "; ".join(f"{r.name}, {r.country}" for r in identity.regions)
