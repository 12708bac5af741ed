# models/address.py

import json
from typing import Any, Optional
from pydantic import BaseModel


ADDRESS_FIELDS = ("country", "state", "city", "zipcode")

# Column prefixes used by joined seller rows (user_country, user_state, ...)
FIELD_PREFIXES = ("", "user_")

# Related rows embedded by PostgREST joins
NESTED_ROW_KEYS = ("buyer", "user", "seller")

ZIPCODE_ALIASES = ("zipcode", "zip_code", "postal_code", "zip")


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_blob(blob: Any) -> dict:
    """Business addresses arrive either as a dict or as a JSON-encoded string."""
    if isinstance(blob, dict):
        return blob
    if isinstance(blob, str) and blob.strip().startswith("{"):
        try:
            parsed = json.loads(blob)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


class Address(BaseModel):
    """
    Normalized address of a marketplace record.
    Built once at the data-access boundary so scope matching and display
    never re-parse record shapes.
    """
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    zipcode: Optional[str] = None

    @classmethod
    def from_record(cls, row: Optional[dict]) -> "Address":
        """
        Collect address fields from a backend row.
        Precedence: flat columns, then embedded related rows, then the
        `address` blob for anything still missing.
        """
        found = {field: None for field in ADDRESS_FIELDS}
        if not isinstance(row, dict):
            return cls()

        def fill_from(source: dict, prefixes=FIELD_PREFIXES):
            for field in ADDRESS_FIELDS:
                if found[field]:
                    continue
                names = ZIPCODE_ALIASES if field == "zipcode" else (field,)
                for prefix in prefixes:
                    for name in names:
                        value = _clean(source.get(f"{prefix}{name}"))
                        if value:
                            found[field] = value
                            break
                    if found[field]:
                        break

        fill_from(row)

        for key in NESTED_ROW_KEYS:
            nested = row.get(key)
            if isinstance(nested, dict):
                fill_from(nested, prefixes=("",))

        fill_from(_parse_blob(row.get("address")), prefixes=("",))

        return cls(**found)

    def is_empty(self) -> bool:
        return not any((self.country, self.state, self.city, self.zipcode))
