# core/access.py

"""
One composition path for every dashboard screen:

    identity → view capability → fetch → location scope → row actions

Routers call load_screen() instead of checking roles themselves so no
screen drifts from the shared policy.
"""

from typing import Callable, Dict, List, Sequence

from fastapi import HTTPException
from pydantic import BaseModel

from core.errors import access_denied, backend_error
from core.location_scope import describe_scope, scope_rows
from core.permission_helpers import has_capability, require_capability
from core.permissions import Capability
from models.address import Address
from models.identity import Identity


class ScreenResult(BaseModel):
    rows: List[dict]
    total: int
    # "Global Access", "No Location Assigned" or the admin's regions, so an
    # empty list is never mistaken for a permission problem
    scope: str
    actions: Dict[str, bool]


def allowed_actions(identity: Identity, actions: Sequence[Capability]) -> Dict[str, bool]:
    return {cap.value: has_capability(identity, cap) for cap in actions}


def fetch_rows(fetch: Callable[[], list], operation: str) -> list:
    """Run a backend read; failures surface as a retryable 502."""
    try:
        return fetch() or []
    except HTTPException:
        raise
    except Exception as e:
        raise backend_error(e, operation) from e


def load_screen(
    identity: Identity,
    view: Capability,
    fetch: Callable[[], list],
    *,
    operation: str,
    row_actions: Sequence[Capability] = (),
    address_of: Callable[[dict], Address] = Address.from_record,
) -> ScreenResult:
    # Refuse before fetching: a denied caller must not cost a backend read
    require_capability(identity, view)

    rows = fetch_rows(fetch, operation)
    visible = scope_rows(identity, rows, address_of)
    actions = allowed_actions(identity, row_actions)

    return ScreenResult(
        rows=[
            {**row, "location": address_of(row).model_dump(), "actions": dict(actions)}
            for row in visible
        ],
        total=len(visible),
        scope=describe_scope(identity),
        actions=actions,
    )


def require_in_scope(
    identity: Identity,
    row: dict,
    address_of: Callable[[dict], Address] = Address.from_record,
):
    """403 when a single record falls outside the caller's location scope."""
    if not scope_rows(identity, [row], address_of):
        raise access_denied("record is outside your assigned regions")
