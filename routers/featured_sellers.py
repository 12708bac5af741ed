# routers/featured_sellers.py

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.access import ScreenResult, load_screen
from core.errors import backend_error, client_unavailable
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, ResourceType
from models.identity import Identity
from services.audit_log import log_audit_event
from services.data_service import fetch_featured_sellers


router = APIRouter(
    prefix="/featured-sellers",
    tags=["Featured Sellers"],
)


class FeaturedToggle(BaseModel):
    user_id: str
    notes: Optional[str] = None


class PriorityUpdate(BaseModel):
    priority: int


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


# -----------------------------------------------------
# LIST FEATURED SELLERS (highest priority first)
# -----------------------------------------------------
@router.get("", response_model=ScreenResult, summary="List featured sellers")
def list_featured_sellers(
    identity: Identity = Depends(requires_capability(Capability.view_featured_sellers)),
):
    return load_screen(
        identity,
        Capability.view_featured_sellers,
        lambda: fetch_featured_sellers(_client()),
        operation="Failed to load featured sellers",
        row_actions=(Capability.manage_featured_sellers,),
    )


# -----------------------------------------------------
# TOGGLE FEATURED STATUS (RPC toggle_featured_seller)
# -----------------------------------------------------
@router.post("/toggle", summary="Feature or un-feature a seller")
def toggle_featured_seller(
    payload: FeaturedToggle,
    identity: Identity = Depends(requires_capability(Capability.manage_featured_sellers)),
):
    client = _client()

    try:
        result = client.rpc(
            "toggle_featured_seller",
            {
                "p_user_id": payload.user_id,
                "p_admin_id": identity.id,
                "p_notes": payload.notes or None,
            },
        ).execute()
    except Exception as e:
        raise backend_error(e, "Failed to toggle featured seller") from e

    outcome = result.data or {}
    log_audit_event(
        identity,
        AuditAction.featured_seller_toggled,
        ResourceType.featured_seller,
        payload.user_id,
        details={"action": outcome.get("action") if isinstance(outcome, dict) else None},
        client=client,
    )
    return outcome


# -----------------------------------------------------
# UPDATE PRIORITY
# -----------------------------------------------------
@router.put("/{user_id}/priority", summary="Change a featured seller's priority")
def update_priority(
    user_id: str,
    payload: PriorityUpdate,
    identity: Identity = Depends(requires_capability(Capability.manage_featured_sellers)),
):
    client = _client()

    try:
        result = (
            client.table("featured_sellers")
            .update({
                "priority": payload.priority,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            })
            .eq("user_id", user_id)
            .execute()
        )
    except Exception as e:
        raise backend_error(e, "Failed to update featured seller priority") from e

    if not result.data:
        raise HTTPException(404, "Featured seller not found")

    log_audit_event(
        identity,
        AuditAction.featured_seller_priority_changed,
        ResourceType.featured_seller,
        user_id,
        details={"priority": payload.priority},
        client=client,
    )
    return {"success": True, "user_id": user_id, "priority": payload.priority}
