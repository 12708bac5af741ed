# routers/sellers.py

from fastapi import APIRouter, Depends

from core.access import ScreenResult, load_screen
from core.errors import client_unavailable
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, ResourceType
from models.identity import Identity
from services.audit_log import log_audit_event
from services.data_service import fetch_sellers
from services.exports import SELLER_EXPORT_COLUMNS, csv_response


router = APIRouter(
    prefix="/sellers",
    tags=["Sellers"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


# -----------------------------------------------------
# LIST SELLERS (seller_profiles + owning user)
# Scoped by the owner's address; the store's business
# address only fills fields the owner row leaves empty.
# -----------------------------------------------------
@router.get("", response_model=ScreenResult, summary="List sellers / farmers")
def list_sellers(identity: Identity = Depends(requires_capability(Capability.view_sellers))):
    return load_screen(
        identity,
        Capability.view_sellers,
        lambda: fetch_sellers(_client()),
        operation="Failed to load sellers",
        row_actions=(
            Capability.edit_member_contact,
            Capability.manage_featured_sellers,
            Capability.suspend_members,
        ),
    )


# -----------------------------------------------------
# EXPORT SELLERS
# -----------------------------------------------------
@router.get("/export", summary="Export sellers as CSV")
def export_sellers(identity: Identity = Depends(requires_capability(Capability.export_data))):
    client = _client()
    screen = load_screen(
        identity,
        Capability.view_sellers,
        lambda: fetch_sellers(client),
        operation="Failed to load sellers",
    )

    log_audit_event(
        identity,
        AuditAction.data_exported,
        ResourceType.export,
        details={"screen": "sellers", "rows": screen.total},
        client=client,
    )
    return csv_response(screen.rows, SELLER_EXPORT_COLUMNS, "sellers")
