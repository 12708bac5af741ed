# routers/buyers.py

from fastapi import APIRouter, Depends

from core.access import ScreenResult, load_screen
from core.errors import client_unavailable
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, ResourceType
from models.identity import Identity
from services.audit_log import log_audit_event
from services.data_service import fetch_buyers
from services.exports import MEMBER_EXPORT_COLUMNS, csv_response


router = APIRouter(
    prefix="/buyers",
    tags=["Buyers"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


# -----------------------------------------------------
# LIST BUYERS (users whose default mode is buyer)
# -----------------------------------------------------
@router.get("", response_model=ScreenResult, summary="List buyers")
def list_buyers(identity: Identity = Depends(requires_capability(Capability.view_buyers))):
    return load_screen(
        identity,
        Capability.view_buyers,
        lambda: fetch_buyers(_client()),
        operation="Failed to load buyers",
        row_actions=(Capability.edit_member_contact, Capability.suspend_members),
    )


# -----------------------------------------------------
# EXPORT BUYERS
# -----------------------------------------------------
@router.get("/export", summary="Export buyers as CSV")
def export_buyers(identity: Identity = Depends(requires_capability(Capability.export_data))):
    client = _client()
    screen = load_screen(
        identity,
        Capability.view_buyers,
        lambda: fetch_buyers(client),
        operation="Failed to load buyers",
    )

    log_audit_event(
        identity,
        AuditAction.data_exported,
        ResourceType.export,
        details={"screen": "buyers", "rows": screen.total},
        client=client,
    )
    return csv_response(screen.rows, MEMBER_EXPORT_COLUMNS, "buyers")
