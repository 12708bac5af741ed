# routers/activity.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.access import fetch_rows
from core.errors import client_unavailable
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, AuditSeverity, ResourceType
from models.identity import Identity
from services.audit_log import fetch_audit_logs, summarize_audit_logs


router = APIRouter(
    prefix="/activity",
    tags=["Activity Log"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


# -----------------------------------------------------
# LIST AUDIT ENTRIES (newest first)
# Audit rows carry no address, so the screen is super_admin only
# -----------------------------------------------------
@router.get("", summary="List audit log entries")
def list_activity(
    action: Optional[AuditAction] = None,
    resource_type: Optional[ResourceType] = None,
    severity: Optional[AuditSeverity] = None,
    limit: int = Query(200, ge=1, le=1000),
    identity: Identity = Depends(requires_capability(Capability.view_activity_log)),
):
    client = _client()
    entries = fetch_rows(
        lambda: fetch_audit_logs(
            client,
            action=action.value if action else None,
            resource_type=resource_type.value if resource_type else None,
            severity=severity.value if severity else None,
            limit=limit,
        ),
        "Failed to load audit logs",
    )
    return {"entries": entries, "total": len(entries)}


# -----------------------------------------------------
# AUDIT STATISTICS
# -----------------------------------------------------
@router.get("/stats", summary="Audit log statistics")
def activity_stats(identity: Identity = Depends(requires_capability(Capability.view_activity_log))):
    client = _client()
    entries = fetch_rows(
        lambda: fetch_audit_logs(client, limit=1000),
        "Failed to load audit logs",
    )
    return summarize_audit_logs(entries)
