# routers/members.py

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr
from typing import Optional

from core.access import ScreenResult, load_screen, require_in_scope
from core.errors import backend_error, client_unavailable
from core.logging_config import logger
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.roles import parse_role
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, AuditSeverity, ResourceType
from models.identity import Identity
from services.audit_log import log_audit_event
from services.data_service import fetch_member, fetch_members
from services.exports import MEMBER_EXPORT_COLUMNS, csv_response


router = APIRouter(
    prefix="/members",
    tags=["Members"],
)


MEMBER_ACTIONS = (
    Capability.edit_member_contact,
    Capability.delete_members,
    Capability.suspend_members,
    Capability.assign_roles,
)

# Admins may only touch these columns
CONTACT_FIELDS = ("full_name", "mobile_phone", "email", "city", "state")


# -----------------------------------------------------
# Request models
# -----------------------------------------------------
class MemberContactUpdate(BaseModel):
    full_name: Optional[str] = None
    mobile_phone: Optional[str] = None
    email: Optional[EmailStr] = None
    city: Optional[str] = None
    state: Optional[str] = None


class RoleAssignment(BaseModel):
    role: str


class SuspendRequest(BaseModel):
    reason: str = "Suspended by admin"


# -----------------------------------------------------
# Helper - sanitize payloads ("" -> None)
# -----------------------------------------------------
def sanitize(data: dict) -> dict:
    clean = {}
    for k, v in data.items():
        if isinstance(v, str) and v.strip() == "":
            clean[k] = None
        elif isinstance(v, str):
            clean[k] = v.strip()
        else:
            clean[k] = v
    return clean


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


def _load_member(client, user_id: str) -> dict:
    try:
        member = fetch_member(client, user_id)
    except Exception as e:
        raise backend_error(e, "Failed to load member") from e

    if not member:
        raise HTTPException(404, "Member not found")
    return member


# -----------------------------------------------------
# LIST MEMBERS
# -----------------------------------------------------
@router.get("", response_model=ScreenResult, summary="List marketplace members")
def list_members(identity: Identity = Depends(requires_capability(Capability.view_members))):
    return load_screen(
        identity,
        Capability.view_members,
        lambda: fetch_members(_client()),
        operation="Failed to load members",
        row_actions=MEMBER_ACTIONS,
    )


# -----------------------------------------------------
# EXPORT MEMBERS (CSV of the caller's visible rows)
# -----------------------------------------------------
@router.get("/export", summary="Export members as CSV")
def export_members(identity: Identity = Depends(requires_capability(Capability.export_data))):
    client = _client()
    screen = load_screen(
        identity,
        Capability.view_members,
        lambda: fetch_members(client),
        operation="Failed to load members",
    )

    log_audit_event(
        identity,
        AuditAction.data_exported,
        ResourceType.export,
        details={"screen": "members", "rows": screen.total},
        client=client,
    )
    return csv_response(screen.rows, MEMBER_EXPORT_COLUMNS, "members")


# -----------------------------------------------------
# UPDATE CONTACT DETAILS
# -----------------------------------------------------
@router.patch("/{user_id}", summary="Edit a member's contact details")
def update_member_contact(
    user_id: str,
    payload: MemberContactUpdate,
    identity: Identity = Depends(requires_capability(Capability.edit_member_contact)),
):
    updates = sanitize(payload.model_dump(exclude_unset=True))
    updates = {k: v for k, v in updates.items() if k in CONTACT_FIELDS}
    if not updates:
        raise HTTPException(400, "No contact fields to update")

    client = _client()
    member = _load_member(client, user_id)
    require_in_scope(identity, member)

    try:
        result = client.table("users").update(updates).eq("id", user_id).execute()
    except Exception as e:
        raise backend_error(e, "Failed to update member") from e

    log_audit_event(
        identity,
        AuditAction.user_updated,
        ResourceType.user,
        user_id,
        details={"fields": sorted(updates)},
        client=client,
    )

    return {"success": True, "member": (result.data or [{**member, **updates}])[0]}


# -----------------------------------------------------
# DELETE MEMBER
# -----------------------------------------------------
@router.delete("/{user_id}", summary="Delete a member")
def delete_member(
    user_id: str,
    identity: Identity = Depends(requires_capability(Capability.delete_members)),
):
    if user_id == identity.id:
        raise HTTPException(400, "You cannot delete your own account")

    client = _client()

    try:
        result = client.table("users").delete().eq("id", user_id).execute()
    except Exception as e:
        raise backend_error(e, "Failed to delete member") from e

    if not result.data:
        raise HTTPException(404, "Member not found")

    logger.info(f"Member {user_id} deleted by {identity.email}")
    log_audit_event(
        identity,
        AuditAction.user_deleted,
        ResourceType.user,
        user_id,
        severity=AuditSeverity.high,
        client=client,
    )
    return {"success": True, "deleted": user_id}


# -----------------------------------------------------
# ASSIGN ROLE
# -----------------------------------------------------
@router.put("/{user_id}/role", summary="Change a member's role")
def assign_role(
    user_id: str,
    payload: RoleAssignment,
    identity: Identity = Depends(requires_capability(Capability.assign_roles)),
):
    role = parse_role(payload.role)
    if role is None:
        raise HTTPException(400, f"Unknown role '{payload.role}'")

    if user_id == identity.id:
        raise HTTPException(400, "You cannot change your own role")

    client = _client()

    try:
        client.table("users").update({"role": role.value}).eq("id", user_id).execute()
    except Exception as e:
        raise backend_error(e, "Failed to change role") from e

    log_audit_event(
        identity,
        AuditAction.role_changed,
        ResourceType.user,
        user_id,
        details={"role": role.value},
        severity=AuditSeverity.high,
        client=client,
    )
    return {"success": True, "user_id": user_id, "role": role.value}


# -----------------------------------------------------
# SUSPEND / UNSUSPEND
# -----------------------------------------------------
@router.post("/{user_id}/suspend", summary="Suspend a member")
def suspend_member(
    user_id: str,
    payload: SuspendRequest,
    identity: Identity = Depends(requires_capability(Capability.suspend_members)),
):
    if user_id == identity.id:
        raise HTTPException(400, "You cannot suspend your own account")

    client = _client()

    try:
        result = client.rpc(
            "suspend_user_direct",
            {
                "user_id_param": user_id,
                "suspended_by_param": identity.id,
                "reason_param": payload.reason,
            },
        ).execute()
    except Exception as e:
        raise backend_error(e, "Failed to suspend member") from e

    log_audit_event(
        identity,
        AuditAction.user_suspended,
        ResourceType.user,
        user_id,
        details={"reason": payload.reason},
        severity=AuditSeverity.high,
        client=client,
    )
    return {"success": True, "user_id": user_id, "data": result.data}


@router.post("/{user_id}/unsuspend", summary="Lift a member's suspension")
def unsuspend_member(
    user_id: str,
    identity: Identity = Depends(requires_capability(Capability.suspend_members)),
):
    client = _client()

    try:
        result = client.rpc("unsuspend_user_direct", {"user_id_param": user_id}).execute()
    except Exception as e:
        raise backend_error(e, "Failed to unsuspend member") from e

    log_audit_event(
        identity,
        AuditAction.user_unsuspended,
        ResourceType.user,
        user_id,
        severity=AuditSeverity.medium,
        client=client,
    )
    return {"success": True, "user_id": user_id, "removed": result.data}
