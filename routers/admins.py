# routers/admins.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.errors import backend_error, client_unavailable
from core.logging_config import logger
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.roles import describe_role, parse_role
from core.supabase_client import get_supabase_client
from dependencies.auth import get_current_identity
from models.enums import AuditAction, AuditSeverity, ResourceType, Role
from models.identity import Identity, Region, regions_from_assigned_location
from services.audit_log import log_audit_event
from services.data_service import fetch_admin_target, fetch_admins


router = APIRouter(
    prefix="/admins",
    tags=["Admin Management"],
    dependencies=[Depends(requires_capability(Capability.manage_admin_regions))],
)


# --------------------------------------------------------------
# Request model
# --------------------------------------------------------------
class RegionAssignment(BaseModel):
    regions: List[Region]


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


def assigned_location_for(regions: List[Region]):
    """
    users.admin_assigned_location holds a single location; the first
    region is written there. The full list lives in user_metadata.regions.
    """
    if not regions:
        return None
    first = regions[0]
    return {"country": first.country, "city": None, "district": first.name}


def _load_target(client, user_id: str) -> dict:
    try:
        target = fetch_admin_target(client, user_id)
    except Exception as e:
        raise backend_error(e, "Failed to load user") from e
    if not target:
        raise HTTPException(404, "User not found")
    return target


def _write_regions(client, target: dict, regions: List[Region], role: Optional[Role] = None):
    """
    Writes the users row, then user_metadata.regions. When the metadata
    update fails the row is put back, so both keep the previous regions.
    """
    user_id = target["id"]
    changes = {"admin_assigned_location": assigned_location_for(regions)}
    if role is not None:
        changes["role"] = role.value
    previous = {field: target.get(field) for field in changes}

    client.table("users").update(changes).eq("id", user_id).execute()

    try:
        client.auth.admin.update_user_by_id(
            user_id,
            {"user_metadata": {"regions": [r.model_dump() for r in regions]}},
        )
    except Exception:
        logger.warning(f"Region metadata update failed for {user_id}; restoring users row")
        try:
            client.table("users").update(previous).eq("id", user_id).execute()
        except Exception as restore_error:
            logger.error(f"Could not restore users row for {user_id}: {restore_error}")
        raise


# --------------------------------------------------------------
# GET /admins - admins and super admins with their regions
# --------------------------------------------------------------
@router.get("", summary="List admins and their regions")
def list_admins():
    client = _client()

    try:
        rows = fetch_admins(client)
    except Exception as e:
        raise backend_error(e, "Failed to load admins") from e

    admins = []
    for row in rows:
        admins.append({
            "id": row.get("id"),
            "name": row.get("full_name") or row.get("email"),
            "email": row.get("email"),
            "role": row.get("role"),
            "role_label": describe_role(row.get("role"))["label"],
            "regions": regions_from_assigned_location(row.get("admin_assigned_location")),
            "created_at": row.get("created_at"),
        })

    return {"admins": admins, "total": len(admins)}


# --------------------------------------------------------------
# PUT /admins/{user_id}/regions
# --------------------------------------------------------------
@router.put("/{user_id}/regions", summary="Assign regions to an admin")
def assign_regions(
    user_id: str,
    payload: RegionAssignment,
    identity: Identity = Depends(get_current_identity),
):
    client = _client()
    target = _load_target(client, user_id)

    # Role changes go through /promote and /demote
    if parse_role(target.get("role")) != Role.admin:
        raise HTTPException(400, "Regions can only be assigned to admins")

    try:
        _write_regions(client, target, payload.regions)
    except Exception as e:
        raise backend_error(e, "Failed to assign regions") from e

    log_audit_event(
        identity,
        AuditAction.admin_regions_assigned,
        ResourceType.admin,
        user_id,
        details={"regions": [r.model_dump() for r in payload.regions]},
        severity=AuditSeverity.high,
        client=client,
    )
    return {"success": True, "user_id": user_id, "regions": payload.regions}


# --------------------------------------------------------------
# POST /admins/{user_id}/promote - user → admin with regions
# --------------------------------------------------------------
@router.post("/{user_id}/promote", summary="Promote a user to admin")
def promote_to_admin(
    user_id: str,
    payload: RegionAssignment,
    identity: Identity = Depends(get_current_identity),
):
    if not payload.regions:
        raise HTTPException(400, "An admin needs at least one region")

    client = _client()
    target = _load_target(client, user_id)

    if parse_role(target.get("role")) == Role.super_admin:
        raise HTTPException(400, "A super admin cannot be promoted to admin")

    try:
        _write_regions(client, target, payload.regions, Role.admin)
    except Exception as e:
        raise backend_error(e, "Failed to promote user") from e

    logger.info(f"User {user_id} promoted to admin by {identity.email}")
    log_audit_event(
        identity,
        AuditAction.role_changed,
        ResourceType.admin,
        user_id,
        details={"role": Role.admin.value, "regions": [r.model_dump() for r in payload.regions]},
        severity=AuditSeverity.high,
        client=client,
    )
    return {"success": True, "user_id": user_id, "role": Role.admin.value, "regions": payload.regions}


# --------------------------------------------------------------
# POST /admins/{user_id}/demote - admin → user, regions cleared
# --------------------------------------------------------------
@router.post("/{user_id}/demote", summary="Demote an admin to user")
def demote_admin(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
):
    if user_id == identity.id:
        raise HTTPException(400, "You cannot demote your own account")

    client = _client()
    target = _load_target(client, user_id)

    if parse_role(target.get("role")) != Role.admin:
        raise HTTPException(400, "Only admins can be demoted")

    try:
        _write_regions(client, target, [], Role.user)
    except Exception as e:
        raise backend_error(e, "Failed to demote admin") from e

    logger.info(f"Admin {user_id} demoted by {identity.email}")
    log_audit_event(
        identity,
        AuditAction.role_changed,
        ResourceType.admin,
        user_id,
        details={"role": Role.user.value},
        severity=AuditSeverity.high,
        client=client,
    )
    return {"success": True, "user_id": user_id, "role": Role.user.value}
