from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field
from typing import Optional

from core.errors import backend_error, client_unavailable
from core.location_scope import describe_scope
from core.logging_config import logger
from core.permission_helpers import capability_flags, has_capability, require_capability
from core.permissions import Capability
from core.roles import describe_role, parse_role
from core.session import Session, MemorySessionStorage, get_session_storage
from core.supabase_client import get_auth_client, get_supabase_client
from dependencies.auth import get_current_identity, get_session
from models.enums import AuditAction, AuditSeverity, ResourceType, Role
from models.identity import (
    Identity,
    regions_from_assigned_location,
    regions_from_metadata,
)
from services.audit_log import log_audit_event


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# MODELS
# ============================================================
class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    identity: Identity
    capabilities: dict
    scope: str


class ChangePasswordRequest(BaseModel):
    new_password: str = Field(min_length=6)
    current_password: Optional[str] = None


# ============================================================
# Identity construction
# ============================================================
def load_identity(auth_user, client) -> Identity:
    """
    Build the dashboard identity from a Supabase auth user.
    Role and name come from the users table; app_metadata.role is the
    fallback when that row cannot be read.
    """
    metadata = getattr(auth_user, "user_metadata", None) or {}
    app_metadata = getattr(auth_user, "app_metadata", None) or {}
    email = getattr(auth_user, "email", None) or ""

    row = {}
    try:
        result = (
            client.table("users")
            .select("full_name, role, admin_assigned_location")
            .eq("id", auth_user.id)
            .limit(1)
            .execute()
        )
        if result.data:
            row = result.data[0]
    except Exception as e:
        logger.warning(f"Could not read users row for {email}: {e}")

    role = parse_role(row.get("role")) or parse_role(app_metadata.get("role"))

    name = (
        row.get("full_name")
        or metadata.get("name")
        or (email.split("@")[0] if email else "")
        or "Admin"
    )

    regions = []
    if role == Role.admin:
        regions = regions_from_metadata(metadata.get("regions")) or regions_from_assigned_location(
            row.get("admin_assigned_location")
        )

    return Identity(
        id=auth_user.id,
        email=email,
        name=name,
        role=role.value if role else None,
        regions=regions,
    )


def dashboard_denied_message(identity: Identity) -> str:
    if parse_role(identity.role) == Role.user:
        return (
            "Access denied. Your account has user-level access only. "
            "Please contact an administrator to request admin privileges."
        )
    if identity.role is None:
        return (
            "Access denied. No role assigned to your account. "
            "Please contact an administrator to assign appropriate permissions."
        )
    return "Access denied. You do not have permission to access the admin panel."


def session_response(token: str, identity: Identity) -> SessionResponse:
    return SessionResponse(
        access_token=token,
        identity=identity,
        capabilities=capability_flags(identity),
        scope=describe_scope(identity),
    )


# ============================================================
# LOGIN (SUPABASE AUTH)
# ============================================================
@router.post("/login", response_model=SessionResponse, summary="Sign in to the admin dashboard")
def login(
    payload: LoginRequest,
    storage: MemorySessionStorage = Depends(get_session_storage),
):
    email = payload.email.strip().lower()

    auth_client = get_auth_client()
    if not auth_client:
        raise client_unavailable()

    try:
        response = auth_client.auth.sign_in_with_password(
            {"email": email, "password": payload.password}
        )
    except Exception as e:
        logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not response.session or not response.session.access_token or not response.user:
        raise HTTPException(401, "Invalid email or password")

    client = get_supabase_client()
    if not client:
        raise client_unavailable()

    identity = load_identity(response.user, client)

    if not has_capability(identity, Capability.access_dashboard):
        logger.warning(f"Dashboard login refused for {email} (role={identity.role})")
        try:
            auth_client.auth.sign_out()
        except Exception as e:
            logger.warning(f"Sign-out after refused login failed: {e}")
        raise HTTPException(status_code=403, detail=dashboard_denied_message(identity))

    token = response.session.access_token
    Session.for_token(storage, token).login(identity)

    logger.info(f"Admin user authorized: {identity.email} with role: {identity.role}")
    log_audit_event(identity, AuditAction.login, ResourceType.session, identity.id, client=client)

    return session_response(token, identity)


# ============================================================
# LOGOUT (idempotent)
# ============================================================
@router.post("/logout", summary="End the dashboard session")
def logout(session: Session = Depends(get_session)):
    identity = session.current_identity()
    session.logout()

    if identity is not None:
        log_audit_event(identity, AuditAction.logout, ResourceType.session, identity.id)

    return {"success": True}


# ============================================================
# CURRENT IDENTITY
# ============================================================
@router.get("/me", summary="Current identity, capabilities and scope")
def read_me(identity: Identity = Depends(get_current_identity)):
    return {
        "identity": identity,
        "role": describe_role(identity.role),
        "capabilities": capability_flags(identity),
        "scope": describe_scope(identity),
    }


# ============================================================
# REFRESH PERMISSIONS
# ============================================================
@router.post("/refresh", summary="Re-read role and regions for this session")
def refresh_identity(
    session: Session = Depends(get_session),
    identity: Identity = Depends(get_current_identity),
):
    client = get_supabase_client()
    if not client:
        raise client_unavailable()

    try:
        resp = client.auth.admin.get_user_by_id(identity.id)
    except Exception as e:
        raise backend_error(e, "Failed to refresh permissions") from e

    if not resp or not resp.user:
        session.logout()
        raise HTTPException(401, "Account no longer exists")

    refreshed = load_identity(resp.user, client)

    if not has_capability(refreshed, Capability.access_dashboard):
        session.logout()
        raise HTTPException(status_code=403, detail=dashboard_denied_message(refreshed))

    session.refresh(refreshed)

    return {
        "identity": refreshed,
        "capabilities": capability_flags(refreshed),
        "scope": describe_scope(refreshed),
    }


# ============================================================
# CHANGE OWN PASSWORD
# ============================================================
@router.post("/change-password", summary="Change the signed-in admin's password")
def change_password(
    payload: ChangePasswordRequest,
    identity: Identity = Depends(get_current_identity),
):
    """
    super_admin may set a new password directly.
    Everyone else must re-authenticate with the current password first.
    """
    require_capability(identity, Capability.access_dashboard)

    skip_current = has_capability(identity, Capability.change_password_without_current)

    if not skip_current:
        if not payload.current_password:
            raise HTTPException(400, "Current password is required")

        auth_client = get_auth_client()
        if not auth_client:
            raise client_unavailable()

        try:
            auth_client.auth.sign_in_with_password(
                {"email": identity.email, "password": payload.current_password}
            )
        except Exception:
            logger.warning(f"Password change refused for {identity.email}: bad current password")
            raise HTTPException(400, "Current password is incorrect")

    client = get_supabase_client()
    if not client:
        raise client_unavailable()

    try:
        client.auth.admin.update_user_by_id(identity.id, {"password": payload.new_password})
    except Exception as e:
        raise backend_error(e, "Failed to change password") from e

    log_audit_event(
        identity,
        AuditAction.password_changed,
        ResourceType.user,
        identity.id,
        details={"current_password_checked": not skip_current},
        severity=AuditSeverity.medium,
        client=client,
    )

    return {
        "success": True,
        "current_password_checked": not skip_current,
        "message": "Password updated successfully.",
    }
