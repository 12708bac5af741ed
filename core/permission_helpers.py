from fastapi import Depends

from core.errors import access_denied
from core.logging_config import logger
from core.permissions import Capability, capabilities_for
from dependencies.auth import get_current_identity
from models.identity import Identity


# -----------------------------------------------------
# Capability evaluation
# -----------------------------------------------------
def has_capability(identity: Identity, capability: Capability) -> bool:
    return capability in capabilities_for(identity.role)


def require_capability(identity: Identity, capability: Capability):
    """
    Raise 403 when the caller's role lacks the capability.
    Called before any backend request so a refused action never reaches Supabase.
    """
    if not has_capability(identity, capability):
        logger.warning(
            f"Denied '{capability}' for {identity.email} (role={identity.role})"
        )
        raise access_denied(f"'{capability}' is not permitted for role '{identity.role}'")


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_capability(capability: Capability):
    """
    Usage:
        @router.delete("/{id}", dependencies=[Depends(requires_capability(Capability.delete_feedback))])
    or take the returned identity as a parameter.
    """

    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        require_capability(identity, capability)
        return identity

    return dependency


def capability_flags(identity: Identity) -> dict:
    """Every capability with a boolean, for clients deciding which controls to show."""
    granted = capabilities_for(identity.role)
    return {cap.value: cap in granted for cap in Capability}
