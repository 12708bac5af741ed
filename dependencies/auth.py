from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.errors import not_authenticated
from core.session import Session, MemorySessionStorage, get_session_storage
from models.identity import Identity


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Session for the calling dashboard client
# ============================================================
def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    storage: MemorySessionStorage = Depends(get_session_storage),
) -> Session:
    """
    The bearer token issued at /auth/login is the session key.
    No token → 401; routes never render partial data for anonymous callers.
    """
    if not credentials or not credentials.credentials:
        raise not_authenticated()
    return Session.for_token(storage, credentials.credentials)


# ============================================================
# Current identity (401 when the session is empty or expired)
# ============================================================
def get_current_identity(session: Session = Depends(get_session)) -> Identity:
    identity = session.current_identity()
    if identity is None:
        raise not_authenticated()
    return identity
