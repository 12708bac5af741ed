# core/errors.py

from fastapi import HTTPException

from core.logging_config import logger


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Storage errors
      • Generic Python exceptions
    """

    # Case 1 - PostgREST / GoTrue errors expose .message
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2 - errors carrying the detail in args
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3 - plain string fallback
    return str(error) or "Unknown Supabase error"


def backend_error(error: Exception, operation: str) -> HTTPException:
    """
    Turn a failed Supabase call into a retryable 502.
    The backend message is passed through verbatim; there is no richer
    recovery available at this layer.
    Returns HTTPException (doesn't raise) so caller can re-raise with `from`.
    """
    detail = extract_supabase_error(error)
    logger.error(f"{operation}: {detail}")
    return HTTPException(status_code=502, detail=f"{operation}: {detail}")


def client_unavailable() -> HTTPException:
    return HTTPException(status_code=503, detail="Supabase client not configured")


def access_denied(reason: str) -> HTTPException:
    return HTTPException(status_code=403, detail=f"Access denied: {reason}")


def not_authenticated() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
