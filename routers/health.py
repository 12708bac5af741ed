# routers/health.py

from fastapi import APIRouter, Response, status

from core.config import settings
from core.supabase_client import ping_supabase, DASHBOARD_TABLES

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Probes every dashboard table. Public.
# -----------------------------------------------------
@router.get("/db", summary="Supabase table probe")
def health_db(response: Response):
    """
    Reports "ok", "degraded" or "not_configured".

    A degraded backend answers 503 so uptime monitors alert on it.
    """
    result = ping_supabase()
    if result["status"] == "degraded":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App liveness")
def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
        "env": settings.ENV,
        "probed_tables": len(DASHBOARD_TABLES),
    }
