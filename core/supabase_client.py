# core/supabase_client.py

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (service role)
# ============================================================

def get_supabase_client() -> Client:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    Used for:
        - auth.admin.update_user_by_id (password changes)
        - reading / writing the marketplace tables
        - storage uploads and RPC calls
    """
    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        return create_client(supabase_url, supabase_key)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Auth Client (password sign-in)
# ============================================================

def get_auth_client() -> Client:
    """
    Client used for password sign-in and re-authentication.
    Prefers the anon key so sign-in behaves like the dashboard login form.
    A fresh client per call keeps sign-in sessions from leaking between requests.
    """
    key = settings.SUPABASE_ANON_KEY or settings.SUPABASE_SERVICE_ROLE_KEY

    if not settings.SUPABASE_URL or not key:
        logger.error("Missing Supabase credentials for sign-in")
        return None

    try:
        return create_client(settings.SUPABASE_URL, key)
    except Exception as e:
        logger.error(f"Supabase Auth Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Ping Supabase for health checks
# ============================================================

DASHBOARD_TABLES = (
    "users",
    "seller_profiles",
    "interests",
    "feedback",
    "reviews",
    "audit_logs",
    "featured_sellers",
    "cover_images",
)


def ping_supabase() -> dict:
    """
    Probes each dashboard table with a one-row read.

    The overall status is "degraded" when any table fails, so a missing
    migration shows up without taking the whole check down.
    """
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    failed = []
    tables = {}
    for name in DASHBOARD_TABLES:
        try:
            client.table(name).select("id").limit(1).execute()
            tables[name] = "ok"
        except Exception as err:
            logger.warning(f"Health probe failed for {name}: {err}")
            tables[name] = f"error: {err}"
            failed.append(name)

    return {
        "service": "Supabase",
        "status": "degraded" if failed else "ok",
        "failed_tables": failed,
        "tables": tables,
    }
