# routers/reports.py

from collections import Counter

from fastapi import APIRouter, Depends

from core.access import fetch_rows, load_screen
from core.errors import client_unavailable
from core.location_scope import describe_scope, scope_rows
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.supabase_client import get_supabase_client
from models.enums import InterestStatus
from models.identity import Identity
from services.data_service import (
    fetch_farmer_revenue,
    fetch_interests,
    fetch_members,
    fetch_sellers,
    location_stats,
)


router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


# -----------------------------------------------------
# GEOGRAPHIC REVENUE
# Accepted interests → per farmer → by state / country
# -----------------------------------------------------
@router.get("/revenue", summary="Farmer revenue by location")
def revenue_report(identity: Identity = Depends(requires_capability(Capability.view_reports))):
    screen = load_screen(
        identity,
        Capability.view_reports,
        lambda: fetch_farmer_revenue(_client()),
        operation="Failed to load revenue report",
    )

    farmers = screen.rows
    return {
        "scope": screen.scope,
        "total_revenue": sum(f["total_revenue"] for f in farmers),
        "total_orders": sum(f["total_orders"] for f in farmers),
        "total_farmers": len(farmers),
        "farmers": farmers,
        **location_stats(farmers),
    }


# -----------------------------------------------------
# DASHBOARD SUMMARY (counts inside the caller's scope)
# -----------------------------------------------------
@router.get("/summary", summary="Dashboard headline counts")
def dashboard_summary(identity: Identity = Depends(requires_capability(Capability.view_reports))):
    client = _client()

    members = scope_rows(identity, fetch_rows(lambda: fetch_members(client), "Failed to load members"))
    sellers = scope_rows(identity, fetch_rows(lambda: fetch_sellers(client), "Failed to load sellers"))
    orders = scope_rows(identity, fetch_rows(lambda: fetch_interests(client), "Failed to load orders"))

    by_status = Counter(o.get("status") or InterestStatus.pending.value for o in orders)

    return {
        "scope": describe_scope(identity),
        "members": len(members),
        "buyers": sum(1 for m in members if m.get("default_mode") == "buyer"),
        "sellers": len(sellers),
        "orders": len(orders),
        "orders_by_status": {status.value: by_status.get(status.value, 0) for status in InterestStatus},
    }
