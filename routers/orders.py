# routers/orders.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.access import ScreenResult, load_screen
from core.errors import backend_error, client_unavailable
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, AuditSeverity, InterestStatus, ResourceType
from models.identity import Identity
from services.audit_log import log_audit_event
from services.data_service import fetch_interests
from services.exports import ORDER_EXPORT_COLUMNS, csv_response


router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
)


class OrderStatusUpdate(BaseModel):
    status: InterestStatus


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


# -----------------------------------------------------
# LIST ORDERS (interests, scoped by buyer address)
# -----------------------------------------------------
@router.get("", response_model=ScreenResult, summary="List orders")
def list_orders(identity: Identity = Depends(requires_capability(Capability.view_orders))):
    return load_screen(
        identity,
        Capability.view_orders,
        lambda: fetch_interests(_client()),
        operation="Failed to load orders",
        row_actions=(Capability.change_order_status,),
    )


# -----------------------------------------------------
# EXPORT ORDERS
# -----------------------------------------------------
@router.get("/export", summary="Export orders as CSV")
def export_orders(identity: Identity = Depends(requires_capability(Capability.export_data))):
    client = _client()
    screen = load_screen(
        identity,
        Capability.view_orders,
        lambda: fetch_interests(client),
        operation="Failed to load orders",
    )

    log_audit_event(
        identity,
        AuditAction.data_exported,
        ResourceType.export,
        details={"screen": "orders", "rows": screen.total},
        client=client,
    )
    return csv_response(screen.rows, ORDER_EXPORT_COLUMNS, "orders")


# -----------------------------------------------------
# CHANGE ORDER STATUS
# -----------------------------------------------------
@router.put("/{order_id}/status", summary="Change an order's status")
def change_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    identity: Identity = Depends(requires_capability(Capability.change_order_status)),
):
    client = _client()
    status = payload.status.value

    try:
        result = (
            client.table("interests")
            .update({"status": status, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", order_id)
            .execute()
        )
    except Exception as e:
        raise backend_error(e, "Failed to update order status") from e

    if not result.data:
        raise HTTPException(404, "Order not found")

    log_audit_event(
        identity,
        AuditAction.order_status_changed,
        ResourceType.order,
        order_id,
        details={"status": status},
        severity=AuditSeverity.medium,
        client=client,
    )
    return {"success": True, "order": result.data[0]}
