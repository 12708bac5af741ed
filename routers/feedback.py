# routers/feedback.py

from fastapi import APIRouter, Depends, HTTPException

from core.access import ScreenResult, load_screen
from core.errors import backend_error, client_unavailable
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, AuditSeverity, FeedbackKind, ResourceType
from models.identity import Identity
from services.audit_log import log_audit_event
from services.data_service import fetch_feedback


router = APIRouter(
    prefix="/feedback",
    tags=["Feedback"],
)


FEEDBACK_TABLES = {
    FeedbackKind.feedback: ("feedback", ResourceType.feedback),
    FeedbackKind.review: ("reviews", ResourceType.review),
}


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


# -----------------------------------------------------
# LIST FEEDBACK + REVIEWS (newest first)
# -----------------------------------------------------
@router.get("", response_model=ScreenResult, summary="List feedback and reviews")
def list_feedback(identity: Identity = Depends(requires_capability(Capability.view_feedback))):
    return load_screen(
        identity,
        Capability.view_feedback,
        lambda: fetch_feedback(_client()),
        operation="Failed to load feedback",
        row_actions=(Capability.delete_feedback,),
    )


# -----------------------------------------------------
# DELETE FEEDBACK ITEM OR REVIEW
# -----------------------------------------------------
@router.delete("/{kind}/{item_id}", summary="Delete a feedback item or review")
def delete_feedback(
    kind: FeedbackKind,
    item_id: str,
    identity: Identity = Depends(requires_capability(Capability.delete_feedback)),
):
    table, resource_type = FEEDBACK_TABLES[kind]
    client = _client()

    try:
        result = client.table(table).delete().eq("id", item_id).execute()
    except Exception as e:
        raise backend_error(e, f"Failed to delete {kind.value}") from e

    if not result.data:
        raise HTTPException(404, f"{kind.value.capitalize()} not found")

    log_audit_event(
        identity,
        AuditAction.feedback_deleted,
        resource_type,
        item_id,
        details={"kind": kind.value},
        severity=AuditSeverity.medium,
        client=client,
    )
    return {"success": True, "deleted": item_id, "kind": kind.value}
