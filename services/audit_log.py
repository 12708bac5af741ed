# services/audit_log.py

import json
from datetime import datetime, timezone
from typing import Optional

from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, AuditSeverity, ResourceType
from models.identity import Identity


AUDIT_TABLE = "audit_logs"


def log_audit_event(
    identity: Identity,
    action: AuditAction,
    resource_type: ResourceType,
    resource_id: Optional[str] = None,
    details: Optional[dict] = None,
    severity: AuditSeverity = AuditSeverity.low,
    client=None,
):
    """
    Record an admin action in audit_logs.
    Never raises: a failed audit insert is logged and the action stands.
    """
    entry = {
        "user_id": identity.id,
        "user_name": identity.name,
        "user_email": identity.email,
        "action": str(action),
        "resource_type": str(resource_type),
        "resource_id": resource_id,
        "details": json.dumps(details or {}, default=str),
        "severity": str(severity),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    client = client or get_supabase_client()
    if client is None:
        logger.warning(f"Audit event '{action}' dropped: Supabase not configured")
        return

    try:
        client.table(AUDIT_TABLE).insert(entry).execute()
    except Exception as e:
        logger.warning(f"Failed to log audit event '{action}': {e}")


def fetch_audit_logs(
    client,
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
    severity: Optional[str] = None,
    limit: int = 200,
) -> list:
    query = client.table(AUDIT_TABLE).select("*")
    if action:
        query = query.eq("action", action)
    if resource_type:
        query = query.eq("resource_type", resource_type)
    if severity:
        query = query.eq("severity", severity)

    result = query.order("timestamp", desc=True).limit(limit).execute()
    return result.data or []


def summarize_audit_logs(entries: list) -> dict:
    """Counts per action and severity, plus how many entries fall on today (UTC)."""
    today = datetime.now(timezone.utc).date().isoformat()
    by_action: dict[str, int] = {}
    by_severity: dict[str, int] = {}
    today_count = 0

    for entry in entries:
        action = entry.get("action") or "unknown"
        severity = entry.get("severity") or "low"
        by_action[action] = by_action.get(action, 0) + 1
        by_severity[severity] = by_severity.get(severity, 0) + 1
        if str(entry.get("timestamp") or "").startswith(today):
            today_count += 1

    return {
        "total": len(entries),
        "today": today_count,
        "by_action": by_action,
        "by_severity": by_severity,
    }
