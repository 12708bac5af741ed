# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    InterestStatus,
    FeedbackKind,
    FeedbackStatus,
    AuditAction,
    AuditSeverity,
    ResourceType,
)

# -------------------------
# Identity (dashboard session)
# -------------------------
from .identity import Identity, Region

# -------------------------
# Address (scope matching)
# -------------------------
from .address import Address

__all__ = [
    # enums
    "Role",
    "InterestStatus",
    "FeedbackKind",
    "FeedbackStatus",
    "AuditAction",
    "AuditSeverity",
    "ResourceType",

    # identity
    "Identity",
    "Region",

    # address
    "Address",
]
