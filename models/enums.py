from enum import Enum


class BaseStrEnum(str, Enum):
    """Base enum that serializes cleanly to a string."""

    def __str__(self):
        return str(self.value)


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Value of users.role (see add-role-column migration)."""

    user = "user"
    admin = "admin"
    super_admin = "super_admin"


# -----------------------------------------------------
# INTEREST (ORDER) STATUS
# -----------------------------------------------------
class InterestStatus(BaseStrEnum):
    """Workflow state of a buyer's interest in a listing."""

    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    completed = "completed"


# -----------------------------------------------------
# FEEDBACK
# -----------------------------------------------------
class FeedbackKind(BaseStrEnum):
    """Which table a feedback item came from."""

    feedback = "feedback"
    review = "review"


class FeedbackStatus(BaseStrEnum):
    new = "new"
    in_progress = "in_progress"
    resolved = "resolved"


# -----------------------------------------------------
# AUDIT LOG
# -----------------------------------------------------
class AuditSeverity(BaseStrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class AuditAction(BaseStrEnum):
    login = "login"
    logout = "logout"
    password_changed = "password_changed"
    user_updated = "user_updated"
    user_deleted = "user_deleted"
    user_suspended = "user_suspended"
    user_unsuspended = "user_unsuspended"
    role_changed = "role_changed"
    admin_regions_assigned = "admin_regions_assigned"
    order_status_changed = "order_status_changed"
    feedback_deleted = "feedback_deleted"
    featured_seller_toggled = "featured_seller_toggled"
    featured_seller_priority_changed = "featured_seller_priority_changed"
    cover_image_uploaded = "cover_image_uploaded"
    cover_image_activated = "cover_image_activated"
    cover_image_deleted = "cover_image_deleted"
    data_exported = "data_exported"


class ResourceType(BaseStrEnum):
    user = "user"
    admin = "admin"
    order = "order"
    feedback = "feedback"
    review = "review"
    featured_seller = "featured_seller"
    cover_image = "cover_image"
    session = "session"
    export = "export"
