# ============================================
# ROLE DISPLAY METADATA
# ============================================
from typing import Optional

from models.enums import Role


ROLE_LABELS = {
    Role.user: "User",
    Role.admin: "Admin",
    Role.super_admin: "Super Admin",
}

ROLE_DESCRIPTIONS = {
    Role.user: "Basic platform access for buying and selling",
    Role.admin: (
        "View-only access to admin features - can see members, orders, "
        "and interests in assigned regions but cannot delete or reassign"
    ),
    Role.super_admin: (
        "Full system access including user management, role assignment, "
        "and direct password changes"
    ),
}


def parse_role(value) -> Optional[Role]:
    """
    Map a raw role value from the backend to a Role.
    Unknown, blank or missing values give None.
    """
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value.strip().lower())
    except ValueError:
        return None


def describe_role(value) -> dict:
    role = parse_role(value)
    if role is None:
        return {"role": None, "label": "Unknown", "description": "No role assigned"}
    return {
        "role": role.value,
        "label": ROLE_LABELS[role],
        "description": ROLE_DESCRIPTIONS[role],
    }
