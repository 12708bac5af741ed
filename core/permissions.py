# ============================================
# CENTRALIZED ROLE → CAPABILITIES MAP
# ============================================
from typing import FrozenSet

from models.enums import BaseStrEnum, Role
from core.roles import parse_role


class Capability(BaseStrEnum):
    access_dashboard = "access_dashboard"

    # Screens
    view_members = "view_members"
    view_buyers = "view_buyers"
    view_sellers = "view_sellers"
    view_orders = "view_orders"
    view_feedback = "view_feedback"
    view_reports = "view_reports"
    view_activity_log = "view_activity_log"
    view_featured_sellers = "view_featured_sellers"
    export_data = "export_data"

    # Mutations
    edit_member_contact = "edit_member_contact"
    delete_members = "delete_members"
    suspend_members = "suspend_members"
    assign_roles = "assign_roles"
    change_order_status = "change_order_status"
    delete_feedback = "delete_feedback"
    manage_cover_image = "manage_cover_image"
    manage_featured_sellers = "manage_featured_sellers"
    change_password_without_current = "change_password_without_current"
    manage_admin_regions = "manage_admin_regions"

    # Scope
    view_all_locations = "view_all_locations"


ADMIN_CAPABILITIES = frozenset({
    Capability.access_dashboard,

    # Read access, narrowed to assigned regions
    Capability.view_members,
    Capability.view_buyers,
    Capability.view_sellers,
    Capability.view_orders,
    Capability.view_feedback,
    Capability.view_reports,
    Capability.view_featured_sellers,
    Capability.export_data,

    # Contact fields only
    Capability.edit_member_contact,
})


ROLE_CAPABILITIES = {

    # =====================================================
    # SUPER ADMIN - Full access to everything
    # =====================================================
    Role.super_admin: frozenset(Capability),

    # =====================================================
    # REGIONAL ADMIN
    # =====================================================
    Role.admin: ADMIN_CAPABILITIES,

    # =====================================================
    # MARKETPLACE USER - no dashboard access
    # =====================================================
    Role.user: frozenset(),
}


def capabilities_for(role) -> FrozenSet[Capability]:
    """
    Total over every input: unknown or missing roles get no capabilities.
    """
    parsed = parse_role(role)
    if parsed is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(parsed, frozenset())
