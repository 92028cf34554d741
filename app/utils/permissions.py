"""
Admin permissions resolver.
Maps user type, admin level and assigned country to a capability set.
"""

from typing import Optional, Union
from pydantic import BaseModel, ConfigDict
from app.models.user import User, UserType, AdminLevel
from app.utils.country import get_country_info


class AdminPermissions(BaseModel):
    """Capability set for one user. All flags default to denied."""

    model_config = ConfigDict(frozen=True)

    # User management
    can_view_users: bool = False
    can_edit_users: bool = False
    can_delete_users: bool = False

    # Payments
    can_view_payments: bool = False
    can_process_payments: bool = False
    can_accept_payments: bool = False
    can_issue_refunds: bool = False

    # Moderation
    can_approve_properties: bool = False
    can_reject_properties: bool = False
    can_approve_agents: bool = False
    can_escalate_to_higher_admin: bool = False

    # System
    can_view_system_settings: bool = False
    can_edit_system_settings: bool = False
    can_view_all_dashboards: bool = False
    can_manage_admins: bool = False

    # Pricing
    can_edit_country_pricing: bool = False
    can_edit_global_pricing: bool = False

    # Country scope
    assigned_country_id: Optional[str] = None
    assigned_country_name: Optional[str] = None
    can_view_all_countries: bool = False
    country_filter: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.can_approve_properties or self.can_view_all_countries


NO_PERMISSIONS = AdminPermissions()


def _coerce_enum(value, enum_cls):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def get_admin_permissions(
    user_type: Union[UserType, str, None],
    admin_level: Union[AdminLevel, str, None],
    country_id: Optional[str] = None,
    country_name: Optional[str] = None
) -> AdminPermissions:
    """
    Resolve the capability set for a user.

    Args:
        user_type: Account type of the user
        admin_level: Admin tier (super/owner/basic), None for non-admins
        country_id: Country the admin is assigned to
        country_name: Display name of the assigned country

    Returns:
        AdminPermissions; every flag is False for non-admins
    """
    user_type = _coerce_enum(user_type, UserType)
    admin_level = _coerce_enum(admin_level, AdminLevel)

    if user_type != UserType.ADMIN or admin_level is None:
        return NO_PERMISSIONS

    if admin_level == AdminLevel.SUPER:
        return AdminPermissions(
            can_view_users=True,
            can_edit_users=True,
            can_delete_users=True,
            can_view_payments=True,
            can_process_payments=True,
            can_accept_payments=True,
            can_issue_refunds=True,
            can_approve_properties=True,
            can_reject_properties=True,
            can_approve_agents=True,
            can_escalate_to_higher_admin=False,
            can_view_system_settings=True,
            can_edit_system_settings=True,
            can_view_all_dashboards=True,
            can_manage_admins=True,
            can_edit_country_pricing=True,
            can_edit_global_pricing=True,
            assigned_country_id=country_id,
            assigned_country_name=country_name,
            can_view_all_countries=True,
            country_filter=None,
        )

    # Owner and basic admins are confined to their assigned country
    is_owner = admin_level == AdminLevel.OWNER
    return AdminPermissions(
        can_view_users=True,
        can_edit_users=False,
        can_delete_users=False,
        can_view_payments=True,
        can_process_payments=True,
        can_accept_payments=True,
        can_issue_refunds=False,
        can_approve_properties=True,
        can_reject_properties=True,
        can_approve_agents=True,
        can_escalate_to_higher_admin=True,
        can_view_system_settings=is_owner,
        can_edit_system_settings=False,
        can_view_all_dashboards=is_owner,
        can_manage_admins=False,
        can_edit_country_pricing=is_owner,
        can_edit_global_pricing=False,
        assigned_country_id=country_id,
        assigned_country_name=country_name,
        can_view_all_countries=False,
        country_filter=country_id,
    )


def get_user_permissions(user: Optional[User]) -> AdminPermissions:
    """Resolve permissions for a user model (None means anonymous)."""
    if user is None:
        return NO_PERMISSIONS

    return get_admin_permissions(
        user.user_type,
        user.admin_level,
        user.country_id,
        get_country_info(user.country_id)["name"],
    )


def can_access_country_data(permissions: AdminPermissions, country_id: Optional[str]) -> bool:
    """
    Check whether an admin may see or change data for a country.

    Args:
        permissions: Resolved admin permissions
        country_id: Country of the target row

    Returns:
        True for global admins or when the country matches the assignment
    """
    if permissions.can_view_all_countries:
        return True
    if not permissions.assigned_country_id or not country_id:
        return False
    return permissions.assigned_country_id == country_id


def get_country_filter(permissions: AdminPermissions) -> Optional[str]:
    """Country to restrict admin queries to, or None for unrestricted."""
    if permissions.can_view_all_countries:
        return None
    return permissions.assigned_country_id
