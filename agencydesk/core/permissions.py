"""
Permission system for role-based access control (RBAC).

Defines user roles, the permission vocabulary, the default permission set of
each role, and the navigation items guarded by those permissions.
Admins bypass every check; everyone else needs an explicit permission.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Protocol, Sequence, Set, Tuple

logger = logging.getLogger(__name__)


class UserRole(str, Enum):
    """Roles for staff users"""
    ADMIN = "admin"          # Full access
    SALES = "sales"          # Clients, leads and sales goals
    EXECUTION = "execution"  # Delivery and work tracking
    FINANCE = "finance"
    VIEWER = "viewer"        # Read-only access


class Permission(str, Enum):
    """Capabilities that can be granted to a user"""
    VIEW_CLIENTS = "view_clients"
    EDIT_CLIENTS = "edit_clients"
    ARCHIVE_CLIENTS = "archive_clients"
    VIEW_LEADS = "view_leads"
    EDIT_LEADS = "edit_leads"
    CREATE_PACKAGES = "create_packages"
    EDIT_PACKAGES = "edit_packages"
    VIEW_INVOICES = "view_invoices"
    CREATE_INVOICES = "create_invoices"
    EDIT_INVOICES = "edit_invoices"
    VIEW_GOALS = "view_goals"
    EDIT_GOALS = "edit_goals"
    VIEW_FINANCE = "view_finance"
    EDIT_FINANCE = "edit_finance"
    ASSIGN_EMPLOYEES = "assign_employees"
    EDIT_WORK_TRACKING = "edit_work_tracking"
    VIEW_EMPLOYEES = "view_employees"
    EDIT_EMPLOYEES = "edit_employees"


# Default permissions for each role, used when a user has no explicit set
ROLE_DEFAULT_PERMISSIONS: Dict[UserRole, FrozenSet[Permission]] = {
    UserRole.ADMIN: frozenset(Permission),
    UserRole.SALES: frozenset({
        Permission.VIEW_CLIENTS,
        Permission.EDIT_CLIENTS,
        Permission.VIEW_LEADS,
        Permission.EDIT_LEADS,
        Permission.VIEW_GOALS,
        Permission.ASSIGN_EMPLOYEES,
    }),
    UserRole.EXECUTION: frozenset({
        Permission.VIEW_CLIENTS,
        Permission.VIEW_GOALS,
        Permission.EDIT_WORK_TRACKING,
    }),
    UserRole.FINANCE: frozenset({
        Permission.VIEW_CLIENTS,
        Permission.VIEW_GOALS,
    }),
    UserRole.VIEWER: frozenset({
        Permission.VIEW_CLIENTS,
        Permission.VIEW_LEADS,
        Permission.VIEW_GOALS,
    }),
}


class PermissionHolder(Protocol):
    role: str
    permissions: Iterable[str]


def _value(item) -> str:
    return item.value if isinstance(item, Enum) else str(item)


def is_admin(user: Optional[PermissionHolder]) -> bool:
    return user is not None and _value(user.role) == UserRole.ADMIN.value


def has_permission(user: Optional[PermissionHolder], permission: Permission) -> bool:
    """
    Check if a user holds a permission.

    Args:
        user: Authenticated user, or None when unauthenticated
        permission: Permission being checked

    Returns:
        False without a user, True for admins, otherwise membership
    """
    if user is None:
        return False
    if is_admin(user):
        return True
    granted = {_value(p) for p in (user.permissions or ())}
    return _value(permission) in granted


def has_any_permission(user: Optional[PermissionHolder], *permissions: Permission) -> bool:
    """
    Check if a user holds at least one of the given permissions.

    Returns:
        False without a user, True for admins, otherwise True iff any
        permission is granted
    """
    if user is None:
        return False
    if is_admin(user):
        return True
    granted = {_value(p) for p in (user.permissions or ())}
    return any(_value(p) in granted for p in permissions)


def get_role_permissions(role: UserRole) -> FrozenSet[Permission]:
    """
    Get the default permissions for a role.

    Args:
        role: User role

    Returns:
        Frozen set of permissions (empty for unknown roles)
    """
    try:
        return ROLE_DEFAULT_PERMISSIONS[UserRole(_value(role))]
    except ValueError:
        return frozenset()


def effective_permissions(role: UserRole, stored: Optional[Iterable[str]] = None) -> Set[Permission]:
    """
    Resolve the permissions a user actually holds.

    An explicit stored set wins over the role defaults. Unknown names in the
    stored set are dropped and logged.
    """
    if stored is None:
        return set(get_role_permissions(role))

    resolved: Set[Permission] = set()
    for name in stored:
        try:
            resolved.add(Permission(_value(name)))
        except ValueError:
            logger.warning(f"Ignoring unknown permission '{name}' for role '{_value(role)}'")
    return resolved


# ==================== Navigation ====================

@dataclass(frozen=True)
class NavItem:
    path: str
    label_key: str
    permissions: Tuple[Permission, ...] = ()


NAV_ITEMS: Tuple[NavItem, ...] = (
    NavItem("/", "nav.dashboard"),
    NavItem("/goals", "nav.goals", (Permission.VIEW_GOALS,)),
    NavItem("/clients", "nav.clients", (Permission.VIEW_CLIENTS, Permission.VIEW_LEADS)),
    NavItem("/work-tracking", "nav.workTracking", (Permission.VIEW_CLIENTS, Permission.EDIT_WORK_TRACKING)),
    NavItem("/packages", "nav.packages", (Permission.CREATE_PACKAGES, Permission.EDIT_PACKAGES)),
    NavItem("/invoices", "nav.invoices", (
        Permission.VIEW_INVOICES, Permission.CREATE_INVOICES, Permission.EDIT_INVOICES
    )),
    NavItem("/employees", "nav.employees", (Permission.VIEW_EMPLOYEES,)),
    NavItem("/sales", "nav.sales", (Permission.VIEW_CLIENTS, Permission.EDIT_CLIENTS)),
    NavItem("/calendar", "nav.calendar"),
    NavItem("/finance", "nav.finance", (Permission.VIEW_FINANCE,)),
    NavItem("/settings", "nav.settings"),
)


def is_nav_item_visible(user: Optional[PermissionHolder], item: NavItem) -> bool:
    """Items without requirements are public; admins see everything."""
    if not item.permissions:
        return True
    if is_admin(user):
        return True
    return has_any_permission(user, *item.permissions)


def visible_nav_items(
    user: Optional[PermissionHolder],
    items: Sequence[NavItem] = NAV_ITEMS
) -> List[NavItem]:
    return [item for item in items if is_nav_item_visible(user, item)]
