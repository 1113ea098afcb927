# Overview: The fixed user roles, their capability sets and default permissions.

from .helpers import get_all_permission_codes


class UserRole:
    """Closed set of roles a user account can hold."""
    SUPER_ADMIN = "SUPER_ADMIN"
    PARISH_ADMIN = "PARISH_ADMIN"
    ACCOUNTANT = "ACCOUNTANT"
    SECRETARY = "SECRETARY"
    VIEWER = "VIEWER"


ALL_ROLES = (
    UserRole.SUPER_ADMIN,
    UserRole.PARISH_ADMIN,
    UserRole.ACCOUNTANT,
    UserRole.SECRETARY,
    UserRole.VIEWER,
)

# Capability sets. Not a total order: admin ops, finance and write access
# are independent allow-lists.
ADMIN_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.PARISH_ADMIN})
FINANCE_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.PARISH_ADMIN, UserRole.ACCOUNTANT})
WRITE_ROLES = frozenset(ALL_ROLES) - {UserRole.VIEWER}


SYSTEM_ROLE_DISPLAY = {
    UserRole.SUPER_ADMIN: ("Super Administrator", "Diocese-wide administrator with access to every parish"),
    UserRole.PARISH_ADMIN: ("Parish Administrator", "Administers a single parish"),
    UserRole.ACCOUNTANT: ("Accountant", "Manages parish finances and budgets"),
    UserRole.SECRETARY: ("Secretary", "Maintains member and sacrament registers"),
    UserRole.VIEWER: ("Viewer", "Read-only access to parish records"),
}


_VIEW_ALL = [
    "VIEW_MEMBERS",
    "VIEW_SACRAMENTS",
    "VIEW_STRUCTURE",
    "VIEW_SETTINGS",
]

DEFAULT_ROLE_PERMISSIONS = {
    UserRole.SUPER_ADMIN: get_all_permission_codes(),

    UserRole.PARISH_ADMIN: [
        code for code in get_all_permission_codes()
        if code not in ("MANAGE_DIOCESES", "MANAGE_GLOBAL_SETTINGS")
    ],

    UserRole.ACCOUNTANT: _VIEW_ALL + [
        "VIEW_FINANCE",
        "RECORD_INCOME",
        "RECORD_EXPENSES",
        "PRINT_RECEIPTS",
        "VIEW_BUDGETS",
        "MANAGE_BUDGETS",
        "SYNC_DEVICE",
    ],

    UserRole.SECRETARY: _VIEW_ALL + [
        "MANAGE_MEMBERS",
        "MANAGE_FAMILIES",
        "RECORD_SACRAMENTS",
        "SYNC_DEVICE",
    ],

    UserRole.VIEWER: list(_VIEW_ALL),
}
