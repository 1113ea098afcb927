# Overview: Permission catalog and role package.
# Re-exports the public names so callers import from sanctus.permissions.

from .categories import PermissionCategory
from .definitions import PERMISSION_DEFINITIONS
from .helpers import get_all_permission_codes
from .roles import (
    UserRole,
    ALL_ROLES,
    ADMIN_ROLES,
    FINANCE_ROLES,
    WRITE_ROLES,
    SYSTEM_ROLE_DISPLAY,
    DEFAULT_ROLE_PERMISSIONS,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "get_all_permission_codes",
    "UserRole",
    "ALL_ROLES",
    "ADMIN_ROLES",
    "FINANCE_ROLES",
    "WRITE_ROLES",
    "SYSTEM_ROLE_DISPLAY",
    "DEFAULT_ROLE_PERMISSIONS",
]
