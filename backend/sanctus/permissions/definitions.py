# Overview: Permission catalog organized by group.
# Each permission is defined as: (key, display_name, description, group)

from .categories import PermissionCategory


# -- MEMBERS --

MEMBER_PERMISSIONS = [
    ("VIEW_MEMBERS", "View Members", "View parishioners and families", PermissionCategory.MEMBERS),
    ("MANAGE_MEMBERS", "Manage Members", "Create, edit and remove parishioners", PermissionCategory.MEMBERS),
    ("MANAGE_FAMILIES", "Manage Families", "Create, edit and remove family records", PermissionCategory.MEMBERS),
]


# -- SACRAMENTS --

SACRAMENT_PERMISSIONS = [
    ("VIEW_SACRAMENTS", "View Sacraments", "View sacrament registers", PermissionCategory.SACRAMENTS),
    ("RECORD_SACRAMENTS", "Record Sacraments", "Record and correct sacrament entries", PermissionCategory.SACRAMENTS),
]


# -- FINANCE --

FINANCE_PERMISSIONS = [
    ("VIEW_FINANCE", "View Finance", "View income transactions and expense vouchers", PermissionCategory.FINANCE),
    ("RECORD_INCOME", "Record Income", "Record tithes, offertory and other income", PermissionCategory.FINANCE),
    ("RECORD_EXPENSES", "Record Expenses", "Raise expense vouchers", PermissionCategory.FINANCE),
    ("APPROVE_EXPENSES", "Approve Expenses", "Approve or reject expense vouchers", PermissionCategory.FINANCE),
    ("PRINT_RECEIPTS", "Print Receipts", "Print and reprint income receipts", PermissionCategory.FINANCE),
]


# -- BUDGETS --

BUDGET_PERMISSIONS = [
    ("VIEW_BUDGETS", "View Budgets", "View parish budgets", PermissionCategory.BUDGETS),
    ("MANAGE_BUDGETS", "Manage Budgets", "Create and edit budget lines", PermissionCategory.BUDGETS),
]


# -- STRUCTURE --

STRUCTURE_PERMISSIONS = [
    ("VIEW_STRUCTURE", "View Structure", "View dioceses, parishes, clusters and SCCs", PermissionCategory.STRUCTURE),
    ("MANAGE_PARISH", "Manage Parish", "Edit parish details", PermissionCategory.STRUCTURE),
    ("MANAGE_CLUSTERS", "Manage Clusters", "Create and edit clusters and SCCs", PermissionCategory.STRUCTURE),
    ("MANAGE_DIOCESES", "Manage Dioceses", "Create and edit dioceses and parishes", PermissionCategory.STRUCTURE),
]


# -- USERS --

USER_PERMISSIONS = [
    ("VIEW_USERS", "View Users", "View user accounts", PermissionCategory.USERS),
    ("MANAGE_USERS", "Manage Users", "Create, edit and deactivate user accounts", PermissionCategory.USERS),
]


# -- ROLES --

ROLE_PERMISSIONS = [
    ("MANAGE_ROLES", "Manage Roles", "Create custom roles and edit role permissions", PermissionCategory.ROLES),
    ("GRANT_OVERRIDES", "Grant Overrides", "Grant and revoke per-user permission overrides", PermissionCategory.ROLES),
]


# -- AUDIT --

AUDIT_PERMISSIONS = [
    ("VIEW_AUDIT_LOG", "View Audit Log", "View the audit trail", PermissionCategory.AUDIT),
]


# -- SYNC --

SYNC_PERMISSIONS = [
    ("SYNC_DEVICE", "Sync Device", "Push offline changes from a device", PermissionCategory.SYNC),
]


# -- SETTINGS --

SETTINGS_PERMISSIONS = [
    ("VIEW_SETTINGS", "View Settings", "View parish and diocese-wide settings", PermissionCategory.SETTINGS),
    ("MANAGE_SETTINGS", "Manage Settings", "Change parish settings", PermissionCategory.SETTINGS),
    ("MANAGE_GLOBAL_SETTINGS", "Manage Global Settings", "Change diocese-wide default settings", PermissionCategory.SETTINGS),
]


# Combined catalog (preserves group ordering)
PERMISSION_DEFINITIONS = (
    MEMBER_PERMISSIONS
    + SACRAMENT_PERMISSIONS
    + FINANCE_PERMISSIONS
    + BUDGET_PERMISSIONS
    + STRUCTURE_PERMISSIONS
    + USER_PERMISSIONS
    + ROLE_PERMISSIONS
    + AUDIT_PERMISSIONS
    + SYNC_PERMISSIONS
    + SETTINGS_PERMISSIONS
)
