# Overview: Permission group constants used to organize the catalog.


class PermissionCategory:
    """Permission groups for organization and UI display."""
    MEMBERS = "MEMBERS"
    SACRAMENTS = "SACRAMENTS"
    FINANCE = "FINANCE"
    BUDGETS = "BUDGETS"
    STRUCTURE = "STRUCTURE"
    USERS = "USERS"
    ROLES = "ROLES"
    AUDIT = "AUDIT"
    SYNC = "SYNC"
    SETTINGS = "SETTINGS"

    ALL = (
        MEMBERS,
        SACRAMENTS,
        FINANCE,
        BUDGETS,
        STRUCTURE,
        USERS,
        ROLES,
        AUDIT,
        SYNC,
        SETTINGS,
    )
