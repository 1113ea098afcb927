from .church import Diocese, Parish, Cluster, SmallChristianCommunity, Family
from .members import Member, SacramentRecord
from .finance import IncomeTransaction, ExpenseVoucher, Budget
from .auth import User, Permission, CustomRole, RolePermission, UserPermissionOverride
from .audit import AuditLog
from .settings import AppSetting

__all__ = [
    'Diocese', 'Parish', 'Cluster', 'SmallChristianCommunity', 'Family',
    'Member', 'SacramentRecord',
    'IncomeTransaction', 'ExpenseVoucher', 'Budget',
    'User', 'Permission', 'CustomRole', 'RolePermission', 'UserPermissionOverride',
    'AuditLog',
    'AppSetting',
]
