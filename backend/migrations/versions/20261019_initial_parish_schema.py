"""initial parish schema

Revision ID: p0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete schema:
- dioceses, parishes: church hierarchy; parishes are the tenant boundary
- clusters, sccs, families, members, sacrament_records: parish registry
- income_transactions, expense_vouchers, budgets: parish finance
- users, permissions, custom_roles, role_permissions,
  user_permission_overrides: identity and RBAC
- audit_logs: append-only audit trail

All primary keys are UUID strings; ids of syncable rows may be generated on
devices. Parish-owned rows are soft deleted through deleted_at.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'p0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _uuid(name, nullable=True):
    return sa.Column(name, sa.String(length=36), nullable=nullable)


def _entity_columns():
    """id plus created/updated/deleted timestamps shared by every parish entity."""
    return [
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    ]


def upgrade():
    # ============================================================================
    # Church hierarchy
    # ============================================================================
    op.create_table(
        'dioceses',
        *_entity_columns(),
        sa.Column('diocese_code', sa.String(length=32), nullable=False),
        sa.Column('diocese_name', sa.String(length=255), nullable=False),
        sa.Column('bishop_name', sa.String(length=255), nullable=True),
        sa.Column('established_date', sa.Date(), nullable=True),
        sa.Column('headquarters_address', sa.Text(), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=32), nullable=True),
        sa.Column('country', sa.String(length=64), nullable=True),
        sa.Column('currency_code', sa.String(length=3), nullable=True),
        sa.Column('logo_url', sa.String(length=512), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('diocese_code'),
    )
    op.create_index('ix_dioceses_deleted_at', 'dioceses', ['deleted_at'])

    op.create_table(
        'parishes',
        *_entity_columns(),
        _uuid('diocese_id', nullable=False),
        sa.Column('parish_code', sa.String(length=32), nullable=False),
        sa.Column('parish_name', sa.String(length=255), nullable=False),
        sa.Column('patron_saint', sa.String(length=255), nullable=True),
        sa.Column('priest_name', sa.String(length=255), nullable=True),
        _uuid('priest_id'),
        sa.Column('established_date', sa.Date(), nullable=True),
        sa.Column('physical_address', sa.Text(), nullable=True),
        sa.Column('postal_address', sa.Text(), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=32), nullable=True),
        sa.Column('bank_account_name', sa.String(length=255), nullable=True),
        sa.Column('bank_account_number', sa.String(length=64), nullable=True),
        sa.Column('bank_name', sa.String(length=255), nullable=True),
        sa.Column('bank_branch', sa.String(length=255), nullable=True),
        sa.Column('mobile_money_name', sa.String(length=64), nullable=True),
        sa.Column('mobile_money_number', sa.String(length=32), nullable=True),
        sa.Column('mobile_money_account_name', sa.String(length=255), nullable=True),
        sa.Column('timezone', sa.String(length=64), nullable=True),
        sa.Column('logo_url', sa.String(length=512), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['diocese_id'], ['dioceses.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('parish_code'),
    )
    op.create_index('ix_parishes_diocese_id', 'parishes', ['diocese_id'])
    op.create_index('ix_parishes_deleted_at', 'parishes', ['deleted_at'])

    op.create_table(
        'clusters',
        *_entity_columns(),
        _uuid('parish_id', nullable=False),
        sa.Column('cluster_code', sa.String(length=32), nullable=False),
        sa.Column('cluster_name', sa.String(length=255), nullable=False),
        sa.Column('location_description', sa.Text(), nullable=True),
        sa.Column('leader_name', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('parish_id', 'cluster_code', name='uq_clusters_parish_code'),
    )
    op.create_index('ix_clusters_parish_id', 'clusters', ['parish_id'])
    op.create_index('ix_clusters_deleted_at', 'clusters', ['deleted_at'])

    op.create_table(
        'sccs',
        *_entity_columns(),
        _uuid('parish_id', nullable=False),
        _uuid('cluster_id'),
        sa.Column('scc_code', sa.String(length=32), nullable=False),
        sa.Column('scc_name', sa.String(length=255), nullable=False),
        sa.Column('patron_saint', sa.String(length=255), nullable=True),
        sa.Column('leader_name', sa.String(length=255), nullable=True),
        sa.Column('location_description', sa.Text(), nullable=True),
        sa.Column('meeting_day', sa.String(length=16), nullable=True),
        sa.Column('meeting_time', sa.Time(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.ForeignKeyConstraint(['cluster_id'], ['clusters.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('parish_id', 'scc_code', name='uq_sccs_parish_code'),
    )
    op.create_index('ix_sccs_parish_id', 'sccs', ['parish_id'])
    op.create_index('ix_sccs_cluster_id', 'sccs', ['cluster_id'])
    op.create_index('ix_sccs_deleted_at', 'sccs', ['deleted_at'])

    # ============================================================================
    # Parish registry
    # ============================================================================
    op.create_table(
        'families',
        *_entity_columns(),
        _uuid('parish_id', nullable=False),
        _uuid('scc_id'),
        sa.Column('family_code', sa.String(length=32), nullable=False),
        sa.Column('family_name', sa.String(length=255), nullable=False),
        _uuid('head_of_family_id'),
        sa.Column('physical_address', sa.Text(), nullable=True),
        sa.Column('postal_address', sa.Text(), nullable=True),
        sa.Column('primary_phone', sa.String(length=32), nullable=True),
        sa.Column('secondary_phone', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.ForeignKeyConstraint(['scc_id'], ['sccs.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('parish_id', 'family_code', name='uq_families_parish_code'),
    )
    op.create_index('ix_families_parish_id', 'families', ['parish_id'])
    op.create_index('ix_families_scc_id', 'families', ['scc_id'])
    op.create_index('ix_families_deleted_at', 'families', ['deleted_at'])

    op.create_table(
        'members',
        *_entity_columns(),
        _uuid('parish_id', nullable=False),
        _uuid('family_id'),
        _uuid('scc_id'),
        sa.Column('member_code', sa.String(length=32), nullable=False),
        sa.Column('first_name', sa.String(length=128), nullable=False),
        sa.Column('middle_name', sa.String(length=128), nullable=True),
        sa.Column('last_name', sa.String(length=128), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(length=6), nullable=True),
        sa.Column('marital_status', sa.String(length=9), nullable=True),
        sa.Column('national_id', sa.String(length=64), nullable=True),
        sa.Column('occupation', sa.String(length=128), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone_number', sa.String(length=32), nullable=True),
        sa.Column('physical_address', sa.Text(), nullable=True),
        sa.Column('photo_url', sa.String(length=512), nullable=True),
        sa.Column('family_role', sa.String(length=6), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.ForeignKeyConstraint(['family_id'], ['families.id']),
        sa.ForeignKeyConstraint(['scc_id'], ['sccs.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_members_parish_id', 'members', ['parish_id'])
    op.create_index('ix_members_family_id', 'members', ['family_id'])
    op.create_index('ix_members_scc_id', 'members', ['scc_id'])
    op.create_index('ix_members_deleted_at', 'members', ['deleted_at'])
    op.create_index('ix_members_parish_name', 'members', ['parish_id', 'last_name', 'first_name'])

    op.create_table(
        'sacrament_records',
        *_entity_columns(),
        _uuid('member_id', nullable=False),
        _uuid('parish_id', nullable=False),
        sa.Column('sacrament_type', sa.String(length=17), nullable=False),
        sa.Column('sacrament_date', sa.Date(), nullable=False),
        sa.Column('officiating_minister', sa.String(length=255), nullable=True),
        sa.Column('church_name', sa.String(length=255), nullable=True),
        sa.Column('certificate_number', sa.String(length=64), nullable=True),
        sa.Column('godparent_1_name', sa.String(length=255), nullable=True),
        sa.Column('godparent_2_name', sa.String(length=255), nullable=True),
        _uuid('spouse_id'),
        sa.Column('spouse_name', sa.String(length=255), nullable=True),
        sa.Column('witnesses', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sacrament_records_member_id', 'sacrament_records', ['member_id'])
    op.create_index('ix_sacrament_records_parish_id', 'sacrament_records', ['parish_id'])
    op.create_index('ix_sacrament_records_deleted_at', 'sacrament_records', ['deleted_at'])

    # ============================================================================
    # Finance
    # ============================================================================
    op.create_table(
        'income_transactions',
        *_entity_columns(),
        _uuid('parish_id', nullable=False),
        _uuid('member_id'),
        _uuid('family_id'),
        sa.Column('transaction_number', sa.String(length=64), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=13), nullable=False),
        sa.Column('transaction_date', sa.Date(), nullable=False),
        sa.Column('transaction_time', sa.Time(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('reference_number', sa.String(length=128), nullable=True),
        _uuid('received_by'),
        sa.Column('receipt_printed', sa.Boolean(), nullable=True),
        sa.Column('receipt_printed_at', sa.DateTime(), nullable=True),
        sa.Column('is_synced', sa.Boolean(), nullable=True),
        sa.Column('synced_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.ForeignKeyConstraint(['family_id'], ['families.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_income_transactions_parish_id', 'income_transactions', ['parish_id'])
    op.create_index('ix_income_transactions_member_id', 'income_transactions', ['member_id'])
    op.create_index('ix_income_transactions_deleted_at', 'income_transactions', ['deleted_at'])
    op.create_index('ix_income_parish_date', 'income_transactions', ['parish_id', 'transaction_date'])

    op.create_table(
        'expense_vouchers',
        *_entity_columns(),
        _uuid('parish_id', nullable=False),
        sa.Column('voucher_number', sa.String(length=64), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=13), nullable=False),
        sa.Column('payee_name', sa.String(length=255), nullable=False),
        sa.Column('payee_phone', sa.String(length=32), nullable=True),
        sa.Column('expense_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('reference_number', sa.String(length=128), nullable=True),
        sa.Column('approval_status', sa.String(length=9), nullable=True),
        _uuid('requested_by', nullable=False),
        _uuid('approved_by'),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('paid', sa.Boolean(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('is_synced', sa.Boolean(), nullable=True),
        sa.Column('synced_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_expense_vouchers_parish_id', 'expense_vouchers', ['parish_id'])
    op.create_index('ix_expense_vouchers_deleted_at', 'expense_vouchers', ['deleted_at'])
    op.create_index('ix_expense_parish_date', 'expense_vouchers', ['parish_id', 'expense_date'])

    op.create_table(
        'budgets',
        *_entity_columns(),
        _uuid('parish_id', nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('fiscal_year', sa.Integer(), nullable=False),
        sa.Column('fiscal_month', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        _uuid('created_by'),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_budgets_parish_id', 'budgets', ['parish_id'])
    op.create_index('ix_budgets_deleted_at', 'budgets', ['deleted_at'])
    op.create_index('ix_budgets_parish_year', 'budgets', ['parish_id', 'fiscal_year'])

    # ============================================================================
    # Identity and RBAC
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        _uuid('parish_id'),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('phone_number', sa.String(length=32), nullable=True),
        sa.Column('role', sa.String(length=12), nullable=False),
        sa.Column('profile_photo_url', sa.String(length=512), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_parish_id', 'users', ['parish_id'])
    op.create_index('ix_users_deleted_at', 'users', ['deleted_at'])

    op.create_table(
        'permissions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('permission_key', sa.String(length=64), nullable=False),
        sa.Column('permission_group', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_permissions_permission_key', 'permissions', ['permission_key'], unique=True)
    op.create_index('ix_permissions_permission_group', 'permissions', ['permission_group'])

    op.create_table(
        'custom_roles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('role_name', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_system', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role_name'),
    )

    op.create_table(
        'role_permissions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('role_id', sa.String(length=36), nullable=False),
        sa.Column('permission_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['custom_roles.id']),
        sa.ForeignKeyConstraint(['permission_id'], ['permissions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role_id', 'permission_id', name='uq_role_permissions'),
    )
    op.create_index('ix_role_permissions_role_id', 'role_permissions', ['role_id'])
    op.create_index('ix_role_permissions_permission_id', 'role_permissions', ['permission_id'])

    op.create_table(
        'user_permission_overrides',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('permission_id', sa.String(length=36), nullable=False),
        sa.Column('granted_by', sa.String(length=36), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['permission_id'], ['permissions.id']),
        sa.ForeignKeyConstraint(['granted_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'permission_id', name='uq_user_permission_override'),
    )
    op.create_index('ix_user_permission_overrides_user_id', 'user_permission_overrides', ['user_id'])
    op.create_index('ix_user_perm_overrides_user_active', 'user_permission_overrides', ['user_id', 'is_active'])

    # ============================================================================
    # audit_logs: append-only
    # ============================================================================
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('parish_id', sa.String(length=36), nullable=True),
        sa.Column('action_type', sa.String(length=64), nullable=False),
        sa.Column('table_name', sa.String(length=64), nullable=True),
        sa.Column('record_id', sa.String(length=36), nullable=True),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_parish_id', 'audit_logs', ['parish_id'])
    op.create_index('ix_audit_logs_action_type', 'audit_logs', ['action_type'])
    op.create_index('ix_audit_logs_table_name', 'audit_logs', ['table_name'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])
    op.create_index('ix_audit_logs_parish_created', 'audit_logs', ['parish_id', 'created_at'])


def downgrade():
    for table in (
        'audit_logs',
        'user_permission_overrides',
        'role_permissions',
        'custom_roles',
        'permissions',
        'users',
        'budgets',
        'expense_vouchers',
        'income_transactions',
        'sacrament_records',
        'members',
        'families',
        'sccs',
        'clusters',
        'parishes',
        'dioceses',
    ):
        op.drop_table(table)
