"""app settings

Revision ID: p0002_app_settings
Revises: p0001_initial
Create Date: 2026-10-19 12:00:00.000000

Adds app_settings: key-value settings per parish, plus diocese-wide
defaults stored with parish_id NULL. A partial unique index keeps the
diocese-wide keys unique, since NULLs never collide in the composite
(parish_id, setting_key) constraint.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'p0002_app_settings'
down_revision = 'p0001_initial'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'app_settings',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('parish_id', sa.String(length=36), nullable=True),
        sa.Column('setting_key', sa.String(length=100), nullable=False),
        sa.Column('setting_value', sa.Text(), nullable=False),
        sa.Column('setting_group', sa.String(length=50), nullable=False, server_default='general'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['parish_id'], ['parishes.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('parish_id', 'setting_key', name='uq_app_settings_parish_key'),
    )
    op.create_index('ix_app_settings_parish_id', 'app_settings', ['parish_id'])
    op.create_index('ix_app_settings_setting_group', 'app_settings', ['setting_group'])
    op.create_index(
        'uq_app_settings_global_key',
        'app_settings',
        ['setting_key'],
        unique=True,
        sqlite_where=sa.text('parish_id IS NULL'),
        postgresql_where=sa.text('parish_id IS NULL'),
    )


def downgrade():
    op.drop_index('uq_app_settings_global_key', table_name='app_settings')
    op.drop_index('ix_app_settings_setting_group', table_name='app_settings')
    op.drop_index('ix_app_settings_parish_id', table_name='app_settings')
    op.drop_table('app_settings')
