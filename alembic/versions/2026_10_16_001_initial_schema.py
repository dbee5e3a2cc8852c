"""Initial schema: plans, tenants, users and subscriptions

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-16

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '001_initial_schema'
down_revision = None

billing_period_unit = sa.Enum('MONTH', 'YEAR', name='billingperiodunit')
user_role = sa.Enum('USER', 'ADMIN', 'MANAGER', 'SUPER_ADMIN', 'SUPPORT', 'SYS_ADMIN', name='userrole')
subscription_status = sa.Enum('ACTIVE', 'EXPIRED', 'CANCELED', 'PENDING', 'TRIALING', 'UNPAID', name='subscriptionstatus')


def upgrade():
    # Create plans table
    op.create_table(
        'plans',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('billing_period_unit', billing_period_unit, nullable=False),
        sa.Column('billing_period_value', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('is_popular', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_plans_name', 'plans', ['name'], unique=True)
    op.create_index('ix_plans_is_archived', 'plans', ['is_archived'])

    # Create tenants table
    op.create_table(
        'tenants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('subdomain', sa.String(63), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('logo', sa.String(), nullable=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('opening_hours', sa.String(), nullable=True),
        sa.Column('theme_color', sa.String(20), nullable=True),
        sa.Column('show_info_to_clients', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_by_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_tenants_name', 'tenants', ['name'], unique=True)
    op.create_index('ix_tenants_subdomain', 'tenants', ['subdomain'], unique=True)
    op.create_index('ix_tenants_email', 'tenants', ['email'], unique=True)

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            'tenant_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('tenants.id', ondelete='CASCADE'),
            nullable=True,
        ),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_by_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_tenant_id', 'users', ['tenant_id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_is_active', 'users', ['is_active'])

    # Create subscriptions table
    op.create_table(
        'subscriptions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            'tenant_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('tenants.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('plan_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('plans.id'), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('status', subscription_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_subscriptions_tenant_id', 'subscriptions', ['tenant_id'])
    op.create_index('ix_subscriptions_plan_id', 'subscriptions', ['plan_id'])
    op.create_index('ix_subscriptions_end_date', 'subscriptions', ['end_date'])
    op.create_index('ix_subscriptions_status', 'subscriptions', ['status'])


def downgrade():
    op.drop_table('subscriptions')
    op.drop_table('users')
    op.drop_table('tenants')
    op.drop_table('plans')

    # Drop enum types (PostgreSQL keeps them after the tables are gone)
    bind = op.get_bind()
    subscription_status.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
    billing_period_unit.drop(bind, checkfirst=True)
