"""initial

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ACTIVE_ONLY = sa.text("status = 'active'")


def upgrade() -> None:
    # Rooms
    op.create_table('rooms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False, server_default=''),
        sa.Column('floor', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('rate', sa.Numeric(precision=14, scale=2), nullable=False, server_default='0'),
        sa.Column('max_occupants', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('status', sa.String(), nullable=False, server_default='vacant'),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_rooms_number'), 'rooms', ['number'], unique=True)

    # Tenants
    op.create_table('tenants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=False, server_default=''),
        sa.Column('email', sa.String(), nullable=False, server_default=''),
        sa.Column('id_type', sa.String(), nullable=False, server_default=''),
        sa.Column('id_number', sa.String(), nullable=False, server_default=''),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tenants_id_number'), 'tenants', ['id_number'], unique=False)

    # Contracts
    op.create_table('contracts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('room_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('deposit', sa.Numeric(precision=14, scale=2), nullable=False, server_default='0'),
        sa.Column('start_date', sa.DATE(), nullable=False),
        sa.Column('end_date', sa.DATE(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    # At most one active contract per room and per tenant
    op.create_index('uq_contract_active_room', 'contracts', ['room_id'], unique=True,
                    postgresql_where=ACTIVE_ONLY, sqlite_where=ACTIVE_ONLY)
    op.create_index('uq_contract_active_tenant', 'contracts', ['tenant_id'], unique=True,
                    postgresql_where=ACTIVE_ONLY, sqlite_where=ACTIVE_ONLY)
    op.create_index('ix_contracts_status_start', 'contracts', ['status', 'start_date'], unique=False)

    # Occupants
    op.create_table('occupants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('contract_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=False, server_default=''),
        sa.Column('id_type', sa.String(), nullable=False, server_default=''),
        sa.Column('id_number', sa.String(), nullable=False, server_default=''),
        sa.Column('relationship', sa.String(), nullable=False, server_default=''),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_occupants_id_number'), 'occupants', ['id_number'], unique=False)

    # Payments
    op.create_table('payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('contract_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('month', sa.String(length=7), nullable=False),
        sa.Column('type', sa.String(), nullable=False, server_default='rent'),
        sa.Column('method', sa.String(), nullable=False, server_default='cash'),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payments_contract_month_type', 'payments', ['contract_id', 'month', 'type'], unique=False)
    op.create_index('ix_payments_month_status', 'payments', ['month', 'status'], unique=False)

    # Utilities
    op.create_table('utilities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('room_id', sa.Integer(), nullable=False),
        sa.Column('month', sa.String(length=7), nullable=False),
        sa.Column('electric_start', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('electric_end', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('electric_rate', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('water_start', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('water_end', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('water_rate', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('total_amount', sa.Numeric(precision=14, scale=2), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('room_id', 'month', name='uq_utility_room_month')
    )

    # Settings
    op.create_table('settings',
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('value', sa.Text(), nullable=False, server_default=''),
        sa.PrimaryKeyConstraint('key')
    )

    # Users (bot admins)
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tg_id', sa.BigInteger(), nullable=False),
        sa.Column('tg_username', sa.String(), nullable=True),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False, server_default='admin'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_tg_id'), 'users', ['tg_id'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_users_tg_id'), table_name='users')
    op.drop_table('users')
    op.drop_table('settings')
    op.drop_table('utilities')
    op.drop_index('ix_payments_month_status', table_name='payments')
    op.drop_index('ix_payments_contract_month_type', table_name='payments')
    op.drop_table('payments')
    op.drop_index(op.f('ix_occupants_id_number'), table_name='occupants')
    op.drop_table('occupants')
    op.drop_index('ix_contracts_status_start', table_name='contracts')
    op.drop_index('uq_contract_active_tenant', table_name='contracts')
    op.drop_index('uq_contract_active_room', table_name='contracts')
    op.drop_table('contracts')
    op.drop_index(op.f('ix_tenants_id_number'), table_name='tenants')
    op.drop_table('tenants')
    op.drop_index(op.f('ix_rooms_number'), table_name='rooms')
    op.drop_table('rooms')
