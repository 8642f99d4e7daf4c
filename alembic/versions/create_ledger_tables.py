"""create member ledger tables

Revision ID: 9a4e6b21c5d3
Revises: 3c1f0a9d2b7e
Create Date: 2026-10-12 10:21:07

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '9a4e6b21c5d3'
down_revision: Union[str, Sequence[str], None] = '3c1f0a9d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=False, server_default='0')


def upgrade() -> None:
    op.create_table(
        'members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('father_name', sa.String(length=100), nullable=True),
        sa.Column('registration_number', sa.String(length=50), nullable=True),
        sa.Column('id_number', sa.String(length=50), nullable=True),
        sa.Column('branch_id', sa.Uuid(), nullable=False),
        sa.Column('locker_id', sa.Uuid(), nullable=True),
        sa.Column('membership_start', sa.Date(), nullable=False),
        sa.Column('membership_end', sa.Date(), nullable=False),
        _money('total_fee'),
        _money('discount'),
        _money('cash'),
        _money('online'),
        _money('amount_paid'),
        _money('due_amount'),
        _money('security_money'),
        sa.Column('remark', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id']),
        sa.ForeignKeyConstraint(['locker_id'], ['lockers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('phone'),
        sa.UniqueConstraint('locker_id'),
    )
    op.create_index('ix_members_branch_id', 'members', ['branch_id'])
    op.create_index('ix_members_membership_end', 'members', ['membership_end'])
    op.create_index('ix_members_is_active', 'members', ['is_active'])

    # lockers.member_id <-> members.locker_id 순환 참조
    op.create_foreign_key('fk_lockers_member_id', 'lockers', 'members', ['member_id'], ['id'])

    op.create_table(
        'seat_assignments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('seat_id', sa.Uuid(), nullable=True),
        sa.Column('shift_id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['seat_id'], ['seats.id']),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.PrimaryKeyConstraint('id'),
        # seat_id 가 NULL 인 행끼리는 충돌하지 않음 (좌석 없는 시간대 등록)
        sa.UniqueConstraint('seat_id', 'shift_id', name='uq_seat_assignments_seat_shift'),
    )
    op.create_index('ix_seat_assignments_member_id', 'seat_assignments', ['member_id'])
    op.create_index('ix_seat_assignments_shift_id', 'seat_assignments', ['shift_id'])

    op.create_table(
        'membership_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('period_no', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('father_name', sa.String(length=100), nullable=True),
        sa.Column('registration_number', sa.String(length=50), nullable=True),
        sa.Column('id_number', sa.String(length=50), nullable=True),
        sa.Column('branch_id', sa.Uuid(), nullable=False),
        sa.Column('seat_id', sa.Uuid(), nullable=True),
        sa.Column('shift_id', sa.Uuid(), nullable=True),
        sa.Column('locker_id', sa.Uuid(), nullable=True),
        sa.Column('membership_start', sa.Date(), nullable=False),
        sa.Column('membership_end', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=10), nullable=False),
        _money('total_fee'),
        _money('discount'),
        _money('cash'),
        _money('online'),
        _money('amount_paid'),
        _money('due_amount'),
        _money('security_money'),
        sa.Column('remark', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id']),
        sa.ForeignKeyConstraint(['seat_id'], ['seats.id']),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['locker_id'], ['lockers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('member_id', 'period_no', name='uq_membership_history_member_period'),
    )
    op.create_index('ix_membership_history_member_id', 'membership_history', ['member_id'])
    op.create_index('ix_membership_history_branch_id', 'membership_history', ['branch_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('history_id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('channel', sa.String(length=10), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['history_id'], ['membership_history.id']),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payments_history_id', 'payments', ['history_id'])
    op.create_index('ix_payments_member_id', 'payments', ['member_id'])

    op.create_table(
        'action_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('actor_id', sa.Uuid(), nullable=True),
        sa.Column('target_member_id', sa.Uuid(), nullable=True),
        sa.Column(
            'action',
            sa.Enum(
                'ENROLL', 'PUBLIC_REGISTER', 'EDIT', 'RENEW', 'DEACTIVATE',
                'REACTIVATE', 'DELETE', 'PAYMENT',
                name='ledger_action',
            ),
            nullable=False,
        ),
        sa.Column('detail', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_action_logs_target_member_id', 'action_logs', ['target_member_id'])


def downgrade() -> None:
    op.drop_index('ix_action_logs_target_member_id', table_name='action_logs')
    op.drop_table('action_logs')
    op.drop_index('ix_payments_member_id', table_name='payments')
    op.drop_index('ix_payments_history_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_membership_history_branch_id', table_name='membership_history')
    op.drop_index('ix_membership_history_member_id', table_name='membership_history')
    op.drop_table('membership_history')
    op.drop_index('ix_seat_assignments_shift_id', table_name='seat_assignments')
    op.drop_index('ix_seat_assignments_member_id', table_name='seat_assignments')
    op.drop_table('seat_assignments')
    op.drop_constraint('fk_lockers_member_id', 'lockers', type_='foreignkey')
    op.drop_index('ix_members_is_active', table_name='members')
    op.drop_index('ix_members_membership_end', table_name='members')
    op.drop_index('ix_members_branch_id', table_name='members')
    op.drop_table('members')
    sa.Enum(name='ledger_action').drop(op.get_bind(), checkfirst=True)
