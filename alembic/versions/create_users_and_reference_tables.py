"""create users and reference tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-12 10:04:31

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('role', sa.Enum('ADMIN', 'STAFF', name='role'), nullable=False),
        sa.Column('permissions', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('refresh_token_version', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'branches',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'shifts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('time', sa.String(length=50), nullable=True),
        sa.Column('fee', sa.Numeric(12, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'seats',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('branch_id', sa.Uuid(), nullable=False),
        sa.Column('seat_number', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('branch_id', 'seat_number', name='uq_seats_branch_number'),
    )

    # member_id FK 는 members 테이블 생성 후 다음 리비전에서 추가
    op.create_table(
        'lockers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('branch_id', sa.Uuid(), nullable=False),
        sa.Column('locker_number', sa.String(length=20), nullable=False),
        sa.Column('is_assigned', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('member_id', sa.Uuid(), nullable=True),
        sa.CheckConstraint(
            '(is_assigned AND member_id IS NOT NULL) OR (NOT is_assigned AND member_id IS NULL)',
            name='ck_lockers_assigned_member',
        ),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('branch_id', 'locker_number', name='uq_lockers_branch_number'),
        sa.UniqueConstraint('member_id'),
    )


def downgrade() -> None:
    op.drop_table('lockers')
    op.drop_table('seats')
    op.drop_table('shifts')
    op.drop_table('branches')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    sa.Enum(name='role').drop(op.get_bind(), checkfirst=True)
