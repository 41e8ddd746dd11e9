"""create users table with phone confirmation columns

Revision ID: createusersphoneconfirmation
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'createusersphoneconfirmation'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('unconfirmed_phone', sa.String(length=32), nullable=True),
        sa.Column('phone_confirmation_token', sa.String(length=64), nullable=True),
        sa.Column('phone_confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('phone_confirmation_sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('lock_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('CURRENT_TIMESTAMP'),
        ),
    )
    op.create_index('ix_users_phone', 'users', ['phone'], unique=True)
    op.create_index(
        'ix_users_phone_confirmation_token', 'users', ['phone_confirmation_token'], unique=True
    )
    op.create_index('ix_users_unconfirmed_phone', 'users', ['unconfirmed_phone'])


def downgrade() -> None:
    op.drop_index('ix_users_unconfirmed_phone', table_name='users')
    op.drop_index('ix_users_phone_confirmation_token', table_name='users')
    op.drop_index('ix_users_phone', table_name='users')
    op.drop_table('users')
