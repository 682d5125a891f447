"""create marketplace tables

Revision ID: 0b1f6c2a9e41
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0b1f6c2a9e41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'accounts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('contact', sa.String(length=64), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_accounts'),
        sa.UniqueConstraint('email', name='ux_accounts_email'),
    )
    op.create_index('ix_accounts_email', 'accounts', ['email'])
    op.create_index('ix_accounts_role', 'accounts', ['role'])

    op.create_table(
        'connection_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('buyer_id', sa.Uuid(), nullable=False),
        sa.Column('farmer_id', sa.Uuid(), nullable=True),
        sa.Column('crop', sa.String(length=120), nullable=False),
        sa.Column('quantity', sa.DECIMAL(precision=14, scale=3), nullable=False),
        sa.Column('price', sa.DECIMAL(precision=14, scale=2), nullable=True),
        sa.Column('contact', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=40), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('buyer_confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('disputed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_by', sa.String(length=16), nullable=True),
        sa.Column('dispute_reason', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['buyer_id'], ['accounts.id'], name='fk_connection_requests_buyer_id_accounts'),
        sa.ForeignKeyConstraint(['farmer_id'], ['accounts.id'], name='fk_connection_requests_farmer_id_accounts'),
        sa.PrimaryKeyConstraint('id', name='pk_connection_requests'),
    )
    op.create_index('ix_connection_requests_crop', 'connection_requests', ['crop'])
    op.create_index('ix_connection_requests_farmer_id', 'connection_requests', ['farmer_id'])
    op.create_index('ix_connection_requests_status_created', 'connection_requests', ['status', 'created_at'])
    op.create_index('ix_connection_requests_buyer_created', 'connection_requests', ['buyer_id', 'created_at'])

    op.create_table(
        'commodities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('price', sa.DECIMAL(precision=14, scale=2), nullable=False),
        sa.Column('change', sa.DECIMAL(precision=14, scale=2), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_commodities'),
        sa.UniqueConstraint('name', name='ux_commodities_name'),
    )

    op.create_table(
        'mandi_prices',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('state', sa.String(length=120), nullable=False),
        sa.Column('district', sa.String(length=120), nullable=False),
        sa.Column('crop', sa.String(length=120), nullable=False),
        sa.Column('today_price', sa.DECIMAL(precision=14, scale=2), nullable=False),
        sa.Column('yesterday_price', sa.DECIMAL(precision=14, scale=2), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_mandi_prices'),
    )
    op.create_index('ix_mandi_prices_state_crop', 'mandi_prices', ['state', 'crop'])

    op.create_table(
        'one_time_tokens',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('token', sa.String(length=255), nullable=False),
        sa.Column('account_id', sa.Uuid(), nullable=False),
        sa.Column('purpose', sa.String(length=50), nullable=False),
        sa.Column('is_used', sa.Boolean(), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], name='fk_one_time_tokens_account_id_accounts'),
        sa.PrimaryKeyConstraint('id', name='pk_one_time_tokens'),
        sa.UniqueConstraint('token', name='ux_one_time_tokens_token'),
    )
    op.create_index('ix_one_time_tokens_account_purpose', 'one_time_tokens', ['account_id', 'purpose'])


def downgrade() -> None:
    op.drop_index('ix_one_time_tokens_account_purpose', table_name='one_time_tokens')
    op.drop_table('one_time_tokens')
    op.drop_index('ix_mandi_prices_state_crop', table_name='mandi_prices')
    op.drop_table('mandi_prices')
    op.drop_table('commodities')
    op.drop_index('ix_connection_requests_buyer_created', table_name='connection_requests')
    op.drop_index('ix_connection_requests_status_created', table_name='connection_requests')
    op.drop_index('ix_connection_requests_farmer_id', table_name='connection_requests')
    op.drop_index('ix_connection_requests_crop', table_name='connection_requests')
    op.drop_table('connection_requests')
    op.drop_index('ix_accounts_role', table_name='accounts')
    op.drop_index('ix_accounts_email', table_name='accounts')
    op.drop_table('accounts')
