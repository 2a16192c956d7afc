"""initial_economy_schema

Revision ID: 0001_initial_economy
Revises:
Create Date: 2026-10-19 09:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from profile_economy.migrations.util import get_timestamp_default, get_uuid_type


# revision identifiers, used by Alembic.
revision: str = '0001_initial_economy'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create account, ownership, purchase, boost, gift and streak tables."""
    uuid = get_uuid_type()
    now = get_timestamp_default()

    op.create_table('accounts',
        sa.Column('account_id', uuid, nullable=False),
        sa.Column('display_name', sa.String(length=80), nullable=True),
        sa.Column('title', sa.String(length=80), nullable=True),
        sa.Column('reputation', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('experience', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('spendable_xp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('bonus_quest_slots', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('free_gift_credits', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('achievements', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.CheckConstraint('reputation >= 0', name='ck_accounts_reputation_non_negative'),
        sa.CheckConstraint('experience >= 0', name='ck_accounts_experience_non_negative'),
        sa.CheckConstraint('spendable_xp >= 0', name='ck_accounts_spendable_xp_non_negative'),
        sa.CheckConstraint('bonus_quest_slots >= 0', name='ck_accounts_bonus_quest_slots_non_negative'),
        sa.CheckConstraint('free_gift_credits >= 0', name='ck_accounts_free_gift_credits_non_negative'),
        sa.PrimaryKeyConstraint('account_id')
    )

    op.create_table('owned_items',
        sa.Column('account_id', uuid, nullable=False),
        sa.Column('item_id', sa.String(length=64), nullable=False),
        sa.Column('acquired_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.account_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('account_id', 'item_id')
    )

    op.create_table('purchase_records',
        sa.Column('purchase_id', uuid, nullable=False),
        sa.Column('account_id', uuid, nullable=False),
        sa.Column('item_id', sa.String(length=64), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('charged_xp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('charged_rep', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('source', sa.String(length=20), nullable=False, server_default='store'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.account_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('purchase_id')
    )
    op.create_index('ix_purchase_records_account_id', 'purchase_records', ['account_id'], unique=False)
    op.create_index('ix_purchase_records_created_at', 'purchase_records', ['created_at'], unique=False)
    op.create_index('ix_purchase_records_account_item', 'purchase_records', ['account_id', 'item_id'], unique=False)

    op.create_table('active_boosts',
        sa.Column('boost_id', uuid, nullable=False),
        sa.Column('account_id', uuid, nullable=False),
        sa.Column('boost_type', sa.String(length=50), nullable=False),
        sa.Column('multiplier', sa.Float(), nullable=False, server_default='1.0'),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.account_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('boost_id'),
        sa.UniqueConstraint('account_id', 'boost_type', name='uq_active_boosts_account_type')
    )
    op.create_index('ix_active_boosts_account_id', 'active_boosts', ['account_id'], unique=False)
    op.create_index('ix_active_boosts_expires_at', 'active_boosts', ['expires_at'], unique=False)

    op.create_table('gifts',
        sa.Column('gift_id', uuid, nullable=False),
        sa.Column('sender_id', uuid, nullable=False),
        sa.Column('recipient_id', uuid, nullable=False),
        sa.Column('gift_type', sa.String(length=32), nullable=False),
        sa.Column('gift_name', sa.String(length=80), nullable=False),
        sa.Column('rarity', sa.String(length=20), nullable=False),
        sa.Column('cost', sa.Integer(), nullable=False),
        sa.Column('effect', sa.JSON(), nullable=False),
        sa.Column('message', sa.String(length=500), nullable=True),
        sa.Column('paid_with', sa.String(length=20), nullable=False, server_default='reputation'),
        sa.Column('is_claimed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.ForeignKeyConstraint(['sender_id'], ['accounts.account_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recipient_id'], ['accounts.account_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('gift_id')
    )
    op.create_index('ix_gifts_sender_id', 'gifts', ['sender_id'], unique=False)
    op.create_index('ix_gifts_recipient_id', 'gifts', ['recipient_id'], unique=False)
    op.create_index('ix_gifts_created_at', 'gifts', ['created_at'], unique=False)

    op.create_table('streak_states',
        sa.Column('account_id', uuid, nullable=False),
        sa.Column('current_streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('longest_streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_streak_date', sa.Date(), nullable=True),
        sa.Column('free_skip_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_check_in', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=now),
        sa.CheckConstraint('free_skip_count >= 0', name='ck_streak_states_free_skip_non_negative'),
        sa.CheckConstraint('longest_streak >= current_streak', name='ck_streak_states_longest_covers_current'),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.account_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('account_id')
    )


def downgrade() -> None:
    """Drop economy tables."""
    op.drop_table('streak_states')
    op.drop_index('ix_gifts_created_at', table_name='gifts')
    op.drop_index('ix_gifts_recipient_id', table_name='gifts')
    op.drop_index('ix_gifts_sender_id', table_name='gifts')
    op.drop_table('gifts')
    op.drop_index('ix_active_boosts_expires_at', table_name='active_boosts')
    op.drop_index('ix_active_boosts_account_id', table_name='active_boosts')
    op.drop_table('active_boosts')
    op.drop_index('ix_purchase_records_account_item', table_name='purchase_records')
    op.drop_index('ix_purchase_records_created_at', table_name='purchase_records')
    op.drop_index('ix_purchase_records_account_id', table_name='purchase_records')
    op.drop_table('purchase_records')
    op.drop_table('owned_items')
    op.drop_table('accounts')
