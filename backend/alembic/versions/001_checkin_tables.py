"""add checkin_states and daily_checkins tables

Revision ID: 001_checkin_tables
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_checkin_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the per-user check-in state and the check-in history."""
    op.create_table(
        'checkin_states',
        sa.Column('user_id', sa.String(64), primary_key=True),
        sa.Column('last_checkin_date', sa.Date, nullable=True, comment='Date of the most recent check-in (configured timezone)'),
        sa.Column('current_streak', sa.Integer, nullable=False, server_default='0'),
        sa.Column('total_checkins', sa.Integer, nullable=False, server_default='0'),
        sa.Column('currency_balance', sa.BigInteger, nullable=False, server_default='0'),
        sa.Column('total_currency_earned', sa.BigInteger, nullable=False, server_default='0'),
        sa.Column('has_loyalty_badge', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('loyal_since', sa.Date, nullable=True, comment='Date the loyalty badge was granted'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'daily_checkins',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(64), nullable=False, index=True),
        sa.Column('checkin_date', sa.Date, nullable=False),
        sa.Column('streak_days', sa.Integer, nullable=False, server_default='1'),
        sa.Column('reward_amount', sa.Integer, nullable=False, server_default='0'),
        sa.Column('reward_type', sa.String(20), nullable=False, server_default='daily'),
        sa.Column('milestone_label', sa.String(100), nullable=True),
        sa.Column('streak_broken', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('checked_at', sa.DateTime(timezone=True), nullable=False),
        # At most one check-in per user per day
        sa.UniqueConstraint('user_id', 'checkin_date', name='uq_user_checkin_date'),
    )

    op.create_index('ix_checkin_user_date', 'daily_checkins', ['user_id', 'checkin_date'])


def downgrade() -> None:
    """Drop both check-in tables."""
    op.drop_index('ix_checkin_user_date', table_name='daily_checkins')
    op.drop_table('daily_checkins')
    op.drop_table('checkin_states')
