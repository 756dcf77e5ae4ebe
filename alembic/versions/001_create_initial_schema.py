"""create initial schema with websites user_plans and usage_tracking tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create websites table
    op.create_table(
        'websites',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_token', sa.String(length=255), nullable=False),
        sa.Column('domain', sa.Text(), nullable=False),
        sa.Column('is_managed', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_websites_user_token'), 'websites', ['user_token'], unique=False)
    op.create_index(op.f('ix_websites_domain'), 'websites', ['domain'], unique=False)

    # Create user_plans table
    op.create_table(
        'user_plans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_token', sa.String(length=255), nullable=False),
        sa.Column('tier', sa.String(length=50), server_default='starter', nullable=False),
        sa.Column('sites_allowed', sa.Integer(), server_default='2', nullable=False),
        sa.Column('posts_allowed', sa.Integer(), server_default='4', nullable=False),
        sa.Column('status', sa.String(length=50), server_default='active', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_token')
    )

    # Create usage_tracking table
    op.create_table(
        'usage_tracking',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_token', sa.String(length=255), nullable=False),
        sa.Column('site_id', sa.Integer(), nullable=True),
        sa.Column('resource_type', sa.String(length=50), nullable=False),
        sa.Column('month_year', sa.String(length=7), nullable=False),
        sa.Column('count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_token', 'site_id', 'resource_type', 'month_year')
    )
    op.create_index(op.f('ix_usage_tracking_user_token'), 'usage_tracking', ['user_token'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    # Drop indexes
    op.drop_index(op.f('ix_usage_tracking_user_token'), table_name='usage_tracking')
    op.drop_index(op.f('ix_websites_domain'), table_name='websites')
    op.drop_index(op.f('ix_websites_user_token'), table_name='websites')

    # Drop tables
    op.drop_table('usage_tracking')
    op.drop_table('user_plans')
    op.drop_table('websites')
