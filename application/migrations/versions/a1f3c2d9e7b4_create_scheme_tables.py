"""create scheme tables

Revision ID: a1f3c2d9e7b4
Revises:
Create Date: 2026-10-19 10:12:41.302118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1f3c2d9e7b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'schemes',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('applicability', sa.String(50), nullable=False, server_default='all_outlets'),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('min_order_value', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('max_benefit', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('config', sa.JSON(), nullable=True),
        sa.Column('eligible_skus', sa.JSON(), nullable=True),
        sa.Column('target_segments', sa.JSON(), nullable=True),
        sa.Column('target_zones', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_schemes_code', 'schemes', ['code'])
    op.create_index('ix_schemes_status', 'schemes', ['status'])
    op.create_index('idx_schemes_status_window', 'schemes', ['status', 'start_date', 'end_date'])

    op.create_table(
        'scheme_override_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('event_id', sa.String(64), nullable=False, unique=True),
        sa.Column('action', sa.String(20), nullable=False),
        sa.Column('session_id', sa.String(64), nullable=True),
        sa.Column('order_id', sa.String(100), nullable=True),
        sa.Column('scheme_id', sa.String(64), nullable=False),
        sa.Column('actor', sa.String(100), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('original_benefit', sa.JSON(), nullable=True),
        sa.Column('override_benefit', sa.JSON(), nullable=True),
        sa.Column('occurred_at', sa.TIMESTAMP(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_scheme_override_logs_session_id', 'scheme_override_logs', ['session_id'])
    op.create_index('ix_scheme_override_logs_order_id', 'scheme_override_logs', ['order_id'])
    op.create_index('ix_scheme_override_logs_scheme_id', 'scheme_override_logs', ['scheme_id'])

    op.create_table(
        'order_scheme_snapshots',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('order_id', sa.String(100), nullable=False, unique=True),
        sa.Column('session_id', sa.String(64), nullable=False),
        sa.Column('submitted_by', sa.String(100), nullable=False),
        sa.Column('submitted_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('total_discount', sa.Numeric(12, 2), nullable=False),
        sa.Column('result', sa.JSON(), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('order_scheme_snapshots')
    op.drop_index('ix_scheme_override_logs_scheme_id', table_name='scheme_override_logs')
    op.drop_index('ix_scheme_override_logs_order_id', table_name='scheme_override_logs')
    op.drop_index('ix_scheme_override_logs_session_id', table_name='scheme_override_logs')
    op.drop_table('scheme_override_logs')
    op.drop_index('idx_schemes_status_window', table_name='schemes')
    op.drop_index('ix_schemes_status', table_name='schemes')
    op.drop_index('ix_schemes_code', table_name='schemes')
    op.drop_table('schemes')
