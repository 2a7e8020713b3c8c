"""Create events table

Revision ID: 0001_create_events
Revises:
Create Date: 2026-10-19 12:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = '0001_create_events'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'events',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=True),
        sa.Column('end_time', sa.String(length=5), nullable=True),
        sa.Column('category', sa.String(length=64), nullable=True),
        sa.Column('color', sa.String(length=32), nullable=True),
        sa.Column('recurrence', sa.JSON(), nullable=True),
        sa.Column('series_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_events_date', 'events', ['date'])
    op.create_index('ix_events_category', 'events', ['category'])
    op.create_index('ix_events_series_id', 'events', ['series_id'])
    op.create_index('ix_events_series_date', 'events', ['series_id', 'date'])


def downgrade():
    op.drop_index('ix_events_series_date', table_name='events')
    op.drop_index('ix_events_series_id', table_name='events')
    op.drop_index('ix_events_category', table_name='events')
    op.drop_index('ix_events_date', table_name='events')
    op.drop_table('events')
