"""create events table

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_title', sa.Text(), nullable=False),
        sa.Column('movie_title', sa.Text(), nullable=True),
        sa.Column('cinema_id', sa.Integer(), nullable=False),
        sa.Column('goods_type', sa.Text(), nullable=True),
        sa.Column('period', sa.String(length=200), nullable=True),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column('locations', ARRAY(sa.Text()), nullable=False, server_default='{}'),
        sa.Column('official_url', sa.String(length=1000), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='예정'),
        sa.Column('is_visible', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_new', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_events_cinema_id'), 'events', ['cinema_id'], unique=False)
    op.create_index(op.f('ix_events_official_url'), 'events', ['official_url'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_events_official_url'), table_name='events')
    op.drop_index(op.f('ix_events_cinema_id'), table_name='events')
    op.drop_table('events')
