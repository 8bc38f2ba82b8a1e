"""
Initial schema: sources, venues, events, tags and event_tags.

On PostgreSQL also creates the GIN index backing full-text event search.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'initial_20261019'
down_revision = None
branch_labels = None
depends_on = None

EVENT_SEARCH_DOCUMENT = "to_tsvector('english', coalesce(title, '') || ' ' || coalesce(description, ''))"


def upgrade() -> None:
    op.create_table(
        'sources',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(length=255)),
        sa.Column('url', sa.String(length=2048), nullable=False, unique=True),
        sa.Column('imported_at', sa.DateTime(timezone=True)),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )

    op.create_table(
        'venues',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('address', sa.String(length=512)),
        sa.Column('street_address', sa.String(length=255)),
        sa.Column('locality', sa.String(length=255)),
        sa.Column('region', sa.String(length=255)),
        sa.Column('postal_code', sa.String(length=32)),
        sa.Column('country', sa.String(length=255)),
        sa.Column('latitude', sa.Float()),
        sa.Column('longitude', sa.Float()),
        sa.Column('email', sa.String(length=255)),
        sa.Column('telephone', sa.String(length=64)),
        sa.Column('url', sa.String(length=2048)),
        sa.Column('source_id', sa.Integer(), sa.ForeignKey('sources.id', ondelete='SET NULL')),
        sa.Column('duplicate_of_id', sa.Integer(), sa.ForeignKey('venues.id', ondelete='SET NULL')),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('idx_venues_title', 'venues', ['title'])
    op.create_index('idx_venues_duplicate_of_id', 'venues', ['duplicate_of_id'])

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('url', sa.String(length=2048)),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime()),
        sa.Column('venue_id', sa.Integer(), sa.ForeignKey('venues.id', ondelete='SET NULL')),
        sa.Column('source_id', sa.Integer(), sa.ForeignKey('sources.id', ondelete='SET NULL')),
        sa.Column('duplicate_of_id', sa.Integer(), sa.ForeignKey('events.id', ondelete='SET NULL')),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('idx_events_start_time', 'events', ['start_time'])
    op.create_index('idx_events_end_time', 'events', ['end_time'])
    op.create_index('idx_events_title', 'events', ['title'])
    op.create_index('idx_events_venue_id', 'events', ['venue_id'])
    op.create_index('idx_events_duplicate_of_id', 'events', ['duplicate_of_id'])

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False, unique=True),
    )
    op.create_index('idx_tags_name', 'tags', ['name'])

    op.create_table(
        'event_tags',
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('tag_id', sa.Integer(), sa.ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
    )

    if op.get_bind().dialect.name == 'postgresql':
        op.execute(f"CREATE INDEX IF NOT EXISTS idx_events_search ON events USING GIN ({EVENT_SEARCH_DOCUMENT})")


def downgrade() -> None:
    if op.get_bind().dialect.name == 'postgresql':
        op.execute("DROP INDEX IF EXISTS idx_events_search")
    op.drop_table('event_tags')
    op.drop_index('idx_tags_name', table_name='tags')
    op.drop_table('tags')
    for name in (
        'idx_events_duplicate_of_id',
        'idx_events_venue_id',
        'idx_events_title',
        'idx_events_end_time',
        'idx_events_start_time',
    ):
        op.drop_index(name, table_name='events')
    op.drop_table('events')
    op.drop_index('idx_venues_duplicate_of_id', table_name='venues')
    op.drop_index('idx_venues_title', table_name='venues')
    op.drop_table('venues')
    op.drop_table('sources')
