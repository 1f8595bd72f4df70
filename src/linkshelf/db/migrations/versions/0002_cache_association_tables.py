"""Move inline caches into cache_entries with association tables

Every non-empty inline cache becomes a cache_entries row, attached to its
group or link through group_caches / link_caches (owner id is the primary
key, so each owner has at most one active entry). The inline columns are
dropped afterwards. batch_alter_table keeps this working on SQLite.

Revision ID: 0002
Revises: 0001
Create Date: 2026-09-20 17:40:05.902117
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

INLINE_COLUMNS = ('cache_content', 'cache_refresh_interval', 'cache_updated_at')


def upgrade() -> None:
    cache_entries = op.create_table(
        'cache_entries',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('slug', sa.String(100), nullable=True, unique=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('refresh_interval', sa.Integer(), nullable=False, server_default='3600'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        'group_caches',
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('link_groups.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('cache_id', sa.Integer(), sa.ForeignKey('cache_entries.id', ondelete='CASCADE'), nullable=False),
    )
    op.create_index('ix_group_caches_cache_id', 'group_caches', ['cache_id'])
    op.create_table(
        'link_caches',
        sa.Column('link_id', sa.Integer(), sa.ForeignKey('links.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('cache_id', sa.Integer(), sa.ForeignKey('cache_entries.id', ondelete='CASCADE'), nullable=False),
    )
    op.create_index('ix_link_caches_cache_id', 'link_caches', ['cache_id'])

    conn = op.get_bind()
    for owner_table, assoc_table, owner_column in (
        ('link_groups', 'group_caches', 'group_id'),
        ('links', 'link_caches', 'link_id'),
    ):
        owner = sa.table(
            owner_table,
            sa.column('id', sa.Integer()),
            sa.column('cache_content', sa.Text()),
            sa.column('cache_refresh_interval', sa.Integer()),
            sa.column('cache_updated_at', sa.DateTime(timezone=True)),
        )
        rows = conn.execute(
            sa.select(
                owner.c.id,
                owner.c.cache_content,
                owner.c.cache_refresh_interval,
                owner.c.cache_updated_at,
            ).where(owner.c.cache_content.isnot(None))
        ).all()
        for owner_id, content, interval, updated_at in rows:
            result = conn.execute(
                cache_entries.insert().values(
                    content=content,
                    refresh_interval=interval,
                    updated_at=updated_at or sa.func.now(),
                )
            )
            conn.execute(
                sa.text(
                    f"INSERT INTO {assoc_table} ({owner_column}, cache_id) "
                    f"VALUES (:owner_id, :cache_id)"
                ),
                {"owner_id": owner_id, "cache_id": result.inserted_primary_key[0]},
            )

    for table in ('link_groups', 'links'):
        with op.batch_alter_table(table) as batch:
            for column in INLINE_COLUMNS:
                batch.drop_column(column)


def downgrade() -> None:
    for table in ('link_groups', 'links'):
        with op.batch_alter_table(table) as batch:
            batch.add_column(sa.Column('cache_content', sa.Text(), nullable=True))
            batch.add_column(sa.Column('cache_refresh_interval', sa.Integer(), nullable=False, server_default='3600'))
            batch.add_column(sa.Column('cache_updated_at', sa.DateTime(timezone=True), nullable=True))

    for owner_table, assoc_table, owner_column in (
        ('link_groups', 'group_caches', 'group_id'),
        ('links', 'link_caches', 'link_id'),
    ):
        op.execute(
            f"UPDATE {owner_table} SET "
            f"cache_content = (SELECT c.content FROM cache_entries c JOIN {assoc_table} a "
            f"ON a.cache_id = c.id WHERE a.{owner_column} = {owner_table}.id), "
            f"cache_refresh_interval = COALESCE((SELECT c.refresh_interval FROM cache_entries c "
            f"JOIN {assoc_table} a ON a.cache_id = c.id WHERE a.{owner_column} = {owner_table}.id), 3600), "
            f"cache_updated_at = (SELECT c.updated_at FROM cache_entries c JOIN {assoc_table} a "
            f"ON a.cache_id = c.id WHERE a.{owner_column} = {owner_table}.id)"
        )

    op.drop_index('ix_link_caches_cache_id', table_name='link_caches')
    op.drop_table('link_caches')
    op.drop_index('ix_group_caches_cache_id', table_name='group_caches')
    op.drop_table('group_caches')
    op.drop_table('cache_entries')
