"""Initial schema with inline cache columns

Users, link groups and links. Groups and links carry their cached rendering
inline (cache_content / cache_refresh_interval / cache_updated_at).

Revision ID: 0001
Revises:
Create Date: 2026-09-02 10:12:41.118204
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _inline_cache_columns() -> list[sa.Column]:
    return [
        sa.Column('cache_content', sa.Text(), nullable=True),
        sa.Column('cache_refresh_interval', sa.Integer(), nullable=False, server_default='3600'),
        sa.Column('cache_updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'link_groups',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False, unique=True),
        sa.Column('access_key', sa.String(100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default='0'),
        *_inline_cache_columns(),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_link_groups_user_id', 'link_groups', ['user_id'])
    op.create_table(
        'links',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('link_groups.id', ondelete='CASCADE'), nullable=False),
        sa.Column('link_type', sa.String(50), nullable=False),
        sa.Column('target_url', sa.Text(), nullable=False),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        *_inline_cache_columns(),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_links_group_id', 'links', ['group_id'])


def downgrade() -> None:
    op.drop_index('ix_links_group_id', table_name='links')
    op.drop_table('links')
    op.drop_index('ix_link_groups_user_id', table_name='link_groups')
    op.drop_table('link_groups')
    op.drop_table('users')
