"""SQLAlchemy ORM models, the single source of truth for the database schema.

Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic revisions in db/migrations track how the
schema got here.

Ownership is strictly hierarchical: a User owns LinkGroups, a LinkGroup owns
Links. Cache entries stand on their own and are attached to at most one group
and one link per owner through the group_caches / link_caches tables, whose
primary key is the owner id (so attaching a new entry replaces the old row).

Deletes cascade in the database (ON DELETE CASCADE), not in the ORM.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered account. Only the password hash ever changes."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class LinkGroup(Base):
    """A named collection of links. The slug is its public lookup key.

    Non-public groups can still be read by anyone holding the access key.
    """

    __tablename__ = "link_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    access_key: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class Link(Base):
    """A single link inside a group."""

    __tablename__ = "links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("link_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    link_type: Mapped[str] = mapped_column(String(50), nullable=False)  # url, rss, note...
    target_url: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class CacheEntry(Base):
    """A pre-rendered artifact (page, aggregated feed) refreshed on an interval.

    updated_at moves only when content is rewritten, so the external
    refresher can tell how stale an entry is.
    """

    __tablename__ = "cache_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[Optional[str]] = mapped_column(String(100), unique=True, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    refresh_interval: Mapped[int] = mapped_column(
        Integer, nullable=False, default=3600
    )  # seconds
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )


class GroupCache(Base):
    """Active cache entry of a group (at most one)."""

    __tablename__ = "group_caches"

    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("link_groups.id", ondelete="CASCADE"), primary_key=True
    )
    cache_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cache_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class LinkCache(Base):
    """Active cache entry of a link (at most one)."""

    __tablename__ = "link_caches"

    link_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("links.id", ondelete="CASCADE"), primary_key=True
    )
    cache_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cache_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
