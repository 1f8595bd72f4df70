"""Content store: link groups, links, cache entries and their associations.

Service layer between the API routes and the database. Every write is its own
transaction: it commits on success and rolls back before raising.

Error contract:
- scalar reads raise NotFound
- duplicate slugs and dangling foreign keys raise ConstraintViolation
- pool timeouts and locked databases raise StorageUnavailable

Cache associations live in group_caches / link_caches, keyed by the owner id.
Setting a new cache for an owner replaces the previous row, so an owner never
has more than one active cache entry.
"""

from dataclasses import dataclass, field
from typing import Optional

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from linkshelf.db.models import (
    CacheEntry,
    GroupCache,
    Link,
    LinkCache,
    LinkGroup,
    utcnow,
)
from linkshelf.errors import NotFound, storage_errors

logger = structlog.get_logger()


@dataclass
class LinkDetails:
    """A link together with its active cache entry, if any."""
    link: Link
    cache: Optional[CacheEntry] = None


@dataclass
class GroupDetails:
    """Aggregate read of a group: the group, its links and its cache."""
    group: LinkGroup
    links: list[LinkDetails] = field(default_factory=list)
    cache: Optional[CacheEntry] = None


class ContentStore:
    """CRUD and relationship management for groups, links and caches."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _insert(self, obj) -> int:
        async with storage_errors(self.db):
            self.db.add(obj)
            await self.db.flush()
            new_id = obj.id
            await self.db.commit()
        # next read loads defaults and timestamps as stored
        self.db.expire(obj)
        return new_id

    async def _execute_write(self, stmt) -> bool:
        async with storage_errors(self.db):
            result = await self.db.execute(stmt)
            await self.db.commit()
        return result.rowcount > 0

    async def _fetch_one(self, stmt, entity: str, key: object):
        async with storage_errors(self.db):
            result = await self.db.execute(stmt)
            row = result.scalar_one_or_none()
        if row is None:
            raise NotFound(entity, key)
        return row

    async def _fetch_all(self, stmt) -> list:
        async with storage_errors(self.db):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    # ─── Link groups ────────────────────────────────────

    async def create_link_group(
        self,
        user_id: int,
        name: str,
        slug: str,
        access_key: Optional[str] = None,
        description: Optional[str] = None,
        is_public: bool = False,
    ) -> int:
        group_id = await self._insert(
            LinkGroup(
                user_id=user_id,
                name=name,
                slug=slug,
                access_key=access_key,
                description=description,
                is_public=is_public,
            )
        )
        logger.info("group.created", group_id=group_id, user_id=user_id, slug=slug)
        return group_id

    async def get_link_group_by_id(self, group_id: int) -> LinkGroup:
        return await self._fetch_one(
            select(LinkGroup).where(LinkGroup.id == group_id), "link group", group_id
        )

    async def get_group_by_slug(self, slug: str) -> LinkGroup:
        return await self._fetch_one(
            select(LinkGroup).where(LinkGroup.slug == slug), "link group", slug
        )

    async def get_groups_by_user(self, user_id: int) -> list[LinkGroup]:
        return await self._fetch_all(
            select(LinkGroup).where(LinkGroup.user_id == user_id).order_by(LinkGroup.id)
        )

    async def get_public_groups(self) -> list[LinkGroup]:
        return await self._fetch_all(
            select(LinkGroup).where(LinkGroup.is_public.is_(True)).order_by(LinkGroup.id)
        )

    async def update_link_group(
        self,
        group_id: int,
        name: str,
        slug: str,
        access_key: Optional[str] = None,
        description: Optional[str] = None,
        is_public: bool = False,
    ) -> bool:
        """Replace all mutable fields. Returns False if the group does not exist."""
        return await self._execute_write(
            update(LinkGroup)
            .where(LinkGroup.id == group_id)
            .values(
                name=name,
                slug=slug,
                access_key=access_key,
                description=description,
                is_public=is_public,
            )
        )

    async def delete_link_group(self, group_id: int) -> bool:
        return await self._execute_write(
            delete(LinkGroup).where(LinkGroup.id == group_id)
        )

    # ─── Links ──────────────────────────────────────────

    async def create_link(
        self,
        group_id: int,
        link_type: str,
        target_url: str,
        name: Optional[str] = None,
        content: Optional[str] = None,
    ) -> int:
        return await self._insert(
            Link(
                group_id=group_id,
                link_type=link_type,
                target_url=target_url,
                name=name,
                content=content,
            )
        )

    async def get_link_by_id(self, link_id: int) -> Link:
        return await self._fetch_one(
            select(Link).where(Link.id == link_id), "link", link_id
        )

    async def get_links_by_group(self, group_id: int) -> list[Link]:
        return await self._fetch_all(
            select(Link).where(Link.group_id == group_id).order_by(Link.id)
        )

    async def update_link(
        self,
        link_id: int,
        link_type: str,
        target_url: str,
        name: Optional[str] = None,
        content: Optional[str] = None,
    ) -> bool:
        return await self._execute_write(
            update(Link)
            .where(Link.id == link_id)
            .values(
                link_type=link_type,
                target_url=target_url,
                name=name,
                content=content,
            )
        )

    async def delete_link(self, link_id: int) -> bool:
        return await self._execute_write(delete(Link).where(Link.id == link_id))

    # ─── Cache entries ──────────────────────────────────

    async def create_cache_entry(
        self,
        content: str,
        slug: Optional[str] = None,
        refresh_interval: int = 3600,
    ) -> int:
        return await self._insert(
            CacheEntry(slug=slug, content=content, refresh_interval=refresh_interval)
        )

    async def get_cache_entry_by_id(self, cache_id: int) -> CacheEntry:
        return await self._fetch_one(
            select(CacheEntry).where(CacheEntry.id == cache_id), "cache entry", cache_id
        )

    async def get_cache_entry_by_slug(self, slug: str) -> CacheEntry:
        return await self._fetch_one(
            select(CacheEntry).where(CacheEntry.slug == slug), "cache entry", slug
        )

    async def update_cache_entry(
        self,
        cache_id: int,
        slug: Optional[str] = None,
        refresh_interval: int = 3600,
    ) -> bool:
        """Replace cache metadata. updated_at is left alone."""
        return await self._execute_write(
            update(CacheEntry)
            .where(CacheEntry.id == cache_id)
            .values(slug=slug, refresh_interval=refresh_interval)
        )

    async def update_cache_content(self, cache_id: int, content: str) -> bool:
        """Rewrite cached content and stamp updated_at."""
        return await self._execute_write(
            update(CacheEntry)
            .where(CacheEntry.id == cache_id)
            .values(content=content, updated_at=utcnow())
        )

    async def delete_cache_entry(self, cache_id: int) -> bool:
        """Delete an entry. Associations pointing at it go with it (FK cascade)."""
        return await self._execute_write(
            delete(CacheEntry).where(CacheEntry.id == cache_id)
        )

    # ─── Cache associations ─────────────────────────────

    async def set_group_cache(self, group_id: int, cache_id: int) -> None:
        """Make cache_id the group's only cache entry."""
        async with storage_errors(self.db):
            await self.db.execute(
                delete(GroupCache).where(GroupCache.group_id == group_id)
            )
            await self.db.execute(
                insert(GroupCache).values(group_id=group_id, cache_id=cache_id)
            )
            await self.db.commit()
        logger.info("group.cache_set", group_id=group_id, cache_id=cache_id)

    async def set_link_cache(self, link_id: int, cache_id: int) -> None:
        """Make cache_id the link's only cache entry."""
        async with storage_errors(self.db):
            await self.db.execute(delete(LinkCache).where(LinkCache.link_id == link_id))
            await self.db.execute(
                insert(LinkCache).values(link_id=link_id, cache_id=cache_id)
            )
            await self.db.commit()
        logger.info("link.cache_set", link_id=link_id, cache_id=cache_id)

    async def clear_group_cache(self, group_id: int) -> bool:
        return await self._execute_write(
            delete(GroupCache).where(GroupCache.group_id == group_id)
        )

    async def clear_link_cache(self, link_id: int) -> bool:
        return await self._execute_write(
            delete(LinkCache).where(LinkCache.link_id == link_id)
        )

    async def get_group_cache(self, group_id: int) -> Optional[CacheEntry]:
        """Return the group's cache entry, None if it has no association.

        Raises NotFound if the association points at a missing entry.
        """
        async with storage_errors(self.db):
            result = await self.db.execute(
                select(GroupCache.cache_id).where(GroupCache.group_id == group_id)
            )
            cache_id = result.scalar_one_or_none()
        if cache_id is None:
            return None
        return await self.get_cache_entry_by_id(cache_id)

    async def get_link_cache(self, link_id: int) -> Optional[CacheEntry]:
        async with storage_errors(self.db):
            result = await self.db.execute(
                select(LinkCache.cache_id).where(LinkCache.link_id == link_id)
            )
            cache_id = result.scalar_one_or_none()
        if cache_id is None:
            return None
        return await self.get_cache_entry_by_id(cache_id)

    # ─── Composite reads ────────────────────────────────

    async def group_with_details(
        self, group_id: int, include_link_cache: bool = True
    ) -> GroupDetails:
        """Assemble a group, its links and its cache into one result.

        A missing group raises NotFound. A missing cache (no association, or
        an association whose entry is gone) is reported as None instead.
        """
        group = await self.get_link_group_by_id(group_id)

        if include_link_cache:
            async with storage_errors(self.db):
                result = await self.db.execute(
                    select(Link, CacheEntry)
                    .outerjoin(LinkCache, LinkCache.link_id == Link.id)
                    .outerjoin(CacheEntry, CacheEntry.id == LinkCache.cache_id)
                    .where(Link.group_id == group_id)
                    .order_by(Link.id)
                )
                links = [LinkDetails(link=link, cache=cache) for link, cache in result.all()]
        else:
            links = [LinkDetails(link=link) for link in await self.get_links_by_group(group_id)]

        try:
            cache = await self.get_group_cache(group_id)
        except NotFound:
            logger.warning("group.cache_missing", group_id=group_id)
            cache = None

        return GroupDetails(group=group, links=links, cache=cache)
