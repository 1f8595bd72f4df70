"""Link group API routes (owner side).

Every route here sits behind the session gate. Groups belong to one user;
touching someone else's group is Forbidden, a missing group is NotFound.
Routes handle HTTP concerns, ContentStore does the database work.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from linkshelf.auth.dependencies import get_current_user
from linkshelf.db.engine import get_db
from linkshelf.db.models import LinkGroup, User
from linkshelf.errors import Forbidden
from linkshelf.schemas.content import (
    CacheAssign,
    CacheRead,
    GroupDetail,
    GroupRead,
    GroupWrite,
    LinkDetail,
    LinkRead,
    LinkWrite,
)
from linkshelf.schemas.envelope import ApiResponse
from linkshelf.services.content_store import ContentStore, GroupDetails

router = APIRouter()


def _store(db: AsyncSession = Depends(get_db)) -> ContentStore:
    return ContentStore(db)


async def owned_group(store: ContentStore, group_id: int, user: User) -> LinkGroup:
    """Load a group and make sure the caller owns it."""
    group = await store.get_link_group_by_id(group_id)
    if group.user_id != user.id:
        raise Forbidden("Not your link group")
    return group


def link_details(details: GroupDetails) -> list[LinkDetail]:
    return [
        LinkDetail(
            **LinkRead.model_validate(item.link).model_dump(),
            cache=CacheRead.model_validate(item.cache) if item.cache else None,
        )
        for item in details.links
    ]


# ─── Groups ─────────────────────────────────────────────

@router.post("/groups", response_model=ApiResponse[GroupRead])
async def create_group(
    body: GroupWrite,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    group_id = await store.create_link_group(
        user_id=user.id,
        name=body.name,
        slug=body.slug,
        access_key=body.access_key,
        description=body.description,
        is_public=body.is_public,
    )
    group = await store.get_link_group_by_id(group_id)
    return ApiResponse.success(GroupRead.model_validate(group))


@router.get("/groups", response_model=ApiResponse[list[GroupRead]])
async def list_groups(
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    groups = await store.get_groups_by_user(user.id)
    return ApiResponse.success([GroupRead.model_validate(g) for g in groups])


@router.get("/groups/{group_id}", response_model=ApiResponse[GroupRead])
async def get_group(
    group_id: int,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    group = await owned_group(store, group_id, user)
    return ApiResponse.success(GroupRead.model_validate(group))


@router.put("/groups/{group_id}", response_model=ApiResponse[GroupRead])
async def update_group(
    group_id: int,
    body: GroupWrite,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    """Replace the group's fields. Slug uniqueness is checked by the database."""
    await owned_group(store, group_id, user)
    await store.update_link_group(
        group_id,
        name=body.name,
        slug=body.slug,
        access_key=body.access_key,
        description=body.description,
        is_public=body.is_public,
    )
    group = await store.get_link_group_by_id(group_id)
    return ApiResponse.success(GroupRead.model_validate(group))


@router.delete("/groups/{group_id}", response_model=ApiResponse[dict])
async def delete_group(
    group_id: int,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    await owned_group(store, group_id, user)
    deleted = await store.delete_link_group(group_id)
    return ApiResponse.success({"deleted": deleted})


@router.get("/groups/{group_id}/details", response_model=ApiResponse[GroupDetail])
async def get_group_details(
    group_id: int,
    include_link_cache: bool = True,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    """Group with its links and cache. A missing cache is simply null."""
    await owned_group(store, group_id, user)
    details = await store.group_with_details(group_id, include_link_cache)
    return ApiResponse.success(
        GroupDetail(
            group=GroupRead.model_validate(details.group),
            links=link_details(details),
            cache=CacheRead.model_validate(details.cache) if details.cache else None,
        )
    )


# ─── Group cache ────────────────────────────────────────

@router.put("/groups/{group_id}/cache", response_model=ApiResponse[CacheRead])
async def set_group_cache(
    group_id: int,
    body: CacheAssign,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    """Attach a cache entry, replacing whatever the group had before."""
    await owned_group(store, group_id, user)
    cache = await store.get_cache_entry_by_id(body.cache_id)
    await store.set_group_cache(group_id, cache.id)
    return ApiResponse.success(CacheRead.model_validate(cache))


@router.delete("/groups/{group_id}/cache", response_model=ApiResponse[dict])
async def clear_group_cache(
    group_id: int,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    await owned_group(store, group_id, user)
    cleared = await store.clear_group_cache(group_id)
    return ApiResponse.success({"cleared": cleared})


# ─── Links in a group ───────────────────────────────────

@router.post("/groups/{group_id}/links", response_model=ApiResponse[LinkRead])
async def create_link(
    group_id: int,
    body: LinkWrite,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    await owned_group(store, group_id, user)
    link_id = await store.create_link(
        group_id=group_id,
        link_type=body.link_type,
        target_url=body.target_url,
        name=body.name,
        content=body.content,
    )
    link = await store.get_link_by_id(link_id)
    return ApiResponse.success(LinkRead.model_validate(link))


@router.get("/groups/{group_id}/links", response_model=ApiResponse[list[LinkRead]])
async def list_links(
    group_id: int,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    await owned_group(store, group_id, user)
    links = await store.get_links_by_group(group_id)
    return ApiResponse.success([LinkRead.model_validate(link) for link in links])
