"""Link API routes.

Links are owned through their group: the caller must own the link's group.
Creating and listing links lives under /groups/{id}/links in api/groups.py.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from linkshelf.api.groups import _store, owned_group
from linkshelf.auth.dependencies import get_current_user
from linkshelf.db.models import Link, User
from linkshelf.schemas.content import CacheAssign, CacheRead, LinkRead, LinkWrite
from linkshelf.schemas.envelope import ApiResponse
from linkshelf.services.content_store import ContentStore

router = APIRouter()


async def _owned_link(store: ContentStore, link_id: int, user: User) -> Link:
    link = await store.get_link_by_id(link_id)
    await owned_group(store, link.group_id, user)
    return link


@router.get("/links/{link_id}", response_model=ApiResponse[LinkRead])
async def get_link(
    link_id: int,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    link = await _owned_link(store, link_id, user)
    return ApiResponse.success(LinkRead.model_validate(link))


@router.put("/links/{link_id}", response_model=ApiResponse[LinkRead])
async def update_link(
    link_id: int,
    body: LinkWrite,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    await _owned_link(store, link_id, user)
    await store.update_link(
        link_id,
        link_type=body.link_type,
        target_url=body.target_url,
        name=body.name,
        content=body.content,
    )
    link = await store.get_link_by_id(link_id)
    return ApiResponse.success(LinkRead.model_validate(link))


@router.delete("/links/{link_id}", response_model=ApiResponse[dict])
async def delete_link(
    link_id: int,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    await _owned_link(store, link_id, user)
    deleted = await store.delete_link(link_id)
    return ApiResponse.success({"deleted": deleted})


# ─── Link cache ─────────────────────────────────────────

@router.get("/links/{link_id}/cache", response_model=ApiResponse[Optional[CacheRead]])
async def get_link_cache(
    link_id: int,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    await _owned_link(store, link_id, user)
    cache = await store.get_link_cache(link_id)
    return ApiResponse.success(CacheRead.model_validate(cache) if cache else None)


@router.put("/links/{link_id}/cache", response_model=ApiResponse[CacheRead])
async def set_link_cache(
    link_id: int,
    body: CacheAssign,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    await _owned_link(store, link_id, user)
    cache = await store.get_cache_entry_by_id(body.cache_id)
    await store.set_link_cache(link_id, cache.id)
    return ApiResponse.success(CacheRead.model_validate(cache))


@router.delete("/links/{link_id}/cache", response_model=ApiResponse[dict])
async def clear_link_cache(
    link_id: int,
    user: User = Depends(get_current_user),
    store: ContentStore = Depends(_store),
):
    await _owned_link(store, link_id, user)
    cleared = await store.clear_link_cache(link_id)
    return ApiResponse.success({"cleared": cleared})
