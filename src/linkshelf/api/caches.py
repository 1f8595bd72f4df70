"""Cache entry API routes.

Cache entries are shared artifacts written by the refresher. Any logged-in
user may create and update them; attaching one to a group or link is done
from the owner's side (api/groups.py, api/links.py).
"""

from fastapi import APIRouter, Depends

from linkshelf.api.groups import _store
from linkshelf.errors import NotFound
from linkshelf.schemas.content import CacheContent, CacheCreate, CacheRead, CacheUpdate
from linkshelf.schemas.envelope import ApiResponse
from linkshelf.services.content_store import ContentStore

router = APIRouter(prefix="/caches")


@router.post("", response_model=ApiResponse[CacheRead])
async def create_cache(body: CacheCreate, store: ContentStore = Depends(_store)):
    cache_id = await store.create_cache_entry(
        content=body.content,
        slug=body.slug,
        refresh_interval=body.refresh_interval,
    )
    cache = await store.get_cache_entry_by_id(cache_id)
    return ApiResponse.success(CacheRead.model_validate(cache))


@router.get("/by-slug/{slug}", response_model=ApiResponse[CacheRead])
async def get_cache_by_slug(slug: str, store: ContentStore = Depends(_store)):
    cache = await store.get_cache_entry_by_slug(slug)
    return ApiResponse.success(CacheRead.model_validate(cache))


@router.get("/{cache_id}", response_model=ApiResponse[CacheRead])
async def get_cache(cache_id: int, store: ContentStore = Depends(_store)):
    cache = await store.get_cache_entry_by_id(cache_id)
    return ApiResponse.success(CacheRead.model_validate(cache))


@router.put("/{cache_id}", response_model=ApiResponse[CacheRead])
async def update_cache(
    cache_id: int, body: CacheUpdate, store: ContentStore = Depends(_store)
):
    """Replace slug and refresh interval. Does not count as a content refresh."""
    if not await store.update_cache_entry(
        cache_id, slug=body.slug, refresh_interval=body.refresh_interval
    ):
        raise NotFound("cache entry", cache_id)
    cache = await store.get_cache_entry_by_id(cache_id)
    return ApiResponse.success(CacheRead.model_validate(cache))


@router.put("/{cache_id}/content", response_model=ApiResponse[CacheRead])
async def refresh_cache_content(
    cache_id: int, body: CacheContent, store: ContentStore = Depends(_store)
):
    if not await store.update_cache_content(cache_id, body.content):
        raise NotFound("cache entry", cache_id)
    cache = await store.get_cache_entry_by_id(cache_id)
    return ApiResponse.success(CacheRead.model_validate(cache))


@router.delete("/{cache_id}", response_model=ApiResponse[dict])
async def delete_cache(cache_id: int, store: ContentStore = Depends(_store)):
    if not await store.delete_cache_entry(cache_id):
        raise NotFound("cache entry", cache_id)
    return ApiResponse.success({"deleted": True})
