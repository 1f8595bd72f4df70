"""Public group pages.

Open routes, no session needed. Public groups are listed and readable by
anyone. A non-public group is readable only with its access key (?key=...),
otherwise the answer is Forbidden.
"""

import secrets
from typing import Optional

from fastapi import APIRouter, Depends

from linkshelf.api.groups import _store, link_details
from linkshelf.db.models import LinkGroup
from linkshelf.errors import Forbidden
from linkshelf.schemas.content import CacheRead, PublicGroupDetail, PublicGroupRead
from linkshelf.schemas.envelope import ApiResponse
from linkshelf.services.content_store import ContentStore

router = APIRouter(prefix="/public")


def _can_view(group: LinkGroup, key: Optional[str]) -> bool:
    if group.is_public:
        return True
    if not group.access_key or key is None:
        return False
    return secrets.compare_digest(key.encode("utf-8"), group.access_key.encode("utf-8"))


@router.get("/groups", response_model=ApiResponse[list[PublicGroupRead]])
async def list_public_groups(store: ContentStore = Depends(_store)):
    groups = await store.get_public_groups()
    return ApiResponse.success([PublicGroupRead.model_validate(g) for g in groups])


@router.get("/groups/{slug}", response_model=ApiResponse[PublicGroupDetail])
async def view_group(
    slug: str,
    key: Optional[str] = None,
    store: ContentStore = Depends(_store),
):
    group = await store.get_group_by_slug(slug)
    if not _can_view(group, key):
        raise Forbidden("This link group is private")

    details = await store.group_with_details(group.id)
    return ApiResponse.success(
        PublicGroupDetail(
            group=PublicGroupRead.model_validate(details.group),
            links=link_details(details),
            cache=CacheRead.model_validate(details.cache) if details.cache else None,
        )
    )
