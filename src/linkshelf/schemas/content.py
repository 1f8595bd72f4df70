"""Pydantic schemas for link groups, links and cache entries.

Separate "Create"/"Update" schemas (input) from "Read" schemas (output).
Updates are full replacements, so they carry every mutable field.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

SLUG_PATTERN = r"^[a-z0-9-]+$"


# ─── Link groups ────────────────────────────────────────

class GroupWrite(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    access_key: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    is_public: bool = False


class GroupRead(BaseModel):
    """Owner view of a group. Includes the access key."""
    id: int
    user_id: int
    name: str
    slug: str
    access_key: Optional[str] = None
    description: Optional[str] = None
    is_public: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class PublicGroupRead(BaseModel):
    """Group as seen by visitors. Never exposes the access key."""
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ─── Links ──────────────────────────────────────────────

class LinkWrite(BaseModel):
    link_type: str = Field(default="url", min_length=1, max_length=50)
    target_url: str = Field(..., min_length=1)
    name: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = None


class LinkRead(BaseModel):
    id: int
    group_id: int
    link_type: str
    target_url: str
    name: Optional[str] = None
    content: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ─── Cache entries ──────────────────────────────────────

class CacheCreate(BaseModel):
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    content: str = ""
    refresh_interval: int = Field(default=3600, gt=0)


class CacheUpdate(BaseModel):
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    refresh_interval: int = Field(default=3600, gt=0)


class CacheContent(BaseModel):
    content: str


class CacheRead(BaseModel):
    id: int
    slug: Optional[str] = None
    content: str
    refresh_interval: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CacheAssign(BaseModel):
    cache_id: int


# ─── Composite ──────────────────────────────────────────

class LinkDetail(LinkRead):
    cache: Optional[CacheRead] = None


class GroupDetail(BaseModel):
    group: GroupRead
    links: list[LinkDetail] = []
    cache: Optional[CacheRead] = None


class PublicGroupDetail(BaseModel):
    group: PublicGroupRead
    links: list[LinkDetail] = []
    cache: Optional[CacheRead] = None
