"""Forum content schemas."""

from __future__ import annotations

from datetime import datetime

from kratia_forums.schemas.common import CamelModel
from kratia_forums.schemas.votation import VotationResponse


class ForumResponse(CamelModel):
    """Schema for forum information returned by the API."""

    id: str
    category_id: str | None
    name: str
    description: str
    thread_count: int
    post_count: int
    is_public: bool
    is_agora: bool


class PostResponse(CamelModel):
    """Schema for a post inside a thread."""

    id: str
    thread_id: str
    author_id: str
    author_username: str
    content: str
    created_at: datetime
    updated_at: datetime | None


class ThreadResponse(CamelModel):
    """Schema for thread metadata."""

    id: str
    forum_id: str
    title: str
    author_id: str
    author_username: str
    created_at: datetime
    last_reply_at: datetime | None
    post_count: int
    is_sticky: bool
    is_locked: bool
    is_public: bool
    related_votation_id: str | None


class ThreadDetail(CamelModel):
    """A thread page: the thread, its posts and its votation if it has one."""

    thread: ThreadResponse
    posts: list[PostResponse]
    votation: VotationResponse | None


class ConstitutionResponse(CamelModel):
    """The current constitution."""

    constitution_text: str
    last_updated: datetime | None
