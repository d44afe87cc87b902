"""Notification schemas."""

from __future__ import annotations

from datetime import datetime

from kratia_forums.schemas.common import CamelModel


class NotificationResponse(CamelModel):
    """Schema for a notification returned by the API."""

    id: str
    recipient_id: str
    actor_id: str | None
    actor_username: str | None
    type: str
    thread_id: str | None
    forum_id: str | None
    votation_id: str | None
    votation_title: str | None
    votation_outcome: str | None
    message: str
    link: str
    created_at: datetime
    is_read: bool
