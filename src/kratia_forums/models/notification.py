# src/kratia_forums/models/notification.py
"""Notification records written by the dispatcher."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kratia_forums.db.session import Base
from kratia_forums.db.time import utcnow


class NotificationType(StrEnum):
    """Kinds of notifications a member can receive."""

    NEW_REPLY_TO_YOUR_THREAD = "new_reply_to_your_thread"
    VOTATION_CONCLUDED_PROPOSER = "votation_concluded_proposer"
    POST_REACTION = "post_reaction"
    VOTATION_CONCLUDED_PARTICIPANT = "votation_concluded_participant"
    NEW_PRIVATE_MESSAGE = "new_private_message"


class Notification(Base):
    """A single notification addressed to one member."""

    __tablename__ = "notification"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: uuid.uuid4().hex,
    )
    recipient_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    actor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    actor_username: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    thread_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    forum_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    votation_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    votation_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    votation_outcome: Mapped[str | None] = mapped_column(String(32), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
