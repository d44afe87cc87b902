# src/kratia_forums/models/forum.py
"""SQLAlchemy models for forum content: categories, forums, threads and posts."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kratia_forums.db.session import Base
from kratia_forums.db.time import utcnow


def _new_id() -> str:
    return uuid.uuid4().hex


class ForumCategory(Base):
    """Top-level grouping of forums."""

    __tablename__ = "forum_category"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class Forum(Base):
    """A forum holding threads; the Agora is the forum flagged ``is_agora``."""

    __tablename__ = "forum"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    category_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("forum_category.id"),
        nullable=True,
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("forum.id"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    thread_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    post_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_agora: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Set when a passed new-forum votation created this forum; unique so a
    # votation can never yield two forums.
    created_by_votation_id: Mapped[str | None] = mapped_column(
        String(64),
        unique=True,
        nullable=True,
    )


class Thread(Base):
    """Discussion container; votation threads carry ``related_votation_id``."""

    __tablename__ = "thread"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    forum_id: Mapped[str] = mapped_column(String(64), ForeignKey("forum.id"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    author_username: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    last_reply_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    post_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_sticky: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # One-way: closure locks, nothing unlocks.
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    related_votation_id: Mapped[str | None] = mapped_column(
        String(64),
        unique=True,
        nullable=True,
    )


class Post(Base):
    """A message inside a thread."""

    __tablename__ = "post"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    thread_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("thread.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    author_username: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
