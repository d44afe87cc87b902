# src/kratia_forums/models/user.py
"""SQLAlchemy model for forum members."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kratia_forums.db.session import Base
from kratia_forums.db.time import utcnow


class UserStatus(StrEnum):
    """Lifecycle status of a member."""

    ACTIVE = "active"
    UNDER_SANCTION_PROCESS = "under_sanction_process"
    SANCTIONED = "sanctioned"
    PENDING_ADMISSION = "pending_admission"
    PENDING_EMAIL_VERIFICATION = "pending_email_verification"


class UserRole(StrEnum):
    """Coarse role of a member; visitors and guests are not authenticated members."""

    VISITOR = "visitor"
    GUEST = "guest"
    USER = "user"
    NORMAL_USER = "normal_user"
    ADMIN = "admin"
    FOUNDER = "founder"


class User(Base):
    """A forum member, including the fields governance reads and mutates.

    ``karma`` and the activity counters are only ever changed with SQL
    increment expressions so concurrent flows cannot lose updates.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("karma >= 0", name="ck_users_karma_non_negative"),
        CheckConstraint(
            "status <> 'sanctioned' OR sanction_end_date IS NOT NULL",
            name="ck_users_sanction_has_end_date",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: uuid.uuid4().hex,
    )
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    registration_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    karma: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.USER)
    can_vote: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_quarantined: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sanction_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Activity counters feeding the karma policy.
    total_posts_by_user: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_reactions_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_posts_in_threads_started_by_user: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    total_threads_started_by_user: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # {"votation_concluded_proposer": {"web": false}, ...}
    notification_preferences: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    @property
    def is_authenticated_member(self) -> bool:
        """Return True unless the account is a visitor or guest stand-in."""
        return self.role not in (UserRole.VISITOR, UserRole.GUEST)
