# src/kratia_forums/models/votation.py
"""Models for community votations and the ballots cast on them."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kratia_forums.db.session import Base
from kratia_forums.db.time import as_utc, utcnow


class VotationType(StrEnum):
    """What a votation decides."""

    SANCTION = "sanction"
    RULE_CHANGE = "rule_change"
    FORUM_MANAGEMENT = "forum_management"
    ADMISSION_REQUEST = "admission_request"
    NEW_FORUM_PROPOSAL = "new_forum_proposal"
    OTHER = "other"


class VotationStatus(StrEnum):
    """One-way state machine; ``active`` is the only non-terminal state."""

    ACTIVE = "active"
    CLOSED_PASSED = "closed_passed"
    CLOSED_FAILED_QUORUM = "closed_failed_quorum"
    CLOSED_FAILED_VOTE = "closed_failed_vote"
    CLOSED_EXECUTED = "closed_executed"
    CLOSED_REJECTED = "closed_rejected"


class VoteChoice(StrEnum):
    """Options offered on every votation."""

    FOR = "for"
    AGAINST = "against"
    ABSTAIN = "abstain"


class Votation(Base):
    """A time-boxed binding vote with its running tally.

    The tally columns and the ``votation_voter`` rows are only written by the
    vote tally engine while ``status`` is active; ``status``, ``outcome`` and
    ``closed_at`` are only written by the closure processor.
    """

    __tablename__ = "votation"
    __table_args__ = (
        CheckConstraint(
            "votes_for >= 0 AND votes_against >= 0 AND votes_abstain >= 0",
            name="ck_votation_tally_non_negative",
        ),
        CheckConstraint(
            "votes_for + votes_against + votes_abstain = total_votes_cast",
            name="ck_votation_tally_conserved",
        ),
        CheckConstraint("quorum_required > 0", name="ck_votation_quorum_positive"),
        Index("ix_votation_status_deadline", "status", "deadline"),
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: uuid.uuid4().hex,
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=VotationStatus.ACTIVE,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    justification: Mapped[str | None] = mapped_column(Text, nullable=True)

    proposer_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    proposer_username: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    votes_for: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    votes_against: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    votes_abstain: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_votes_cast: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quorum_required: Mapped[int] = mapped_column(Integer, nullable=False)

    # Type-specific payload, validated through schemas.votation.VotationPayload.
    payload: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    related_thread_id: Mapped[str] = mapped_column(String(64), nullable=False)
    outcome: Mapped[str | None] = mapped_column(Text, nullable=True)

    ballots: Mapped[list[VotationVoter]] = relationship(
        "VotationVoter",
        back_populates="votation",
        cascade="all, delete-orphan",
        order_by="VotationVoter.cast_at",
    )

    @property
    def is_active(self) -> bool:
        """Return True while the votation accepts ballots."""
        return self.status == VotationStatus.ACTIVE

    def is_due(self, now: datetime) -> bool:
        """Return True if the votation is active but its deadline has passed."""
        return self.is_active and as_utc(self.deadline) <= as_utc(now)

    @property
    def options(self) -> dict[str, int]:
        """Return the tally keyed by choice."""
        return {
            VoteChoice.FOR.value: self.votes_for,
            VoteChoice.AGAINST.value: self.votes_against,
            VoteChoice.ABSTAIN.value: self.votes_abstain,
        }

    @property
    def voters(self) -> dict[str, str]:
        """Return the member-id to choice mapping."""
        return {ballot.voter_id: ballot.choice for ballot in self.ballots}


class VotationVoter(Base):
    """One member's ballot on one votation.

    The composite primary key is what enforces one vote per member.
    """

    __tablename__ = "votation_voter"
    __table_args__ = (
        CheckConstraint(
            "choice IN ('for', 'against', 'abstain')",
            name="ck_votation_voter_choice",
        ),
    )

    votation_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("votation.id", ondelete="CASCADE"),
        primary_key=True,
    )
    voter_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id"),
        primary_key=True,
    )
    choice: Mapped[str] = mapped_column(String(8), nullable=False)
    cast_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    votation: Mapped[Votation] = relationship("Votation", back_populates="ballots")
