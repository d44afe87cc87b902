"""Data access helpers for listing votations."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from kratia_forums.models import Votation, VotationStatus

__all__ = ["VotationRepository"]


class VotationRepository:
    """Thin wrapper around read queries for votations."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def list_page(
        self,
        *,
        status: str | None = None,
        type_: str | None = None,
        limit: int = 20,
        before: str | None = None,
    ) -> list[Votation]:
        """Return votations newest first, starting after the ``before`` cursor.

        The cursor is the id of the last votation of the previous page; an
        unknown cursor yields an empty page.
        """
        stmt = select(Votation)
        if status is not None:
            stmt = stmt.where(Votation.status == status)
        if type_ is not None:
            stmt = stmt.where(Votation.type == type_)
        if before is not None:
            anchor = self.session.get(Votation, before)
            if anchor is None:
                return []
            stmt = stmt.where(
                or_(
                    Votation.created_at < anchor.created_at,
                    and_(Votation.created_at == anchor.created_at, Votation.id < anchor.id),
                )
            )
        stmt = stmt.order_by(Votation.created_at.desc(), Votation.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))

    def list_due_ids(self, now: datetime) -> list[str]:
        """Return ids of active votations whose deadline has passed, oldest first."""
        stmt = (
            select(Votation.id)
            .where(Votation.status == VotationStatus.ACTIVE, Votation.deadline <= now)
            .order_by(Votation.deadline)
        )
        return list(self.session.scalars(stmt))
