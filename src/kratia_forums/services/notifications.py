"""Notification fan-out for concluded votations.

Dispatch is fire-and-forget: it runs after the state change it reports has
been committed, and a failure here is logged without touching that state.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kratia_forums.core.settings import settings
from kratia_forums.models import Notification, NotificationType, User, Votation

logger = logging.getLogger(__name__)

_STATUS_LABELS = {
    "closed_passed": "passed",
    "closed_failed_quorum": "failed to reach quorum",
    "closed_failed_vote": "was rejected",
    "closed_executed": "was executed",
    "closed_rejected": "was rejected",
}


def wants_notification(member: User, kind: str) -> bool:
    """Return False only if the member switched off web notifications of ``kind``."""
    preferences = member.notification_preferences or {}
    setting = preferences.get(kind)
    if not isinstance(setting, dict):
        return True
    return bool(setting.get("web", True))


class NotificationDispatcher:
    """Writes notification rows for members."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def notify(self, recipient_id: str, kind: str, **fields: Any) -> None:
        """Write a single notification, swallowing and logging storage errors."""
        self._write([Notification(recipient_id=recipient_id, type=kind, **fields)])

    def votation_concluded(self, votation: Votation) -> int:
        """Tell the proposer and every other participant how a votation ended.

        Returns the number of notifications written.
        """
        label = _STATUS_LABELS.get(votation.status, votation.status)
        link = f"/forums/{settings.agora_forum_id}/threads/{votation.related_thread_id}"
        common = {
            "thread_id": votation.related_thread_id,
            "forum_id": settings.agora_forum_id,
            "votation_id": votation.id,
            "votation_title": votation.title,
            "votation_outcome": votation.status,
            "link": link,
        }

        recipients = {votation.proposer_id: NotificationType.VOTATION_CONCLUDED_PROPOSER}
        for voter_id in votation.voters:
            recipients.setdefault(voter_id, NotificationType.VOTATION_CONCLUDED_PARTICIPANT)

        members = {
            member.id: member
            for member in self.session.scalars(
                select(User).where(User.id.in_(list(recipients)))
            )
        }

        notifications = []
        for recipient_id, kind in recipients.items():
            member = members.get(recipient_id)
            if member is None or not wants_notification(member, kind):
                continue
            if kind == NotificationType.VOTATION_CONCLUDED_PROPOSER:
                message = f'Your proposal "{votation.title}" {label}.'
            else:
                message = f'The votation "{votation.title}" you took part in {label}.'
            notifications.append(
                Notification(
                    recipient_id=recipient_id,
                    type=kind,
                    message=message,
                    **common,
                )
            )
        return self._write(notifications)

    def _write(self, notifications: list[Notification]) -> int:
        if not notifications:
            return 0
        try:
            self.session.add_all(notifications)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to write %s notification(s)", len(notifications))
            return 0
        return len(notifications)
