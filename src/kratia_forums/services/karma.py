"""Karma accrual and promotion to voting rights.

Counters are always changed with SQL increments so independent flows
(posting, proposing, admin edits) never overwrite each other's updates.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from kratia_forums.core.settings import settings
from kratia_forums.db.time import as_utc
from kratia_forums.models import User, UserRole, UserStatus

logger = logging.getLogger(__name__)


def award_activity(
    session: Session,
    member_id: str,
    *,
    karma: int = 0,
    posts: int = 0,
    posts_in_own_threads: int = 0,
    threads_started: int = 0,
) -> None:
    """Stage increments of a member's karma and activity counters."""
    session.execute(
        update(User)
        .where(User.id == member_id)
        .values(
            karma=User.karma + karma,
            total_posts_by_user=User.total_posts_by_user + posts,
            total_posts_in_threads_started_by_user=(
                User.total_posts_in_threads_started_by_user + posts_in_own_threads
            ),
            total_threads_started_by_user=User.total_threads_started_by_user + threads_started,
        )
        .execution_options(synchronize_session=False)
    )


def qualifies_for_voting_rights(member: User, now: datetime) -> bool:
    """Return True once karma and account age both cross the configured thresholds."""
    old_enough = as_utc(member.registration_date) <= as_utc(now) - timedelta(
        days=settings.days_to_karma_eligibility
    )
    return member.karma >= settings.karma_threshold_for_voting and old_enough


def refresh_voting_rights(session: Session, member_id: str, now: datetime) -> bool:
    """Grant voting rights if the member now qualifies; never revokes them.

    Returns True if this call promoted the member.
    """
    registered_before = as_utc(now) - timedelta(days=settings.days_to_karma_eligibility)
    result = session.execute(
        update(User)
        .where(
            User.id == member_id,
            User.can_vote.is_(False),
            User.status == UserStatus.ACTIVE,
            User.karma >= settings.karma_threshold_for_voting,
            User.registration_date <= registered_before,
        )
        .values(
            can_vote=True,
            is_quarantined=False,
            role=case((User.role == UserRole.USER, UserRole.NORMAL_USER), else_=User.role),
        )
        .execution_options(synchronize_session=False)
    )
    promoted = result.rowcount == 1
    if promoted:
        logger.info("Member %s promoted to voting rights", member_id)
    return promoted
