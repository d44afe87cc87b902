"""Sanction duration policy and lazy expiry."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta

from sqlalchemy import update
from sqlalchemy.orm import Session

from kratia_forums.core.settings import settings
from kratia_forums.db.time import as_utc
from kratia_forums.models import User, UserStatus

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(
    r"^\s*(?P<amount>\d+)\s*(?P<unit>days?|d|weeks?|w|months?|years?|y)\s*$",
    re.IGNORECASE,
)

_UNIT_DAYS = {
    "d": 1,
    "day": 1,
    "days": 1,
    "w": 7,
    "week": 7,
    "weeks": 7,
    "month": 30,
    "months": 30,
    "y": 365,
    "year": 365,
    "years": 365,
}


def parse_sanction_duration(text: str) -> timedelta:
    """Turn duration text such as ``"7 days"`` or ``"1 month"`` into a timedelta.

    Raises:
        ValueError: If the text is not a positive amount of days, weeks,
            months or years, or exceeds the configured maximum.
    """
    match = _DURATION_RE.match(text)
    if match is None:
        raise ValueError(f"Unrecognised sanction duration: {text!r}")
    amount = int(match.group("amount"))
    if amount <= 0:
        raise ValueError("Sanction duration must be positive")
    days = amount * _UNIT_DAYS[match.group("unit").lower()]
    if days > settings.max_sanction_days:
        raise ValueError(f"Sanction duration cannot exceed {settings.max_sanction_days} days")
    return timedelta(days=days)


def lift_expired_sanction(session: Session, member_id: str, now: datetime) -> bool:
    """Stage the return of a member whose sanction has ended to active status.

    Returns True if a sanction was lifted.
    """
    result = session.execute(
        update(User)
        .where(
            User.id == member_id,
            User.status == UserStatus.SANCTIONED,
            User.sanction_end_date <= as_utc(now),
        )
        .values(status=UserStatus.ACTIVE, sanction_end_date=None)
        .execution_options(synchronize_session=False)
    )
    lifted = result.rowcount == 1
    if lifted:
        logger.info("Sanction on member %s expired and was lifted", member_id)
    return lifted
