"""Member-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from kratia_forums.schemas.common import CamelModel


class MemberResponse(CamelModel):
    """Public view of a member including governance fields."""

    id: str
    username: str
    avatar_url: str | None
    registration_date: datetime
    karma: int
    status: str
    role: str
    can_vote: bool
    is_quarantined: bool
    sanction_end_date: datetime | None
