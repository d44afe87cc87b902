"""Who may propose and who may vote.

Pure predicates over already-loaded rows. The API uses them to decide what
to offer; the tally engine and the proposal issuer call them again inside
their transactions against freshly read rows.
"""

from __future__ import annotations

from kratia_forums.models import User, UserStatus, Votation, VotationType


def can_propose(member: User | None) -> bool:
    """Return True if ``member`` may open a votation.

    Requires an authenticated member (not a visitor or guest) holding voting
    rights whose status is active.
    """
    if member is None:
        return False
    return (
        member.is_authenticated_member
        and bool(member.can_vote)
        and member.status == UserStatus.ACTIVE
    )


def ineligibility_reason(member: User | None) -> str | None:
    """Explain why ``can_propose`` is False, or return None if it is True."""
    if member is None or not member.is_authenticated_member:
        return "You must be a registered member to take part in votations."
    if member.status == UserStatus.UNDER_SANCTION_PROCESS:
        return "You cannot take part in votations while under a sanction process."
    if member.status == UserStatus.SANCTIONED:
        return "Sanctioned members cannot take part in votations."
    if not member.can_vote:
        return "You do not have voting rights yet."
    if member.status != UserStatus.ACTIVE:
        return "Your account is not active."
    return None


def sanction_target_id(votation: Votation) -> str | None:
    """Return the member a sanction votation targets."""
    if votation.type != VotationType.SANCTION or not votation.payload:
        return None
    return votation.payload.get("target_user_id")


def is_sanction_target(member: User, votation: Votation) -> bool:
    """Return True if ``votation`` is a sanction against ``member``."""
    return sanction_target_id(votation) == member.id


def has_voted(member: User, votation: Votation) -> bool:
    """Return True if ``member`` already has a ballot on ``votation``."""
    return member.id in votation.voters


def can_vote(member: User | None, votation: Votation) -> bool:
    """Return True if ``member`` may cast a ballot on ``votation`` right now."""
    if member is None or not can_propose(member):
        return False
    return (
        votation.is_active
        and not has_voted(member, votation)
        and not is_sanction_target(member, votation)
    )
