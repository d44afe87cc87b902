"""Votation closure: deciding an expired votation and applying its result.

Closure is triggered lazily by whoever reads a votation after its deadline.
Several readers may race to close the same votation, and a ballot cast just
before the deadline may still be committing. The decision is taken on a
locked read of the tally, and the status transition is a compare-and-swap on
``status = 'active'`` and the ballot count the decision saw. Every side
effect is staged in the same commit, so exactly one closure takes effect and
a closed status is never visible without its effects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from kratia_forums.core.errors import NotFound
from kratia_forums.core.settings import settings
from kratia_forums.db.time import utcnow
from kratia_forums.models import (
    CONSTITUTION_ID,
    Forum,
    ForumCategory,
    SiteSettings,
    Thread,
    User,
    UserRole,
    UserStatus,
    Votation,
    VotationStatus,
    VotationType,
)
from kratia_forums.repositories.votation_repo import VotationRepository
from kratia_forums.schemas.votation import (
    AdmissionPayload,
    NewForumPayload,
    RuleChangePayload,
    SanctionPayload,
    parse_payload,
)
from kratia_forums.services.ledger import AtomicStore
from kratia_forums.services.notifications import NotificationDispatcher
from kratia_forums.services.sanctions import parse_sanction_duration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClosureDecision:
    """Terminal status and human-readable outcome computed for a votation."""

    status: VotationStatus
    outcome: str
    quorum_met: bool
    passed: bool


def required_quorum(votation: Votation) -> int:
    """Return the number of ballots needed for the result to count."""
    return max(votation.quorum_required, settings.votation_quorum_floor)


def sanction_length(payload: SanctionPayload) -> timedelta:
    """Return how long a passed sanction lasts."""
    try:
        return parse_sanction_duration(payload.sanction_duration)
    except ValueError:
        # Stored before duration validation existed; clamp to the maximum.
        logger.warning(
            "Unparseable sanction duration %r; applying %s days",
            payload.sanction_duration,
            settings.max_sanction_days,
        )
        return timedelta(days=settings.max_sanction_days)


def _passed_effect_summary(votation: Votation, now: datetime) -> str:
    payload = parse_payload(votation.payload)
    if isinstance(payload, SanctionPayload):
        end = now + sanction_length(payload)
        return f" {payload.target_username} is sanctioned until {end:%Y-%m-%d %H:%M} UTC."
    if isinstance(payload, RuleChangePayload):
        return " The constitution has been updated."
    if isinstance(payload, NewForumPayload):
        return f' The forum "{payload.proposed_forum_name}" has been created.'
    if isinstance(payload, AdmissionPayload):
        return f" {payload.target_username} has been admitted as a member."
    return ""


def _counts(votation: Votation) -> str:
    return (
        f"{votation.votes_for} for, {votation.votes_against} against, "
        f"{votation.votes_abstain} abstaining"
    )


def decide(votation: Votation, now: datetime) -> ClosureDecision:
    """Compute the terminal status of an expired votation.

    Quorum is checked first: a votation that did not reach quorum fails
    regardless of how the ballots split. Otherwise it passes only with
    strictly more votes for than against; abstentions count towards quorum
    but not towards the result.
    """
    required = required_quorum(votation)
    quorum_met = votation.total_votes_cast >= required
    passed = votation.votes_for > votation.votes_against
    counts = _counts(votation)

    if not quorum_met:
        return ClosureDecision(
            status=VotationStatus.CLOSED_FAILED_QUORUM,
            outcome=(
                f"Failed: quorum not met ({votation.total_votes_cast} of {required} "
                f"required votes cast; {counts})."
            ),
            quorum_met=False,
            passed=passed,
        )
    if passed:
        return ClosureDecision(
            status=VotationStatus.CLOSED_PASSED,
            outcome=f"Passed with {counts}.{_passed_effect_summary(votation, now)}",
            quorum_met=True,
            passed=True,
        )
    return ClosureDecision(
        status=VotationStatus.CLOSED_FAILED_VOTE,
        outcome=f"Rejected with {counts}.",
        quorum_met=True,
        passed=False,
    )


def _apply_sanction(
    session: Session, payload: SanctionPayload, votation: Votation, now: datetime
) -> None:
    session.execute(
        update(User)
        .where(User.id == payload.target_user_id)
        .values(
            status=UserStatus.SANCTIONED,
            sanction_end_date=now + sanction_length(payload),
        )
        .execution_options(synchronize_session=False)
    )


def _release_sanction_target(session: Session, payload: SanctionPayload) -> None:
    session.execute(
        update(User)
        .where(
            User.id == payload.target_user_id,
            User.status == UserStatus.UNDER_SANCTION_PROCESS,
        )
        .values(status=UserStatus.ACTIVE)
        .execution_options(synchronize_session=False)
    )


def _apply_rule_change(
    session: Session, payload: RuleChangePayload, votation: Votation, now: datetime
) -> None:
    site = session.get(SiteSettings, CONSTITUTION_ID)
    if site is None:
        site = SiteSettings(id=CONSTITUTION_ID)
        session.add(site)
    site.constitution_text = payload.proposed_constitution_text
    site.last_updated = now


def _apply_admission(
    session: Session, payload: AdmissionPayload, votation: Votation, now: datetime
) -> None:
    session.execute(
        update(User)
        .where(
            User.id == payload.target_user_id,
            User.status == UserStatus.PENDING_ADMISSION,
        )
        .values(
            status=UserStatus.ACTIVE,
            can_vote=True,
            is_quarantined=False,
            role=UserRole.USER,
        )
        .execution_options(synchronize_session=False)
    )


def _apply_new_forum(
    session: Session, payload: NewForumPayload, votation: Votation, now: datetime
) -> None:
    session.add(
        Forum(
            category_id=payload.proposed_forum_category_id,
            name=payload.proposed_forum_name,
            description=payload.proposed_forum_description,
            is_public=payload.proposed_forum_is_public,
            thread_count=0,
            post_count=0,
            created_by_votation_id=votation.id,
        )
    )


_PASSED_EFFECTS = {
    VotationType.SANCTION: _apply_sanction,
    VotationType.RULE_CHANGE: _apply_rule_change,
    VotationType.ADMISSION_REQUEST: _apply_admission,
    VotationType.NEW_FORUM_PROPOSAL: _apply_new_forum,
}


def _blocked_effect_reason(session: Session, votation: Votation) -> str | None:
    """Return why a passed votation's effect can no longer be applied, if so."""
    payload = parse_payload(votation.payload)
    if isinstance(payload, NewForumPayload):
        if session.get(ForumCategory, payload.proposed_forum_category_id) is None:
            return f'the category chosen for "{payload.proposed_forum_name}" no longer exists'
    elif isinstance(payload, AdmissionPayload):
        target_status = session.scalar(
            select(User.status).where(User.id == payload.target_user_id)
        )
        if target_status != UserStatus.PENDING_ADMISSION:
            return f"{payload.target_username} is no longer awaiting admission"
    return None


def _reconcile(session: Session, votation: Votation, decision: ClosureDecision) -> ClosureDecision:
    """Downgrade a passing decision whose effect is no longer possible."""
    if decision.status != VotationStatus.CLOSED_PASSED:
        return decision
    reason = _blocked_effect_reason(session, votation)
    if reason is None:
        return decision
    return ClosureDecision(
        status=VotationStatus.CLOSED_REJECTED,
        outcome=f"Passed with {_counts(votation)} but not applied: {reason}.",
        quorum_met=True,
        passed=True,
    )


def apply_closure(
    session: Session,
    votation: Votation,
    decision: ClosureDecision,
    now: datetime,
) -> bool:
    """Stage the status transition and every effect of ``decision``.

    The status update only matches while the votation is still active and
    holds exactly the ballots ``decision`` was computed from. If another
    closure got there first, or a late ballot landed, nothing is staged and
    False is returned.
    """
    result = session.execute(
        update(Votation)
        .where(
            Votation.id == votation.id,
            Votation.status == VotationStatus.ACTIVE,
            Votation.total_votes_cast == votation.total_votes_cast,
        )
        .values(status=decision.status, outcome=decision.outcome, closed_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False

    payload = parse_payload(votation.payload)
    if decision.status == VotationStatus.CLOSED_PASSED:
        effect = _PASSED_EFFECTS.get(VotationType(votation.type))
        if effect is not None and payload is not None:
            effect(session, payload, votation, now)
    elif isinstance(payload, SanctionPayload):
        _release_sanction_target(session, payload)

    session.execute(
        update(Thread)
        .where(Thread.id == votation.related_thread_id, Thread.is_locked.is_(False))
        .values(is_locked=True)
        .execution_options(synchronize_session=False)
    )
    return True


def get_votation(session: Session, votation_id: str) -> Votation:
    """Load a votation with fresh column values or raise ``NotFound``."""
    votation = session.get(Votation, votation_id, populate_existing=True)
    if votation is None:
        raise NotFound("Votation not found")
    return votation


def _close_locked(session: Session, votation_id: str, now: datetime) -> ClosureDecision | None:
    votation = session.execute(
        select(Votation)
        .where(Votation.id == votation_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one()
    if not votation.is_due(now):
        return None
    decision = _reconcile(session, votation, decide(votation, now))
    if not apply_closure(session, votation, decision, now):
        return None
    return decision


def ensure_closed(
    store: AtomicStore,
    votation_id: str,
    *,
    now: datetime | None = None,
    dispatcher: NotificationDispatcher | None = None,
) -> Votation:
    """Return the votation, closing it first if its deadline has passed.

    Idempotent: a votation that is no longer active is returned untouched.
    If a late ballot changes the tally while closing, the decision is taken
    again on the new tally. Raises ``InfrastructureError`` if the closing
    commit fails, in which case the votation is still active and the next
    call retries.
    """
    now = now or utcnow()
    votation = get_votation(store.session, votation_id)

    for _ in range(settings.transaction_max_attempts):
        if not votation.is_due(now):
            return votation

        decision = store.batch_write(lambda session: _close_locked(session, votation_id, now))
        votation = get_votation(store.session, votation_id)
        if decision is None:
            logger.info(
                "Votation %s was closed or received a ballot while closing; re-reading",
                votation_id,
            )
            continue

        logger.info(
            "Votation %s (%s) closed as %s: %s",
            votation.id,
            votation.type,
            decision.status,
            decision.outcome,
        )
        (dispatcher or NotificationDispatcher(store.session)).votation_concluded(votation)
        return votation

    logger.warning("Votation %s is still open after repeated closing attempts", votation_id)
    return votation


def close_due_votations(store: AtomicStore, *, now: datetime | None = None) -> list[str]:
    """Close every active votation whose deadline has passed.

    Returns the ids of the votations this call examined.
    """
    now = now or utcnow()
    due_ids = VotationRepository(store.session).list_due_ids(now)
    for votation_id in due_ids:
        ensure_closed(store, votation_id, now=now)
    return due_ids
