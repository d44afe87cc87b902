"""Proposal issuer: opens a votation together with its Agora thread.

Each ``propose_*`` function validates its input, then writes the votation,
the companion thread, the seed post, the Agora counters and the proposer's
activity counters in a single transaction.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from kratia_forums.core.errors import (
    Forbidden,
    InvalidTarget,
    NotFound,
    ValidationError,
)
from kratia_forums.core.settings import settings
from kratia_forums.db.time import utcnow
from kratia_forums.models import (
    CONSTITUTION_ID,
    Forum,
    ForumCategory,
    Post,
    SiteSettings,
    Thread,
    User,
    UserStatus,
    Votation,
    VotationStatus,
    VotationType,
)
from kratia_forums.schemas.proposal import (
    AdmissionProposal,
    NewForumProposal,
    RuleChangeProposal,
    SanctionProposal,
)
from kratia_forums.schemas.votation import (
    AdmissionPayload,
    NewForumPayload,
    RuleChangePayload,
    SanctionPayload,
    dump_payload,
    parse_payload,
)
from kratia_forums.services.eligibility import can_propose, ineligibility_reason
from kratia_forums.services.karma import award_activity, refresh_voting_rights
from kratia_forums.services.ledger import AtomicStore
from kratia_forums.services.sanctions import parse_sanction_duration

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class IssuedProposal:
    """Identifiers written by a successful proposal."""

    votation_id: str
    thread_id: str


@dataclass
class _Draft:
    type: VotationType
    title: str
    description: str
    justification: str
    payload: BaseModel
    thread_title: str
    post_content: str


def _validate(model: type[M], **data: Any) -> M:
    """Build a proposal schema, reporting bad input as a domain ``ValidationError``."""
    try:
        return model(**data)
    except PydanticValidationError as exc:
        messages = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"])
            messages.append(f"{field}: {error['msg']}")
        raise ValidationError("; ".join(messages)) from exc


def _load_proposer(session: Session, member: User) -> User:
    proposer = session.get(User, member.id, populate_existing=True)
    if not can_propose(proposer):
        raise Forbidden(ineligibility_reason(proposer) or "You cannot create proposals.")
    return proposer


def _issue(
    store: AtomicStore,
    member: User,
    now: datetime,
    build: Callable[[Session, User], _Draft],
) -> IssuedProposal:
    """Write a votation, its thread and seed post, and the counter updates.

    ``build`` runs inside the transaction after the proposer has been
    re-checked; it performs the type-specific validation, may stage extra
    writes (such as flagging a sanction target) and returns the draft.
    """

    def _write(session: Session) -> IssuedProposal:
        proposer = _load_proposer(session, member)
        agora = session.get(Forum, settings.agora_forum_id)
        if agora is None:
            raise NotFound("The Agora forum has not been set up")

        draft = build(session, proposer)
        votation_id = uuid.uuid4().hex
        thread_id = uuid.uuid4().hex

        votation = Votation(
            id=votation_id,
            type=draft.type,
            status=VotationStatus.ACTIVE,
            title=draft.title,
            description=draft.description,
            justification=draft.justification,
            proposer_id=proposer.id,
            proposer_username=proposer.username,
            created_at=now,
            deadline=now + timedelta(days=settings.votation_duration_days),
            votes_for=0,
            votes_against=0,
            votes_abstain=0,
            total_votes_cast=0,
            quorum_required=settings.votation_quorum_min_participants,
            payload=dump_payload(draft.payload),
            related_thread_id=thread_id,
        )
        thread = Thread(
            id=thread_id,
            forum_id=agora.id,
            title=draft.thread_title,
            author_id=proposer.id,
            author_username=proposer.username,
            created_at=now,
            last_reply_at=now,
            post_count=1,
            is_sticky=False,
            is_locked=False,
            is_public=agora.is_public,
            related_votation_id=votation_id,
        )
        session.add_all([votation, thread])
        session.flush()
        session.add(
            Post(
                thread_id=thread.id,
                author_id=proposer.id,
                author_username=proposer.username,
                content=draft.post_content,
                created_at=now,
            )
        )

        session.execute(
            update(Forum)
            .where(Forum.id == agora.id)
            .values(thread_count=Forum.thread_count + 1, post_count=Forum.post_count + 1)
            .execution_options(synchronize_session=False)
        )
        award_activity(
            session,
            proposer.id,
            karma=settings.proposal_karma_reward,
            posts=1,
            posts_in_own_threads=1,
            threads_started=1,
        )
        refresh_voting_rights(session, proposer.id, now)
        return IssuedProposal(votation_id=votation.id, thread_id=thread.id)

    issued = store.transact(_write)
    logger.info(
        "Member %s opened votation %s (thread %s)",
        member.id,
        issued.votation_id,
        issued.thread_id,
    )
    return issued


def _load_target(session: Session, user_id: str) -> User:
    target = session.get(User, user_id, populate_existing=True)
    if target is None:
        raise NotFound("Member not found")
    return target


def propose_sanction(
    store: AtomicStore,
    member: User,
    target_user_id: str,
    duration: str,
    justification: str,
    *,
    now: datetime | None = None,
) -> IssuedProposal:
    """Open a sanction votation and put the target under a sanction process.

    Raises:
        ValidationError: Bounds or duration text are invalid.
        Forbidden: The proposer may not create proposals.
        NotFound: The target member does not exist.
        InvalidTarget: The target is the proposer or is not active.
    """
    now = now or utcnow()
    data = _validate(
        SanctionProposal,
        target_user_id=target_user_id,
        duration=duration,
        justification=justification,
    )
    try:
        parse_sanction_duration(data.duration)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    def build(session: Session, proposer: User) -> _Draft:
        if data.target_user_id == proposer.id:
            raise InvalidTarget("You cannot propose a sanction against yourself.")
        target = _load_target(session, data.target_user_id)
        if target.status in (UserStatus.UNDER_SANCTION_PROCESS, UserStatus.SANCTIONED):
            raise InvalidTarget(f"{target.username} is already sanctioned or on trial.")
        flagged = session.execute(
            update(User)
            .where(User.id == target.id, User.status == UserStatus.ACTIVE)
            .values(status=UserStatus.UNDER_SANCTION_PROCESS)
            .execution_options(synchronize_session=False)
        )
        if flagged.rowcount != 1:
            raise InvalidTarget(f"{target.username} is not an active member.")

        title = f"Sanction proposal for {target.username}"
        return _Draft(
            type=VotationType.SANCTION,
            title=title,
            description=f"Sanction {target.username} for {data.duration}.",
            justification=data.justification,
            payload=SanctionPayload(
                target_user_id=target.id,
                target_username=target.username,
                sanction_duration=data.duration,
            ),
            thread_title=f"Votation: {title}",
            post_content=(
                f"Proposal to sanction {target.username} for {data.duration}.\n\n"
                f"Justification:\n{data.justification}"
            ),
        )

    return _issue(store, member, now, build)


def propose_rule_change(
    store: AtomicStore,
    member: User,
    title: str,
    justification: str,
    full_text: str,
    *,
    now: datetime | None = None,
) -> IssuedProposal:
    """Open a votation replacing the constitution with ``full_text``."""
    now = now or utcnow()
    data = _validate(
        RuleChangeProposal,
        title=title,
        justification=justification,
        full_text=full_text,
    )

    def build(session: Session, proposer: User) -> _Draft:
        current = session.get(SiteSettings, CONSTITUTION_ID)
        if current is not None and current.constitution_text.strip() == data.full_text.strip():
            raise ValidationError("The proposed text is identical to the current constitution.")
        return _Draft(
            type=VotationType.RULE_CHANGE,
            title=data.title,
            description="Proposal to replace the text of the constitution.",
            justification=data.justification,
            payload=RuleChangePayload(proposed_constitution_text=data.full_text),
            thread_title=f"Votation: {data.title}",
            post_content=(
                f"Justification:\n{data.justification}\n\n"
                f"Proposed constitution:\n{data.full_text}"
            ),
        )

    return _issue(store, member, now, build)


def propose_new_forum(
    store: AtomicStore,
    member: User,
    name: str,
    description: str,
    category_id: str,
    is_public: bool,
    justification: str,
    *,
    now: datetime | None = None,
) -> IssuedProposal:
    """Open a votation creating a new forum in an existing category."""
    now = now or utcnow()
    data = _validate(
        NewForumProposal,
        name=name,
        description=description,
        category_id=category_id,
        is_public=is_public,
        justification=justification,
    )

    def build(session: Session, proposer: User) -> _Draft:
        category = session.get(ForumCategory, data.category_id)
        if category is None:
            raise ValidationError("category_id: category does not exist")
        title = f'New forum proposal: "{data.name}"'
        visibility = "public" if data.is_public else "members only"
        return _Draft(
            type=VotationType.NEW_FORUM_PROPOSAL,
            title=title,
            description=data.description,
            justification=data.justification,
            payload=NewForumPayload(
                proposed_forum_name=data.name,
                proposed_forum_description=data.description,
                proposed_forum_category_id=category.id,
                proposed_forum_category_name=category.name,
                proposed_forum_is_public=data.is_public,
            ),
            thread_title=f"Votation: {title}",
            post_content=(
                f'Proposal to create the forum "{data.name}" in {category.name} '
                f"({visibility}).\n\n{data.description}\n\n"
                f"Justification:\n{data.justification}"
            ),
        )

    return _issue(store, member, now, build)


def _has_open_admission(session: Session, applicant_id: str) -> bool:
    open_admissions = session.scalars(
        select(Votation).where(
            Votation.type == VotationType.ADMISSION_REQUEST,
            Votation.status == VotationStatus.ACTIVE,
        )
    )
    for votation in open_admissions:
        payload = parse_payload(votation.payload)
        if isinstance(payload, AdmissionPayload) and payload.target_user_id == applicant_id:
            return True
    return False


def propose_admission(
    store: AtomicStore,
    member: User,
    applicant_id: str,
    justification: str,
    *,
    now: datetime | None = None,
) -> IssuedProposal:
    """Sponsor a pending applicant for admission by vote."""
    now = now or utcnow()
    data = _validate(AdmissionProposal, applicant_id=applicant_id, justification=justification)

    def build(session: Session, proposer: User) -> _Draft:
        if data.applicant_id == proposer.id:
            raise InvalidTarget("You cannot sponsor your own admission.")
        applicant = _load_target(session, data.applicant_id)
        if applicant.status != UserStatus.PENDING_ADMISSION:
            raise InvalidTarget(f"{applicant.username} is not awaiting admission.")
        if _has_open_admission(session, applicant.id):
            raise InvalidTarget(f"{applicant.username} already has an admission votation open.")
        title = f"Admission request for {applicant.username}"
        return _Draft(
            type=VotationType.ADMISSION_REQUEST,
            title=title,
            description=f"Admit {applicant.username} as a full member.",
            justification=data.justification,
            payload=AdmissionPayload(
                target_user_id=applicant.id,
                target_username=applicant.username,
            ),
            thread_title=f"Votation: {title}",
            post_content=(
                f"{proposer.username} proposes admitting {applicant.username}.\n\n"
                f"Justification:\n{data.justification}"
            ),
        )

    return _issue(store, member, now, build)
