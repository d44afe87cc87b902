"""Vote tally engine.

A ballot and the three tally counters it affects are written in one
transaction. The ``votation_voter`` primary key rejects a second ballot
from the same member even when two requests race past the in-transaction
checks, and the counter update only applies while the votation is active.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kratia_forums.core.errors import (
    DuplicateVote,
    Forbidden,
    InvalidState,
    NotFound,
    SelfVoteForbidden,
)
from kratia_forums.db.time import as_utc, utcnow
from kratia_forums.models import User, Votation, VotationStatus, VotationVoter, VoteChoice
from kratia_forums.services.closure import ensure_closed
from kratia_forums.services.eligibility import (
    can_propose,
    ineligibility_reason,
    is_sanction_target,
)
from kratia_forums.services.ledger import AtomicStore

logger = logging.getLogger(__name__)

_COUNTER_COLUMNS = {
    VoteChoice.FOR: Votation.votes_for,
    VoteChoice.AGAINST: Votation.votes_against,
    VoteChoice.ABSTAIN: Votation.votes_abstain,
}


@dataclass(frozen=True)
class Tally:
    """Counts of a votation right after a ballot was recorded."""

    votation_id: str
    choice: VoteChoice
    options: dict[str, int]
    total_votes_cast: int


def cast_vote(
    store: AtomicStore,
    member: User,
    votation_id: str,
    choice: VoteChoice | str,
    *,
    now: datetime | None = None,
) -> Tally:
    """Record ``member``'s ballot on a votation and return the updated tally.

    Raises:
        NotFound: The votation does not exist.
        Forbidden: The member may not take part in votations.
        InvalidState: The votation is closed or its deadline has passed.
        SelfVoteForbidden: The member is the target of this sanction votation.
        DuplicateVote: The member already voted.
    """
    now = now or utcnow()
    choice = VoteChoice(choice)
    counter = _COUNTER_COLUMNS[choice]

    # An expired votation is closed before the ballot is refused.
    ensure_closed(store, votation_id, now=now)

    def _cast(session: Session) -> Tally:
        votation = session.get(Votation, votation_id, populate_existing=True)
        if votation is None:
            raise NotFound("Votation not found")
        voter = session.get(User, member.id, populate_existing=True)
        if not can_propose(voter):
            raise Forbidden(ineligibility_reason(voter) or "You cannot vote.")
        if not votation.is_active:
            raise InvalidState("This votation is closed.")
        if as_utc(votation.deadline) <= as_utc(now):
            raise InvalidState("The deadline for this votation has passed.")
        if is_sanction_target(voter, votation):
            raise SelfVoteForbidden("You cannot vote on a sanction against yourself.")
        existing = session.get(VotationVoter, (votation_id, voter.id))
        if existing is not None:
            raise DuplicateVote("You have already voted on this votation.")

        session.add(
            VotationVoter(
                votation_id=votation_id,
                voter_id=voter.id,
                choice=choice.value,
                cast_at=now,
            )
        )
        try:
            session.flush()
        except IntegrityError as exc:
            raise DuplicateVote("You have already voted on this votation.") from exc

        result = session.execute(
            update(Votation)
            .where(Votation.id == votation_id, Votation.status == VotationStatus.ACTIVE)
            .values(
                {
                    counter: counter + 1,
                    Votation.total_votes_cast: Votation.total_votes_cast + 1,
                }
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidState("This votation is closed.")

        row = session.execute(
            select(
                Votation.votes_for,
                Votation.votes_against,
                Votation.votes_abstain,
                Votation.total_votes_cast,
            ).where(Votation.id == votation_id)
        ).one()
        return Tally(
            votation_id=votation_id,
            choice=choice,
            options={
                VoteChoice.FOR.value: row.votes_for,
                VoteChoice.AGAINST.value: row.votes_against,
                VoteChoice.ABSTAIN.value: row.votes_abstain,
            },
            total_votes_cast=row.total_votes_cast,
        )

    tally = store.transact(_cast)
    logger.info(
        "Member %s voted %s on votation %s (%s cast)",
        member.id,
        choice,
        votation_id,
        tally.total_votes_cast,
    )
    return tally


def get_my_vote(session: Session, member: User, votation_id: str) -> VoteChoice | None:
    """Return the member's recorded choice on a votation, if any.

    Raises:
        NotFound: The votation does not exist.
    """
    if session.get(Votation, votation_id) is None:
        raise NotFound("Votation not found")
    ballot = session.get(VotationVoter, (votation_id, member.id))
    return VoteChoice(ballot.choice) if ballot is not None else None
