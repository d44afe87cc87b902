"""Tests for issuing proposals into the Agora."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from kratia_forums.core.errors import Forbidden, InvalidTarget, NotFound, ValidationError
from kratia_forums.core.settings import settings
from kratia_forums.models import (
    Forum,
    ForumCategory,
    Post,
    Thread,
    User,
    UserRole,
    UserStatus,
    Votation,
    VotationStatus,
    VotationType,
)
from kratia_forums.services.proposals import (
    propose_admission,
    propose_new_forum,
    propose_rule_change,
    propose_sanction,
)

JUSTIFICATION = "This member has repeatedly ignored the community guidelines on civility."
CONSTITUTION_TEXT = "Article 1. " + "All members are equal before the assembly. " * 4


def _count(db_session, model) -> int:
    return db_session.scalar(select(func.count()).select_from(model))


def test_sanction_proposal_writes_everything(db_session, store, proposer, make_member, agora, now) -> None:
    target = make_member("mallory")

    issued = propose_sanction(store, proposer, target.id, "7 days", JUSTIFICATION, now=now)

    votation = db_session.get(Votation, issued.votation_id)
    thread = db_session.get(Thread, issued.thread_id)
    assert votation.type == VotationType.SANCTION
    assert votation.status == VotationStatus.ACTIVE
    assert votation.related_thread_id == thread.id
    assert thread.related_votation_id == votation.id
    assert thread.forum_id == settings.agora_forum_id
    assert votation.options == {"for": 0, "against": 0, "abstain": 0}
    assert votation.voters == {}
    assert votation.total_votes_cast == 0
    assert votation.quorum_required == settings.votation_quorum_min_participants
    deadline = votation.deadline.replace(tzinfo=None)
    expected = (now + timedelta(days=settings.votation_duration_days)).replace(tzinfo=None)
    assert abs(deadline - expected) < timedelta(seconds=1)
    assert votation.payload["target_user_id"] == target.id
    assert votation.payload["sanction_duration"] == "7 days"

    posts = db_session.scalars(select(Post).where(Post.thread_id == thread.id)).all()
    assert len(posts) == 1
    assert JUSTIFICATION in posts[0].content

    db_session.refresh(target)
    assert target.status == UserStatus.UNDER_SANCTION_PROCESS
    db_session.refresh(agora)
    assert agora.thread_count == 1
    assert agora.post_count == 1


def test_proposal_rewards_proposer(db_session, store, proposer, make_member, agora, now) -> None:
    target = make_member("mallory")
    karma_before = proposer.karma

    propose_sanction(store, proposer, target.id, "2 weeks", JUSTIFICATION, now=now)

    db_session.refresh(proposer)
    assert proposer.karma == karma_before + settings.proposal_karma_reward
    assert proposer.total_posts_by_user == 1
    assert proposer.total_posts_in_threads_started_by_user == 1
    assert proposer.total_threads_started_by_user == 1


def test_cannot_sanction_self(db_session, store, proposer, agora) -> None:
    with pytest.raises(InvalidTarget):
        propose_sanction(store, proposer, proposer.id, "7 days", JUSTIFICATION)
    assert _count(db_session, Votation) == 0


@pytest.mark.parametrize(
    "status",
    [UserStatus.UNDER_SANCTION_PROCESS, UserStatus.SANCTIONED],
)
def test_cannot_sanction_member_already_in_process(
    db_session, store, proposer, make_member, agora, now, status
) -> None:
    end = now + timedelta(days=3) if status == UserStatus.SANCTIONED else None
    target = make_member("mallory", status=status, sanction_end_date=end)

    with pytest.raises(InvalidTarget):
        propose_sanction(store, proposer, target.id, "7 days", JUSTIFICATION)

    assert _count(db_session, Votation) == 0
    assert _count(db_session, Thread) == 0


def test_sanction_target_must_exist(store, proposer, agora) -> None:
    with pytest.raises(NotFound):
        propose_sanction(store, proposer, "ghost", "7 days", JUSTIFICATION)


@pytest.mark.parametrize("duration", ["forever", "0 days", "50 years"])
def test_bad_sanction_duration(db_session, store, proposer, make_member, agora, duration) -> None:
    target = make_member("mallory")

    with pytest.raises(ValidationError):
        propose_sanction(store, proposer, target.id, duration, JUSTIFICATION)
    db_session.refresh(target)
    assert target.status == UserStatus.ACTIVE


def test_short_justification_rejected(store, proposer, make_member, agora) -> None:
    target = make_member("mallory")

    with pytest.raises(ValidationError, match="justification"):
        propose_sanction(store, proposer, target.id, "7 days", "too short")


def test_ineligible_proposer(db_session, store, make_member, agora) -> None:
    newcomer = make_member("newbie", can_vote=False)
    target = make_member("mallory")

    with pytest.raises(Forbidden):
        propose_sanction(store, newcomer, target.id, "7 days", JUSTIFICATION)

    db_session.refresh(target)
    assert target.status == UserStatus.ACTIVE
    assert _count(db_session, Post) == 0


def test_rule_change_proposal(db_session, store, proposer, constitution) -> None:
    issued = propose_rule_change(
        store,
        proposer,
        "Clarify equality of members",
        JUSTIFICATION,
        CONSTITUTION_TEXT,
    )

    votation = db_session.get(Votation, issued.votation_id)
    assert votation.type == VotationType.RULE_CHANGE
    assert votation.title == "Clarify equality of members"
    assert votation.payload["proposed_constitution_text"] == CONSTITUTION_TEXT


def test_rule_change_identical_text_rejected(store, proposer, constitution) -> None:
    text = constitution.constitution_text + " " * 3

    with pytest.raises(ValidationError, match="identical"):
        propose_rule_change(store, proposer, "Reaffirm the constitution", JUSTIFICATION, text)


def test_rule_change_text_too_short(store, proposer, constitution) -> None:
    with pytest.raises(ValidationError, match=r"full_?[tT]ext"):
        propose_rule_change(store, proposer, "Shorten everything", JUSTIFICATION, "Be nice.")


def test_new_forum_proposal(db_session, store, proposer, agora) -> None:
    issued = propose_new_forum(
        store,
        proposer,
        "Gardening",
        "Everything about plants.",
        agora.category_id,
        True,
        "We keep discussing plants everywhere.",
    )

    votation = db_session.get(Votation, issued.votation_id)
    assert votation.type == VotationType.NEW_FORUM_PROPOSAL
    assert votation.payload["proposed_forum_name"] == "Gardening"
    assert votation.payload["proposed_forum_category_name"] == "Governance"
    # Nothing is created until the votation passes.
    assert db_session.scalar(select(Forum).where(Forum.name == "Gardening")) is None


def test_new_forum_requires_existing_category(db_session, store, proposer, agora) -> None:
    with pytest.raises(ValidationError, match="category"):
        propose_new_forum(
            store,
            proposer,
            "Gardening",
            "Everything about plants.",
            "no-such-category",
            True,
            "We keep discussing plants everywhere.",
        )
    assert _count(db_session, ForumCategory) == 1


def test_missing_agora(store, proposer, make_member) -> None:
    target = make_member("mallory")

    with pytest.raises(NotFound, match="Agora"):
        propose_sanction(store, proposer, target.id, "7 days", JUSTIFICATION)


def _applicant(make_member) -> User:
    return make_member(
        "newcomer",
        status=UserStatus.PENDING_ADMISSION,
        role=UserRole.GUEST,
        can_vote=False,
    )


def test_admission_proposal(db_session, store, proposer, make_member, agora) -> None:
    applicant = _applicant(make_member)

    issued = propose_admission(store, proposer, applicant.id, "I know them from the meetup.")

    votation = db_session.get(Votation, issued.votation_id)
    assert votation.type == VotationType.ADMISSION_REQUEST
    assert votation.payload["target_user_id"] == applicant.id


def test_admission_only_once_while_open(store, proposer, make_member, agora) -> None:
    applicant = _applicant(make_member)
    sponsor = make_member("carol")
    propose_admission(store, proposer, applicant.id, "I know them from the meetup.")

    with pytest.raises(InvalidTarget, match="already"):
        propose_admission(store, sponsor, applicant.id, "They are a great contributor.")


def test_admission_requires_pending_applicant(store, proposer, make_member, agora) -> None:
    member = make_member("carol")

    with pytest.raises(InvalidTarget):
        propose_admission(store, proposer, member.id, "They are a great contributor.")
