"""Endpoints that open votations in the Agora."""

from __future__ import annotations

from fastapi import APIRouter, status

from kratia_forums.schemas import (
    AdmissionProposal,
    NewForumProposal,
    ProposalCreated,
    RuleChangeProposal,
    SanctionProposal,
)
from kratia_forums.services.proposals import (
    IssuedProposal,
    propose_admission,
    propose_new_forum,
    propose_rule_change,
    propose_sanction,
)

from ..dependencies import CurrentMemberDep, StoreDep

router = APIRouter(prefix="/proposals", tags=["proposals"])


def _created(issued: IssuedProposal) -> ProposalCreated:
    return ProposalCreated(votation_id=issued.votation_id, thread_id=issued.thread_id)


@router.post(
    "/sanction",
    response_model=ProposalCreated,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_sanction_proposal(
    proposal: SanctionProposal,
    store: StoreDep,
    current_member: CurrentMemberDep,
) -> ProposalCreated:
    """Propose a sanction against another member."""
    return _created(
        propose_sanction(
            store,
            current_member,
            proposal.target_user_id,
            proposal.duration,
            proposal.justification,
        )
    )


@router.post(
    "/rule-change",
    response_model=ProposalCreated,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_rule_change_proposal(
    proposal: RuleChangeProposal,
    store: StoreDep,
    current_member: CurrentMemberDep,
) -> ProposalCreated:
    """Propose a replacement constitution."""
    return _created(
        propose_rule_change(
            store,
            current_member,
            proposal.title,
            proposal.justification,
            proposal.full_text,
        )
    )


@router.post(
    "/new-forum",
    response_model=ProposalCreated,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_new_forum_proposal(
    proposal: NewForumProposal,
    store: StoreDep,
    current_member: CurrentMemberDep,
) -> ProposalCreated:
    """Propose a new forum."""
    return _created(
        propose_new_forum(
            store,
            current_member,
            proposal.name,
            proposal.description,
            proposal.category_id,
            proposal.is_public,
            proposal.justification,
        )
    )


@router.post(
    "/admission",
    response_model=ProposalCreated,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_admission_proposal(
    proposal: AdmissionProposal,
    store: StoreDep,
    current_member: CurrentMemberDep,
) -> ProposalCreated:
    """Sponsor a pending applicant's admission."""
    return _created(
        propose_admission(store, current_member, proposal.applicant_id, proposal.justification)
    )
