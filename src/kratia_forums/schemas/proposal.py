"""Proposal payload schemas.

Bounds mirror the proposal forms: they are checked again in the issuer so a
call that bypasses the API cannot write a malformed votation.
"""

from __future__ import annotations

from pydantic import Field

from kratia_forums.schemas.common import CamelModel


class SanctionProposal(CamelModel):
    """Request to sanction another member."""

    target_user_id: str = Field(..., min_length=1)
    duration: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Sanction duration, e.g. '7 days' or '1 month'.",
    )
    justification: str = Field(..., min_length=50, max_length=5000)


class RuleChangeProposal(CamelModel):
    """Request to replace the constitution text."""

    title: str = Field(..., min_length=10, max_length=150)
    justification: str = Field(..., min_length=50, max_length=5000)
    full_text: str = Field(..., min_length=100, description="Complete proposed constitution.")


class NewForumProposal(CamelModel):
    """Request to create a new forum."""

    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10, max_length=500)
    category_id: str = Field(..., min_length=1)
    is_public: bool = True
    justification: str = Field(..., min_length=20, max_length=2000)


class AdmissionProposal(CamelModel):
    """Request to admit a pending applicant."""

    applicant_id: str = Field(..., min_length=1)
    justification: str = Field(..., min_length=20, max_length=2000)


class ProposalCreated(CamelModel):
    """Identifiers of the votation and thread written by a proposal."""

    votation_id: str
    thread_id: str
