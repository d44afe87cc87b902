"""Votation-related Pydantic schemas.

A votation's type-specific fields are modelled as a tagged union keyed by
``kind`` so each variant only carries the fields it needs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from kratia_forums.models import Votation, VoteChoice
from kratia_forums.schemas.common import CamelModel, Cursor


class SanctionPayload(CamelModel):
    """Member to sanction and the requested duration text."""

    kind: Literal["sanction"] = "sanction"
    target_user_id: str
    target_username: str
    sanction_duration: str


class RuleChangePayload(CamelModel):
    """Full replacement text for the constitution."""

    kind: Literal["rule_change"] = "rule_change"
    proposed_constitution_text: str


class NewForumPayload(CamelModel):
    """Forum to create if the votation passes."""

    kind: Literal["new_forum_proposal"] = "new_forum_proposal"
    proposed_forum_name: str
    proposed_forum_description: str
    proposed_forum_category_id: str
    proposed_forum_category_name: str | None = None
    proposed_forum_is_public: bool = True


class AdmissionPayload(CamelModel):
    """Applicant to admit as a full member."""

    kind: Literal["admission_request"] = "admission_request"
    target_user_id: str
    target_username: str


VotationPayload = Annotated[
    Union[SanctionPayload, RuleChangePayload, NewForumPayload, AdmissionPayload],
    Field(discriminator="kind"),
]

_PAYLOAD_ADAPTER: TypeAdapter[Any] = TypeAdapter(VotationPayload)


def parse_payload(raw: dict[str, Any] | None) -> Any:
    """Return the typed payload stored on a votation, or None if it has none."""
    if raw is None:
        return None
    return _PAYLOAD_ADAPTER.validate_python(raw)


def dump_payload(payload: Any) -> dict[str, Any]:
    """Serialize a payload variant for storage in the votation's JSON column."""
    return payload.model_dump(mode="json", by_alias=False)


class VoteTally(CamelModel):
    """Vote counts per option."""

    for_: int = Field(alias="for")
    against: int
    abstain: int


class VotationResponse(CamelModel):
    """Schema for votation information returned by the API."""

    id: str
    type: str
    status: str
    title: str
    description: str
    justification: str | None
    proposer_id: str
    proposer_username: str
    created_at: datetime
    deadline: datetime
    closed_at: datetime | None
    options: VoteTally
    voters: dict[str, str]
    total_votes_cast: int
    quorum_required: int
    payload: VotationPayload | None
    related_thread_id: str
    outcome: str | None

    @classmethod
    def from_votation(cls, votation: Votation) -> VotationResponse:
        """Build the response from an ORM instance, unpacking the stored payload."""
        return cls(
            id=votation.id,
            type=votation.type,
            status=votation.status,
            title=votation.title,
            description=votation.description,
            justification=votation.justification,
            proposer_id=votation.proposer_id,
            proposer_username=votation.proposer_username,
            created_at=votation.created_at,
            deadline=votation.deadline,
            closed_at=votation.closed_at,
            options=VoteTally.model_validate(votation.options),
            voters=votation.voters,
            total_votes_cast=votation.total_votes_cast,
            quorum_required=votation.quorum_required,
            payload=parse_payload(votation.payload),
            related_thread_id=votation.related_thread_id,
            outcome=votation.outcome,
        )


class VoteCreate(CamelModel):
    """Schema for casting a vote."""

    choice: VoteChoice = Field(..., description="for, against or abstain")


class VoteResult(CamelModel):
    """Tally after a successful vote."""

    votation_id: str
    choice: VoteChoice
    options: VoteTally
    total_votes_cast: int


class MyVote(CamelModel):
    """The caller's ballot on a votation, if any."""

    votation_id: str
    choice: VoteChoice | None


class VotationPage(CamelModel):
    """A page of votations plus the cursor for the next page."""

    items: list[VotationResponse]
    next_cursor: Cursor
