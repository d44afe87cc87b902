# src/kratia_forums/api/v1/endpoints/votations.py
"""Votation endpoints: listing, reading and casting ballots."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from kratia_forums.models import VotationStatus, VotationType
from kratia_forums.repositories.votation_repo import VotationRepository
from kratia_forums.schemas import (
    Cursor,
    MyVote,
    VotationPage,
    VotationResponse,
    VoteCreate,
    VoteResult,
    VoteTally,
)
from kratia_forums.services.closure import ensure_closed
from kratia_forums.services.tally import cast_vote, get_my_vote

from ..dependencies import CurrentMemberDep, StoreDep

router = APIRouter(prefix="/votations", tags=["votations"])


@router.get("", response_model=VotationPage, response_model_by_alias=True)
async def list_votations(
    store: StoreDep,
    status: VotationStatus | None = None,
    type_: Annotated[VotationType | None, Query(alias="type")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    before: str | None = None,
) -> VotationPage:
    """List votations newest first, closing any that are past their deadline."""
    repo = VotationRepository(store.session)
    page = repo.list_page(status=status, type_=type_, limit=limit, before=before)
    items = [ensure_closed(store, votation.id) for votation in page]
    next_cursor = Cursor(before=items[-1].id if len(items) == limit else None)
    return VotationPage(
        items=[VotationResponse.from_votation(votation) for votation in items],
        next_cursor=next_cursor,
    )


@router.get("/{votation_id}", response_model=VotationResponse, response_model_by_alias=True)
async def get_votation(votation_id: str, store: StoreDep) -> VotationResponse:
    """Return a single votation, closing it first if it is due."""
    return VotationResponse.from_votation(ensure_closed(store, votation_id))


@router.post(
    "/{votation_id}/vote",
    response_model=VoteResult,
    response_model_by_alias=True,
)
async def vote(
    votation_id: str,
    ballot: VoteCreate,
    store: StoreDep,
    current_member: CurrentMemberDep,
) -> VoteResult:
    """Cast the caller's ballot on an active votation."""
    tally = cast_vote(store, current_member, votation_id, ballot.choice)
    return VoteResult(
        votation_id=tally.votation_id,
        choice=tally.choice,
        options=VoteTally.model_validate(tally.options),
        total_votes_cast=tally.total_votes_cast,
    )


@router.get("/{votation_id}/my-vote", response_model=MyVote, response_model_by_alias=True)
async def my_vote(
    votation_id: str,
    store: StoreDep,
    current_member: CurrentMemberDep,
) -> MyVote:
    """Return the caller's recorded choice, or null if they have not voted."""
    return MyVote(
        votation_id=votation_id,
        choice=get_my_vote(store.session, current_member, votation_id),
    )
