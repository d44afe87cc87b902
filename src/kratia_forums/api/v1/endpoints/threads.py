"""Thread page endpoint; the read path that drives lazy votation closure."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from kratia_forums.core.errors import InfrastructureError
from kratia_forums.models import Post, Thread, Votation
from kratia_forums.schemas import PostResponse, ThreadDetail, ThreadResponse, VotationResponse
from kratia_forums.services.closure import ensure_closed

from ..dependencies import OptionalMemberDep, StoreDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/threads", tags=["threads"])


@router.get("/{thread_id}", response_model=ThreadDetail, response_model_by_alias=True)
async def get_thread(
    thread_id: str,
    store: StoreDep,
    member: OptionalMemberDep,
) -> ThreadDetail:
    """Return a thread with its posts and, for Agora threads, its votation.

    An expired votation is closed before the page is built. If that closure
    cannot be committed the still-active votation is served and the next
    read tries again.
    """
    db = store.session
    thread = db.get(Thread, thread_id)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
    if not thread.is_public and member is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Log in to read this thread",
        )

    votation = None
    if thread.related_votation_id:
        try:
            votation = ensure_closed(store, thread.related_votation_id)
        except InfrastructureError:
            logger.warning(
                "Closing votation %s failed; serving it unchanged",
                thread.related_votation_id,
                exc_info=True,
            )
            votation = db.get(Votation, thread.related_votation_id, populate_existing=True)
        thread = db.get(Thread, thread_id, populate_existing=True)

    posts = db.scalars(
        select(Post).where(Post.thread_id == thread_id).order_by(Post.created_at, Post.id)
    )
    return ThreadDetail(
        thread=ThreadResponse.model_validate(thread),
        posts=[PostResponse.model_validate(post) for post in posts],
        votation=VotationResponse.from_votation(votation) if votation is not None else None,
    )
