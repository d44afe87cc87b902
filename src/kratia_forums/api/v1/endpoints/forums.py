"""Forum listing endpoints."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from kratia_forums.models import Forum
from kratia_forums.schemas import ForumResponse

from ..dependencies import OptionalMemberDep, SessionDep

router = APIRouter(prefix="/forums", tags=["forums"])


@router.get("", response_model=list[ForumResponse], response_model_by_alias=True)
async def list_forums(db: SessionDep, member: OptionalMemberDep) -> list[ForumResponse]:
    """List forums; members-only forums are hidden from anonymous visitors."""
    stmt = select(Forum).order_by(Forum.is_agora.desc(), Forum.name)
    if member is None:
        stmt = stmt.where(Forum.is_public.is_(True))
    return [ForumResponse.model_validate(forum) for forum in db.scalars(stmt)]


@router.get("/{forum_id}", response_model=ForumResponse, response_model_by_alias=True)
async def get_forum(forum_id: str, db: SessionDep, member: OptionalMemberDep) -> ForumResponse:
    """Return a single forum."""
    forum = db.get(Forum, forum_id)
    if forum is None or (not forum.is_public and member is None):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Forum not found")
    return ForumResponse.model_validate(forum)
