"""Member profile endpoints exposing governance status."""

from fastapi import APIRouter, HTTPException, status

from kratia_forums.models import User
from kratia_forums.schemas import MemberResponse

from ..dependencies import CurrentMemberDep, SessionDep

router = APIRouter(prefix="/members", tags=["members"])


@router.get("/me", response_model=MemberResponse, response_model_by_alias=True)
async def read_me(current_member: CurrentMemberDep) -> MemberResponse:
    """Return the authenticated member."""
    return MemberResponse.model_validate(current_member)


@router.get("/{member_id}", response_model=MemberResponse, response_model_by_alias=True)
async def read_member(member_id: str, db: SessionDep) -> MemberResponse:
    """Return a member's public profile."""
    member = db.get(User, member_id)
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return MemberResponse.model_validate(member)
