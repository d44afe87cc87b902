"""Constitution endpoint."""

from fastapi import APIRouter, HTTPException, status

from kratia_forums.models import CONSTITUTION_ID, SiteSettings
from kratia_forums.schemas import ConstitutionResponse

from ..dependencies import SessionDep

router = APIRouter(prefix="/constitution", tags=["governance"])


@router.get("", response_model=ConstitutionResponse, response_model_by_alias=True)
async def get_constitution(db: SessionDep) -> ConstitutionResponse:
    """Return the current constitution text."""
    site = db.get(SiteSettings, CONSTITUTION_ID)
    if site is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Constitution not found",
        )
    return ConstitutionResponse.model_validate(site)
