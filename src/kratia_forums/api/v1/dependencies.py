"""Shared API dependencies for authentication and storage access."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from kratia_forums.core.security import decode_access_token
from kratia_forums.db.session import get_db
from kratia_forums.db.time import as_utc, utcnow
from kratia_forums.models import User, UserStatus
from kratia_forums.services.ledger import AtomicStore
from kratia_forums.services.sanctions import lift_expired_sanction

# Anonymous visitors may read, so a missing header is not an error here.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_store(db: SessionDep) -> AtomicStore:
    """Wrap the request session in the transactional store used by the services."""
    return AtomicStore(db)


StoreDep = Annotated[AtomicStore, Depends(get_store)]


def _refresh_sanction(db: Session, member: User) -> User:
    """Lift an expired sanction before the member is handed to an endpoint."""
    if member.status != UserStatus.SANCTIONED or member.sanction_end_date is None:
        return member
    now = utcnow()
    if as_utc(member.sanction_end_date) > now:
        return member
    if lift_expired_sanction(db, member.id, now):
        db.commit()
    db.refresh(member)
    return member


def get_optional_member(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Return the member named by the bearer token, or None for anonymous visitors.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    member_id = decode_access_token(credentials.credentials)
    if member_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    member = db.get(User, member_id)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return _refresh_sanction(db, member)


OptionalMemberDep = Annotated[User | None, Depends(get_optional_member)]


def get_current_member(member: OptionalMemberDep) -> User:
    """Require an authenticated member.

    Raises:
        HTTPException: If no bearer token was supplied.
    """
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return member


# Type alias for current member dependency
CurrentMemberDep = Annotated[User, Depends(get_current_member)]
