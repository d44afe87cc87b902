"""Notification inbox endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select

from kratia_forums.models import Notification
from kratia_forums.schemas import NotificationResponse

from ..dependencies import CurrentMemberDep, SessionDep

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse], response_model_by_alias=True)
async def list_notifications(
    db: SessionDep,
    current_member: CurrentMemberDep,
    unread_only: bool = False,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[NotificationResponse]:
    """Return the caller's notifications, newest first."""
    stmt = select(Notification).where(Notification.recipient_id == current_member.id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
    return [NotificationResponse.model_validate(item) for item in db.scalars(stmt)]


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    response_model_by_alias=True,
)
async def mark_notification_read(
    notification_id: str,
    db: SessionDep,
    current_member: CurrentMemberDep,
) -> NotificationResponse:
    """Mark one of the caller's notifications as read."""
    notification = db.get(Notification, notification_id)
    if notification is None or notification.recipient_id != current_member.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    if not notification.is_read:
        notification.is_read = True
        db.commit()
        db.refresh(notification)
    return NotificationResponse.model_validate(notification)
