"""Per-recipient notification feed."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.api.deps import get_current_user, get_db
from hallbook.domain.notification_routing import NotificationType
from hallbook.models.profile import Profile
from hallbook.schemas.notification import NotificationListResponse, NotificationResponse
from hallbook.services.notification_service import notification_service

router = APIRouter()


@router.get("/", response_model=NotificationListResponse)
async def get_notifications(
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    unread_only: bool = Query(default=False),
    notification_type: NotificationType | None = Query(default=None, alias="type"),
    booking_id: UUID | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> NotificationListResponse:
    """The current user's notifications, newest first."""
    notifications, total, unread = await notification_service.get_feed(
        db,
        current_user.id,
        unread_only=unread_only,
        notification_type=notification_type.value if notification_type else None,
        booking_id=booking_id,
        page=page,
        page_size=page_size,
    )
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        total=total,
        unread_count=unread,
        page=page,
        page_size=page_size,
    )


@router.patch("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_notification_read(
    notification_id: UUID,
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    await notification_service.mark_read(db, current_user.id, notification_id)


@router.post("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_read(
    current_user: Annotated[Profile, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    await notification_service.mark_all_read(db, current_user.id)
