"""
Notifications API Routes.
"""
from fastapi import APIRouter, Depends, Query

from partnerhub.services.notifications import NotificationOutbox
from ..deps import current_user_id, get_outbox
from ..schemas.notifications import NotificationResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_my_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(current_user_id),
    outbox: NotificationOutbox = Depends(get_outbox),
) -> list[NotificationResponse]:
    notifications = await outbox.list_for_user(user_id, unread_only=unread_only, limit=limit)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/partnership/{partnership_id}", response_model=list[NotificationResponse])
async def list_partnership_notifications(
    partnership_id: str,
    limit: int = Query(50, ge=1, le=200),
    outbox: NotificationOutbox = Depends(get_outbox),
) -> list[NotificationResponse]:
    notifications = await outbox.list_for_partnership(partnership_id, limit=limit)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    user_id: str = Depends(current_user_id),
    outbox: NotificationOutbox = Depends(get_outbox),
) -> NotificationResponse:
    """Only the recipient can mark a notification as read."""
    notification = await outbox.mark_read(notification_id, user_id)
    return NotificationResponse.model_validate(notification)
