"""
Notification Dispatcher and outbox.

The core records notifications as outbox rows and moves on. Delivery is a
separate step (NotificationOutbox.drain) so a broken push or email channel
can never undo or block a partnership or task transition.
"""
import logging
from typing import Optional, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.base import utcnow
from partnerhub.infra.db.models.notification import (
    NotificationPriority,
    NotificationType,
    PartnerNotification,
)
from partnerhub.infra.db.repositories.notification import NotificationRepository

from .errors import NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Fire-and-forget writer for partner notifications."""
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = NotificationRepository(session)
    
    async def notify(
        self,
        partnership_id: str,
        from_user_id: str,
        to_user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        related_ids: Optional[dict[str, str]] = None,
        priority: NotificationPriority = NotificationPriority.NORMAL,
    ) -> None:
        """
        Queue a notification. Never raises.

        The row is written inside a savepoint so a failed insert only undoes
        itself; entities the caller already committed stay loaded and usable.
        """
        related_ids = related_ids or {}
        try:
            async with self.session.begin_nested():
                await self.repo.add(
                    partnership_id=partnership_id,
                    from_user_id=from_user_id,
                    to_user_id=to_user_id,
                    type=NotificationType(type).value,
                    title=title,
                    message=message,
                    related_task_id=related_ids.get("task_id"),
                    related_goal_id=related_ids.get("goal_id"),
                    priority=NotificationPriority(priority).value,
                )
        except Exception as e:
            logger.warning(f"Failed to queue {type} notification for {to_user_id}: {e}")
            return

        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            # A failed commit leaves the session unusable until it is rolled back
            logger.error(f"Failed to commit {type} notification for {to_user_id}: {e}")
            await self.session.rollback()
    
    # ------------------------------------------------------------------
    # Helpers for the transitions the core announces
    # ------------------------------------------------------------------
    
    async def partner_assigned(self, partnership_id: str, user1_id: str, user2_id: str) -> None:
        for sender, recipient in ((user1_id, user2_id), (user2_id, user1_id)):
            await self.notify(
                partnership_id,
                sender,
                recipient,
                NotificationType.PARTNER_ASSIGNED,
                "New Accountability Partner",
                "You've been matched with a new accountability partner! Start your journey together.",
                priority=NotificationPriority.HIGH,
            )
    
    async def partnership_request(self, partnership_id: str, requester_id: str, partner_id: str) -> None:
        await self.notify(
            partnership_id,
            requester_id,
            partner_id,
            NotificationType.PARTNERSHIP_REQUEST,
            "Partnership Request",
            "Someone wants to be your accountability partner! Review and accept or decline the request.",
            priority=NotificationPriority.HIGH,
        )
    
    async def partnership_ended(self, partnership_id: str, ended_by: str, other_user: str, reason: Optional[str] = None) -> None:
        message = "Your accountability partnership has ended. You are available for new matches."
        if reason:
            message = f"{message} Reason: {reason}"
        await self.notify(
            partnership_id,
            ended_by,
            other_user,
            NotificationType.PARTNERSHIP_ENDED,
            "Partnership Ended",
            message,
        )
    
    async def goal_shared(self, partnership_id: str, owner_id: str, partner_id: str, goal_title: str, goal_id: str) -> None:
        await self.notify(
            partnership_id,
            owner_id,
            partner_id,
            NotificationType.GOAL_SHARED,
            "New Shared Goal",
            f'Your partner created a shared goal: "{goal_title}"',
            related_ids={"goal_id": goal_id},
        )
    
    async def task_completed(self, partnership_id: str, owner_id: str, partner_id: str, task_title: str, task_id: str) -> None:
        await self.notify(
            partnership_id,
            owner_id,
            partner_id,
            NotificationType.TASK_COMPLETED,
            "Partner Completed Task",
            f'Your partner has completed: "{task_title}"',
            related_ids={"task_id": task_id},
        )
    
    async def verification_request(self, partnership_id: str, owner_id: str, verifier_id: str, task_title: str, task_id: str) -> None:
        await self.notify(
            partnership_id,
            owner_id,
            verifier_id,
            NotificationType.VERIFICATION_REQUEST,
            "Task Verification Needed",
            f'Please verify the completed task: "{task_title}"',
            related_ids={"task_id": task_id},
            priority=NotificationPriority.HIGH,
        )
    
    async def verification_result(
        self,
        partnership_id: str,
        verifier_id: str,
        owner_id: str,
        task_title: str,
        task_id: str,
        outcome: NotificationType,
        comment: Optional[str] = None,
    ) -> None:
        """outcome is one of VERIFICATION_APPROVED, VERIFICATION_REJECTED, REDO_REQUESTED."""
        titles = {
            NotificationType.VERIFICATION_APPROVED: ("Task Approved!", f'Your task "{task_title}" has been approved by your partner!'),
            NotificationType.VERIFICATION_REJECTED: ("Task Needs Revision", f'Your task "{task_title}" needs some revisions. Check the feedback provided.'),
            NotificationType.REDO_REQUESTED: ("Redo Requested", f'Your partner asked you to redo "{task_title}".'),
        }
        title, default_message = titles[outcome]
        await self.notify(
            partnership_id,
            verifier_id,
            owner_id,
            outcome,
            title,
            comment or default_message,
            related_ids={"task_id": task_id},
            priority=(
                NotificationPriority.NORMAL
                if outcome == NotificationType.VERIFICATION_APPROVED
                else NotificationPriority.HIGH
            ),
        )


class NotificationSender(Protocol):
    """Delivery channel used by the outbox drain."""
    
    async def send(self, notification: PartnerNotification) -> None: ...


class LoggingSender:
    """Default sender: writes the notification to the log."""
    
    async def send(self, notification: PartnerNotification) -> None:
        logger.info(
            f"[{notification.priority}] to={notification.to_user_id} "
            f"type={notification.type} title={notification.title!r}"
        )


class NotificationOutbox:
    """Reads, delivers and marks notifications."""
    
    def __init__(self, session: AsyncSession):
        self.repo = NotificationRepository(session)
    
    async def drain(self, sender: NotificationSender, limit: int = 50) -> int:
        """
        Hand undelivered notifications to a sender.
        
        A failed send is logged and left in the outbox for the next drain.
        
        Returns:
            Number of notifications delivered
        """
        delivered = 0
        for notification in await self.repo.get_undelivered(limit=limit):
            try:
                await sender.send(notification)
            except Exception as e:
                logger.warning(f"Delivery of notification {notification.id} failed: {e}")
                continue
            now = utcnow()
            await self.repo.apply(
                notification,
                push_sent=True,
                push_sent_at=now,
                email_sent=True,
                email_sent_at=now,
            )
            delivered += 1
        if delivered:
            logger.info(f"Delivered {delivered} notification(s)")
        return delivered
    
    async def list_for_user(self, user_id: str, unread_only: bool = False, limit: int = 50) -> Sequence[PartnerNotification]:
        return await self.repo.get_for_recipient(user_id, unread_only=unread_only, limit=limit)
    
    async def list_for_partnership(self, partnership_id: str, limit: int = 50) -> Sequence[PartnerNotification]:
        return await self.repo.get_by_partnership(partnership_id, limit=limit)
    
    async def mark_read(self, notification_id: str, user_id: str) -> PartnerNotification:
        """Only the recipient may mark a notification as read."""
        notification = await self.repo.get_by_id(notification_id)
        if notification is None:
            raise NotFoundError(f"Notification {notification_id} not found")
        if notification.to_user_id != user_id:
            raise UnauthorizedError("Only the recipient can mark this notification as read")
        if notification.is_read:
            return notification
        return await self.repo.apply(notification, is_read=True, read_at=utcnow())
