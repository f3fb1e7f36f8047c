"""
Notification Service - "someone liked/commented/followed you" events.

This provides:
1. The fan-out helper other services call
2. The paginated inbox with sender summaries
3. Read-state changes
"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import BadRequestError, NotFoundError
from socialnet.models.comment import Comment
from socialnet.models.notification import Notification
from socialnet.models.post import Post
from socialnet.models.user import User
from socialnet.repositories.notification_repository import NotificationRepository
from socialnet.schemas.common import PageOptions, paginated
from socialnet.services.base import BaseService


def notification_view(notification: Notification) -> Dict[str, Any]:
    sender = notification.sender
    return {
        "id": notification.id,
        "note": notification.note,
        "recipient_id": notification.recipient_id,
        "has_read": notification.has_read,
        "sender": (
            {"id": sender.id, "username": sender.username, "avatar": sender.avatar}
            if sender
            else None
        ),
        "post_id": notification.post_id,
        "comment_id": notification.comment_id,
        "created_at": notification.created_at,
    }


class NotificationService(BaseService):
    """
    Notification service handling the inbox.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.notification_repo = NotificationRepository(db)

    async def notify(
        self,
        recipient_id: int,
        sender_id: int,
        note: str,
        post_id: Optional[int] = None,
        comment_id: Optional[int] = None,
        commit: bool = True,
    ) -> Optional[Notification]:
        """
        Record a notification for another user.

        Nothing is recorded when someone acts on their own content. Callers
        that already staged the triggering write pass `commit=False` and
        commit both together.
        """
        if recipient_id == sender_id:
            return None

        notification = await self.notification_repo.create(
            {
                "recipient_id": recipient_id,
                "sender_id": sender_id,
                "note": note,
                "post_id": post_id,
                "comment_id": comment_id,
                "has_read": False,
            },
            commit=commit,
        )
        self.logger.info(f"Notified user {recipient_id}: {note}")
        return notification

    async def get_notification(self, notification_id: int) -> Notification:
        notification = await self.notification_repo.get_with_sender(notification_id)
        if not notification:
            raise NotFoundError(f"Notification with ID {notification_id} not found")
        return notification

    async def find_all(
        self, recipient_id: int, page: PageOptions, unread_only: bool = False
    ) -> Dict[str, Any]:
        """
        A page of the recipient's inbox, newest first.

        `total` is the whole inbox; `results_count` honours `unread_only`.
        """
        try:
            notifications, results_count = await self.notification_repo.list_for_recipient(
                recipient_id, unread_only, page.skip, page.limit
            )
            total = await self.notification_repo.count_for_recipient(recipient_id)

            return paginated(
                [notification_view(n) for n in notifications],
                page,
                results_count,
                total,
            )

        except Exception as error:
            await self._handle_service_error(error, "list notifications")

    async def find_by_id(self, notification_id: int) -> Dict[str, Any]:
        try:
            return notification_view(await self.get_notification(notification_id))

        except Exception as error:
            await self._handle_service_error(error, "get notification")

    async def create_one(
        self,
        sender_id: int,
        recipient_id: int,
        note: str,
        post_id: Optional[int] = None,
        comment_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Create a notification explicitly.

        Raises:
            BadRequestError: If sender and recipient are the same user
            NotFoundError: If the recipient doesn't exist
        """
        self._log_operation("create_notification", sender_id=sender_id, recipient_id=recipient_id)

        try:
            if sender_id == recipient_id:
                raise BadRequestError("Cannot notify yourself")

            if not await self.db.get(User, recipient_id):
                raise NotFoundError(f"User with ID {recipient_id} not found")

            if post_id is not None and not await self.db.get(Post, post_id):
                raise NotFoundError(f"Post with ID {post_id} not found")

            if comment_id is not None and not await self.db.get(Comment, comment_id):
                raise NotFoundError(f"Comment with ID {comment_id} not found")

            notification = await self.notify(recipient_id, sender_id, note, post_id, comment_id)

            return {
                "message": "Notification created successfully",
                "data": notification_view(await self.get_notification(notification.id)),
            }

        except Exception as error:
            await self._handle_service_error(error, "create notification")

    async def mark_read(self, notification_id: int, has_read: bool = True) -> Dict[str, Any]:
        try:
            await self.get_notification(notification_id)
            await self.notification_repo.update(notification_id, {"has_read": has_read})

            return {
                "message": "Notification updated successfully",
                "data": notification_view(await self.get_notification(notification_id)),
            }

        except Exception as error:
            await self._handle_service_error(error, "update notification")

    async def mark_all_read(self, recipient_id: int) -> Dict[str, Any]:
        try:
            updated = await self.notification_repo.mark_all_read(recipient_id)
            return {"updated": updated}

        except Exception as error:
            await self._handle_service_error(error, "mark notifications read")

    async def delete_one(self, notification_id: int) -> Dict[str, Any]:
        try:
            if not await self.notification_repo.delete(notification_id):
                raise NotFoundError(f"Notification with ID {notification_id} not found")
            return {"message": "Notification deleted successfully"}

        except Exception as error:
            await self._handle_service_error(error, "delete notification")
