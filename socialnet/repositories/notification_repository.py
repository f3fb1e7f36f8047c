from typing import List, Optional, Tuple

from sqlalchemy import and_, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialnet.models.notification import Notification
from socialnet.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, db: AsyncSession):
        super().__init__(Notification, db)

    async def list_for_recipient(
        self,
        recipient_id: int,
        unread_only: bool = False,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Notification], int]:
        """An inbox page, newest first, with senders loaded."""
        query = select(Notification).where(Notification.recipient_id == recipient_id)
        if unread_only:
            query = query.where(Notification.has_read.is_(False))
        query = query.order_by(desc(Notification.created_at), desc(Notification.id))
        return await self.paginate(
            query, skip, limit, options=(selectinload(Notification.sender),)
        )

    async def count_for_recipient(self, recipient_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.recipient_id == recipient_id
            )
        )
        return result.scalar() or 0

    async def get_with_sender(self, notification_id: int) -> Optional[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.id == notification_id)
            .options(selectinload(Notification.sender))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def mark_all_read(self, recipient_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                and_(
                    Notification.recipient_id == recipient_id,
                    Notification.has_read.is_(False),
                )
            )
            .values(has_read=True)
        )
        await self.db.commit()
        return result.rowcount
