from datetime import datetime, timezone
from typing import List, Tuple

from sqlalchemy import and_, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.models.conversation import Message
from socialnet.repositories.base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    def __init__(self, db: AsyncSession):
        super().__init__(Message, db)

    async def list_for_conversation(
        self, conversation_id: int, skip: int = 0, limit: int = 10
    ) -> Tuple[List[Message], int]:
        """Messages of a conversation, newest first."""
        query = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(desc(Message.created_at), desc(Message.id))
        )
        return await self.paginate(query, skip, limit)

    async def mark_read(self, conversation_id: int, reader_id: int) -> int:
        """
        Mark every unread message sent by someone else as read.

        Returns:
            Number of messages updated
        """
        now = datetime.now(timezone.utc)
        not_mine = and_(
            Message.conversation_id == conversation_id,
            Message.sender_id != reader_id,
        )
        await self.db.execute(
            update(Message)
            .where(and_(not_mine, Message.delivered_at.is_(None)))
            .values(delivered_at=now)
        )
        result = await self.db.execute(
            update(Message)
            .where(and_(not_mine, Message.read_at.is_(None)))
            .values(read_at=now)
        )
        await self.db.commit()
        return result.rowcount
