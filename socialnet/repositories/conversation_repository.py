"""
Conversation Repository - Inbox queries and participant management.

This provides:
1. The caller's conversations, most recent activity first
2. Participant name filtering inside the query
3. Last message lookup per conversation
4. Membership replacement and deletion with messages
"""

from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import Select, and_, delete, desc, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialnet.models.conversation import (
    Conversation,
    ConversationParticipant,
    Message,
)
from socialnet.models.user import User
from socialnet.repositories.base import BaseRepository


class ConversationRepository(BaseRepository[Conversation]):
    """
    Conversation-specific repository extending BaseRepository.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Conversation, db)

    def _participants_option(self):
        return selectinload(Conversation.participants).selectinload(
            ConversationParticipant.user
        )

    def _user_conversations(self, user_id: int) -> Select:
        member = select(ConversationParticipant.id).where(
            and_(
                ConversationParticipant.conversation_id == Conversation.id,
                ConversationParticipant.user_id == user_id,
            )
        )
        return select(Conversation).where(exists(member))

    async def list_for_user(
        self,
        user_id: int,
        name_filter: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Conversation], int]:
        """
        Conversations the user takes part in, most recently active first.

        The name filter matches (case-insensitive) the full name of any
        other participant.

        Returns:
            (page of conversations with participants loaded, matching count)
        """
        query = self._user_conversations(user_id)

        if name_filter:
            term = name_filter.lower()
            full_name = func.lower(User.first_name + " " + User.last_name)
            other_matches = (
                select(ConversationParticipant.id)
                .join(User, User.id == ConversationParticipant.user_id)
                .where(
                    and_(
                        ConversationParticipant.conversation_id == Conversation.id,
                        ConversationParticipant.user_id != user_id,
                        or_(
                            full_name.contains(term, autoescape=True),
                            func.lower(User.username).contains(term, autoescape=True),
                        ),
                    )
                )
            )
            query = query.where(exists(other_matches))

        query = query.order_by(desc(Conversation.updated_at), desc(Conversation.id))
        return await self.paginate(
            query, skip, limit, options=(self._participants_option(),)
        )

    async def count_for_user(self, user_id: int) -> int:
        return await self.count_query(self._user_conversations(user_id))

    async def get_with_participants(self, conversation_id: int) -> Optional[Conversation]:
        result = await self.db.execute(
            select(Conversation)
            .where(Conversation.id == conversation_id)
            .options(self._participants_option())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_participant_ids(self, conversation_id: int) -> List[int]:
        result = await self.db.execute(
            select(ConversationParticipant.user_id)
            .where(ConversationParticipant.conversation_id == conversation_id)
            .order_by(ConversationParticipant.id)
        )
        return list(result.scalars().all())

    async def is_participant(self, conversation_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            select(ConversationParticipant.id).where(
                and_(
                    ConversationParticipant.conversation_id == conversation_id,
                    ConversationParticipant.user_id == user_id,
                )
            )
        )
        return result.first() is not None

    async def get_last_messages(
        self, conversation_ids: Iterable[int]
    ) -> Dict[int, Message]:
        """Newest message of each conversation, keyed by conversation id."""
        conversation_ids = list(conversation_ids)
        if not conversation_ids:
            return {}

        ranked = (
            select(
                Message.id.label("message_id"),
                func.row_number()
                .over(
                    partition_by=Message.conversation_id,
                    order_by=(desc(Message.created_at), desc(Message.id)),
                )
                .label("position"),
            )
            .where(Message.conversation_id.in_(conversation_ids))
            .subquery()
        )
        result = await self.db.execute(
            select(Message).join(ranked, ranked.c.message_id == Message.id).where(
                ranked.c.position == 1
            )
        )
        return {message.conversation_id: message for message in result.scalars().all()}

    def add_participants(self, conversation_id: int, user_ids: Iterable[int]) -> None:
        """Stage membership rows; the caller commits."""
        for user_id in user_ids:
            self.db.add(
                ConversationParticipant(conversation_id=conversation_id, user_id=user_id)
            )

    async def replace_participants(self, conversation_id: int, user_ids: List[int]) -> None:
        await self.db.execute(
            delete(ConversationParticipant).where(
                ConversationParticipant.conversation_id == conversation_id
            )
        )
        self.add_participants(conversation_id, user_ids)
        await self.db.commit()

    async def delete_with_messages(self, conversation_id: int) -> bool:
        await self.db.execute(
            delete(Message).where(Message.conversation_id == conversation_id)
        )
        await self.db.execute(
            delete(ConversationParticipant).where(
                ConversationParticipant.conversation_id == conversation_id
            )
        )
        result = await self.db.execute(
            delete(Conversation).where(Conversation.id == conversation_id)
        )
        await self.db.commit()
        return result.rowcount > 0
