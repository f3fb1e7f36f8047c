"""
Conversation Service - Business logic for conversations.

This provides:
1. The caller's inbox with last-message previews
2. Atomic creation of a conversation with its first message
3. Real-time notice to the other participants
4. Admin participant management and deletion
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import NotFoundError, ValidationError
from socialnet.core.realtime import RealtimePublisher
from socialnet.models.conversation import (
    MAX_PARTICIPANTS,
    MIN_PARTICIPANTS,
    Conversation,
    Message,
)
from socialnet.repositories.conversation_repository import ConversationRepository
from socialnet.repositories.user_repository import UserRepository
from socialnet.schemas.common import PageOptions, paginated
from socialnet.services.base import BaseService
from socialnet.services.message_service import message_view

CONVERSATION_CREATED = "conversation:new"


def conversation_view(
    conversation: Conversation,
    viewer_id: Optional[int],
    last_message: Optional[Message] = None,
) -> Dict[str, Any]:
    """Conversation as seen by one participant (who is left out of the list)."""
    return {
        "id": conversation.id,
        "participants": [
            {
                "id": participant.user.id,
                "full_name": participant.user.full_name,
                "avatar": participant.user.avatar,
            }
            for participant in conversation.participants
            if participant.user_id != viewer_id
        ],
        "last_message": message_view(last_message) if last_message else None,
        "updated_at": conversation.updated_at,
    }


class ConversationService(BaseService):
    """
    Conversation service handling inbox listings and membership.
    """

    def __init__(self, db: AsyncSession, realtime: Optional[RealtimePublisher] = None):
        super().__init__(db)
        self.conversation_repo = ConversationRepository(db)
        self.user_repo = UserRepository(db)
        self.realtime = realtime

    async def get_conversation(self, conversation_id: int) -> Conversation:
        conversation = await self.conversation_repo.get_with_participants(conversation_id)
        if not conversation:
            raise NotFoundError(f"Conversation with ID {conversation_id} not found")
        return conversation

    async def _validate_participants(self, participant_ids: List[int]) -> List[int]:
        """
        Deduplicate participants and check the allowed range and existence.

        Raises:
            ValidationError: If there are fewer than 2 or more than 10
            NotFoundError: If a participant doesn't exist
        """
        unique_ids = list(dict.fromkeys(participant_ids))

        if not MIN_PARTICIPANTS <= len(unique_ids) <= MAX_PARTICIPANTS:
            raise ValidationError(
                f"A conversation needs between {MIN_PARTICIPANTS} and "
                f"{MAX_PARTICIPANTS} participants",
                details={"participants": len(unique_ids)},
            )

        users = await self.user_repo.get_many(unique_ids)
        missing = set(unique_ids) - {user.id for user in users}
        if missing:
            raise NotFoundError(f"Users not found: {sorted(missing)}")

        return unique_ids

    async def find_all(
        self, user_id: int, name_filter: Optional[str], page: PageOptions
    ) -> Dict[str, Any]:
        """
        The user's conversations, most recently active first.

        `total` counts all of the user's conversations; `results_count`
        only those matching the participant name filter.
        """
        try:
            conversations, results_count = await self.conversation_repo.list_for_user(
                user_id, name_filter, page.skip, page.limit
            )
            total = await self.conversation_repo.count_for_user(user_id)
            last_messages = await self.conversation_repo.get_last_messages(
                c.id for c in conversations
            )

            return paginated(
                [
                    conversation_view(c, user_id, last_messages.get(c.id))
                    for c in conversations
                ],
                page,
                results_count,
                total,
            )

        except Exception as error:
            await self._handle_service_error(error, "list conversations")

    async def find_by_id(self, conversation_id: int, viewer_id: Optional[int] = None) -> Dict[str, Any]:
        try:
            conversation = await self.get_conversation(conversation_id)
            last_messages = await self.conversation_repo.get_last_messages([conversation_id])
            return conversation_view(conversation, viewer_id, last_messages.get(conversation_id))

        except Exception as error:
            await self._handle_service_error(error, "get conversation")

    async def create_one(
        self, initiator_id: int, participant_ids: List[int], first_message: str
    ) -> Dict[str, Any]:
        """
        Start a conversation.

        The conversation, its members and its first message are committed
        together; the other participants are then told in real time.

        Raises:
            ValidationError: If the participant count is out of range
            NotFoundError: If a participant doesn't exist
        """
        self._log_operation("create_conversation", initiator_id=initiator_id)

        try:
            members = await self._validate_participants([initiator_id, *participant_ids])

            conversation = Conversation()
            self.db.add(conversation)
            await self.db.flush()

            self.conversation_repo.add_participants(conversation.id, members)
            message = Message(
                content=first_message, sender_id=initiator_id, conversation_id=conversation.id
            )
            self.db.add(message)
            await self.db.commit()
            await self.db.refresh(message)

            conversation = await self.get_conversation(conversation.id)

        except Exception as error:
            await self._handle_service_error(error, "create conversation")

        others = [user_id for user_id in members if user_id != initiator_id]
        if self.realtime:
            for user_id in others:
                await self.realtime.publish(
                    user_id, CONVERSATION_CREATED, conversation_view(conversation, user_id, message)
                )

        return {
            "message": "Conversation created successfully",
            "data": conversation_view(conversation, initiator_id, message),
        }

    async def update_participants(
        self, conversation_id: int, participant_ids: List[int]
    ) -> Dict[str, Any]:
        """Replace a conversation's members (admin operation)."""
        self._log_operation("update_participants", conversation_id=conversation_id)

        try:
            await self.get_conversation(conversation_id)
            members = await self._validate_participants(participant_ids)
            await self.conversation_repo.replace_participants(conversation_id, members)

            conversation = await self.get_conversation(conversation_id)
            return {
                "message": "Conversation updated successfully",
                "data": conversation_view(conversation, None),
            }

        except Exception as error:
            await self._handle_service_error(error, "update conversation")

    async def delete_one(self, conversation_id: int) -> Dict[str, Any]:
        """Delete a conversation and all of its messages (admin operation)."""
        self._log_operation("delete_conversation", conversation_id=conversation_id)

        try:
            if not await self.conversation_repo.delete_with_messages(conversation_id):
                raise NotFoundError(f"Conversation with ID {conversation_id} not found")
            return {"message": "Conversation deleted successfully"}

        except Exception as error:
            await self._handle_service_error(error, "delete conversation")
