"""
Message Service - Business logic for messages inside conversations.

Ownership of update/delete is enforced by the permission dependencies,
not here.
"""

from typing import Any, Dict, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import NotFoundError
from socialnet.core.realtime import RealtimePublisher
from socialnet.models.conversation import Conversation, Message
from socialnet.repositories.conversation_repository import ConversationRepository
from socialnet.repositories.message_repository import MessageRepository
from socialnet.schemas.common import PageOptions, paginated
from socialnet.services.base import BaseService

MESSAGE_CREATED = "message:new"


def message_view(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "content": message.content,
        "sender_id": message.sender_id,
        "conversation_id": message.conversation_id,
        "delivered_at": message.delivered_at,
        "read_at": message.read_at,
        "created_at": message.created_at,
        "updated_at": message.updated_at,
    }


class MessageService(BaseService):
    def __init__(self, db: AsyncSession, realtime: Optional[RealtimePublisher] = None):
        super().__init__(db)
        self.message_repo = MessageRepository(db)
        self.conversation_repo = ConversationRepository(db)
        self.realtime = realtime

    async def _require_conversation(self, conversation_id: int) -> None:
        if not await self.conversation_repo.exists(conversation_id):
            raise NotFoundError(f"Conversation with ID {conversation_id} not found")

    async def find_all(self, conversation_id: int, page: PageOptions) -> Dict[str, Any]:
        """Messages of a conversation, newest first."""
        try:
            await self._require_conversation(conversation_id)
            messages, results_count = await self.message_repo.list_for_conversation(
                conversation_id, page.skip, page.limit
            )
            return paginated(
                [message_view(m) for m in messages], page, results_count, results_count
            )

        except Exception as error:
            await self._handle_service_error(error, "list messages")

    async def find_by_id(self, message_id: int) -> Dict[str, Any]:
        try:
            message = await self.message_repo.get(message_id)
            if not message:
                raise NotFoundError(f"Message with ID {message_id} not found")
            return message_view(message)

        except Exception as error:
            await self._handle_service_error(error, "get message")

    async def create_one(
        self, conversation_id: int, sender_id: int, content: str
    ) -> Dict[str, Any]:
        """
        Send a message.

        Bumps the conversation's activity time and pushes the message to
        the other participants.

        Raises:
            NotFoundError: If the conversation doesn't exist
        """
        self._log_operation("create_message", conversation_id=conversation_id, sender_id=sender_id)

        try:
            await self._require_conversation(conversation_id)

            message = Message(
                content=content, sender_id=sender_id, conversation_id=conversation_id
            )
            self.db.add(message)
            await self.db.execute(
                update(Conversation)
                .where(Conversation.id == conversation_id)
                .values(updated_at=func.now())
            )
            await self.db.commit()
            await self.db.refresh(message)

            recipients = [
                user_id
                for user_id in await self.conversation_repo.get_participant_ids(conversation_id)
                if user_id != sender_id
            ]

        except Exception as error:
            await self._handle_service_error(error, "create message")

        view = message_view(message)
        if self.realtime:
            await self.realtime.publish_many(recipients, MESSAGE_CREATED, view)

        return {"message": "Message created successfully", "data": view}

    async def update_one(self, message_id: int, content: str) -> Dict[str, Any]:
        try:
            message = await self.message_repo.update(message_id, {"content": content})
            if not message:
                raise NotFoundError(f"Message with ID {message_id} not found")
            return {"message": "Message updated successfully", "data": message_view(message)}

        except Exception as error:
            await self._handle_service_error(error, "update message")

    async def delete_one(self, message_id: int) -> Dict[str, Any]:
        try:
            if not await self.message_repo.delete(message_id):
                raise NotFoundError(f"Message with ID {message_id} not found")
            return {"message": "Message deleted successfully"}

        except Exception as error:
            await self._handle_service_error(error, "delete message")

    async def mark_read(self, conversation_id: int, reader_id: int) -> Dict[str, Any]:
        """Mark the messages others sent in a conversation as delivered and read."""
        try:
            await self._require_conversation(conversation_id)
            updated = await self.message_repo.mark_read(conversation_id, reader_id)
            return {"updated": updated}

        except Exception as error:
            await self._handle_service_error(error, "mark messages read")
