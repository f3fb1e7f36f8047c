"""
Conversation and message API endpoints.

This provides:
1. The caller's inbox and conversation creation
2. Message history, sending and read receipts (participants only)
3. Message edits and deletion (sender or admin)
4. Participant management and deletion (admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from socialnet.core.exceptions import NotFoundError
from socialnet.core.permissions import (
    require_admin,
    require_message_owner,
    require_participant,
)
from socialnet.core.security import get_current_user_id
from socialnet.dependencies import (
    clean_filter,
    get_conversation_service,
    get_message_service,
    get_page_options,
)
from socialnet.models.conversation import Message
from socialnet.schemas.common import DataResponse, PageOptions, PaginatedResponse
from socialnet.schemas.common import MessageResponse as StatusMessage
from socialnet.schemas.conversation import (
    ConversationCreateRequest,
    ConversationResponse,
    MessageCreateRequest,
    MessageResponse,
    MessageUpdateRequest,
    ParticipantsUpdateRequest,
    ReadReceiptResponse,
)
from socialnet.services.conversation_service import ConversationService
from socialnet.services.message_service import MessageService

router = APIRouter(prefix="/conversations", tags=["Conversations"])


def _in_conversation(conversation_id: int, message: Message) -> None:
    if message.conversation_id != conversation_id:
        raise NotFoundError(f"Message with ID {message.id} not found")


@router.get(
    "",
    response_model=PaginatedResponse[ConversationResponse],
    summary="List your conversations",
)
async def list_conversations(
    name: Optional[str] = Query(None, description="Participant name substring"),
    page: PageOptions = Depends(get_page_options),
    current_user_id: int = Depends(get_current_user_id),
    conversation_service: ConversationService = Depends(get_conversation_service),
):
    return await conversation_service.find_all(current_user_id, clean_filter(name), page)


@router.post(
    "",
    response_model=DataResponse[ConversationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Start a conversation",
)
async def create_conversation(
    request: ConversationCreateRequest,
    current_user_id: int = Depends(get_current_user_id),
    conversation_service: ConversationService = Depends(get_conversation_service),
):
    """
    Create a conversation with its first message.

    The caller is always a participant; 2 to 10 participants in total.
    """
    return await conversation_service.create_one(
        current_user_id, request.participants, request.message
    )


@router.get(
    "/{id}",
    response_model=ConversationResponse,
    dependencies=[Depends(require_participant)],
    summary="Get a conversation",
)
async def get_conversation(
    id: int,
    current_user_id: int = Depends(get_current_user_id),
    conversation_service: ConversationService = Depends(get_conversation_service),
):
    return await conversation_service.find_by_id(id, current_user_id)


@router.put(
    "/{id}/participants",
    response_model=DataResponse[ConversationResponse],
    dependencies=[Depends(require_admin)],
    summary="Replace participants (admin)",
)
async def update_participants(
    id: int,
    request: ParticipantsUpdateRequest,
    conversation_service: ConversationService = Depends(get_conversation_service),
):
    return await conversation_service.update_participants(id, request.participants)


@router.delete(
    "/{id}",
    response_model=StatusMessage,
    dependencies=[Depends(require_admin)],
    summary="Delete a conversation (admin)",
)
async def delete_conversation(
    id: int,
    conversation_service: ConversationService = Depends(get_conversation_service),
):
    return await conversation_service.delete_one(id)


@router.get(
    "/{id}/messages",
    response_model=PaginatedResponse[MessageResponse],
    dependencies=[Depends(require_participant)],
    summary="Message history, newest first",
)
async def list_messages(
    id: int,
    page: PageOptions = Depends(get_page_options),
    message_service: MessageService = Depends(get_message_service),
):
    return await message_service.find_all(id, page)


@router.post(
    "/{id}/messages",
    response_model=DataResponse[MessageResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_participant)],
    summary="Send a message",
)
async def create_message(
    id: int,
    request: MessageCreateRequest,
    current_user_id: int = Depends(get_current_user_id),
    message_service: MessageService = Depends(get_message_service),
):
    return await message_service.create_one(id, current_user_id, request.content)


@router.post(
    "/{id}/read",
    response_model=ReadReceiptResponse,
    dependencies=[Depends(require_participant)],
    summary="Mark others' messages as read",
)
async def mark_read(
    id: int,
    current_user_id: int = Depends(get_current_user_id),
    message_service: MessageService = Depends(get_message_service),
):
    return await message_service.mark_read(id, current_user_id)


@router.put(
    "/{id}/messages/{message_id}",
    response_model=DataResponse[MessageResponse],
    summary="Edit a message",
)
async def update_message(
    id: int,
    message_id: int,
    request: MessageUpdateRequest,
    message: Message = Depends(require_message_owner),
    message_service: MessageService = Depends(get_message_service),
):
    _in_conversation(id, message)
    return await message_service.update_one(message_id, request.content)


@router.delete(
    "/{id}/messages/{message_id}",
    response_model=StatusMessage,
    summary="Delete a message",
)
async def delete_message(
    id: int,
    message_id: int,
    message: Message = Depends(require_message_owner),
    message_service: MessageService = Depends(get_message_service),
):
    _in_conversation(id, message)
    return await message_service.delete_one(message_id)
