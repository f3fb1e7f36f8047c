"""
Conversation and message schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from socialnet.models.conversation import MAX_PARTICIPANTS
from socialnet.schemas.common import CamelModel


class MessageResponse(CamelModel):
    id: int
    content: str
    sender_id: int
    conversation_id: int
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ParticipantResponse(CamelModel):
    """Compact participant view used in inbox listings."""

    id: int
    full_name: str
    avatar: Optional[str] = None


class ConversationResponse(CamelModel):
    id: int
    participants: List[ParticipantResponse]
    last_message: Optional[MessageResponse] = None
    updated_at: Optional[datetime] = None


class ConversationCreateRequest(CamelModel):
    """
    Schema for starting a conversation.

    The caller is always added to `participants`.
    """

    participants: List[int] = Field(..., min_length=1, max_length=MAX_PARTICIPANTS)
    message: str = Field(..., min_length=1, max_length=5000)

    model_config = CamelModel.model_config | {
        "json_schema_extra": {"example": {"participants": [2, 3], "message": "Hello!"}}
    }


class ParticipantsUpdateRequest(CamelModel):
    participants: List[int] = Field(..., min_length=1, max_length=MAX_PARTICIPANTS)


class MessageCreateRequest(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)


class MessageUpdateRequest(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)


class ReadReceiptResponse(CamelModel):
    updated: int
