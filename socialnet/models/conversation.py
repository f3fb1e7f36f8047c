"""
Messaging models - Conversations, their participants and messages.

This handles:
1. Conversations between 2 to 10 users
2. Participant membership (one row per user)
3. Messages with delivery and read timestamps
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialnet.database import Base

if TYPE_CHECKING:
    from socialnet.models.user import User

MIN_PARTICIPANTS = 2
MAX_PARTICIPANTS = 10


class Conversation(Base):
    """
    A conversation.

    `updated_at` is bumped on every new message and drives the inbox order.
    """

    __tablename__ = "conversations"

    participants: Mapped[List["ConversationParticipant"]] = relationship(
        "ConversationParticipant", order_by="ConversationParticipant.id", viewonly=True
    )

    @property
    def participant_ids(self) -> List[int]:
        return [p.user_id for p in self.participants]


class ConversationParticipant(Base):
    __tablename__ = "conversation_participants"

    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    user: Mapped["User"] = relationship("User")

    __table_args__ = (
        UniqueConstraint("conversation_id", "user_id", name="unique_conversation_participant"),
    )


class Message(Base):
    """
    A message in a conversation.

    Sender and conversation never change after creation.
    """

    __tablename__ = "messages"

    content: Mapped[str] = mapped_column(Text)
    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id"), index=True)
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_message_conversation_created", "conversation_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, conversation_id={self.conversation_id})>"
