"""
Notification model - "someone liked/commented/followed you" events.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialnet.database import Base

if TYPE_CHECKING:
    from socialnet.models.user import User


class Notification(Base):
    __tablename__ = "notifications"

    note: Mapped[str] = mapped_column(String(1000))
    recipient_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    has_read: Mapped[bool] = mapped_column(Boolean, default=False)
    post_id: Mapped[Optional[int]] = mapped_column(ForeignKey("posts.id"), nullable=True)
    comment_id: Mapped[Optional[int]] = mapped_column(ForeignKey("comments.id"), nullable=True)

    sender: Mapped["User"] = relationship("User", foreign_keys=[sender_id])

    __table_args__ = (
        Index("idx_notification_recipient_read", "recipient_id", "has_read"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, recipient_id={self.recipient_id})>"
