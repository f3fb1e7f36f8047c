from datetime import datetime
from typing import Optional

from pydantic import Field

from socialnet.schemas.common import CamelModel


class NotificationSender(CamelModel):
    id: int
    username: str
    avatar: Optional[str] = None


class NotificationResponse(CamelModel):
    id: int
    note: str
    recipient_id: int
    has_read: bool
    sender: Optional[NotificationSender] = None
    post_id: Optional[int] = None
    comment_id: Optional[int] = None
    created_at: Optional[datetime] = None


class NotificationCreateRequest(CamelModel):
    """Schema for creating a notification on behalf of the caller."""

    recipient_id: int
    note: str = Field(..., min_length=1, max_length=1000)
    post_id: Optional[int] = None
    comment_id: Optional[int] = None


class NotificationUpdateRequest(CamelModel):
    has_read: bool = True


class MarkAllReadResponse(CamelModel):
    updated: int
