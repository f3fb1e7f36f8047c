from datetime import datetime
from typing import Optional

from pydantic import Field

from socialnet.schemas.common import CamelModel
from socialnet.schemas.user import UserSummary


class CommentCreateRequest(CamelModel):
    """Schema for comment creation."""

    post_id: int = Field(..., description="Post being commented on")
    content: str = Field(..., min_length=1, max_length=5000)


class CommentUpdateRequest(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(CamelModel):
    id: int
    content: str
    post_id: int
    author: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
