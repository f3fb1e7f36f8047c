from datetime import datetime
from typing import Optional

from pydantic import Field

from socialnet.schemas.common import CamelModel
from socialnet.schemas.user import UserSummary


class ArticleCreateRequest(CamelModel):
    """Schema for article creation."""

    title: str = Field(..., min_length=1, max_length=300)
    topic: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    image: Optional[str] = Field(None, max_length=500)


class ArticleUpdateRequest(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    topic: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = Field(None, max_length=500)


class ArticleResponse(CamelModel):
    id: int
    title: str
    topic: str
    description: str
    image: Optional[str] = None
    author: Optional[UserSummary] = None
    likes_count: int = 0
    liked_by_me: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
