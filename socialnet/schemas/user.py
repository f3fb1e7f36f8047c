"""
User schemas for profile, social graph and listing responses.

Passwords never appear here: every view is an explicit field list.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from socialnet.models.user import Role
from socialnet.schemas.common import CamelModel


class UserSummary(CamelModel):
    """Author/sender/participant view of a user."""

    id: int
    username: str
    first_name: str
    last_name: str
    full_name: str
    avatar: Optional[str] = None
    is_account_verified: bool = False


class UserResponse(UserSummary):
    """Full profile view."""

    email: EmailStr
    role: Role
    is_email_verified: bool
    followers_count: int = 0
    following_count: int = 0
    created_at: Optional[datetime] = None


class UserUpdateRequest(CamelModel):
    """Schema for profile updates; every field is optional."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=100)

    model_config = CamelModel.model_config | {
        "json_schema_extra": {"example": {"firstName": "Ada", "username": "ada"}}
    }


class FollowingIdsResponse(CamelModel):
    following: List[int]
