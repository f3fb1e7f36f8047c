"""
User model - Represents accounts and the follow graph.

This model handles:
1. Authentication data (email, username, password hash, role)
2. Profile information
3. Follow relationships between users
"""

from enum import Enum
from typing import Optional

from sqlalchemy import Boolean
from sqlalchemy import Enum as SQLEnum
from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from socialnet.database import Base


class Role(str, Enum):
    """All roles available in the application"""

    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    User model representing system users.

    Design decisions:
    - Username and email are both unique login handles
    - Followers live in the `follows` table, not in a column
    - The founder/verified badge is derived per request, never stored
    """

    __tablename__ = "users"

    # Authentication
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    role: Mapped[Role] = mapped_column(SQLEnum(Role, name="user_role"), default=Role.USER)
    is_email_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    # Profile
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    avatar: Mapped[Optional[str]] = mapped_column(String(500))

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Follow(Base):
    """
    User following relationships.

    Design decisions:
    - One row per (follower, followed) pair, so following is a set
    - Row id gives the insertion order of a user's followers
    """

    __tablename__ = "follows"

    # The user who is following
    follower_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    # The user being followed
    followed_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    __table_args__ = (
        UniqueConstraint("follower_id", "followed_id", name="unique_follow_relationship"),
        Index("idx_follow_followed_follower", "followed_id", "follower_id"),
    )

    def __repr__(self) -> str:
        return f"<Follow(id={self.id}, follower_id={self.follower_id}, followed_id={self.followed_id})>"
