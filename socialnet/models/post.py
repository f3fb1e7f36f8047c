"""
Post models - Posts and their likes.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialnet.database import Base

if TYPE_CHECKING:
    from socialnet.models.comment import Comment
    from socialnet.models.user import User


class Post(Base):
    """
    A post in the social feed.

    Design decisions:
    - Likes are rows in `post_likes` (set semantics through a unique pair)
    - Comments reference the post; there is no second copy of their ids here
    - Anonymous posts keep their author for ownership checks
    """

    __tablename__ = "posts"

    title: Mapped[str] = mapped_column(String(300))
    topic: Mapped[str] = mapped_column(String(100), index=True)
    description: Mapped[str] = mapped_column(Text)
    image: Mapped[Optional[str]] = mapped_column(String(500))
    files: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False)

    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    # Relationships
    author: Mapped["User"] = relationship("User")
    likes: Mapped[List["PostLike"]] = relationship(
        "PostLike", order_by="PostLike.id", viewonly=True
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", order_by="Comment.id", viewonly=True
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, author_id={self.author_id})>"


class PostLike(Base):
    """One user's like on one post."""

    __tablename__ = "post_likes"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id"), index=True)

    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="unique_post_like"),
    )

    def __repr__(self) -> str:
        return f"<PostLike(id={self.id}, user_id={self.user_id}, post_id={self.post_id})>"
