"""
Article models - Long-form articles and their likes.

Article likes use a join table (one row per user/article pair) rather than
a list on the article.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialnet.database import Base

if TYPE_CHECKING:
    from socialnet.models.user import User


class Article(Base):
    __tablename__ = "articles"

    title: Mapped[str] = mapped_column(String(300))
    topic: Mapped[str] = mapped_column(String(100))
    description: Mapped[str] = mapped_column(Text)
    image: Mapped[Optional[str]] = mapped_column(String(500))
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    author: Mapped["User"] = relationship("User")
    likes: Mapped[List["ArticleLike"]] = relationship(
        "ArticleLike", order_by="ArticleLike.id", viewonly=True
    )

    def __repr__(self) -> str:
        return f"<Article(id={self.id}, author_id={self.author_id})>"


class ArticleLike(Base):
    __tablename__ = "article_likes"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    article_id: Mapped[int] = mapped_column(ForeignKey("articles.id"), index=True)

    __table_args__ = (
        UniqueConstraint("user_id", "article_id", name="unique_article_like"),
    )
