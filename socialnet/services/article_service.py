"""
Article Service - Long-form articles with join-table likes.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import NotFoundError
from socialnet.models.article import Article
from socialnet.repositories.article_repository import ArticleRepository
from socialnet.repositories.user_repository import UserRepository
from socialnet.services.base import BaseService
from socialnet.services.user_service import user_summary

ARTICLE_FIELDS = ("title", "topic", "description", "image")


def article_view(
    article: Article, viewer_id: Optional[int], verified_user_id: Optional[int]
) -> Dict[str, Any]:
    liker_ids = [like.user_id for like in article.likes]
    return {
        "id": article.id,
        "title": article.title,
        "topic": article.topic,
        "description": article.description,
        "image": article.image,
        "author": user_summary(article.author, verified_user_id) if article.author else None,
        "likes_count": len(liker_ids),
        "liked_by_me": viewer_id in liker_ids,
        "created_at": article.created_at,
        "updated_at": article.updated_at,
    }


class ArticleService(BaseService):
    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.article_repo = ArticleRepository(db)
        self.user_repo = UserRepository(db)

    async def get_article(self, article_id: int) -> Article:
        article = await self.article_repo.get_with_details(article_id)
        if not article:
            raise NotFoundError(f"Article with ID {article_id} not found")
        return article

    async def _view(self, article_id: int, viewer_id: Optional[int]) -> Dict[str, Any]:
        article = await self.get_article(article_id)
        verified_user_id = await self.user_repo.get_most_followed_user_id()
        return article_view(article, viewer_id, verified_user_id)

    async def find_all(
        self, viewer_id: Optional[int] = None, author_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        try:
            articles = await self.article_repo.list_with_details(author_id)
            verified_user_id = await self.user_repo.get_most_followed_user_id()
            return [article_view(a, viewer_id, verified_user_id) for a in articles]

        except Exception as error:
            await self._handle_service_error(error, "list articles")

    async def find_by_id(self, article_id: int, viewer_id: Optional[int] = None) -> Dict[str, Any]:
        try:
            return await self._view(article_id, viewer_id)

        except Exception as error:
            await self._handle_service_error(error, "get article")

    async def create_one(self, author_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        self._log_operation("create_article", author_id=author_id)

        try:
            article_data = {f: data[f] for f in ARTICLE_FIELDS if data.get(f) is not None}
            article = await self.article_repo.create({**article_data, "author_id": author_id})
            return {
                "message": "Article created successfully",
                "data": await self._view(article.id, author_id),
            }

        except Exception as error:
            await self._handle_service_error(error, "create article")

    async def update_one(
        self, article_id: int, data: Dict[str, Any], viewer_id: Optional[int] = None
    ) -> Dict[str, Any]:
        try:
            update_data = {f: data[f] for f in ARTICLE_FIELDS if data.get(f) is not None}
            if not await self.article_repo.update(article_id, update_data):
                raise NotFoundError(f"Article with ID {article_id} not found")

            return {
                "message": "Article updated successfully",
                "data": await self._view(article_id, viewer_id),
            }

        except Exception as error:
            await self._handle_service_error(error, "update article")

    async def delete_one(self, article_id: int) -> Dict[str, Any]:
        self._log_operation("delete_article", article_id=article_id)

        try:
            if not await self.article_repo.delete_with_likes(article_id):
                raise NotFoundError(f"Article with ID {article_id} not found")
            return {"message": "Article deleted successfully"}

        except Exception as error:
            await self._handle_service_error(error, "delete article")

    async def like_one(self, article_id: int, user_id: int) -> Dict[str, Any]:
        """Like an article; liking twice keeps one like."""
        try:
            await self.get_article(article_id)
            await self.article_repo.add_like(article_id, user_id)
            return {
                "message": "Article liked successfully",
                "data": await self._view(article_id, user_id),
            }

        except Exception as error:
            await self._handle_service_error(error, "like article")

    async def remove_like_one(self, article_id: int, user_id: int) -> Dict[str, Any]:
        try:
            await self.get_article(article_id)
            await self.article_repo.remove_like(article_id, user_id)
            return {
                "message": "Like removed successfully",
                "data": await self._view(article_id, user_id),
            }

        except Exception as error:
            await self._handle_service_error(error, "remove article like")
