from typing import List, Optional

from sqlalchemy import and_, delete, desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialnet.models.article import Article, ArticleLike
from socialnet.repositories.base import BaseRepository


class ArticleRepository(BaseRepository[Article]):
    """Articles and their join-table likes."""

    def __init__(self, db: AsyncSession):
        super().__init__(Article, db)

    def _detail_options(self):
        return (selectinload(Article.author), selectinload(Article.likes))

    async def list_with_details(self, author_id: Optional[int] = None) -> List[Article]:
        query = (
            select(Article)
            .options(*self._detail_options())
            .order_by(desc(Article.created_at), desc(Article.id))
            .execution_options(populate_existing=True)
        )
        if author_id is not None:
            query = query.where(Article.author_id == author_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_with_details(self, article_id: int) -> Optional[Article]:
        result = await self.db.execute(
            select(Article)
            .where(Article.id == article_id)
            .options(*self._detail_options())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add_like(self, article_id: int, user_id: int) -> bool:
        existing = await self.db.execute(
            select(ArticleLike.id).where(
                and_(ArticleLike.article_id == article_id, ArticleLike.user_id == user_id)
            )
        )
        if existing.first() is not None:
            return False

        self.db.add(ArticleLike(article_id=article_id, user_id=user_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return False
        return True

    async def remove_like(self, article_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            delete(ArticleLike).where(
                and_(ArticleLike.article_id == article_id, ArticleLike.user_id == user_id)
            )
        )
        await self.db.commit()
        return result.rowcount > 0

    async def delete_with_likes(self, article_id: int) -> bool:
        await self.db.execute(delete(ArticleLike).where(ArticleLike.article_id == article_id))
        result = await self.db.execute(delete(Article).where(Article.id == article_id))
        await self.db.commit()
        return result.rowcount > 0
