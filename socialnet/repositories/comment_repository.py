from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialnet.models.comment import Comment
from socialnet.models.notification import Notification
from socialnet.repositories.base import BaseRepository


class CommentRepository(BaseRepository[Comment]):
    def __init__(self, db: AsyncSession):
        super().__init__(Comment, db)

    async def list_with_author(self, post_id: Optional[int] = None) -> List[Comment]:
        """Comments in creation order, optionally limited to one post."""
        query = (
            select(Comment)
            .options(selectinload(Comment.author))
            .order_by(Comment.id)
            .execution_options(populate_existing=True)
        )
        if post_id is not None:
            query = query.where(Comment.post_id == post_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_with_author(self, comment_id: int) -> Optional[Comment]:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.id == comment_id)
            .options(selectinload(Comment.author))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def delete_one(self, comment_id: int) -> bool:
        """Delete a comment, detaching notifications that referenced it."""
        await self.db.execute(
            update(Notification)
            .where(Notification.comment_id == comment_id)
            .values(comment_id=None)
        )
        result = await self.db.execute(delete(Comment).where(Comment.id == comment_id))
        await self.db.commit()
        return result.rowcount > 0
