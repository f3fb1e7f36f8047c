"""
Comment Service - Business logic for comments under posts.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import NotFoundError
from socialnet.models.comment import Comment
from socialnet.repositories.comment_repository import CommentRepository
from socialnet.repositories.post_repository import PostRepository
from socialnet.repositories.user_repository import UserRepository
from socialnet.services.base import BaseService
from socialnet.services.notification_service import NotificationService
from socialnet.services.user_service import user_summary


def comment_view(comment: Comment, verified_user_id: Optional[int]) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "content": comment.content,
        "post_id": comment.post_id,
        "author": user_summary(comment.author, verified_user_id) if comment.author else None,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
    }


class CommentService(BaseService):
    """
    Comment service handling comment CRUD and comment notifications.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.comment_repo = CommentRepository(db)
        self.post_repo = PostRepository(db)
        self.user_repo = UserRepository(db)
        self.notifications = NotificationService(db)

    async def get_comment(self, comment_id: int) -> Comment:
        comment = await self.comment_repo.get_with_author(comment_id)
        if not comment:
            raise NotFoundError(f"Comment with ID {comment_id} not found")
        return comment

    async def _view(self, comment_id: int) -> Dict[str, Any]:
        comment = await self.get_comment(comment_id)
        verified_user_id = await self.user_repo.get_most_followed_user_id()
        return comment_view(comment, verified_user_id)

    async def find_all(self, post_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """Comments in creation order, optionally for one post."""
        try:
            if post_id is not None and not await self.post_repo.exists(post_id):
                raise NotFoundError(f"Post with ID {post_id} not found")

            comments = await self.comment_repo.list_with_author(post_id)
            verified_user_id = await self.user_repo.get_most_followed_user_id()
            return [comment_view(comment, verified_user_id) for comment in comments]

        except Exception as error:
            await self._handle_service_error(error, "list comments")

    async def find_by_id(self, comment_id: int) -> Dict[str, Any]:
        try:
            return await self._view(comment_id)

        except Exception as error:
            await self._handle_service_error(error, "get comment")

    async def create_one(self, author_id: int, post_id: int, content: str) -> Dict[str, Any]:
        """
        Comment on a post.

        The post author is notified unless they commented themselves.

        Raises:
            NotFoundError: If the post doesn't exist
        """
        self._log_operation("create_comment", author_id=author_id, post_id=post_id)

        try:
            post = await self.post_repo.get(post_id)
            if not post:
                raise NotFoundError(f"Post with ID {post_id} not found")

            comment = await self.comment_repo.create(
                {"author_id": author_id, "post_id": post_id, "content": content},
                commit=False,
            )

            if post.author_id != author_id:
                commenter = await self.user_repo.get(author_id)
                await self.notifications.notify(
                    recipient_id=post.author_id,
                    sender_id=author_id,
                    note=f"{commenter.username if commenter else 'Someone'} commented on your post",
                    post_id=post_id,
                    comment_id=comment.id,
                    commit=False,
                )
            await self.db.commit()

            return {"message": "Comment created successfully", "data": await self._view(comment.id)}

        except Exception as error:
            await self._handle_service_error(error, "create comment")

    async def update_one(self, comment_id: int, content: str) -> Dict[str, Any]:
        try:
            comment = await self.comment_repo.update(comment_id, {"content": content})
            if not comment:
                raise NotFoundError(f"Comment with ID {comment_id} not found")

            return {"message": "Comment updated successfully", "data": await self._view(comment_id)}

        except Exception as error:
            await self._handle_service_error(error, "update comment")

    async def delete_one(self, comment_id: int) -> Dict[str, Any]:
        """
        Delete a comment. The post's comment list shrinks with it.

        Raises:
            NotFoundError: If comment doesn't exist
        """
        self._log_operation("delete_comment", comment_id=comment_id)

        try:
            if not await self.comment_repo.delete_one(comment_id):
                raise NotFoundError(f"Comment with ID {comment_id} not found")
            return {"message": "Comment deleted successfully"}

        except Exception as error:
            await self._handle_service_error(error, "delete comment")
