"""
Post Service - Business logic for posts, feeds and likes.

This provides:
1. Feed listings through a closed set of feed queries
2. Post creation and update with image-store uploads
3. Post deletion with an explicit cascade policy
4. Idempotent likes with author notifications
"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import NotFoundError, ValidationError
from socialnet.core.storage import ImageStore
from socialnet.models.post import Post
from socialnet.repositories.post_repository import FeedQuery, PostRepository
from socialnet.repositories.user_repository import UserRepository
from socialnet.schemas.common import PageOptions, paginated
from socialnet.services.base import BaseService
from socialnet.services.notification_service import NotificationService
from socialnet.services.user_service import user_summary

POST_FOLDER = "posts"
POST_FIELDS = ("title", "topic", "description", "is_anonymous", "files")


def build_feed_query(
    following: bool = False,
    suggested: bool = False,
    user_id: Optional[int] = None,
    search: Optional[str] = None,
) -> FeedQuery:
    """
    Turn listing parameters into one feed query.

    Raises:
        ValidationError: If more than one feed mode is requested
    """
    requested = []
    if following:
        requested.append(FeedQuery.following())
    if suggested:
        requested.append(FeedQuery.suggested())
    if user_id is not None:
        requested.append(FeedQuery.by_user(user_id))
    if search:
        requested.append(FeedQuery.search(search))

    if len(requested) > 1:
        raise ValidationError(
            "Only one of following, suggested, userId or search can be used at a time"
        )

    return requested[0] if requested else FeedQuery.all()


def post_view(post: Post, viewer_id: Optional[int], verified_user_id: Optional[int]) -> Dict[str, Any]:
    """
    Post as returned to a viewer.

    The author of an anonymous post is only shown to the author.
    """
    show_author = not post.is_anonymous or post.author_id == viewer_id
    liker_ids = [like.user_id for like in post.likes]

    return {
        "id": post.id,
        "title": post.title,
        "topic": post.topic,
        "description": post.description,
        "image": post.image,
        "files": post.files or [],
        "is_anonymous": post.is_anonymous,
        "author": user_summary(post.author, verified_user_id) if show_author else None,
        "likes": liker_ids,
        "likes_count": len(liker_ids),
        "comments_count": len(post.comments),
        "liked_by_me": viewer_id in liker_ids,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


class PostService(BaseService):
    """
    Post service handling feeds, posts and likes.
    """

    def __init__(self, db: AsyncSession, image_store: Optional[ImageStore] = None):
        super().__init__(db)
        self.post_repo = PostRepository(db)
        self.user_repo = UserRepository(db)
        self.image_store = image_store
        self.notifications = NotificationService(db)

    async def get_post(self, post_id: int) -> Post:
        """
        Get a post with its author, likes and comments.

        Raises:
            NotFoundError: If post doesn't exist
        """
        post = await self.post_repo.get_with_details(post_id)
        if not post:
            raise NotFoundError(f"Post with ID {post_id} not found")
        return post

    async def _view(self, post_id: int, viewer_id: Optional[int]) -> Dict[str, Any]:
        post = await self.get_post(post_id)
        verified_user_id = await self.user_repo.get_most_followed_user_id()
        return post_view(post, viewer_id, verified_user_id)

    async def find_all(
        self, feed: FeedQuery, viewer_id: int, page: PageOptions
    ) -> Dict[str, Any]:
        """
        One page of a feed, newest first.

        Returns:
            Page of posts; `total` counts every post
        """
        self._log_operation("find_all_posts", mode=feed.mode.value, viewer_id=viewer_id)

        try:
            posts, results_count = await self.post_repo.list_feed(
                feed, viewer_id, page.skip, page.limit
            )
            total = await self.post_repo.count()
            verified_user_id = await self.user_repo.get_most_followed_user_id()

            return paginated(
                [post_view(post, viewer_id, verified_user_id) for post in posts],
                page,
                results_count,
                total,
            )

        except Exception as error:
            await self._handle_service_error(error, "list posts")

    async def find_by_id(self, post_id: int, viewer_id: Optional[int] = None) -> Dict[str, Any]:
        try:
            return await self._view(post_id, viewer_id)

        except Exception as error:
            await self._handle_service_error(error, "get post")

    async def create_one(
        self,
        author_id: int,
        data: Dict[str, Any],
        image: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a post.

        When an image is supplied it is uploaded first; if the upload
        fails no post is created.

        Raises:
            ExternalServiceError: If the image upload fails
        """
        self._log_operation("create_post", author_id=author_id)

        try:
            post_data = {field: data[field] for field in POST_FIELDS if data.get(field) is not None}
            post_data["author_id"] = author_id

            if image:
                post_data["image"] = await self.image_store.upload(
                    POST_FOLDER, image, content_type
                )

            post = await self.post_repo.create(post_data)
            self.logger.info(f"Post {post.id} created by user {author_id}")

            return {
                "message": "Post created successfully",
                "data": await self._view(post.id, author_id),
            }

        except Exception as error:
            await self._handle_service_error(error, "create post")

    async def update_one(
        self,
        post_id: int,
        data: Dict[str, Any],
        image: Optional[bytes] = None,
        content_type: Optional[str] = None,
        viewer_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Update a post.

        A new image replaces the old one (delete old, then upload new);
        without a new image the stored URL is kept.

        Raises:
            NotFoundError: If post doesn't exist
            ExternalServiceError: If the image store fails
        """
        self._log_operation("update_post", post_id=post_id)

        try:
            post = await self.get_post(post_id)
            update_data = {
                field: data[field] for field in POST_FIELDS if data.get(field) is not None
            }

            if image:
                update_data["image"] = await self.image_store.replace(
                    POST_FOLDER, image, post.image, content_type
                )

            await self.post_repo.update(post_id, update_data)

            return {
                "message": "Post updated successfully",
                "data": await self._view(post_id, viewer_id),
            }

        except Exception as error:
            await self._handle_service_error(error, "update post")

    async def delete_one(self, post_id: int) -> Dict[str, Any]:
        """
        Delete a post.

        Policy: the post's comments and likes are deleted with it, and
        notifications that referenced the post or its comments are kept
        but detached. The stored image is deleted first; if that fails the
        post stays.

        Raises:
            NotFoundError: If post doesn't exist
        """
        self._log_operation("delete_post", post_id=post_id)

        try:
            post = await self.get_post(post_id)

            if post.image:
                await self.image_store.delete(POST_FOLDER, post.image)

            await self.post_repo.delete_with_comments(post_id)
            return {"message": "Post deleted successfully"}

        except Exception as error:
            await self._handle_service_error(error, "delete post")

    async def like_one(self, post_id: int, user_id: int) -> Dict[str, Any]:
        """
        Like a post. Liking twice keeps a single like.

        The author is notified of new likes from other users.

        Raises:
            NotFoundError: If post doesn't exist
        """
        self._log_operation("like_post", post_id=post_id, user_id=user_id)

        try:
            post = await self.get_post(post_id)
            created = await self.post_repo.add_like(post_id, user_id, commit=False)

            if created and post.author_id != user_id:
                liker = await self.user_repo.get(user_id)
                await self.notifications.notify(
                    recipient_id=post.author_id,
                    sender_id=user_id,
                    note=f"{liker.username if liker else 'Someone'} liked your post",
                    post_id=post_id,
                    commit=False,
                )
            if created:
                await self.db.commit()

            return {
                "message": "Post liked successfully",
                "data": await self._view(post_id, user_id),
            }

        except Exception as error:
            await self._handle_service_error(error, "like post")

    async def remove_like_one(self, post_id: int, user_id: int) -> Dict[str, Any]:
        """
        Remove a like. Removing a missing like is a no-op.

        Raises:
            NotFoundError: If post doesn't exist
        """
        self._log_operation("unlike_post", post_id=post_id, user_id=user_id)

        try:
            await self.get_post(post_id)
            await self.post_repo.remove_like(post_id, user_id)

            return {
                "message": "Like removed successfully",
                "data": await self._view(post_id, user_id),
            }

        except Exception as error:
            await self._handle_service_error(error, "remove like")

    async def get_likes(
        self, post_id: int, username_filter: Optional[str], page: PageOptions
    ) -> Dict[str, Any]:
        """
        Users who liked a post.

        `total` is the post's like count regardless of the filter.
        """
        try:
            if not await self.post_repo.exists(post_id):
                raise NotFoundError(f"Post with ID {post_id} not found")

            users, results_count = await self.post_repo.get_likers(
                post_id, username_filter, page.skip, page.limit
            )
            total = await self.post_repo.count_likes(post_id)
            verified_user_id = await self.user_repo.get_most_followed_user_id()

            return paginated(
                [user_summary(user, verified_user_id) for user in users],
                page,
                results_count,
                total,
            )

        except Exception as error:
            await self._handle_service_error(error, "get likes")
