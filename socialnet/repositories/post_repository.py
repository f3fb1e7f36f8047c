"""
Post Repository - Feed queries, likes and ownership-aware deletion.

This provides:
1. The closed set of feed queries (all, following, suggested, by user, search)
2. Detail loading with author, likes and comments
3. Set-semantics likes over the post_likes table
4. Post deletion that also removes its comments and likes
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from sqlalchemy import Select, and_, delete, desc, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialnet.models.comment import Comment
from socialnet.models.notification import Notification
from socialnet.models.post import Post, PostLike
from socialnet.models.user import Follow, User
from socialnet.repositories.base import BaseRepository


class FeedMode(str, Enum):
    """Mutually exclusive post listings."""

    ALL = "all"
    FOLLOWING = "following"
    SUGGESTED = "suggested"
    BY_USER = "by_user"
    SEARCH = "search"


@dataclass(frozen=True)
class FeedQuery:
    """
    One feed listing.

    `user_id` is only meaningful for BY_USER and `term` only for SEARCH;
    use the constructors below instead of building it by hand.
    """

    mode: FeedMode = FeedMode.ALL
    user_id: Optional[int] = None
    term: Optional[str] = None

    @classmethod
    def all(cls) -> "FeedQuery":
        return cls(FeedMode.ALL)

    @classmethod
    def following(cls) -> "FeedQuery":
        return cls(FeedMode.FOLLOWING)

    @classmethod
    def suggested(cls) -> "FeedQuery":
        return cls(FeedMode.SUGGESTED)

    @classmethod
    def by_user(cls, user_id: int) -> "FeedQuery":
        return cls(FeedMode.BY_USER, user_id=user_id)

    @classmethod
    def search(cls, term: str) -> "FeedQuery":
        return cls(FeedMode.SEARCH, term=term)


class PostRepository(BaseRepository[Post]):
    """
    Post-specific repository extending BaseRepository.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Post, db)

    def _detail_options(self):
        return (
            selectinload(Post.author),
            selectinload(Post.likes),
            selectinload(Post.comments),
        )

    def _feed_statement(self, feed: FeedQuery, viewer_id: int) -> Select:
        query = select(Post)

        if feed.mode == FeedMode.FOLLOWING:
            followed = select(Follow.followed_id).where(Follow.follower_id == viewer_id)
            query = query.where(
                and_(Post.author_id.in_(followed), Post.is_anonymous.is_(False))
            )
        elif feed.mode == FeedMode.SUGGESTED:
            query = query.where(Post.author_id != viewer_id)
        elif feed.mode == FeedMode.BY_USER:
            query = query.where(Post.author_id == feed.user_id)
            if feed.user_id != viewer_id:
                query = query.where(Post.is_anonymous.is_(False))
        elif feed.mode == FeedMode.SEARCH:
            query = query.where(
                and_(
                    func.lower(Post.topic).contains((feed.term or "").lower(), autoescape=True),
                    Post.author_id != viewer_id,
                )
            )

        return query.order_by(desc(Post.created_at), desc(Post.id))

    async def list_feed(
        self, feed: FeedQuery, viewer_id: int, skip: int = 0, limit: int = 10
    ) -> Tuple[List[Post], int]:
        """
        Get one page of a feed, newest first.

        Returns:
            (page of posts with author and likes loaded, matching count)
        """
        return await self.paginate(
            self._feed_statement(feed, viewer_id),
            skip,
            limit,
            options=self._detail_options(),
        )

    async def get_with_details(self, post_id: int) -> Optional[Post]:
        """Get a post with author, likes and comments freshly loaded."""
        result = await self.db.execute(
            select(Post)
            .where(Post.id == post_id)
            .options(*self._detail_options())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def has_like(self, post_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            select(PostLike.id).where(
                and_(PostLike.post_id == post_id, PostLike.user_id == user_id)
            )
        )
        return result.first() is not None

    async def add_like(self, post_id: int, user_id: int, commit: bool = True) -> bool:
        """
        Add a like.

        With `commit=False` the like is only flushed, so the caller can
        commit it together with the notification it triggers.

        Returns:
            True if the like is new, False if the user already liked the post
        """
        if await self.has_like(post_id, user_id):
            return False

        self.db.add(PostLike(post_id=post_id, user_id=user_id))
        try:
            if commit:
                await self.db.commit()
            else:
                await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            return False
        return True

    async def remove_like(self, post_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            delete(PostLike).where(
                and_(PostLike.post_id == post_id, PostLike.user_id == user_id)
            )
        )
        await self.db.commit()
        return result.rowcount > 0

    async def count_likes(self, post_id: int) -> int:
        result = await self.db.execute(
            select(func.count(PostLike.id)).where(PostLike.post_id == post_id)
        )
        return result.scalar() or 0

    async def get_likers(
        self,
        post_id: int,
        username_filter: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[User], int]:
        """
        Users who liked a post, in the order they liked it.

        Returns:
            (page of users, number of likers matching the filter)
        """
        query: Select = (
            select(User)
            .join(PostLike, PostLike.user_id == User.id)
            .where(PostLike.post_id == post_id)
            .order_by(PostLike.id)
        )
        if username_filter:
            query = query.where(
                func.lower(User.username).contains(username_filter.lower(), autoescape=True)
            )
        return await self.paginate(query, skip, limit)

    async def delete_with_comments(self, post_id: int) -> bool:
        """
        Delete a post together with its comments and likes.

        Notifications that pointed at the post or at one of its comments
        are kept and detached (their post and comment references become
        NULL).

        Returns:
            True if the post existed
        """
        comment_ids = select(Comment.id).where(Comment.post_id == post_id)

        await self.db.execute(
            update(Notification)
            .where(
                or_(
                    Notification.post_id == post_id,
                    Notification.comment_id.in_(comment_ids),
                )
            )
            .values(post_id=None, comment_id=None)
        )
        await self.db.execute(delete(PostLike).where(PostLike.post_id == post_id))
        await self.db.execute(delete(Comment).where(Comment.post_id == post_id))
        result = await self.db.execute(delete(Post).where(Post.id == post_id))
        await self.db.commit()
        return result.rowcount > 0
