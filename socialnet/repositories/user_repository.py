"""
User Repository - Specialized data access for User model.

This provides:
1. Lookup by email/username for authentication
2. Follow graph queries (followers, following, most followed)
3. Name filtering shared by every user listing
4. Ownership-aware account deletion
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import Select, and_, delete, desc, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.models.article import Article, ArticleLike
from socialnet.models.comment import Comment
from socialnet.models.conversation import ConversationParticipant, Message
from socialnet.models.notification import Notification
from socialnet.models.post import Post, PostLike
from socialnet.models.user import Follow, User
from socialnet.repositories.base import BaseRepository


def name_matches(term: str):
    """Case-insensitive substring match on username, first or last name."""
    term = term.lower()
    return or_(
        func.lower(User.username).contains(term, autoescape=True),
        func.lower(User.first_name).contains(term, autoescape=True),
        func.lower(User.last_name).contains(term, autoescape=True),
    )


class UserRepository(BaseRepository[User]):
    """
    User-specific repository extending BaseRepository.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: User's email address

        Returns:
            User instance or None if not found
        """
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(or_(User.username == username, User.email == email)).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_many(self, user_ids: Sequence[int]) -> List[User]:
        if not user_ids:
            return []
        result = await self.db.execute(select(User).where(User.id.in_(user_ids)))
        return list(result.scalars().all())

    def _followers_count_subquery(self):
        return (
            select(Follow.followed_id, func.count(Follow.id).label("followers_count"))
            .group_by(Follow.followed_id)
            .subquery()
        )

    async def list_by_popularity(
        self, username_filter: Optional[str] = None, skip: int = 0, limit: int = 10
    ) -> Tuple[List[User], int]:
        """
        Users ordered by followers count (desc), ties by id.

        Returns:
            (page of users, number of users matching the filter)
        """
        counts = self._followers_count_subquery()
        query: Select = (
            select(User)
            .outerjoin(counts, counts.c.followed_id == User.id)
            .order_by(desc(func.coalesce(counts.c.followers_count, 0)), User.id)
        )
        if username_filter:
            query = query.where(
                func.lower(User.username).contains(username_filter.lower(), autoescape=True)
            )
        return await self.paginate(query, skip, limit)

    async def get_user_followers(
        self,
        user_id: int,
        name_filter: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[User], int]:
        """
        Get users who follow this user, in the order they followed.

        Returns:
            (page of followers, number of followers matching the filter)
        """
        query: Select = (
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.followed_id == user_id)
            .order_by(Follow.id)
        )
        if name_filter:
            query = query.where(name_matches(name_filter))
        return await self.paginate(query, skip, limit)

    async def get_user_following(
        self,
        user_id: int,
        name_filter: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[User], int]:
        """
        Get users that this user follows, in the order they were followed.

        Returns:
            (page of followed users, number matching the filter)
        """
        query: Select = (
            select(User)
            .join(Follow, Follow.followed_id == User.id)
            .where(Follow.follower_id == user_id)
            .order_by(Follow.id)
        )
        if name_filter:
            query = query.where(name_matches(name_filter))
        return await self.paginate(query, skip, limit)

    async def count_followers(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Follow.id)).where(Follow.followed_id == user_id)
        )
        return result.scalar() or 0

    async def count_following(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Follow.id)).where(Follow.follower_id == user_id)
        )
        return result.scalar() or 0

    def following_ids_query(self, user_id: int) -> Select:
        """Subquery of the ids a user follows."""
        return select(Follow.followed_id).where(Follow.follower_id == user_id)

    async def get_following_ids(self, user_id: int) -> List[int]:
        result = await self.db.execute(
            self.following_ids_query(user_id).order_by(Follow.id)
        )
        return list(result.scalars().all())

    async def is_following(self, follower_id: int, followed_id: int) -> bool:
        """
        Check if one user follows another.
        """
        result = await self.db.execute(
            select(Follow.id).where(
                and_(Follow.follower_id == follower_id, Follow.followed_id == followed_id)
            )
        )
        return result.first() is not None

    async def add_follower(self, followed_id: int, follower_id: int, commit: bool = True) -> bool:
        """
        Add a follow edge; `commit=False` only flushes it.

        Returns:
            True if the edge is new, False if it already existed
        """
        if await self.is_following(follower_id, followed_id):
            return False

        self.db.add(Follow(follower_id=follower_id, followed_id=followed_id))
        try:
            if commit:
                await self.db.commit()
            else:
                await self.db.flush()
        except IntegrityError:
            # Concurrent follow inserted the same pair first
            await self.db.rollback()
            return False
        return True

    async def remove_follower(self, followed_id: int, follower_id: int) -> bool:
        """
        Remove a follow edge.

        Returns:
            True if an edge was removed
        """
        result = await self.db.execute(
            delete(Follow).where(
                and_(Follow.follower_id == follower_id, Follow.followed_id == followed_id)
            )
        )
        await self.db.commit()
        return result.rowcount > 0

    async def get_most_followed_user_id(self) -> Optional[int]:
        """
        Id of the user with the most followers, lowest id winning ties.

        Returns None when nobody has any follower.
        """
        followers_count = func.count(Follow.id).label("followers_count")
        result = await self.db.execute(
            select(Follow.followed_id, followers_count)
            .group_by(Follow.followed_id)
            .order_by(desc(followers_count), Follow.followed_id)
            .limit(1)
        )
        row = result.first()
        return row.followed_id if row else None

    async def delete_with_content(self, user_id: int) -> bool:
        """
        Delete a user and everything that references them.

        Removes follows in both directions, likes, notifications, messages,
        conversation memberships, comments, posts (with their comments and
        likes) and articles (with their likes), then the user row.

        Returns:
            True if the user existed
        """
        if not await self.exists(user_id):
            return False

        post_ids = select(Post.id).where(Post.author_id == user_id)
        article_ids = select(Article.id).where(Article.author_id == user_id)
        comment_ids = select(Comment.id).where(
            or_(Comment.author_id == user_id, Comment.post_id.in_(post_ids))
        )

        await self.db.execute(
            delete(Follow).where(
                or_(Follow.follower_id == user_id, Follow.followed_id == user_id)
            )
        )
        await self.db.execute(
            delete(Notification).where(
                or_(Notification.recipient_id == user_id, Notification.sender_id == user_id)
            )
        )
        await self.db.execute(
            update(Notification)
            .where(
                or_(
                    Notification.post_id.in_(post_ids),
                    Notification.comment_id.in_(comment_ids),
                )
            )
            .values(post_id=None, comment_id=None)
        )
        await self.db.execute(
            delete(PostLike).where(
                or_(PostLike.user_id == user_id, PostLike.post_id.in_(post_ids))
            )
        )
        await self.db.execute(
            delete(ArticleLike).where(
                or_(ArticleLike.user_id == user_id, ArticleLike.article_id.in_(article_ids))
            )
        )
        await self.db.execute(delete(Comment).where(Comment.id.in_(comment_ids)))
        await self.db.execute(delete(Post).where(Post.author_id == user_id))
        await self.db.execute(delete(Article).where(Article.author_id == user_id))
        await self.db.execute(delete(Message).where(Message.sender_id == user_id))
        await self.db.execute(
            delete(ConversationParticipant).where(ConversationParticipant.user_id == user_id)
        )
        await self.db.execute(delete(User).where(User.id == user_id))
        await self.db.commit()
        return True
