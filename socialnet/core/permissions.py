"""
Per-route authorization gates.

A protected route goes through, in order:
1. Token validation (401 when the bearer token is missing or invalid)
2. Current user lookup (404 when the token's user no longer exists)
3. Role check (403 for non-admins on admin routes)
4. Ownership check: the target resource is re-fetched, a missing resource
   is reported as 404 before any ownership comparison, and admins bypass
   ownership but never existence.

Each gate is a FastAPI dependency; routes list the gates they need.
"""

import logging
from typing import Awaitable, Callable, Optional, Type

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import AuthorizationError, NotFoundError
from socialnet.core.security import get_current_user_id
from socialnet.database import Base
from socialnet.dependencies import get_db
from socialnet.models.article import Article
from socialnet.models.comment import Comment
from socialnet.models.conversation import Conversation, ConversationParticipant, Message
from socialnet.models.notification import Notification
from socialnet.models.post import Post
from socialnet.models.user import User

logger = logging.getLogger(__name__)

ExtraRule = Callable[[AsyncSession, Base, User], Awaitable[bool]]


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    The authenticated user.

    Raises:
        NotFoundError: If the token's user no longer exists
    """
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Only admins pass.

    Raises:
        AuthorizationError: If the user is not an admin
    """
    if not current_user.is_admin:
        raise AuthorizationError("Admin privileges required")
    return current_user


async def require_self_or_admin(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Only the user named in the path, or an admin, passes.

    Raises:
        NotFoundError: If the target user doesn't exist
        AuthorizationError: If the caller is neither that user nor an admin
    """
    if current_user.id == user_id:
        return current_user

    if not await db.get(User, user_id):
        raise NotFoundError(f"User with ID {user_id} not found")

    if not current_user.is_admin:
        raise AuthorizationError("You can only modify your own account")

    return current_user


class OwnershipChecker:
    """
    Dependency that loads a resource from the path and checks who may touch it.

    Usage:
        require_post_owner = OwnershipChecker(Post, "post", owner_field="author_id")

        @router.delete("/{id}", dependencies=[Depends(require_post_owner)])
        async def delete_post(id: int): ...

    Args:
        model: Model class of the resource
        resource_name: Name used in error messages
        owner_field: Attribute holding the owner's user id
        param: Path parameter carrying the resource id
        extra_rule: Additional way to be allowed (e.g. post owner on comments)
    """

    def __init__(
        self,
        model: Type[Base],
        resource_name: str,
        owner_field: Optional[str] = None,
        param: str = "id",
        extra_rule: Optional[ExtraRule] = None,
    ):
        self.model = model
        self.resource_name = resource_name
        self.owner_field = owner_field
        self.param = param
        self.extra_rule = extra_rule

    def _resource_id(self, request: Request) -> int:
        raw_id = request.path_params.get(self.param)
        try:
            return int(raw_id)
        except (TypeError, ValueError):
            raise NotFoundError(f"{self.resource_name.capitalize()} not found") from None

    async def __call__(
        self,
        request: Request,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        resource_id = self._resource_id(request)
        resource = await db.get(self.model, resource_id)
        if not resource:
            raise NotFoundError(
                f"{self.resource_name.capitalize()} with ID {resource_id} not found"
            )

        if current_user.is_admin:
            return resource

        if self.owner_field and getattr(resource, self.owner_field) == current_user.id:
            return resource

        if self.extra_rule and await self.extra_rule(db, resource, current_user):
            return resource

        logger.info(
            f"User {current_user.id} denied access to {self.resource_name} {resource_id}"
        )
        raise AuthorizationError(f"You don't have permission to access this {self.resource_name}")


async def _owns_commented_post(db: AsyncSession, comment: Comment, user: User) -> bool:
    post = await db.get(Post, comment.post_id)
    return post is not None and post.author_id == user.id


async def _is_participant(db: AsyncSession, conversation: Conversation, user: User) -> bool:
    result = await db.execute(
        select(ConversationParticipant.id).where(
            ConversationParticipant.conversation_id == conversation.id,
            ConversationParticipant.user_id == user.id,
        )
    )
    return result.first() is not None


require_post_owner = OwnershipChecker(Post, "post", owner_field="author_id")
require_comment_owner = OwnershipChecker(Comment, "comment", owner_field="author_id")
require_comment_owner_or_post_owner = OwnershipChecker(
    Comment, "comment", owner_field="author_id", extra_rule=_owns_commented_post
)
require_message_owner = OwnershipChecker(
    Message, "message", owner_field="sender_id", param="message_id"
)
require_participant = OwnershipChecker(
    Conversation, "conversation", extra_rule=_is_participant
)
require_notification_recipient = OwnershipChecker(
    Notification, "notification", owner_field="recipient_id"
)
require_article_owner = OwnershipChecker(Article, "article", owner_field="author_id")
