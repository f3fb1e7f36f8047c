"""
User Service - Business logic for user operations.

This provides:
1. Profile management operations
2. Follow/unfollow business rules
3. Followers/following listings
4. The founder/verified badge (most followed user)
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import BadRequestError, ConflictError, NotFoundError
from socialnet.core.security import security_manager
from socialnet.core.storage import ImageStore
from socialnet.models.user import User
from socialnet.repositories.user_repository import UserRepository
from socialnet.schemas.common import PageOptions, paginated
from socialnet.services.base import BaseService
from socialnet.services.notification_service import NotificationService

AVATAR_FOLDER = "avatars"


def user_summary(user: User, verified_user_id: Optional[int]) -> Dict[str, Any]:
    """Public view of a user, with the badge resolved against the given winner."""
    return {
        "id": user.id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "full_name": user.full_name,
        "avatar": user.avatar,
        "is_account_verified": verified_user_id is not None and user.id == verified_user_id,
    }


def user_profile(
    user: User,
    verified_user_id: Optional[int],
    followers_count: int = 0,
    following_count: int = 0,
) -> Dict[str, Any]:
    """Full view of a user. Never includes the password hash."""
    return {
        **user_summary(user, verified_user_id),
        "email": user.email,
        "role": user.role,
        "is_email_verified": user.is_email_verified,
        "followers_count": followers_count,
        "following_count": following_count,
        "created_at": user.created_at,
    }


class UserService(BaseService):
    """
    User service handling profile and social graph logic.

    This demonstrates the Service layer pattern:
    - Coordinates multiple repositories
    - Implements business rules
    - Validates business constraints
    """

    def __init__(self, db: AsyncSession, image_store: Optional[ImageStore] = None):
        super().__init__(db)
        self.user_repo = UserRepository(db)
        self.image_store = image_store
        self.notifications = NotificationService(db)

    async def get_user(self, user_id: int) -> User:
        """
        Get user by ID.

        Raises:
            NotFoundError: If user doesn't exist
        """
        user = await self.user_repo.get(user_id)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    async def get_user_with_most_followers(self) -> Optional[Dict[str, Any]]:
        """
        The founder/verified badge holder.

        Recomputed on every call: the user with the most followers, lowest
        id winning ties. Nobody holds the badge while no follow exists.
        """
        user_id = await self.user_repo.get_most_followed_user_id()
        if user_id is None:
            return None
        user = await self.user_repo.get(user_id)
        return user_summary(user, user_id) if user else None

    async def build_profile(self, user: User, verified_user_id: Optional[int]) -> Dict[str, Any]:
        return user_profile(
            user,
            verified_user_id,
            followers_count=await self.user_repo.count_followers(user.id),
            following_count=await self.user_repo.count_following(user.id),
        )

    async def find_all(
        self, username_filter: Optional[str], page: PageOptions
    ) -> Dict[str, Any]:
        """
        Users sorted by followers count, most followed first.

        Returns:
            Page of user summaries; `total` counts every user
        """
        self._log_operation("find_all_users", username_filter=username_filter, page=page.page)

        try:
            users, results_count = await self.user_repo.list_by_popularity(
                username_filter, page.skip, page.limit
            )
            total = await self.user_repo.count()
            verified_user_id = await self.user_repo.get_most_followed_user_id()

            return paginated(
                [user_summary(user, verified_user_id) for user in users],
                page,
                results_count,
                total,
            )

        except Exception as error:
            await self._handle_service_error(error, "list users")

    async def find_by_id(self, user_id: int) -> Dict[str, Any]:
        """
        Get a user's profile.

        Raises:
            NotFoundError: If user doesn't exist
        """
        try:
            user = await self.get_user(user_id)
            verified_user_id = await self.user_repo.get_most_followed_user_id()
            return await self.build_profile(user, verified_user_id)

        except Exception as error:
            await self._handle_service_error(error, "get user")

    async def update_one(self, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update a user's profile.

        Business rules:
        1. Username and email stay globally unique
        2. A new password is hashed before it is stored

        Raises:
            NotFoundError: If user doesn't exist
            ConflictError: If the new username or email is taken
        """
        self._log_operation("update_user", user_id=user_id, fields=sorted(data))

        try:
            user = await self.get_user(user_id)
            update_data = {k: v for k, v in data.items() if v is not None}

            new_email = update_data.get("email")
            if new_email and new_email != user.email:
                if await self.user_repo.get_by_email(new_email):
                    raise ConflictError("Email already in use")

            new_username = update_data.get("username")
            if new_username and new_username != user.username:
                if await self.user_repo.get_by_username(new_username):
                    raise ConflictError("Username already in use")

            password = update_data.pop("password", None)
            if password:
                update_data["hashed_password"] = security_manager.create_password_hash(password)

            user = await self.user_repo.update(user_id, update_data)
            verified_user_id = await self.user_repo.get_most_followed_user_id()

            return {
                "message": "User updated successfully",
                "data": await self.build_profile(user, verified_user_id),
            }

        except IntegrityError:
            await self._handle_service_error(
                ConflictError("Username or email already in use"), "update user"
            )

        except Exception as error:
            await self._handle_service_error(error, "update user")

    async def update_avatar(
        self, user_id: int, image: bytes, content_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Replace a user's avatar (delete old, then upload new).

        Raises:
            NotFoundError: If user doesn't exist
            ExternalServiceError: If the image store fails
        """
        self._log_operation("update_avatar", user_id=user_id)

        try:
            user = await self.get_user(user_id)
            avatar_url = await self.image_store.replace(
                AVATAR_FOLDER, image, user.avatar, content_type
            )
            user = await self.user_repo.update(user_id, {"avatar": avatar_url})
            verified_user_id = await self.user_repo.get_most_followed_user_id()

            return {
                "message": "Avatar updated successfully",
                "data": await self.build_profile(user, verified_user_id),
            }

        except Exception as error:
            await self._handle_service_error(error, "update avatar")

    async def delete_one(self, user_id: int) -> Dict[str, Any]:
        """
        Delete a user and everything they own.

        Raises:
            NotFoundError: If user doesn't exist
        """
        self._log_operation("delete_user", user_id=user_id)

        try:
            deleted = await self.user_repo.delete_with_content(user_id)
            if not deleted:
                raise NotFoundError(f"User with ID {user_id} not found")

            self.logger.info(f"User {user_id} deleted")
            return {"message": "User deleted successfully"}

        except Exception as error:
            await self._handle_service_error(error, "delete user")

    async def follow(self, target_id: int, follower_id: int) -> Dict[str, Any]:
        """
        Follow another user.

        Business rules:
        1. Can't follow yourself
        2. Target user must exist
        3. Following twice is a no-op
        4. Only a new follow notifies the target

        Raises:
            NotFoundError: If target user doesn't exist
            BadRequestError: If trying to follow yourself
        """
        self._log_operation("follow", target_id=target_id, follower_id=follower_id)

        try:
            if target_id == follower_id:
                raise BadRequestError("Cannot follow yourself")

            await self.get_user(target_id)
            follower = await self.get_user(follower_id)

            created = await self.user_repo.add_follower(target_id, follower_id, commit=False)
            if created:
                await self.notifications.notify(
                    recipient_id=target_id,
                    sender_id=follower_id,
                    note=f"{follower.username} started following you",
                    commit=False,
                )
                await self.db.commit()

            return {"message": "User followed successfully"}

        except Exception as error:
            await self._handle_service_error(error, "follow user")

    async def unfollow(self, target_id: int, follower_id: int) -> Dict[str, Any]:
        """
        Stop following a user. Never notifies.

        Raises:
            NotFoundError: If target user doesn't exist
        """
        self._log_operation("unfollow", target_id=target_id, follower_id=follower_id)

        try:
            await self.get_user(target_id)
            await self.user_repo.remove_follower(target_id, follower_id)
            return {"message": "User unfollowed successfully"}

        except Exception as error:
            await self._handle_service_error(error, "unfollow user")

    async def get_followers(
        self, user_id: int, name_filter: Optional[str], page: PageOptions
    ) -> Dict[str, Any]:
        """
        Page through a user's followers in the order they followed.

        `total` is the user's followers count regardless of the filter.
        """
        try:
            await self.get_user(user_id)
            users, results_count = await self.user_repo.get_user_followers(
                user_id, name_filter, page.skip, page.limit
            )
            total = await self.user_repo.count_followers(user_id)
            verified_user_id = await self.user_repo.get_most_followed_user_id()

            return paginated(
                [user_summary(user, verified_user_id) for user in users],
                page,
                results_count,
                total,
            )

        except Exception as error:
            await self._handle_service_error(error, "get followers")

    async def get_following(
        self, user_id: int, name_filter: Optional[str], page: PageOptions
    ) -> Dict[str, Any]:
        """Page through the users someone follows."""
        try:
            await self.get_user(user_id)
            users, results_count = await self.user_repo.get_user_following(
                user_id, name_filter, page.skip, page.limit
            )
            total = await self.user_repo.count_following(user_id)
            verified_user_id = await self.user_repo.get_most_followed_user_id()

            return paginated(
                [user_summary(user, verified_user_id) for user in users],
                page,
                results_count,
                total,
            )

        except Exception as error:
            await self._handle_service_error(error, "get following")

    async def get_following_ids(self, user_id: int) -> Dict[str, Any]:
        try:
            await self.get_user(user_id)
            return {"following": await self.user_repo.get_following_ids(user_id)}

        except Exception as error:
            await self._handle_service_error(error, "get following ids")
