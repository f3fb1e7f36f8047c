"""
Authentication Service - Business logic for user authentication.

This provides:
1. User registration workflow
2. Login
3. Token renewal
4. Password change
5. Email verification flag
"""

from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import BadRequestError, ConflictError, NotFoundError
from socialnet.core.security import security_manager
from socialnet.models.user import Role, User
from socialnet.repositories.user_repository import UserRepository
from socialnet.services.base import BaseService
from socialnet.services.user_service import UserService

TOKEN_LIFETIME = timedelta(days=1)


class AuthService(BaseService):
    """
    Authentication service handling all auth-related business logic.

    Tokens identify only the user id and are valid for one day.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.user_repo = UserRepository(db)
        self.user_service = UserService(db)

    def _issue_token(self, user: User) -> str:
        return security_manager.create_access_token(user.id, TOKEN_LIFETIME)

    async def _auth_response(self, user: User) -> Dict[str, Any]:
        verified_user_id = await self.user_repo.get_most_followed_user_id()
        return {
            "access_token": self._issue_token(user),
            "token_type": "bearer",
            "user": await self.user_service.build_profile(user, verified_user_id),
        }

    async def register(self, candidate: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a new user.

        Business rules:
        1. Username and email must both be unique
        2. Only a bcrypt hash of the password is stored
        3. New users get the "user" role and an unverified email

        Args:
            candidate: first_name, last_name, username, email, password

        Returns:
            Dictionary with the access token and the created user

        Raises:
            ConflictError: If username or email already exists
        """
        self._log_operation("register", email=candidate.get("email"))

        try:
            existing = await self.user_repo.get_by_username_or_email(
                candidate["username"], candidate["email"]
            )
            if existing:
                raise ConflictError("A user with this username or email already exists")

            user = await self.user_repo.create(
                {
                    "first_name": candidate["first_name"],
                    "last_name": candidate["last_name"],
                    "username": candidate["username"],
                    "email": candidate["email"],
                    "hashed_password": security_manager.create_password_hash(
                        candidate["password"]
                    ),
                    "role": Role.USER,
                    "is_email_verified": False,
                }
            )

            self.logger.info(f"User registered successfully: {user.id}")
            return await self._auth_response(user)

        except IntegrityError:
            # A concurrent registration took the username or email after the check
            await self._handle_service_error(
                ConflictError("A user with this username or email already exists"), "register user"
            )

        except Exception as error:
            await self._handle_service_error(error, "register user")

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Authenticate user and return a token.

        Raises:
            NotFoundError: If no user has this email
            BadRequestError: If the password is wrong
        """
        self._log_operation("login", email=email)

        try:
            user = await self.user_repo.get_by_email(email)
            if not user:
                raise NotFoundError("User not found")

            if not security_manager.verify_password(password, user.hashed_password):
                raise BadRequestError("Invalid email or password")

            self.logger.info(f"User authenticated successfully: {user.id}")
            return await self._auth_response(user)

        except Exception as error:
            await self._handle_service_error(error, "log in")

    async def renew_token(self, user_id: int) -> Dict[str, Any]:
        """
        Issue a fresh token for a still existing user.

        Raises:
            NotFoundError: If the user no longer exists
        """
        try:
            user = await self.user_service.get_user(user_id)
            return await self._auth_response(user)

        except Exception as error:
            await self._handle_service_error(error, "renew token")

    async def change_password(self, user_id: int, new_password: str) -> Dict[str, Any]:
        """
        Replace a user's password.

        Raises:
            NotFoundError: If user doesn't exist
        """
        self._log_operation("change_password", user_id=user_id)

        try:
            user = await self.user_repo.update(
                user_id,
                {"hashed_password": security_manager.create_password_hash(new_password)},
            )
            if not user:
                raise NotFoundError(f"User with ID {user_id} not found")

            return {"message": "Password updated successfully"}

        except Exception as error:
            await self._handle_service_error(error, "change password")

    async def verify_email(self, user_id: int) -> Dict[str, Any]:
        """
        Mark a user's email as verified.

        Raises:
            NotFoundError: If user doesn't exist
        """
        try:
            user: Optional[User] = await self.user_repo.update(
                user_id, {"is_email_verified": True}
            )
            if not user:
                raise NotFoundError(f"User with ID {user_id} not found")

            self.logger.info(f"Email verified for user {user_id}")
            return {"message": "Email verified successfully"}

        except Exception as error:
            await self._handle_service_error(error, "verify email")
