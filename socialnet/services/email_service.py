"""
Email Service - Confirmation and password reset flows.

Each flow issues a short-lived, purpose-bound token, embeds it in a
frontend link and hands the rendered email to the mailer. The matching
confirm/reset operations decode that token and finish the flow through
AuthService.
"""

from datetime import timedelta
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.config import Settings
from socialnet.core.exceptions import NotFoundError
from socialnet.core.mailer import EmailSender
from socialnet.core.security import (
    EMAIL_CONFIRMATION_TOKEN,
    PASSWORD_RESET_TOKEN,
    security_manager,
)
from socialnet.models.user import User
from socialnet.repositories.user_repository import UserRepository
from socialnet.services.auth_service import AuthService
from socialnet.services.base import BaseService

CONFIRM_EMAIL_TEMPLATE = """\
<html>
  <body>
    <h2>Verify your email address</h2>
    <p>Hi {name}, thanks for joining. Confirm your address to finish setting up your account.</p>
    <p><a href="{link}">Confirm my email</a></p>
    <p>This link expires in {minutes} minutes.</p>
    <p><a href="{frontend_url}">{frontend_url}</a></p>
  </body>
</html>
"""

RESET_PASSWORD_TEMPLATE = """\
<html>
  <body>
    <h2>Reset your password</h2>
    <p>Hi {name}, we received a request to reset your password.</p>
    <p><a href="{link}">Choose a new password</a></p>
    <p>This link expires in {minutes} minutes. If you didn't ask for it, ignore this email.</p>
    <p><a href="{frontend_url}">{frontend_url}</a></p>
  </body>
</html>
"""


class EmailService(BaseService):
    """
    Email flows built on the mailer collaborator.
    """

    def __init__(self, db: AsyncSession, mailer: EmailSender, settings: Settings):
        super().__init__(db)
        self.user_repo = UserRepository(db)
        self.auth_service = AuthService(db)
        self.mailer = mailer
        self.settings = settings

    async def _get_recipient(self, email: str) -> User:
        user = await self.user_repo.get_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        return user

    def _link(self, path: str, user: User, token_type: str) -> str:
        token = security_manager.create_access_token(
            user.id,
            timedelta(minutes=self.settings.email_token_expire_minutes),
            token_type=token_type,
        )
        return f"{self.settings.frontend_url}{path}?userId={user.id}&token={token}"

    def _render(self, template: str, user: User, link: str) -> str:
        return template.format(
            name=user.first_name,
            link=link,
            minutes=self.settings.email_token_expire_minutes,
            frontend_url=self.settings.frontend_url,
        )

    async def send_confirmation_email(self, recipient: str) -> Dict[str, Any]:
        """
        Send the email address confirmation link.

        Raises:
            NotFoundError: If no user has this email
            ExternalServiceError: If the email can't be queued
        """
        self._log_operation("send_confirmation_email", recipient=recipient)

        try:
            user = await self._get_recipient(recipient)
            link = self._link("/auth/confirm-email", user, EMAIL_CONFIRMATION_TOKEN)
            await self.mailer.send(
                self.settings.email_from,
                recipient,
                "Verify your email address",
                self._render(CONFIRM_EMAIL_TEMPLATE, user, link),
            )
            return {"message": "Email sent"}

        except Exception as error:
            await self._handle_service_error(error, "send confirmation email")

    async def confirm_email(self, token: str) -> Dict[str, Any]:
        """
        Finish the confirmation flow.

        Raises:
            AuthenticationError: If the token is invalid, expired or not a confirmation token
            NotFoundError: If the user no longer exists
        """
        user_id = security_manager.decode_user_id(token, EMAIL_CONFIRMATION_TOKEN)
        return await self.auth_service.verify_email(user_id)

    async def send_reset_password_email(self, recipient: str) -> Dict[str, Any]:
        """
        Send the password reset link.

        Raises:
            NotFoundError: If no user has this email
            ExternalServiceError: If the email can't be queued
        """
        self._log_operation("send_reset_password_email", recipient=recipient)

        try:
            user = await self._get_recipient(recipient)
            link = self._link("/auth/reset-password", user, PASSWORD_RESET_TOKEN)
            await self.mailer.send(
                self.settings.email_from,
                recipient,
                "Reset your password",
                self._render(RESET_PASSWORD_TEMPLATE, user, link),
            )
            return {"message": "Email sent"}

        except Exception as error:
            await self._handle_service_error(error, "send reset password email")

    async def reset_password(self, token: str, new_password: str) -> Dict[str, Any]:
        """
        Finish the reset flow with a new password.

        Raises:
            AuthenticationError: If the token is invalid, expired or not a reset token
            NotFoundError: If the user no longer exists
        """
        user_id = security_manager.decode_user_id(token, PASSWORD_RESET_TOKEN)
        return await self.auth_service.change_password(user_id, new_password)
