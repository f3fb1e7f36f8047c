"""
Unit tests for the email confirmation and password reset flows.
"""

from urllib.parse import parse_qs, urlparse

import pytest

from socialnet.config import settings
from socialnet.core.exceptions import AuthenticationError, NotFoundError
from socialnet.core.security import (
    EMAIL_CONFIRMATION_TOKEN,
    PASSWORD_RESET_TOKEN,
    security_manager,
)
from socialnet.models.user import User
from socialnet.services.auth_service import AuthService
from socialnet.services.email_service import EmailService


def link_token(html: str) -> str:
    href = html.split('href="', 1)[1].split('"', 1)[0]
    return parse_qs(urlparse(href).query)["token"][0]


@pytest.mark.unit
class TestEmailService:
    @pytest.fixture
    def service(self, db_session, mailer):
        return EmailService(db_session, mailer, settings)

    @pytest.mark.asyncio
    async def test_confirmation_email_carries_purpose_bound_link(
        self, service, make_user, mailer
    ):
        user = await make_user("grace")

        await service.send_confirmation_email("grace@example.com")

        sender, recipient, subject, html = mailer.send.call_args.args
        assert sender == settings.email_from
        assert recipient == "grace@example.com"
        assert f"{settings.frontend_url}/auth/confirm-email?userId={user.id}" in html
        token = link_token(html)
        assert security_manager.decode_user_id(token, EMAIL_CONFIRMATION_TOKEN) == user.id

    @pytest.mark.asyncio
    async def test_confirmation_email_for_unknown_address(self, service, mailer):
        with pytest.raises(NotFoundError):
            await service.send_confirmation_email("nobody@example.com")

        mailer.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_confirm_email_verifies_user(self, service, make_user, db_session):
        user = await make_user("grace")
        user_id = user.id
        token = security_manager.create_access_token(
            user_id, token_type=EMAIL_CONFIRMATION_TOKEN
        )

        await service.confirm_email(token)

        refreshed = await db_session.get(User, user_id, populate_existing=True)
        assert refreshed.is_email_verified is True

    @pytest.mark.asyncio
    async def test_access_token_cannot_confirm_email(self, service, make_user):
        user = await make_user("grace")

        with pytest.raises(AuthenticationError):
            await service.confirm_email(security_manager.create_access_token(user.id))

    @pytest.mark.asyncio
    async def test_reset_password_flow(self, service, make_user, mailer, db_session):
        await make_user("grace")

        await service.send_reset_password_email("grace@example.com")
        html = mailer.send.call_args.args[3]
        assert "/auth/reset-password?" in html

        await service.reset_password(link_token(html), "fresh-password")

        result = await AuthService(db_session).login("grace@example.com", "fresh-password")
        assert result["access_token"]

    @pytest.mark.asyncio
    async def test_reset_token_cannot_confirm_email(self, service, make_user):
        user = await make_user("grace")
        token = security_manager.create_access_token(user.id, token_type=PASSWORD_RESET_TOKEN)

        with pytest.raises(AuthenticationError):
            await service.confirm_email(token)
