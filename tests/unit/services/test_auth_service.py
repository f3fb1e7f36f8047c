"""
Unit tests for Authentication Service.
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from socialnet.core.exceptions import BadRequestError, ConflictError, NotFoundError
from socialnet.core.security import security_manager
from socialnet.models.user import Role, User
from socialnet.services.auth_service import AuthService


def candidate(username="ada", email="ada@example.com", password="secret123"):
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "username": username,
        "email": email,
        "password": password,
    }


@pytest.mark.unit
class TestAuthService:
    """Test registration, login and credential changes."""

    @pytest.fixture
    def service(self, db_session):
        return AuthService(db_session)

    @pytest.mark.asyncio
    async def test_register_returns_token_for_created_user(self, service, db_session):
        result = await service.register(candidate())

        user_id = result["user"]["id"]
        assert security_manager.decode_user_id(result["access_token"]) == user_id

        stored = await db_session.get(User, user_id)
        assert stored.role == Role.USER
        assert stored.is_email_verified is False
        assert stored.hashed_password != "secret123"
        assert security_manager.verify_password("secret123", stored.hashed_password)

    @pytest.mark.asyncio
    async def test_register_never_returns_the_password(self, service):
        result = await service.register(candidate())

        assert "password" not in result["user"]
        assert "hashed_password" not in result["user"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username,email",
        [("ada", "other@example.com"), ("other", "ada@example.com")],
    )
    async def test_register_conflicts_on_taken_username_or_email(self, service, username, email):
        await service.register(candidate())

        with pytest.raises(ConflictError):
            await service.register(candidate(username=username, email=email))

    @pytest.mark.asyncio
    async def test_register_race_on_username_is_a_conflict(self, db_session, database):
        await AuthService(db_session).register(candidate())

        async with database.session() as other_session:
            racing = AuthService(other_session)
            # The uniqueness check ran before the first registration committed
            racing.user_repo.get_by_username_or_email = AsyncMock(return_value=None)

            with pytest.raises(ConflictError):
                await racing.register(candidate(email="late@example.com"))

        result = await db_session.execute(select(func.count(User.id)))
        assert result.scalar() == 1

    @pytest.mark.asyncio
    async def test_login_with_correct_password(self, service, make_user, default_password):
        user = await make_user("grace")

        result = await service.login("grace@example.com", default_password)

        assert security_manager.decode_user_id(result["access_token"]) == user.id
        assert result["user"]["username"] == "grace"

    @pytest.mark.asyncio
    async def test_login_unknown_email_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            await service.login("nobody@example.com", "whatever")

    @pytest.mark.asyncio
    async def test_login_wrong_password_is_bad_request(self, service, make_user):
        await make_user("grace")

        with pytest.raises(BadRequestError):
            await service.login("grace@example.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_renew_token_for_missing_user(self, service):
        with pytest.raises(NotFoundError):
            await service.renew_token(999)

    @pytest.mark.asyncio
    async def test_renew_token_binds_same_user(self, service, make_user):
        user = await make_user()

        result = await service.renew_token(user.id)

        assert security_manager.decode_user_id(result["access_token"]) == user.id

    @pytest.mark.asyncio
    async def test_change_password_replaces_hash(self, service, make_user, default_password):
        user = await make_user("grace")

        await service.change_password(user.id, "brand-new-pass")

        await service.login("grace@example.com", "brand-new-pass")
        with pytest.raises(BadRequestError):
            await service.login("grace@example.com", default_password)

    @pytest.mark.asyncio
    async def test_change_password_for_missing_user(self, service):
        with pytest.raises(NotFoundError):
            await service.change_password(999, "brand-new-pass")

    @pytest.mark.asyncio
    async def test_verify_email_sets_flag(self, service, make_user, db_session):
        user = await make_user()
        user_id = user.id

        await service.verify_email(user_id)

        refreshed = await db_session.get(User, user_id, populate_existing=True)
        assert refreshed.is_email_verified is True
