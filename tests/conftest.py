"""
Shared test fixtures and configuration.
"""

import itertools
import os

# Cheap hashing and a fixed key before the settings object is built
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from socialnet.config import settings
from socialnet.context import AppContext
from socialnet.core.mailer import EmailSender
from socialnet.core.realtime import RealtimePublisher
from socialnet.core.security import security_manager
from socialnet.core.storage import ImageStore
from socialnet.database import Database
from socialnet.main import create_app
from socialnet.models.post import Post
from socialnet.models.user import Follow, Role, User

DEFAULT_PASSWORD = "password123"


@pytest_asyncio.fixture
async def database():
    """In-memory SQLite database with every table created."""
    database = Database(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await database.create_all()

    yield database

    await database.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """A session on the test database."""
    async with database.session() as session:
        yield session


@pytest.fixture
def image_store():
    """Image store double handing out predictable URLs."""
    store = Mock(spec=ImageStore)
    store.upload = AsyncMock(
        side_effect=lambda folder, image, content_type=None: f"https://cdn.test/{folder}/new.png"
    )
    store.replace = AsyncMock(
        side_effect=lambda folder, image, old_url, content_type=None: (
            f"https://cdn.test/{folder}/replaced.png"
        )
    )
    store.delete = AsyncMock(return_value=None)
    return store


@pytest.fixture
def realtime():
    """Real-time publisher double."""
    publisher = Mock(spec=RealtimePublisher)
    publisher.publish = AsyncMock(return_value=None)
    publisher.publish_many = AsyncMock(return_value=None)
    return publisher


@pytest.fixture
def mailer():
    sender = Mock(spec=EmailSender)
    sender.send = AsyncMock(return_value=None)
    return sender


@pytest.fixture
def default_password():
    """Password every factory-made user logs in with."""
    return DEFAULT_PASSWORD


@pytest.fixture
def make_user(db_session):
    """Factory creating persisted users with the default password."""
    counter = itertools.count(1)

    async def _make_user(
        username=None,
        role=Role.USER,
        first_name=None,
        last_name="Tester",
        **fields,
    ) -> User:
        n = next(counter)
        username = username or f"user{n}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            first_name=first_name or username.capitalize(),
            last_name=last_name,
            hashed_password=security_manager.create_password_hash(DEFAULT_PASSWORD),
            role=role,
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_post(db_session):
    """Factory creating persisted posts."""

    async def _make_post(
        author_id: int, topic: str = "general", is_anonymous: bool = False, **fields
    ) -> Post:
        post = Post(
            title=fields.pop("title", f"About {topic}"),
            topic=topic,
            description=fields.pop("description", "Some words"),
            is_anonymous=is_anonymous,
            author_id=author_id,
            **fields,
        )
        db_session.add(post)
        await db_session.commit()
        await db_session.refresh(post)
        return post

    return _make_post


@pytest.fixture
def follow(db_session):
    """Make one user follow another."""

    async def _follow(follower_id: int, followed_id: int) -> None:
        db_session.add(Follow(follower_id=follower_id, followed_id=followed_id))
        await db_session.commit()

    return _follow


@pytest.fixture
def auth_headers():
    def _auth_headers(user_id: int) -> dict:
        token = security_manager.create_access_token(user_id)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def app(database, image_store, realtime, mailer):
    """Application wired to the test database and collaborator doubles."""
    context = AppContext(
        settings=settings,
        database=database,
        image_store=image_store,
        realtime=realtime,
        mailer=mailer,
    )
    return create_app(context)


@pytest_asyncio.fixture
async def client(app):
    """HTTP client talking to the app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
