"""
FastAPI dependencies for dependency injection.

This provides:
1. Access to the application context (database, image store, push, mailer)
2. Request-scoped database sessions
3. Service layer dependency injection
4. Common pagination parameters
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.config import settings
from socialnet.context import AppContext
from socialnet.schemas.common import PageOptions
from socialnet.services.article_service import ArticleService
from socialnet.services.auth_service import AuthService
from socialnet.services.comment_service import CommentService
from socialnet.services.conversation_service import ConversationService
from socialnet.services.email_service import EmailService
from socialnet.services.message_service import MessageService
from socialnet.services.notification_service import NotificationService
from socialnet.services.post_service import PostService
from socialnet.services.user_service import UserService


def get_context(request: Request) -> AppContext:
    """The context the application was started with."""
    return request.app.state.context


async def get_db(
    context: AppContext = Depends(get_context),
) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    Usage in FastAPI endpoints:
    @app.get("/users/")
    async def get_users(db: AsyncSession = Depends(get_db)):
        # Use db session here
    """
    async with context.database.session() as session:
        yield session


# Service Dependencies
def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """Get AuthService instance with database session."""
    return AuthService(db)


def get_user_service(
    db: AsyncSession = Depends(get_db), context: AppContext = Depends(get_context)
) -> UserService:
    """Get UserService instance with database session and image store."""
    return UserService(db, context.image_store)


def get_post_service(
    db: AsyncSession = Depends(get_db), context: AppContext = Depends(get_context)
) -> PostService:
    """Get PostService instance with database session and image store."""
    return PostService(db, context.image_store)


def get_comment_service(db: AsyncSession = Depends(get_db)) -> CommentService:
    return CommentService(db)


def get_article_service(db: AsyncSession = Depends(get_db)) -> ArticleService:
    return ArticleService(db)


def get_conversation_service(
    db: AsyncSession = Depends(get_db), context: AppContext = Depends(get_context)
) -> ConversationService:
    return ConversationService(db, context.realtime)


def get_message_service(
    db: AsyncSession = Depends(get_db), context: AppContext = Depends(get_context)
) -> MessageService:
    return MessageService(db, context.realtime)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_email_service(
    db: AsyncSession = Depends(get_db), context: AppContext = Depends(get_context)
) -> EmailService:
    return EmailService(db, context.mailer, context.settings)


# Common pagination dependency
def get_page_options(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Page size",
    ),
) -> PageOptions:
    """
    Get pagination parameters with validation.

    Returns:
        Validated page options (skip is derived from page and limit)
    """
    return PageOptions(page=page, limit=limit)


def clean_filter(value: Optional[str]) -> Optional[str]:
    """Blank text filters mean no filter."""
    if value is None:
        return None
    value = value.strip()
    return value or None
