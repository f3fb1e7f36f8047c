"""
Repository layer - Data access patterns for the application.

This module exports all repositories for easy importing:
- BaseRepository: Generic CRUD operations and pagination
- UserRepository: Users and the follow graph
- PostRepository: Feeds and post likes
- CommentRepository, ArticleRepository: Other content
- ConversationRepository, MessageRepository: Messaging
- NotificationRepository: Notification inbox
"""

from .article_repository import ArticleRepository
from .base import BaseRepository
from .comment_repository import CommentRepository
from .conversation_repository import ConversationRepository
from .message_repository import MessageRepository
from .notification_repository import NotificationRepository
from .post_repository import FeedMode, FeedQuery, PostRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PostRepository",
    "FeedMode",
    "FeedQuery",
    "CommentRepository",
    "ArticleRepository",
    "ConversationRepository",
    "MessageRepository",
    "NotificationRepository",
]
