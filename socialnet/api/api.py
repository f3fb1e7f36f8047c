"""
API router - Combines all API endpoints under /api.
"""

from fastapi import APIRouter

from socialnet.api.endpoints import (
    articles,
    auth,
    comments,
    conversations,
    email,
    notifications,
    posts,
    users,
)

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(posts.router)
api_router.include_router(comments.router)
api_router.include_router(conversations.router)
api_router.include_router(notifications.router)
api_router.include_router(articles.router)
api_router.include_router(email.router)

# API metadata for documentation
tags_metadata = [
    {"name": "Authentication", "description": "Registration, login and tokens"},
    {"name": "Users", "description": "Profiles and the follow graph"},
    {"name": "Posts", "description": "Feeds, posts and likes"},
    {"name": "Comments", "description": "Comments under posts"},
    {"name": "Conversations", "description": "Conversations and messages"},
    {"name": "Notifications", "description": "Notification inbox"},
    {"name": "Articles", "description": "Long-form articles"},
    {"name": "Email", "description": "Email confirmation and password reset"},
]
