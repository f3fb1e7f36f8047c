# Import all models to make them available
from .article import Article, ArticleLike
from .comment import Comment
from .conversation import Conversation, ConversationParticipant, Message
from .notification import Notification
from .post import Post, PostLike
from .user import Follow, Role, User

__all__ = [
    "User",
    "Role",
    "Follow",
    "Post",
    "PostLike",
    "Comment",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "Notification",
    "Article",
    "ArticleLike",
]
