"""
Post schemas.

Posts are created and updated through multipart forms (the image travels
as a file part), so only the response side is modelled here.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from socialnet.schemas.common import CamelModel
from socialnet.schemas.user import UserSummary


class PostResponse(CamelModel):
    """
    Post view.

    `author` is None for anonymous posts unless the viewer wrote them.
    """

    id: int
    title: str
    topic: str
    description: str
    image: Optional[str] = None
    files: List[Dict[str, Any]] = []
    is_anonymous: bool = False
    author: Optional[UserSummary] = None
    likes: List[int] = []
    likes_count: int = 0
    comments_count: int = 0
    liked_by_me: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
