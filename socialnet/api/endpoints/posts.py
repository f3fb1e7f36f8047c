"""
Post API endpoints.

Posts are sent as multipart forms so an image can travel with them.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from socialnet.core.permissions import require_post_owner
from socialnet.core.security import get_current_user_id
from socialnet.dependencies import (
    clean_filter,
    get_comment_service,
    get_page_options,
    get_post_service,
)
from socialnet.schemas.comment import CommentResponse
from socialnet.schemas.common import DataResponse, MessageResponse, PageOptions, PaginatedResponse
from socialnet.schemas.post import PostResponse
from socialnet.schemas.user import UserSummary
from socialnet.services.comment_service import CommentService
from socialnet.services.post_service import PostService, build_feed_query

router = APIRouter(prefix="/posts", tags=["Posts"])


async def _read_image(image: Optional[UploadFile]):
    if image is None or not image.filename:
        return None, None
    return await image.read(), image.content_type


@router.get("", response_model=PaginatedResponse[PostResponse], summary="List posts")
async def list_posts(
    following: bool = Query(False, description="Posts by accounts you follow"),
    suggested: bool = Query(False, description="Posts by anyone but you"),
    user_id: Optional[int] = Query(None, alias="userId", description="Posts by one user"),
    search: Optional[str] = Query(None, description="Topic substring"),
    page: PageOptions = Depends(get_page_options),
    current_user_id: int = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    """
    One page of a feed, newest first.

    At most one of `following`, `suggested`, `userId` and `search` may be given.
    """
    feed = build_feed_query(following, suggested, user_id, clean_filter(search))
    return await post_service.find_all(feed, current_user_id, page)


@router.get("/{id}", response_model=PostResponse, summary="Get a post")
async def get_post(
    id: int,
    current_user_id: int = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    return await post_service.find_by_id(id, current_user_id)


@router.post(
    "",
    response_model=DataResponse[PostResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
)
async def create_post(
    title: str = Form(..., min_length=1, max_length=300),
    topic: str = Form(..., min_length=1, max_length=100),
    description: str = Form(..., min_length=1),
    is_anonymous: bool = Form(False, alias="isAnonymous"),
    image: Optional[UploadFile] = File(None),
    current_user_id: int = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    """If an image is attached and its upload fails, no post is created."""
    image_bytes, content_type = await _read_image(image)
    return await post_service.create_one(
        current_user_id,
        {"title": title, "topic": topic, "description": description, "is_anonymous": is_anonymous},
        image_bytes,
        content_type,
    )


@router.put(
    "/{id}",
    response_model=DataResponse[PostResponse],
    dependencies=[Depends(require_post_owner)],
    summary="Update a post",
)
async def update_post(
    id: int,
    title: Optional[str] = Form(None, min_length=1, max_length=300),
    topic: Optional[str] = Form(None, min_length=1, max_length=100),
    description: Optional[str] = Form(None, min_length=1),
    is_anonymous: Optional[bool] = Form(None, alias="isAnonymous"),
    image: Optional[UploadFile] = File(None),
    current_user_id: int = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    image_bytes, content_type = await _read_image(image)
    return await post_service.update_one(
        id,
        {"title": title, "topic": topic, "description": description, "is_anonymous": is_anonymous},
        image_bytes,
        content_type,
        viewer_id=current_user_id,
    )


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_post_owner)],
    summary="Delete a post with its comments and likes",
)
async def delete_post(id: int, post_service: PostService = Depends(get_post_service)):
    return await post_service.delete_one(id)


@router.post("/{id}/like", response_model=DataResponse[PostResponse], summary="Like a post")
async def like_post(
    id: int,
    current_user_id: int = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    return await post_service.like_one(id, current_user_id)


@router.delete("/{id}/like", response_model=DataResponse[PostResponse], summary="Unlike a post")
async def unlike_post(
    id: int,
    current_user_id: int = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    return await post_service.remove_like_one(id, current_user_id)


@router.get(
    "/{id}/likes",
    response_model=PaginatedResponse[UserSummary],
    summary="Users who liked a post",
)
async def get_likes(
    id: int,
    username: Optional[str] = Query(None, description="Username substring"),
    page: PageOptions = Depends(get_page_options),
    _: int = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    return await post_service.get_likes(id, clean_filter(username), page)


@router.get("/{id}/comments", response_model=List[CommentResponse], summary="Comments of a post")
async def get_post_comments(
    id: int,
    _: int = Depends(get_current_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    return await comment_service.find_all(id)
