"""
Comment API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from socialnet.core.permissions import (
    require_comment_owner,
    require_comment_owner_or_post_owner,
)
from socialnet.core.security import get_current_user_id
from socialnet.dependencies import get_comment_service
from socialnet.schemas.comment import (
    CommentCreateRequest,
    CommentResponse,
    CommentUpdateRequest,
)
from socialnet.schemas.common import DataResponse, MessageResponse
from socialnet.services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("", response_model=List[CommentResponse], summary="List comments")
async def list_comments(
    post_id: Optional[int] = Query(None, alias="postId"),
    _: int = Depends(get_current_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    return await comment_service.find_all(post_id)


@router.get("/{id}", response_model=CommentResponse, summary="Get a comment")
async def get_comment(
    id: int,
    _: int = Depends(get_current_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    return await comment_service.find_by_id(id)


@router.post(
    "",
    response_model=DataResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
)
async def create_comment(
    comment: CommentCreateRequest,
    current_user_id: int = Depends(get_current_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    return await comment_service.create_one(current_user_id, comment.post_id, comment.content)


@router.put(
    "/{id}",
    response_model=DataResponse[CommentResponse],
    dependencies=[Depends(require_comment_owner)],
    summary="Edit a comment",
)
async def update_comment(
    id: int,
    comment: CommentUpdateRequest,
    comment_service: CommentService = Depends(get_comment_service),
):
    return await comment_service.update_one(id, comment.content)


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_comment_owner_or_post_owner)],
    summary="Delete a comment",
)
async def delete_comment(id: int, comment_service: CommentService = Depends(get_comment_service)):
    """The comment author, the post author and admins may delete a comment."""
    return await comment_service.delete_one(id)
