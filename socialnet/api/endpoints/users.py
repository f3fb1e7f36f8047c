"""
User API endpoints.

This provides:
1. User listings and profiles
2. Profile and avatar updates (self or admin)
3. Follow/unfollow and followers/following listings
4. Account deletion (admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from socialnet.core.permissions import require_admin, require_self_or_admin
from socialnet.core.security import get_current_user_id
from socialnet.dependencies import clean_filter, get_page_options, get_user_service
from socialnet.schemas.common import DataResponse, MessageResponse, PageOptions, PaginatedResponse
from socialnet.schemas.user import (
    FollowingIdsResponse,
    UserResponse,
    UserSummary,
    UserUpdateRequest,
)
from socialnet.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=PaginatedResponse[UserSummary], summary="List users")
async def list_users(
    username: Optional[str] = Query(None, description="Username substring"),
    page: PageOptions = Depends(get_page_options),
    _: int = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    """Users sorted by followers count, most followed first."""
    return await user_service.find_all(clean_filter(username), page)


@router.get(
    "/most-followed",
    response_model=Optional[UserSummary],
    summary="Current holder of the verified badge",
)
async def most_followed(
    _: int = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_user_with_most_followers()


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user")
async def get_user(
    user_id: int,
    _: int = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.find_by_id(user_id)


@router.put(
    "/{user_id}",
    response_model=DataResponse[UserResponse],
    dependencies=[Depends(require_self_or_admin)],
    summary="Update a user",
)
async def update_user(
    user_id: int,
    update_data: UserUpdateRequest,
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.update_one(user_id, update_data.model_dump(exclude_unset=True))


@router.put(
    "/{user_id}/avatar",
    response_model=DataResponse[UserResponse],
    dependencies=[Depends(require_self_or_admin)],
    summary="Replace a user's avatar",
)
async def update_avatar(
    user_id: int,
    image: UploadFile = File(...),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.update_avatar(user_id, await image.read(), image.content_type)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
    summary="Delete a user and their content",
)
async def delete_user(user_id: int, user_service: UserService = Depends(get_user_service)):
    return await user_service.delete_one(user_id)


@router.post("/{user_id}/follow", response_model=MessageResponse, summary="Follow a user")
async def follow_user(
    user_id: int,
    current_user_id: int = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.follow(user_id, current_user_id)


@router.delete("/{user_id}/follow", response_model=MessageResponse, summary="Unfollow a user")
async def unfollow_user(
    user_id: int,
    current_user_id: int = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.unfollow(user_id, current_user_id)


@router.get(
    "/{user_id}/followers",
    response_model=PaginatedResponse[UserSummary],
    summary="List a user's followers",
)
async def get_followers(
    user_id: int,
    name: Optional[str] = Query(None, description="Username or name substring"),
    page: PageOptions = Depends(get_page_options),
    _: int = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_followers(user_id, clean_filter(name), page)


@router.get(
    "/{user_id}/following",
    response_model=PaginatedResponse[UserSummary],
    summary="List the users someone follows",
)
async def get_following(
    user_id: int,
    name: Optional[str] = Query(None, description="Username or name substring"),
    page: PageOptions = Depends(get_page_options),
    _: int = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_following(user_id, clean_filter(name), page)


@router.get("/{user_id}/following-ids", response_model=FollowingIdsResponse)
async def get_following_ids(
    user_id: int,
    _: int = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_following_ids(user_id)
