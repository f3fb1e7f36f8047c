"""
Notification API endpoints. Every notification is visible to its recipient only.
"""

from fastapi import APIRouter, Depends, Query, status

from socialnet.core.permissions import require_notification_recipient
from socialnet.core.security import get_current_user_id
from socialnet.dependencies import get_notification_service, get_page_options
from socialnet.schemas.common import DataResponse, MessageResponse, PageOptions, PaginatedResponse
from socialnet.schemas.notification import (
    MarkAllReadResponse,
    NotificationCreateRequest,
    NotificationResponse,
    NotificationUpdateRequest,
)
from socialnet.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=PaginatedResponse[NotificationResponse], summary="Your inbox")
async def list_notifications(
    unread: bool = Query(False, description="Only unread notifications"),
    page: PageOptions = Depends(get_page_options),
    current_user_id: int = Depends(get_current_user_id),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return await notification_service.find_all(current_user_id, page, unread_only=unread)


@router.post(
    "",
    response_model=DataResponse[NotificationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Notify another user",
)
async def create_notification(
    request: NotificationCreateRequest,
    current_user_id: int = Depends(get_current_user_id),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return await notification_service.create_one(
        sender_id=current_user_id,
        recipient_id=request.recipient_id,
        note=request.note,
        post_id=request.post_id,
        comment_id=request.comment_id,
    )


@router.put("/read-all", response_model=MarkAllReadResponse, summary="Mark your inbox as read")
async def mark_all_read(
    current_user_id: int = Depends(get_current_user_id),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return await notification_service.mark_all_read(current_user_id)


@router.get(
    "/{id}",
    response_model=NotificationResponse,
    dependencies=[Depends(require_notification_recipient)],
)
async def get_notification(
    id: int, notification_service: NotificationService = Depends(get_notification_service)
):
    return await notification_service.find_by_id(id)


@router.put(
    "/{id}",
    response_model=DataResponse[NotificationResponse],
    dependencies=[Depends(require_notification_recipient)],
    summary="Mark a notification read or unread",
)
async def update_notification(
    id: int,
    request: NotificationUpdateRequest,
    notification_service: NotificationService = Depends(get_notification_service),
):
    return await notification_service.mark_read(id, request.has_read)


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_notification_recipient)],
)
async def delete_notification(
    id: int, notification_service: NotificationService = Depends(get_notification_service)
):
    return await notification_service.delete_one(id)
