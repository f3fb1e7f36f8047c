"""
Authentication API endpoints.

This provides:
1. User registration and login
2. Token renewal
3. Password change
"""

from fastapi import APIRouter, Depends, status

from socialnet.core.security import get_current_user_id
from socialnet.dependencies import get_auth_service
from socialnet.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
)
from socialnet.schemas.common import MessageResponse
from socialnet.services.auth_service import AuthService

# Create router with tags for API documentation
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={409: {"model": MessageResponse, "description": "Username or email taken"}},
)
async def register(
    user_data: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user account.

    **Business Rules:**
    - Username and email must be unique
    - Returns an access token for immediate use
    """
    return await auth_service.register(user_data.model_dump())


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate user",
    responses={
        400: {"model": MessageResponse, "description": "Wrong password"},
        404: {"model": MessageResponse, "description": "Unknown email"},
    },
)
async def login(
    credentials: LoginRequest, auth_service: AuthService = Depends(get_auth_service)
):
    return await auth_service.login(credentials.email, credentials.password)


@router.get("/renew", response_model=AuthResponse, summary="Renew the access token")
async def renew_token(
    user_id: int = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Issue a fresh one-day token for the authenticated user."""
    return await auth_service.renew_token(user_id)


@router.put("/password", response_model=MessageResponse, summary="Change password")
async def change_password(
    request: ChangePasswordRequest,
    user_id: int = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
):
    return await auth_service.change_password(user_id, request.password)
