"""
Email API endpoints: confirmation and password reset flows.

These routes are public; the tokens in the emailed links are the proof.
"""

from fastapi import APIRouter, Depends

from socialnet.dependencies import get_email_service
from socialnet.schemas.common import MessageResponse
from socialnet.schemas.email import ConfirmEmailRequest, EmailRequest, ResetPasswordRequest
from socialnet.services.email_service import EmailService

router = APIRouter(prefix="/email", tags=["Email"])


@router.post("/confirm-email", response_model=MessageResponse, summary="Send the confirmation link")
async def send_confirmation_email(
    request: EmailRequest, email_service: EmailService = Depends(get_email_service)
):
    return await email_service.send_confirmation_email(request.email)


@router.post("/confirm-email/verify", response_model=MessageResponse, summary="Confirm an email")
async def confirm_email(
    request: ConfirmEmailRequest, email_service: EmailService = Depends(get_email_service)
):
    return await email_service.confirm_email(request.token)


@router.post("/reset-password", response_model=MessageResponse, summary="Send the reset link")
async def send_reset_password_email(
    request: EmailRequest, email_service: EmailService = Depends(get_email_service)
):
    return await email_service.send_reset_password_email(request.email)


@router.post(
    "/reset-password/confirm", response_model=MessageResponse, summary="Set a new password"
)
async def reset_password(
    request: ResetPasswordRequest, email_service: EmailService = Depends(get_email_service)
):
    return await email_service.reset_password(request.token, request.password)
