from pydantic import EmailStr, Field

from socialnet.schemas.common import CamelModel


class EmailRequest(CamelModel):
    """Recipient of a confirmation or reset email."""

    email: EmailStr


class ConfirmEmailRequest(CamelModel):
    token: str = Field(..., min_length=1)


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=100)
