"""
Authentication schemas for request/response validation.

This provides:
1. Registration and login request validation
2. Token responses carrying the user view
3. Password change requests
"""

from pydantic import EmailStr, Field, field_validator

from socialnet.schemas.common import CamelModel
from socialnet.schemas.user import UserResponse


class RegisterRequest(CamelModel):
    """Schema for user registration requests."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(
        ..., min_length=6, max_length=100, description="User's password (min 6 characters)"
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        """Usernames are single words"""
        if any(c.isspace() for c in v):
            raise ValueError("Username cannot contain spaces")
        return v

    model_config = CamelModel.model_config | {
        "json_schema_extra": {
            "example": {
                "firstName": "Ada",
                "lastName": "Lovelace",
                "username": "ada",
                "email": "ada@example.com",
                "password": "secret123",
            }
        }
    }


class LoginRequest(CamelModel):
    """Schema for user login requests."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class ChangePasswordRequest(CamelModel):
    password: str = Field(..., min_length=6, max_length=100)


class AuthResponse(CamelModel):
    """Token plus the authenticated user."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
