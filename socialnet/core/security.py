"""
Security utilities for authentication.

This provides:
1. JWT token creation and validation
2. Password hashing and verification
3. The bearer-token FastAPI dependency
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from socialnet.config import settings
from socialnet.core.exceptions import AuthenticationError

ACCESS_TOKEN = "access_token"
EMAIL_CONFIRMATION_TOKEN = "email_confirmation"
PASSWORD_RESET_TOKEN = "password_reset"

# JWT token scheme; missing headers are reported as 401 by us, not 403 by FastAPI
security = HTTPBearer(auto_error=False)


class SecurityManager:
    """
    Centralized security management for the application.

    Tokens carry only the user id as identity, plus a `type` claim so that
    an email-confirmation or reset token cannot be used as an access token.
    """

    def __init__(
        self,
        secret_key: str = settings.secret_key,
        algorithm: str = settings.algorithm,
        access_token_expire_minutes: int = settings.access_token_expire_minutes,
        bcrypt_rounds: int = settings.bcrypt_rounds,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes
        self.pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds
        )

    def create_password_hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Previously hashed password

        Returns:
            True if password matches, False otherwise
        """
        return self.pwd_context.verify(plain_password, hashed_password)

    def create_access_token(
        self,
        user_id: int,
        expires_delta: Optional[timedelta] = None,
        token_type: str = ACCESS_TOKEN,
    ) -> str:
        """
        Create a signed JWT bound to a user id.

        Args:
            user_id: The user the token identifies
            expires_delta: Optional custom expiration time
            token_type: Purpose of the token

        Returns:
            Encoded JWT token string
        """
        if expires_delta:
            expire = datetime.utcnow() + expires_delta
        else:
            expire = datetime.utcnow() + timedelta(minutes=self.access_token_expire_minutes)

        to_encode = {
            "user_id": user_id,
            "exp": expire,
            "iat": datetime.utcnow(),
            "type": token_type,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT token.

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise AuthenticationError(f"Could not validate token: {str(e)}")

    def decode_user_id(self, token: str, expected_type: str = ACCESS_TOKEN) -> int:
        """
        Extract the user id from a token of the expected type.

        Raises:
            AuthenticationError: If the token is invalid, expired or of another type
        """
        payload = self.decode_token(token)

        if payload.get("type") != expected_type:
            raise AuthenticationError("Invalid token type")

        user_id = payload.get("user_id")
        if not isinstance(user_id, int):
            raise AuthenticationError("Token does not contain valid user information")

        return user_id


# Global security manager instance
security_manager = SecurityManager()


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """
    FastAPI dependency resolving the bearer token to a user id.

    @router.get("/protected")
    async def protected_route(user_id: int = Depends(get_current_user_id)):
        return {"user_id": user_id}
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided")

    return security_manager.decode_user_id(credentials.credentials)
