"""
Base Service - what every SocialNet service shares.

A service owns one request-scoped AsyncSession. Each public operation
wraps its body so that:
1. The session is rolled back on any failure
2. AppExceptions (NotFound, Conflict, ...) reach the API unchanged
3. Everything else is logged and reported as a bare ServiceError
"""

import logging
from typing import NoReturn

from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.exceptions import AppException, ServiceError


class BaseService:
    """
    Base service class holding the session and the module's logger.
    """

    def __init__(self, db: AsyncSession):
        """
        Args:
            db: Async database session for the current request
        """
        self.db = db
        self.logger = logging.getLogger(type(self).__module__)

    async def _handle_service_error(self, error: Exception, operation: str) -> NoReturn:
        """
        Roll back, then re-raise `error` or its generic replacement.

        Args:
            error: The exception that occurred
            operation: What was being done, e.g. "create post"
        """
        try:
            await self.db.rollback()
        except Exception as rollback_error:
            self.logger.error(f"Failed to rollback transaction: {rollback_error}")

        if isinstance(error, AppException):
            raise error

        self.logger.exception(f"Unexpected error while trying to {operation}: {error}")
        raise ServiceError(f"Failed to {operation}") from error

    def _log_operation(self, operation: str, **kwargs) -> None:
        context = " ".join(f"{key}={value}" for key, value in kwargs.items())
        self.logger.info(f"{type(self).__name__}.{operation} {context}".rstrip())
