from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.exceptions.base import KeyGateException
from src.api.core.messages import MessageCode
from src.utils.logger import get_logger


class BaseService:
    """Base service class with database dependency injection."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = get_logger(self.__class__.__name__)

    @asynccontextmanager
    async def storage_errors(self, operation: str) -> AsyncIterator[None]:
        """Translate engine failures into an opaque internal error.

        The session is rolled back and the original error is logged with the
        operation name; callers only ever see INTERNAL_ERROR.
        """
        try:
            yield
        except SQLAlchemyError as e:
            await self.db.rollback()
            self.logger.error(
                "Storage operation failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise KeyGateException(
                MessageCode.INTERNAL_ERROR,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ) from e
