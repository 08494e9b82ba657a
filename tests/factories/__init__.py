"""Test factories for key service models."""

from .base import AsyncSQLAlchemyModelFactory
from .api_keys import ApiKeyFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "ApiKeyFactory",
]
