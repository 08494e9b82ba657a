"""Database models for the key service."""

from .api_keys import ApiKey
from .base import Base

__all__ = [
    "Base",
    "ApiKey",
]
