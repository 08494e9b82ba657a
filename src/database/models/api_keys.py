"""API Key model."""

import uuid

from sqlalchemy import JSON, BigInteger, Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.api.core.constants import ADMIN_PERMISSIONS, API_KEY_NAME_MAX_LENGTH
from src.utils import timestamps
from .base import Base


class ApiKey(Base):
    __tablename__ = "api_keys"
    __table_args__ = (
        Index("idx_api_keys_hash", "key_hash", unique=True),
        Index("idx_api_keys_revoked", "revoked"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(API_KEY_NAME_MAX_LENGTH), nullable=False)
    # First characters of the plaintext for display, e.g. "sk-3f9a1b2..."
    prefix: Mapped[str] = mapped_column(String(16), nullable=False)
    # SHA-256 of the full plaintext; the only persisted form of the secret
    key_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    permissions: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=lambda: ["*"]
    )
    created_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=timestamps.now_ms
    )
    last_used_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    expires_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def is_expired(self, now: int) -> bool:
        return self.expires_at is not None and now > self.expires_at

    @property
    def is_admin(self) -> bool:
        return any(scope in ADMIN_PERMISSIONS for scope in self.permissions)

    def __repr__(self) -> str:
        return f"<ApiKey id={self.id} prefix={self.prefix} revoked={self.revoked}>"
