"""Database settings configuration."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: SecretStr = SecretStr("sqlite:///./data/api-keys.db")
    DATABASE_ECHO: bool = False

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        """Derive async database URL from sync URL."""
        url = self.DATABASE_URL.get_secret_value()
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL_ASYNC.startswith("sqlite")
