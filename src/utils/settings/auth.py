from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.logger import get_logger

logger = get_logger(__name__)


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Root secret for the admin surface. Empty disables the root path so only
    # keys carrying an admin scope can reach it.
    ADMIN_API_KEY: SecretStr = SecretStr("")

    @property
    def root_secret(self) -> str | None:
        value = self.ADMIN_API_KEY.get_secret_value()
        return value or None
