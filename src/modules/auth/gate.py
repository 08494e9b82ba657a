"""Bearer token authorization for ordinary and admin requests."""

from dataclasses import dataclass
from typing import Literal

from fastapi import status

from src.api.core.constants import AUTHORIZATION_SCHEME
from src.api.core.exceptions.base import KeyGateException
from src.api.core.messages import MessageCode
from src.database.models import ApiKey
from src.modules.keys.api_keys import ApiKeyStore
from src.utils.hashing import SecretCodec
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RootAdmin:
    """Authorized through the operator-provisioned root secret."""

    kind: Literal["root"] = "root"


@dataclass(frozen=True)
class ElevatedKey:
    """Authorized through a stored key carrying an admin scope."""

    record: ApiKey
    kind: Literal["key"] = "key"


@dataclass(frozen=True)
class Denied:
    reason: str
    message_code: MessageCode = MessageCode.INVALID_API_KEY
    status_code: int = status.HTTP_401_UNAUTHORIZED
    kind: Literal["denied"] = "denied"

    def to_exception(self) -> KeyGateException:
        return KeyGateException(
            self.message_code, self.status_code, {"description": self.reason}
        )


AdminDecision = RootAdmin | ElevatedKey | Denied


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise KeyGateException(
            MessageCode.AUTH_REQUIRED,
            status.HTTP_401_UNAUTHORIZED,
            {
                "description": "Missing Authorization header. Provide: Authorization: Bearer <api-key>"
            },
            headers={"WWW-Authenticate": AUTHORIZATION_SCHEME},
        )

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != AUTHORIZATION_SCHEME or not parts[1]:
        raise KeyGateException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Authorization header must be 'Bearer <api-key>'"},
            headers={"WWW-Authenticate": AUTHORIZATION_SCHEME},
        )
    return parts[1]


class AuthGate:
    """Resolves bearer tokens to key records and admin decisions."""

    def __init__(self, store: ApiKeyStore, root_secret: str | None = None):
        self.store = store
        self.root_secret = root_secret

    async def authenticate(
        self, authorization: str | None, client_ip: str | None = None
    ) -> ApiKey:
        """Required mode: every failure is a 401."""
        token = parse_bearer(authorization)

        if not SecretCodec.has_key_format(token):
            raise KeyGateException(
                MessageCode.INVALID_API_KEY,
                status.HTTP_401_UNAUTHORIZED,
                {"description": "Invalid API key format"},
                headers={"WWW-Authenticate": AUTHORIZATION_SCHEME},
            )

        record = await self.store.validate(token)
        if record is None:
            logger.warning(
                "Invalid or expired API key attempt",
                prefix=SecretCodec.prefix(token),
                ip_address=client_ip,
            )
            raise KeyGateException(
                MessageCode.INVALID_API_KEY,
                status.HTTP_401_UNAUTHORIZED,
                {"description": "Invalid or expired API key"},
                headers={"WWW-Authenticate": AUTHORIZATION_SCHEME},
            )
        return record

    async def authenticate_optional(self, authorization: str | None) -> ApiKey | None:
        """Optional mode: absent or invalid credentials resolve to None."""
        if not authorization:
            return None
        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0] != AUTHORIZATION_SCHEME:
            return None
        if not SecretCodec.has_key_format(parts[1]):
            return None
        return await self.store.validate(parts[1])

    async def authorize(self, token: str) -> AdminDecision:
        """Admin decision for a bearer token.

        The root secret is checked first and never touches the store. Keys
        are accepted when their scopes contain "*" or "admin:*".
        """
        if self.root_secret and SecretCodec.constant_time_equals(
            token, self.root_secret
        ):
            return RootAdmin()

        if not SecretCodec.has_key_format(token):
            return Denied("Invalid admin credentials")

        record = await self.store.validate(token)
        if record is None:
            return Denied("Invalid admin credentials")
        if not record.is_admin:
            return Denied(
                "API key lacks admin permission",
                message_code=MessageCode.FORBIDDEN,
                status_code=status.HTTP_403_FORBIDDEN,
            )
        return ElevatedKey(record)
