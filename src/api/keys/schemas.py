"""Keys API schemas."""

from typing import Any, Literal

from src.api.core.messages import APIResponse
from src.api.core.schemas import CamelModel


class KeyModel(CamelModel):
    """Sanitized key record: never carries the digest or the plaintext."""

    id: str
    name: str
    prefix: str
    permissions: list[str]
    created_at: int
    last_used_at: int | None = None
    expires_at: int | None = None
    revoked: bool


class KeyWithSecret(CamelModel):
    """Creation result; the only response that contains the plaintext key."""

    key: str
    id: str
    name: str
    prefix: str
    permissions: list[str]
    created_at: int
    expires_at: int | None = None


class KeyCreateRequest(CamelModel):
    """Field values are validated by the key store, not by pydantic."""

    name: Any = None
    permissions: Any = None
    expires_at: Any = None


class KeyUpdateRequest(CamelModel):
    name: Any = None


class KeyUpdated(CamelModel):
    id: str
    name: str
    updated: bool = True


class KeyDeleted(CamelModel):
    id: str
    action: Literal["revoked", "deleted"]


KeyCreateResponse = APIResponse[KeyWithSecret]
KeyResponse = APIResponse[KeyModel]
KeyListResponse = APIResponse[list[KeyModel]]
KeyUpdateResponse = APIResponse[KeyUpdated]
KeyDeleteResponse = APIResponse[KeyDeleted]
