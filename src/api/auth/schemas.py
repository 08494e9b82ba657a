"""Auth API schemas."""

from typing import Literal

from src.api.core.messages import APIResponse
from src.api.core.schemas import CamelModel
from src.api.keys.schemas import KeyModel


class VerifyKeyRequest(CamelModel):
    key: str


class VerifiedKey(CamelModel):
    valid: bool = True
    role: Literal["admin", "user"]


class SessionState(CamelModel):
    authenticated: bool
    key: KeyModel | None = None


VerifyKeyResponse = APIResponse[VerifiedKey]
CurrentKeyResponse = APIResponse[KeyModel]
SessionResponse = APIResponse[SessionState]
