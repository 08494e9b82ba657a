from fastapi import APIRouter, status

from src.api.auth.schemas import (
    CurrentKeyResponse,
    SessionResponse,
    SessionState,
    VerifiedKey,
    VerifyKeyRequest,
    VerifyKeyResponse,
)
from src.api.core.dependencies import (
    ApiKeyAuthDep,
    AuthGateDep,
    OptionalApiKeyAuthDep,
)
from src.api.core.exceptions.base import KeyGateException
from src.api.core.messages import APIResponse, MessageCode
from src.api.keys.schemas import KeyModel
from src.modules.auth.gate import Denied

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/verify", response_model=VerifyKeyResponse)
async def verify_key(body: VerifyKeyRequest, gate: AuthGateDep) -> VerifyKeyResponse:
    """Check a key (or the root secret) and report the role it grants."""
    decision = await gate.authorize(body.key)
    if isinstance(decision, Denied):
        if decision.status_code != status.HTTP_403_FORBIDDEN:
            raise KeyGateException(
                MessageCode.INVALID_API_KEY,
                status.HTTP_401_UNAUTHORIZED,
                {"description": "Invalid or expired API key"},
            )
        role = "user"
    else:
        role = "admin"

    return APIResponse.success(
        message_code=MessageCode.API_KEY_VERIFIED, data=VerifiedKey(role=role)
    )


@router.get("/me", response_model=CurrentKeyResponse)
async def current_key(api_key: ApiKeyAuthDep) -> CurrentKeyResponse:
    """Describe the key used to authenticate this request."""
    return APIResponse.success(data=KeyModel.model_validate(api_key))


@router.get("/session", response_model=SessionResponse)
async def session_state(api_key: OptionalApiKeyAuthDep) -> SessionResponse:
    """Report whether the request carries a valid key; never rejects."""
    return APIResponse.success(
        data=SessionState(
            authenticated=api_key is not None,
            key=KeyModel.model_validate(api_key) if api_key else None,
        )
    )
