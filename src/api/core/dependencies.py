from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.constants import AUTHORIZATION_HEADER
from src.database.models import ApiKey
from src.modules.auth.gate import AdminDecision, AuthGate, Denied, parse_bearer
from src.modules.health.service import HealthService
from src.modules.keys.api_keys import ApiKeyStore
from src.utils.logger import get_client_ip, get_logger
from src.utils.settings.auth import AuthSettings

logger = get_logger(__name__)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_api_key_store(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiKeyStore:
    """Get API key store bound to the request's database session."""
    return ApiKeyStore(db)


async def get_auth_gate(
    request: Request,
    store: Annotated[ApiKeyStore, Depends(get_api_key_store)],
) -> AuthGate:
    """Get auth gate with the configured root secret."""
    auth_settings: AuthSettings = request.app.state.auth_settings
    return AuthGate(store, root_secret=auth_settings.root_secret)


async def get_health_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> HealthService:
    """Get health service with database session."""
    return HealthService(db)


async def require_api_key(
    request: Request,
    gate: Annotated[AuthGate, Depends(get_auth_gate)],
) -> ApiKey:
    """Required API key auth: attaches the key record or rejects with 401."""
    record = await gate.authenticate(
        request.headers.get(AUTHORIZATION_HEADER), client_ip=get_client_ip(request)
    )
    request.state.api_key = record
    return record


async def optional_api_key(
    request: Request,
    gate: Annotated[AuthGate, Depends(get_auth_gate)],
) -> ApiKey | None:
    """Optional API key auth: attaches the key record when one validates."""
    record = await gate.authenticate_optional(
        request.headers.get(AUTHORIZATION_HEADER)
    )
    request.state.api_key = record
    return record


async def require_admin(
    request: Request,
    gate: Annotated[AuthGate, Depends(get_auth_gate)],
) -> AdminDecision:
    """Admin auth: root secret or a key with an admin scope."""
    token = parse_bearer(request.headers.get(AUTHORIZATION_HEADER))
    decision = await gate.authorize(token)

    if isinstance(decision, Denied):
        logger.warning(
            "Unauthorized admin access attempt",
            ip_address=get_client_ip(request),
            endpoint=request.url.path,
            reason=decision.reason,
        )
        raise decision.to_exception()

    request.state.admin_via = decision.kind
    request.state.api_key = getattr(decision, "record", None)
    logger.debug("Admin access granted", via=decision.kind, endpoint=request.url.path)
    return decision


ApiKeyStoreDep = Annotated[ApiKeyStore, Depends(get_api_key_store)]
AuthGateDep = Annotated[AuthGate, Depends(get_auth_gate)]
HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]

ApiKeyAuthDep = Annotated[ApiKey, Depends(require_api_key)]
OptionalApiKeyAuthDep = Annotated[ApiKey | None, Depends(optional_api_key)]
AdminAuthDep = Annotated[AdminDecision, Depends(require_admin)]
