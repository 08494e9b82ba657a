from fastapi import APIRouter, Depends, Query, status

from src.api.core.dependencies import AdminAuthDep, ApiKeyStoreDep, require_admin
from src.api.core.exceptions.base import KeyGateException
from src.api.core.messages import APIResponse, MessageCode
from src.api.keys.schemas import (
    KeyCreateRequest,
    KeyCreateResponse,
    KeyDeleted,
    KeyDeleteResponse,
    KeyListResponse,
    KeyModel,
    KeyResponse,
    KeyUpdated,
    KeyUpdateRequest,
    KeyUpdateResponse,
    KeyWithSecret,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/keys", tags=["keys"], dependencies=[Depends(require_admin)]
)


def _not_found(key_id: str) -> KeyGateException:
    return KeyGateException(
        MessageCode.API_KEY_NOT_FOUND,
        status.HTTP_404_NOT_FOUND,
        {"description": f"API key {key_id} not found"},
    )


@router.post(
    "", response_model=KeyCreateResponse, status_code=status.HTTP_201_CREATED
)
async def create_key(
    key_data: KeyCreateRequest,
    store: ApiKeyStoreDep,
    admin: AdminAuthDep,
) -> KeyCreateResponse:
    """Create a new API key. The full key is only ever returned here."""
    plain_key, api_key = await store.create(
        name=key_data.name,
        permissions=key_data.permissions,
        expires_at=key_data.expires_at,
    )
    logger.info("API key issued", key_id=api_key.id, issued_via=admin.kind)
    key_with_secret = KeyWithSecret(
        key=plain_key,
        id=api_key.id,
        name=api_key.name,
        prefix=api_key.prefix,
        permissions=api_key.permissions,
        created_at=api_key.created_at,
        expires_at=api_key.expires_at,
    )
    return APIResponse.success(
        message_code=MessageCode.API_KEY_CREATED, data=key_with_secret
    )


@router.get("", response_model=KeyListResponse)
async def list_keys(
    store: ApiKeyStoreDep,
    include_revoked: bool = Query(False, alias="includeRevoked"),
) -> KeyListResponse:
    """List API keys, newest first."""
    keys = await store.list_api_keys(include_revoked=include_revoked)
    return APIResponse.success(data=[KeyModel.model_validate(key) for key in keys])


@router.get("/{key_id}", response_model=KeyResponse)
async def get_key(key_id: str, store: ApiKeyStoreDep) -> KeyResponse:
    """Get a single API key."""
    api_key = await store.get_by_id(key_id)
    if api_key is None:
        raise _not_found(key_id)
    return APIResponse.success(data=KeyModel.model_validate(api_key))


@router.put("/{key_id}", response_model=KeyUpdateResponse)
async def update_key(
    key_id: str,
    key_data: KeyUpdateRequest,
    store: ApiKeyStoreDep,
) -> KeyUpdateResponse:
    """Rename an API key."""
    renamed = await store.update_name(key_id, key_data.name)
    api_key = await store.get_by_id(key_id) if renamed else None
    if api_key is None:
        raise _not_found(key_id)
    return APIResponse.success(
        message_code=MessageCode.API_KEY_UPDATED,
        data=KeyUpdated(id=key_id, name=api_key.name),
    )


@router.delete("/{key_id}", response_model=KeyDeleteResponse)
async def delete_key(
    key_id: str,
    store: ApiKeyStoreDep,
    permanent: bool = Query(False),
) -> KeyDeleteResponse:
    """Revoke an API key, or remove it entirely with ``?permanent=true``."""
    if await store.get_by_id(key_id) is None:
        raise _not_found(key_id)

    if permanent:
        await store.delete(key_id)
        logger.info("Permanently deleted API key", key_id=key_id)
        return APIResponse.success(
            message_code=MessageCode.API_KEY_DELETED,
            data=KeyDeleted(id=key_id, action="deleted"),
        )

    await store.revoke(key_id)
    return APIResponse.success(
        message_code=MessageCode.API_KEY_REVOKED,
        data=KeyDeleted(id=key_id, action="revoked"),
    )
