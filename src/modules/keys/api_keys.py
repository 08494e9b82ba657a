"""API key store: the only component that reads or writes the api_keys table."""

from collections.abc import Iterable
from contextlib import suppress

from fastapi import status
from sqlalchemy import bindparam, delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.api.core.constants import (
    API_KEY_NAME_MAX_LENGTH,
    DEFAULT_PERMISSIONS,
    MAX_TIMESTAMP_MS,
)
from src.api.core.exceptions.base import KeyGateException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import ApiKey
from src.utils import timestamps
from src.utils.hashing import SecretCodec


def _validation_error(description: str) -> KeyGateException:
    return KeyGateException(
        MessageCode.VALIDATION_ERROR,
        status.HTTP_400_BAD_REQUEST,
        {"description": description},
    )


def clean_name(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        raise _validation_error("Name is required and must be a non-empty string")
    name = name.strip()
    if len(name) > API_KEY_NAME_MAX_LENGTH:
        raise _validation_error(
            f"Name must be {API_KEY_NAME_MAX_LENGTH} characters or less"
        )
    return name


def clean_permissions(permissions: object) -> list[str]:
    if permissions is None:
        return list(DEFAULT_PERMISSIONS)
    if isinstance(permissions, (str, bytes)) or not isinstance(
        permissions, (list, tuple, set, frozenset)
    ):
        raise _validation_error("Permissions must be an array of strings")

    cleaned: list[str] = []
    for scope in permissions:
        if not isinstance(scope, str) or not scope.strip():
            raise _validation_error("Permissions must be non-empty strings")
        scope = scope.strip()
        if scope not in cleaned:
            cleaned.append(scope)

    if not cleaned:
        raise _validation_error("Permissions must contain at least one scope")
    return cleaned


def check_expiry(expires_at: object, now: int) -> int | None:
    if expires_at is None:
        return None
    if (
        isinstance(expires_at, bool)
        or not isinstance(expires_at, int)
        or not now < expires_at <= MAX_TIMESTAMP_MS
    ):
        raise _validation_error(
            "expiresAt must be a future Unix timestamp in milliseconds"
        )
    return expires_at


class ApiKeyStore(BaseService):
    """Persisted API key records.

    Statements are built once with bound parameters and reused for every
    call; the store keeps no other state than the session it was given.
    Lookups populate existing identity-map instances so a record read after
    an UPDATE in the same session reflects the row.
    """

    _find_by_hash = (
        select(ApiKey)
        .where(ApiKey.key_hash == bindparam("key_hash"), ApiKey.revoked.is_(False))
        .execution_options(populate_existing=True)
    )
    _find_by_id = (
        select(ApiKey)
        .where(ApiKey.id == bindparam("key_id"))
        .execution_options(populate_existing=True)
    )
    _list_all = (
        select(ApiKey)
        .order_by(ApiKey.created_at.desc())
        .execution_options(populate_existing=True)
    )
    _list_active = (
        select(ApiKey)
        .where(ApiKey.revoked.is_(False))
        .order_by(ApiKey.created_at.desc())
        .execution_options(populate_existing=True)
    )
    _revoke = (
        update(ApiKey)
        .where(ApiKey.id == bindparam("key_id"), ApiKey.revoked.is_(False))
        .values(revoked=True)
        .execution_options(synchronize_session=False)
    )
    _touch_last_used = (
        update(ApiKey)
        .where(ApiKey.id == bindparam("key_id"))
        .values(last_used_at=bindparam("used_at"))
        .execution_options(synchronize_session=False)
    )
    _update_name = (
        update(ApiKey)
        .where(ApiKey.id == bindparam("key_id"))
        .values(name=bindparam("new_name"))
        .execution_options(synchronize_session=False)
    )
    _delete = (
        delete(ApiKey)
        .where(ApiKey.id == bindparam("key_id"))
        .execution_options(synchronize_session=False)
    )
    _count_active = (
        select(func.count()).select_from(ApiKey).where(ApiKey.revoked.is_(False))
    )

    async def create(
        self,
        name: str,
        permissions: Iterable[str] | None = None,
        expires_at: int | None = None,
    ) -> tuple[str, ApiKey]:
        """Issue a new key.

        Returns the plaintext key and the persisted record. The plaintext is
        not stored anywhere and cannot be retrieved again.
        """
        now = timestamps.now_ms()
        name = clean_name(name)
        scopes = clean_permissions(permissions)
        expires_at = check_expiry(expires_at, now)

        plain_key = SecretCodec.generate()
        api_key = ApiKey(
            name=name,
            prefix=SecretCodec.prefix(plain_key),
            key_hash=SecretCodec.digest(plain_key),
            permissions=scopes,
            created_at=now,
            last_used_at=None,
            expires_at=expires_at,
            revoked=False,
        )

        async with self.storage_errors("create"):
            self.db.add(api_key)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                self.logger.error("API key digest collision", prefix=api_key.prefix)
                raise KeyGateException(
                    MessageCode.API_KEY_CONFLICT, status.HTTP_409_CONFLICT
                )

        self.logger.info(
            "Created API key",
            key_id=api_key.id,
            name=name,
            prefix=api_key.prefix,
            permissions=scopes,
        )
        return plain_key, api_key

    async def validate(self, plain_key: str) -> ApiKey | None:
        """Resolve a plaintext key to its record.

        Returns None when no active row matches the digest or the key has
        expired. A successful lookup refreshes last_used_at on a best-effort
        basis.
        """
        async with self.storage_errors("validate"):
            result = await self.db.execute(
                self._find_by_hash, {"key_hash": SecretCodec.digest(plain_key)}
            )
            api_key = result.scalar_one_or_none()

        if api_key is None:
            return None

        now = timestamps.now_ms()
        if api_key.is_expired(now):
            self.logger.info("Rejected expired API key", key_id=api_key.id)
            return None

        # Detached so a failed touch rollback cannot expire the record
        self.db.expunge(api_key)
        await self._touch(api_key, now)
        return api_key

    async def _touch(self, api_key: ApiKey, now: int) -> None:
        try:
            await self.db.execute(
                self._touch_last_used, {"key_id": api_key.id, "used_at": now}
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            with suppress(SQLAlchemyError):
                await self.db.rollback()
            self.logger.warning(
                "Could not update last_used_at",
                key_id=api_key.id,
                error_type=type(e).__name__,
            )
            return
        api_key.last_used_at = now

    async def get_by_id(self, key_id: str) -> ApiKey | None:
        async with self.storage_errors("get_by_id"):
            result = await self.db.execute(self._find_by_id, {"key_id": key_id})
            return result.scalar_one_or_none()

    async def list_api_keys(self, include_revoked: bool = False) -> list[ApiKey]:
        """List keys newest first; revoked keys only when asked for."""
        stmt = self._list_all if include_revoked else self._list_active
        async with self.storage_errors("list"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def revoke(self, key_id: str) -> bool:
        """Mark a key revoked. False when unknown or already revoked."""
        async with self.storage_errors("revoke"):
            result = await self.db.execute(self._revoke, {"key_id": key_id})
            await self.db.commit()

        if result.rowcount > 0:
            self.logger.info("Revoked API key", key_id=key_id)
            return True
        return False

    async def delete(self, key_id: str) -> bool:
        """Permanently remove a key row."""
        async with self.storage_errors("delete"):
            result = await self.db.execute(self._delete, {"key_id": key_id})
            await self.db.commit()

        if result.rowcount > 0:
            self.logger.info("Deleted API key", key_id=key_id)
            return True
        return False

    async def update_name(self, key_id: str, name: str) -> bool:
        name = clean_name(name)
        async with self.storage_errors("update_name"):
            result = await self.db.execute(
                self._update_name, {"key_id": key_id, "new_name": name}
            )
            await self.db.commit()
        return result.rowcount > 0

    async def active_count(self) -> int:
        async with self.storage_errors("active_count"):
            result = await self.db.execute(self._count_active)
            return result.scalar_one()
