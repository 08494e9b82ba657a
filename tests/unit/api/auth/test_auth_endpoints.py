"""Auth endpoint tests: verify, me and session."""

import pytest
from fastapi import status
from httpx import AsyncClient

from src.api.core.messages import MessageCode
from src.utils.hashing import SecretCodec
from tests.utils.assertions import assert_error_response, assert_success_response


@pytest.mark.asyncio
async def test_verify_root_secret_is_admin(public_client: AsyncClient, root_secret):
    response = await public_client.post("/v1/auth/verify", json={"key": root_secret})

    assert_success_response(
        response,
        MessageCode.API_KEY_VERIFIED,
        data_assertions={"valid": True, "role": "admin"},
    )


@pytest.mark.asyncio
async def test_verify_full_access_key_is_admin(public_client: AsyncClient, test_api_key):
    _, plain_key = test_api_key

    response = await public_client.post("/v1/auth/verify", json={"key": plain_key})

    assert_success_response(
        response, MessageCode.API_KEY_VERIFIED, data_assertions={"role": "admin"}
    )


@pytest.mark.asyncio
async def test_verify_scoped_key_is_user(public_client: AsyncClient, read_only_key):
    _, plain_key = read_only_key

    response = await public_client.post("/v1/auth/verify", json={"key": plain_key})

    assert_success_response(
        response,
        MessageCode.API_KEY_VERIFIED,
        data_assertions={"valid": True, "role": "user"},
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["wrong-secret", "sk-unknown"])
async def test_verify_rejects_unknown(public_client: AsyncClient, key):
    response = await public_client.post("/v1/auth/verify", json={"key": key})

    assert_error_response(
        response, MessageCode.INVALID_API_KEY, status.HTTP_401_UNAUTHORIZED
    )


@pytest.mark.asyncio
async def test_verify_requires_key_field(public_client: AsyncClient):
    response = await public_client.post("/v1/auth/verify", json={})

    assert_error_response(response, MessageCode.INVALID_INPUT, 422)


@pytest.mark.asyncio
async def test_me_returns_sanitized_record(api_key_client: AsyncClient, test_api_key):
    api_key, plain_key = test_api_key

    response = await api_key_client.get("/v1/auth/me")

    data = assert_success_response(
        response, data_assertions={"id": api_key.id, "prefix": api_key.prefix}
    )
    assert data["lastUsedAt"] is not None
    assert plain_key not in response.text
    assert api_key.key_hash not in response.text


@pytest.mark.asyncio
async def test_me_requires_header(public_client: AsyncClient):
    response = await public_client.get("/v1/auth/me")

    assert_error_response(
        response, MessageCode.AUTH_REQUIRED, status.HTTP_401_UNAUTHORIZED
    )


@pytest.mark.asyncio
async def test_me_rejects_malformed_header(public_client: AsyncClient):
    response = await public_client.get(
        "/v1/auth/me", headers={"Authorization": "Token abc"}
    )

    assert_error_response(
        response, MessageCode.INVALID_TOKEN, status.HTTP_401_UNAUTHORIZED
    )


@pytest.mark.asyncio
async def test_me_rejects_root_secret(admin_client: AsyncClient):
    response = await admin_client.get("/v1/auth/me")

    assert_error_response(
        response, MessageCode.INVALID_API_KEY, status.HTTP_401_UNAUTHORIZED
    )


@pytest.mark.asyncio
async def test_me_rejects_expired_key(client_factory, db_session, api_key_factory):
    _, plain_key = await api_key_factory.create_with_secret(
        db_session, name="Expired", expires_at=1
    )

    async with client_factory(plain_key) as client:
        response = await client.get("/v1/auth/me")

    assert_error_response(
        response, MessageCode.INVALID_API_KEY, status.HTTP_401_UNAUTHORIZED
    )


@pytest.mark.asyncio
async def test_session_without_key(public_client: AsyncClient):
    response = await public_client.get("/v1/auth/session")

    assert_success_response(
        response, data_assertions={"authenticated": False, "key": None}
    )


@pytest.mark.asyncio
async def test_session_with_invalid_key_does_not_reject(client_factory):
    async with client_factory(SecretCodec.generate()) as client:
        response = await client.get("/v1/auth/session")

    assert_success_response(response, data_assertions={"authenticated": False})


@pytest.mark.asyncio
async def test_session_with_valid_key(api_key_client: AsyncClient, test_api_key):
    api_key, _ = test_api_key

    response = await api_key_client.get("/v1/auth/session")

    data = assert_success_response(response, data_assertions={"authenticated": True})
    assert data["key"]["id"] == api_key.id
