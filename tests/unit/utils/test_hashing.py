"""Tests for API key secret helpers."""

import re

from src.utils.hashing import SecretCodec


def test_generate_has_prefix_and_hex_body():
    plain_key = SecretCodec.generate()

    assert plain_key.startswith("sk-")
    assert len(plain_key) == 67
    assert re.fullmatch(r"sk-[0-9a-f]{64}", plain_key)


def test_generate_produces_unique_keys_and_digests():
    """10,000 generated keys never collide on key or digest."""
    keys = [SecretCodec.generate() for _ in range(10_000)]

    assert len(set(keys)) == len(keys)
    assert len({SecretCodec.digest(key) for key in keys}) == len(keys)


def test_digest_is_deterministic_sha256_hex():
    plain_key = "sk-" + "ab" * 32

    first = SecretCodec.digest(plain_key)
    second = SecretCodec.digest(plain_key)

    assert first == second
    assert re.fullmatch(r"[0-9a-f]{64}", first)
    assert first != SecretCodec.digest(plain_key + "0")


def test_digest_known_value():
    # sha256("abc")
    assert SecretCodec.digest("abc") == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_prefix_shows_first_ten_characters():
    plain_key = "sk-0123456789abcdef"

    assert SecretCodec.prefix(plain_key) == "sk-0123456..."


def test_has_key_format():
    assert SecretCodec.has_key_format(SecretCodec.generate()) is True
    assert SecretCodec.has_key_format("pk-abc") is False
    assert SecretCodec.has_key_format("") is False
    assert SecretCodec.has_key_format(None) is False


def test_constant_time_equals():
    assert SecretCodec.constant_time_equals("root-secret", "root-secret") is True
    assert SecretCodec.constant_time_equals("root-secret", "root-secreT") is False
    assert SecretCodec.constant_time_equals("root", "root-secret") is False
