import hashlib
import hmac
import secrets

from src.api.core.constants import (
    API_KEY_DISPLAY_LENGTH,
    API_KEY_DISPLAY_MARKER,
    API_KEY_PREFIX,
    API_KEY_RANDOM_BYTES,
)


class SecretCodec:
    """Generation, digesting and display helpers for API key secrets."""

    @staticmethod
    def generate() -> str:
        """
        Generate a new plaintext API key.

        The key is the fixed prefix tag followed by 256 bits of CSPRNG output
        hex encoded, e.g. ``sk-3f9a...`` (67 characters in total).

        Returns:
            The plaintext key. It must only ever be shown once to the caller.
        """
        return f"{API_KEY_PREFIX}{secrets.token_hex(API_KEY_RANDOM_BYTES)}"

    @staticmethod
    def digest(plain_key: str) -> str:
        """
        Compute the lookup digest for a plaintext key.

        SHA-256 is unsalted on purpose so that the digest can be used as a
        unique lookup column; the key material itself carries the entropy.

        Args:
            plain_key: The full plaintext key

        Returns:
            The hex encoded SHA-256 digest (64 characters)
        """
        return hashlib.sha256(plain_key.encode("utf-8")).hexdigest()

    @staticmethod
    def prefix(plain_key: str) -> str:
        """Display form of a key: first characters plus a truncation marker."""
        return f"{plain_key[:API_KEY_DISPLAY_LENGTH]}{API_KEY_DISPLAY_MARKER}"

    @staticmethod
    def has_key_format(token: str | None) -> bool:
        """Cheap structural check done before any database lookup."""
        return bool(token) and token.startswith(API_KEY_PREFIX)

    @staticmethod
    def constant_time_equals(presented: str, expected: str) -> bool:
        """Compare two secrets without leaking the mismatch position."""
        return hmac.compare_digest(
            presented.encode("utf-8"), expected.encode("utf-8")
        )
