"""
Start-time token: a server-issued timestamp the client must echo back unmodified

Format: ``<ivHex>:<cipherHex>``. The timestamp (ISO-8601, UTC) is encrypted with
AES-256-GCM under a key derived from a configured secret, with a fresh random
IV per token, so two tokens for the same instant never match and any edit to
either half fails authentication.
"""
import hashlib
import logging
import os
import re
from datetime import datetime, timezone
from typing import Callable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from quizplay.config import settings

logger = logging.getLogger(__name__)

IV_LENGTH = 12  # bytes, GCM nonce
TOKEN_PATTERN = re.compile(r"^([0-9a-f]+):([0-9a-f]+)$")


class BadTokenError(ValueError):
    """Token could not be decoded back into a timestamp"""


def sha256_key(secret: str) -> bytes:
    """Default key derivation: SHA-256 of the secret (32 bytes -> AES-256)"""
    return hashlib.sha256(secret.encode("utf-8")).digest()


class StartTimeToken:
    """
    Encode/decode server timestamps into opaque tokens

    Stateless after construction; one instance is shared process-wide.
    """

    def __init__(self, key: bytes):
        if len(key) not in (16, 24, 32):
            raise ValueError("AES key must be 16, 24 or 32 bytes")
        self._aead = AESGCM(key)

    @classmethod
    def from_secret(
        cls,
        secret: str,
        derive: Callable[[str], bytes] = sha256_key
    ) -> "StartTimeToken":
        """Build a codec from a secret using a pluggable key derivation"""
        return cls(derive(secret))

    def encode(self, issued_at: datetime) -> str:
        """
        Encrypt a timestamp into a token

        Args:
            issued_at: Issue time; naive values are taken as UTC

        Returns:
            "<ivHex>:<cipherHex>"
        """
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        plaintext = issued_at.astimezone(timezone.utc).isoformat().encode("utf-8")

        iv = os.urandom(IV_LENGTH)
        ciphertext = self._aead.encrypt(iv, plaintext, None)
        return f"{iv.hex()}:{ciphertext.hex()}"

    def decode(self, token: str) -> datetime:
        """
        Decrypt a token back into its (UTC, timezone-aware) timestamp

        Raises:
            BadTokenError: malformed input, wrong IV length, failed
                authentication or an unparseable timestamp
        """
        if not isinstance(token, str):
            raise BadTokenError("token must be a string")

        match = TOKEN_PATTERN.match(token)
        if not match:
            raise BadTokenError("token is not in <ivHex>:<cipherHex> form")

        iv_hex, cipher_hex = match.groups()
        if len(iv_hex) % 2 or len(cipher_hex) % 2:
            raise BadTokenError("token contains truncated hex")

        iv = bytes.fromhex(iv_hex)
        if len(iv) != IV_LENGTH:
            raise BadTokenError(f"IV must be {IV_LENGTH} bytes, got {len(iv)}")

        try:
            plaintext = self._aead.decrypt(iv, bytes.fromhex(cipher_hex), None)
        except InvalidTag:
            raise BadTokenError("token failed authentication") from None

        try:
            issued_at = datetime.fromisoformat(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise BadTokenError(f"token payload is not a timestamp: {e}") from None

        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        return issued_at


# Global instance
start_time_token = StartTimeToken.from_secret(settings.START_TOKEN_SECRET)
