"""Fernet-based field encryption for profile and advice records at rest.

Profiles and cached advice are encrypted before they reach SQLite. Scores
and try topics stay in clear so history queries need no decryption.
Older keys may be kept for reading while new writes use the primary key.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from cryptography.fernet import Fernet, InvalidToken, MultiFernet

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


def _fernet(key: str) -> Fernet:
    if not key or not key.strip():
        raise EncryptionError("Encryption key must not be empty")
    try:
        return Fernet(key.strip().encode("utf-8"))
    except (ValueError, TypeError) as exc:
        raise EncryptionError(f"Invalid encryption key: {exc}") from exc


class FieldEncryptor:
    """Encrypts JSON-serializable values to Fernet tokens and back.

    Usage::

        encryptor = FieldEncryptor(FieldEncryptor.generate_key())
        token = encryptor.encrypt({"nickname": "Aki"})
        encryptor.decrypt(token)  # {"nickname": "Aki"}

    Args:
        key: Primary Fernet key, used for all new tokens.
        previous_keys: Retired keys still accepted for decryption.
    """

    def __init__(self, key: str, previous_keys: Iterable[str] = ()) -> None:
        keys = [_fernet(key)] + [_fernet(k) for k in previous_keys]
        self._fernet = MultiFernet(keys)

    def encrypt(self, data: Any) -> str:
        """Encrypt a JSON-serializable value; ``None`` encrypts to ``""``.

        Raises:
            EncryptionError: If the value is not JSON-serializable.
        """
        if data is None:
            return ""
        try:
            plaintext = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Encryption failed: {exc}") from exc
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, token: str) -> Any:
        """Decrypt a token produced by ``encrypt``; ``""`` decrypts to ``None``.

        Raises:
            EncryptionError: If the token is invalid or no key matches.
        """
        if not token:
            return None
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        return json.loads(plaintext)

    def rotate(self, token: str) -> str:
        """Re-encrypt ``token`` under the primary key."""
        if not token:
            return ""
        try:
            return self._fernet.rotate(token.encode("utf-8")).decode("utf-8")
        except InvalidToken as exc:
            raise EncryptionError("Rotation failed: invalid token or wrong key") from exc

    @staticmethod
    def generate_key() -> str:
        """Generate a new URL-safe base64 Fernet key."""
        return Fernet.generate_key().decode("utf-8")
