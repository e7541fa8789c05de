"""Fernet field encryption for self-reported data at rest.

Symptom checklists, free-text memory notes, prompts and model outputs are
encrypted before they are written to SQLite. Numeric scenario fields and
computed vector values stay in plain columns so they can be aggregated.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


class FieldEncryptor:
    """Encrypts JSON-serializable values into Fernet tokens and back.

    Usage::

        encryptor = FieldEncryptor(key="...")
        token = encryptor.encrypt({"cramps": 1, "anxiety": 0})
        encryptor.decrypt(token)  # {"cramps": 1, "anxiety": 0}
    """

    def __init__(self, key: str) -> None:
        """Initialize with a Fernet key.

        Raises:
            EncryptionError: If the key is empty or invalid.
        """
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.strip().encode())
        except ValueError as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, data: Any) -> str:
        """Serialize ``data`` as JSON and encrypt it. None becomes ``""``."""
        if data is None:
            return ""
        try:
            plaintext = json.dumps(data, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Encryption failed: {exc}") from exc
        return self._fernet.encrypt(plaintext).decode("utf-8")

    def decrypt(self, token: str | None) -> Any:
        """Decrypt a token produced by encrypt(). ``""``/None become None.

        Raises:
            EncryptionError: If the token is invalid or the key is wrong.
        """
        if not token:
            return None
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        try:
            return json.loads(plaintext)
        except ValueError as exc:
            raise EncryptionError(f"Decryption failed: {exc}") from exc

    @staticmethod
    def generate_key() -> str:
        """Generate a new URL-safe base64 Fernet key."""
        return Fernet.generate_key().decode("utf-8")
