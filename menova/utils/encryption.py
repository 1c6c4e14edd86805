"""Column-level encryption for free-text health notes."""
import base64
import hashlib
import os
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy.types import Text, TypeDecorator


def _build_cipher() -> Fernet:
    secret = os.getenv("ENCRYPTION_SECRET", "menova-dev-secret-change-me").encode("utf-8")
    # Fernet wants a urlsafe-base64 32-byte key
    key = base64.urlsafe_b64encode(hashlib.sha256(secret).digest())
    return Fernet(key)


_CIPHER = _build_cipher()


def encrypt_text(value: str) -> str:
    return _CIPHER.encrypt(value.encode("utf-8")).decode("utf-8")


def decrypt_text(token: str) -> Any:
    """Return the plaintext, or None when the token was written under another key."""
    try:
        return _CIPHER.decrypt(token.encode("utf-8")).decode("utf-8")
    except InvalidToken:
        return None


class EncryptedText(TypeDecorator):
    """Text column stored as a Fernet token."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> Any:  # type: ignore[override]
        if value is None:
            return None
        return encrypt_text(value if isinstance(value, str) else str(value))

    def process_result_value(self, value: Any, dialect) -> Any:  # type: ignore[override]
        if value is None:
            return None
        return decrypt_text(value)
