"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import bcrypt

from config.settings import config
from utils.errors import EncodingError
from utils.schemas import MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """Hash a password with bcrypt (auto-salted, work factor from config)."""
    if not isinstance(password, str) or not password:
        raise EncodingError("Cannot hash an empty password")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise EncodingError(f"Password longer than {MAX_PASSWORD_BYTES} bytes")
    try:
        salt = bcrypt.gensalt(rounds=config.bcrypt_rounds)
        return bcrypt.hashpw(password.encode(), salt).decode()
    except (ValueError, TypeError) as exc:
        raise EncodingError(f"Password hashing failed: {exc}") from exc


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            return False
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError, AttributeError):
        return False
