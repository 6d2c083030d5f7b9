"""
Registration service — validate, hash, persist.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from auth.password import hash_password
from database.models import User
from database.users import insert_user
from utils.errors import (
    DuplicateEmail,
    DuplicateKeyError,
    EncodingError,
    InternalError,
    ValidationError,
)
from utils.schemas import MAX_PASSWORD_BYTES, MAX_SQL_INT, Role

logger = logging.getLogger(__name__)


def _require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{name}' is required")
    return value.strip()


def _require_role(value: Any) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        allowed = ", ".join(r.value for r in Role)
        raise ValidationError(f"'role' must be one of: {allowed}; got {value!r}") from None


def _require_mobile_number(value: Any) -> int:
    if value is None or isinstance(value, bool):
        raise ValidationError("'mobileNumber' must be a number")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not text.isdigit():
            raise ValidationError(f"'mobileNumber' must be a number, got {value!r}")
        number = int(text)
    if not 0 <= number <= MAX_SQL_INT:
        raise ValidationError(f"'mobileNumber' is out of range: {number}")
    return number


async def sign_up(
    session: AsyncSession,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    mobile_number: Any,
    role: Any,
) -> User:
    """
    Register a new user and return the persisted record.

    Raises ``ValidationError`` for missing/invalid fields, ``DuplicateEmail``
    when the email is already registered, and ``InternalError`` when the
    password cannot be hashed.
    """
    user_role = _require_role(role)
    first_name = _require_text("firstName", first_name)
    last_name = _require_text("lastName", last_name)
    email = _require_text("email", email)
    if not isinstance(password, str) or not password:
        raise ValidationError("'password' is required")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"'password' must be at most {MAX_PASSWORD_BYTES} bytes")
    mobile_number = _require_mobile_number(mobile_number)

    try:
        password_hash = hash_password(password)
    except EncodingError as exc:
        logger.error("Password hashing failed for sign-up of %s: %s", email, exc)
        raise InternalError("Could not secure the password") from exc

    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash=password_hash,
        mobile_number=mobile_number,
        role=user_role,
    )
    try:
        await insert_user(session, user)
    except DuplicateKeyError as exc:
        raise DuplicateEmail(f"Email {email!r} is already registered") from exc

    logger.info("Registered user %s (%s, role=%s)", user.user_id, email, user_role.value)
    return user
