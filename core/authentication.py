"""
Authentication service — email + password in, login token out.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import create_token
from auth.password import hash_password, verify_password
from database.users import find_user_by_email
from utils.errors import InternalError, InvalidCredentials, IssuanceError, UserNotFound

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    """bcrypt hash checked for unknown emails so both failures cost one verify."""
    return hash_password("no-such-user-placeholder")


async def login(session: AsyncSession, email: str, password: str) -> str:
    """
    Verify ``email``/``password`` and return a signed login token.

    Raises ``UserNotFound`` or ``InvalidCredentials``; the API reports both
    with the same status and text.
    """
    user = await find_user_by_email(session, email)

    if user is None:
        verify_password(password, _dummy_hash())
        logger.info("Login failed: unknown email")
        raise UserNotFound("User not found")

    if not verify_password(password, user.password_hash):
        logger.info("Login failed: bad password for %s", user.user_id)
        raise InvalidCredentials("You have entered an invalid username/password.")

    try:
        token = create_token(str(user.user_id))
    except IssuanceError as exc:
        logger.error("Token issuance failed for %s: %s", user.user_id, exc)
        raise InternalError("Could not issue login token") from exc

    logger.info("Login: %s", user.user_id)
    return token
