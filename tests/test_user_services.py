"""
Tests for the registration and authentication services.
"""

import logging
import uuid
from unittest.mock import patch

import pytest

from auth.jwt import verify_token
from auth.password import verify_password
from core.authentication import login
from core.directory_query import list_users
from core.registration import sign_up
from database.users import find_user_by_email
from utils.errors import (
    AuthenticationError,
    DuplicateEmail,
    EncodingError,
    InternalError,
    InvalidCredentials,
    IssuanceError,
    UserNotFound,
    ValidationError,
)
from utils.schemas import MAX_SQL_INT, Role


def _john(**overrides):
    fields = dict(
        first_name="John",
        last_name="Doe",
        email="john@example.com",
        password="secret1",
        mobile_number=9876543210,
        role="USER",
    )
    fields.update(overrides)
    return fields


class TestSignUp:
    @pytest.mark.asyncio
    async def test_stores_hashed_password(self, session):
        user = await sign_up(session, **_john())
        await session.commit()

        assert user.role is Role.USER
        assert isinstance(user.user_id, uuid.UUID)
        assert user.password_hash != "secret1"
        assert verify_password("secret1", user.password_hash)

        stored = await find_user_by_email(session, "john@example.com")
        assert stored.user_id == user.user_id
        assert stored.mobile_number == 9876543210

    @pytest.mark.asyncio
    async def test_duplicate_email(self, session):
        await sign_up(session, **_john())
        await session.commit()

        with pytest.raises(DuplicateEmail):
            await sign_up(session, **_john(first_name="Jane"))

        page = await list_users(session, {"searchtext": "john@example.com"})
        assert page.count == 1
        assert page.items[0].first_name == "John"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["ROOT", "user", "", None])
    async def test_invalid_role(self, session, role):
        with pytest.raises(ValidationError, match="role"):
            await sign_up(session, **_john(role=role))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"first_name": "  "},
            {"last_name": ""},
            {"email": ""},
            {"password": ""},
            {"mobile_number": None},
            {"mobile_number": "98-76"},
            {"mobile_number": True},
        ],
    )
    async def test_missing_or_invalid_fields(self, session, overrides):
        with pytest.raises(ValidationError):
            await sign_up(session, **_john(**overrides))

    @pytest.mark.asyncio
    async def test_numeric_string_mobile_number_accepted(self, session):
        user = await sign_up(session, **_john(mobile_number="9876543210"))
        assert user.mobile_number == 9876543210

    @pytest.mark.asyncio
    async def test_hashing_failure_persists_nothing(self, session):
        with patch("core.registration.hash_password", side_effect=EncodingError("boom")):
            with pytest.raises(InternalError):
                await sign_up(session, **_john())

        assert await find_user_by_email(session, "john@example.com") is None


class TestLogin:
    @pytest.mark.asyncio
    async def test_correct_password_returns_token_for_user(self, session):
        user = await sign_up(session, **_john())
        await session.commit()

        token = await login(session, "john@example.com", "secret1")
        assert verify_token(token) == str(user.user_id)

    @pytest.mark.asyncio
    async def test_wrong_password(self, session):
        await sign_up(session, **_john())
        await session.commit()

        with pytest.raises(InvalidCredentials):
            await login(session, "john@example.com", "wrong")

    @pytest.mark.asyncio
    async def test_unknown_email(self, session):
        with pytest.raises(UserNotFound):
            await login(session, "nobody@example.com", "secret1")

    @pytest.mark.asyncio
    async def test_unknown_email_still_runs_a_password_check(self, session):
        with patch("core.authentication.verify_password", return_value=False) as mock_verify:
            with pytest.raises(AuthenticationError):
                await login(session, "nobody@example.com", "secret1")
        mock_verify.assert_called_once()

    @pytest.mark.asyncio
    async def test_both_failures_share_public_message(self, session):
        await sign_up(session, **_john())
        await session.commit()

        with pytest.raises(AuthenticationError) as unknown:
            await login(session, "nobody@example.com", "secret1")
        with pytest.raises(AuthenticationError) as wrong:
            await login(session, "john@example.com", "wrong")

        assert unknown.value.public_message == wrong.value.public_message
        assert unknown.value.status_code == wrong.value.status_code == 401

    @pytest.mark.asyncio
    async def test_issuance_failure_is_internal(self, session):
        await sign_up(session, **_john())
        await session.commit()

        with patch("core.authentication.create_token", side_effect=IssuanceError("bad key")):
            with pytest.raises(InternalError) as exc_info:
                await login(session, "john@example.com", "secret1")
        assert not isinstance(exc_info.value, IssuanceError)


class TestSignUpBounds:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("number", [10**20, -1, "100000000000000000000"])
    async def test_mobile_number_out_of_range(self, session, number):
        with pytest.raises(ValidationError, match="mobileNumber"):
            await sign_up(session, **_john(mobile_number=number))

    @pytest.mark.asyncio
    async def test_largest_mobile_number_accepted(self, session):
        user = await sign_up(session, **_john(mobile_number=MAX_SQL_INT))
        await session.commit()
        assert user.mobile_number == MAX_SQL_INT

    @pytest.mark.asyncio
    async def test_password_over_72_bytes_is_caller_error(self, session):
        with pytest.raises(ValidationError, match="password"):
            await sign_up(session, **_john(password="é" * 37))
        assert await find_user_by_email(session, "john@example.com") is None


class TestLoginLogging:
    @pytest.mark.asyncio
    async def test_email_not_logged(self, session, caplog):
        user = await sign_up(session, **_john())
        await session.commit()

        with caplog.at_level(logging.INFO, logger="core.authentication"):
            await login(session, "john@example.com", "secret1")
            with pytest.raises(AuthenticationError):
                await login(session, "nobody@example.com", "secret1")

        assert str(user.user_id) in caplog.text
        assert "john@example.com" not in caplog.text
        assert "nobody@example.com" not in caplog.text
        assert "secret1" not in caplog.text
