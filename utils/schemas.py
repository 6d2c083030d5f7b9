"""
Pydantic schemas for the user-account service.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Largest value a signed 64-bit SQL integer (BIGINT) column or OFFSET/LIMIT can hold.
MAX_SQL_INT = 2**63 - 1

# bcrypt only reads the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


# ═══════════════════════════════════════════════════════════════════════════════
# Enumerations
# ═══════════════════════════════════════════════════════════════════════════════


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    GUEST = "GUEST"


class SortKey(str, Enum):
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    FIRST_NAME = "firstName"
    EMAIL = "email"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


# ═══════════════════════════════════════════════════════════════════════════════
# Directory listing
# ═══════════════════════════════════════════════════════════════════════════════


class QueryPlan(BaseModel):
    """
    Normalised description of one listing request.

    ``search_text`` and ``role`` are ``None`` when the caller did not ask for
    them; the store applies no predicate for a ``None`` filter.
    """

    model_config = ConfigDict(frozen=True)

    search_text: Optional[str] = None
    role: Optional[Role] = None
    sort_key: SortKey = SortKey.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    skip: int = Field(default=0, ge=0, le=MAX_SQL_INT)
    limit: int = Field(default=20, gt=0, le=MAX_SQL_INT)


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserOut(_WireModel):
    user_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    mobile_number: int
    role: Role
    created_at: datetime
    updated_at: datetime


class UserSummary(UserOut):
    full_name: str


class UserPage(_WireModel):
    items: List[UserSummary] = Field(default_factory=list)
    count: int = 0


# ═══════════════════════════════════════════════════════════════════════════════
# Request / response bodies
# ═══════════════════════════════════════════════════════════════════════════════


class SignUpRequest(_WireModel):
    first_name: str = Field(..., min_length=1, max_length=128)
    last_name: str = Field(..., min_length=1, max_length=128)
    email: str = Field(
        ...,
        min_length=5,
        max_length=255,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
    )
    password: str = Field(..., min_length=4, max_length=MAX_PASSWORD_BYTES)
    mobile_number: int = Field(..., ge=0, le=MAX_SQL_INT)

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    email: str
    password: str


class SignUpResponse(_WireModel):
    message: str
    user: UserOut


class LoginResponse(BaseModel):
    message: str
    token: str


class UserListResponse(UserPage):
    message: str
