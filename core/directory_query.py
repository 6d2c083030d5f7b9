"""
Directory query builder — turns raw listing parameters into a
``QueryPlan`` and runs it against the user store.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from database.users import query_users
from utils.errors import ValidationError
from utils.schemas import MAX_SQL_INT, QueryPlan, Role, SortKey, SortOrder, UserPage

logger = logging.getLogger(__name__)

DEFAULT_SKIP = 0
DEFAULT_LIMIT = 20

# Anything outside alphanumerics, space and this punctuation is dropped.
_DISALLOWED_SEARCH_CHARS = re.compile(r"[^a-zA-Z0-9 !@#$%^&*)(+=._]")


def sanitize_search_text(text: Optional[str]) -> Optional[str]:
    """Drop disallowed characters; ``None`` when only blanks remain.

    Spaces are kept as typed, leading and trailing ones included.
    """
    if text is None:
        return None
    cleaned = _DISALLOWED_SEARCH_CHARS.sub("", str(text))
    return cleaned if cleaned.strip() else None


def _absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_int(name: str, value: Any, default: int, minimum: int) -> int:
    if _absent(value):
        return default
    if isinstance(value, bool):
        raise ValidationError(f"'{name}' must be an integer")
    try:
        parsed = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"'{name}' must be an integer, got {value!r}") from None
    if parsed < minimum:
        raise ValidationError(f"'{name}' must be >= {minimum}, got {parsed}")
    if parsed > MAX_SQL_INT:
        raise ValidationError(f"'{name}' must be <= {MAX_SQL_INT}, got {parsed}")
    return parsed


def _parse_enum(name: str, enum_cls, value: Any, default=None, upper: bool = False):
    if _absent(value):
        return default
    text = str(value).strip()
    if upper:
        text = text.upper()
    try:
        return enum_cls(text)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"'{name}' must be one of: {allowed}; got {value!r}"
        ) from None


def build_plan(raw_params: Mapping[str, Any]) -> QueryPlan:
    """
    Build an immutable ``QueryPlan`` from listing parameters.

    Recognised keys: ``searchtext``, ``role``, ``sortkey``, ``sortorder``,
    ``skip``, ``limit``.  Missing or empty values fall back to defaults
    (no search, no role filter, ``createdAt`` ``DESC``, skip 0, limit 20).
    """
    return QueryPlan(
        search_text=sanitize_search_text(raw_params.get("searchtext")),
        role=_parse_enum("role", Role, raw_params.get("role")),
        sort_key=_parse_enum("sortkey", SortKey, raw_params.get("sortkey"), SortKey.CREATED_AT),
        sort_order=_parse_enum(
            "sortorder", SortOrder, raw_params.get("sortorder"), SortOrder.DESC, upper=True,
        ),
        skip=_parse_int("skip", raw_params.get("skip"), DEFAULT_SKIP, minimum=0),
        limit=_parse_int("limit", raw_params.get("limit"), DEFAULT_LIMIT, minimum=1),
    )


async def list_users(session: AsyncSession, raw_params: Mapping[str, Any]) -> UserPage:
    """Build the plan for ``raw_params`` and return one page plus the total count."""
    plan = build_plan(raw_params)
    items, count = await query_users(session, plan)
    return UserPage(items=items, count=count)
