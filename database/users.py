"""
User directory store — insert, point lookup, and the combined
filter/sort/paginate/count listing query.

"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User
from utils.errors import DuplicateKeyError, StoreUnavailable
from utils.schemas import QueryPlan, SortKey, SortOrder, UserSummary

logger = logging.getLogger(__name__)


_SORT_COLUMNS = {
    SortKey.CREATED_AT: User.created_at,
    SortKey.UPDATED_AT: User.updated_at,
    SortKey.FIRST_NAME: User.first_name,
    SortKey.EMAIL: User.email,
}

# Columns returned by the listing query; the password hash is never projected.
_SUMMARY_COLUMNS = (
    User.user_id,
    User.first_name,
    User.last_name,
    (User.first_name + " " + User.last_name).label("full_name"),
    User.email,
    User.mobile_number,
    User.role,
    User.created_at,
    User.updated_at,
)


async def insert_user(session: AsyncSession, user: User) -> User:
    """Persist a new ``User``. Raises ``DuplicateKeyError`` if the email is taken."""
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateKeyError(f"Email {user.email!r} already exists") from exc
    except OperationalError as exc:
        await session.rollback()
        raise StoreUnavailable(f"User store unavailable: {exc}") from exc
    return user


async def find_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    """Exact (case-sensitive) lookup; ``None`` when no user has that email."""
    try:
        result = await session.execute(select(User).where(User.email == email))
    except OperationalError as exc:
        raise StoreUnavailable(f"User store unavailable: {exc}") from exc
    return result.scalar_one_or_none()


def _plan_conditions(plan: QueryPlan) -> list:
    """WHERE clauses for the plan; absent filters contribute nothing."""
    conditions = []
    if plan.search_text is not None:
        conditions.append(
            or_(
                User.first_name.icontains(plan.search_text, autoescape=True),
                User.last_name.icontains(plan.search_text, autoescape=True),
                User.email.icontains(plan.search_text, autoescape=True),
            )
        )
    if plan.role is not None:
        conditions.append(User.role == plan.role)
    return conditions


async def query_users(
    session: AsyncSession,
    plan: QueryPlan,
) -> Tuple[List[UserSummary], int]:
    """
    Run a listing plan and return ``(page_items, total_count)``.

    Both statements run on the same session, so the page and the count
    come from one read.  ``total_count`` covers the whole filtered set and
    is ``0`` when nothing matches.
    """
    conditions = _plan_conditions(plan)

    column = _SORT_COLUMNS[plan.sort_key]
    if plan.sort_order is SortOrder.ASC:
        ordering = (column.asc(), User.user_id.asc())
    else:
        ordering = (column.desc(), User.user_id.desc())

    page_stmt = (
        select(*_SUMMARY_COLUMNS)
        .where(*conditions)
        .order_by(*ordering)
        .offset(plan.skip)
        .limit(plan.limit)
    )
    count_stmt = select(func.count(User.user_id)).where(*conditions)

    try:
        total = (await session.execute(count_stmt)).scalar_one()
        rows = (await session.execute(page_stmt)).all()
    except OperationalError as exc:
        raise StoreUnavailable(f"User store unavailable: {exc}") from exc

    items = [UserSummary.model_validate(dict(row._mapping)) for row in rows]
    logger.debug(
        "query_users: %d of %d (skip=%d limit=%d sort=%s %s)",
        len(items), total, plan.skip, plan.limit,
        plan.sort_key.value, plan.sort_order.value,
    )
    return items, int(total or 0)
