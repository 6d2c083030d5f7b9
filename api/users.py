"""
User API routes — sign up, login, list.

Route prefix: ``config.api_prefix`` (default ``/users``)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import list_params
from core.authentication import login
from core.directory_query import list_users
from core.registration import sign_up
from database.session import get_db_session
from utils.errors import InternalError, UserServiceError
from utils.schemas import (
    LoginRequest,
    LoginResponse,
    SignUpRequest,
    SignUpResponse,
    UserListResponse,
    UserOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

SIGN_UP_FAILED = "Error in user sign up"
LOGIN_FAILED = "Error in user login"
LIST_FAILED = "Error in getting user list"


async def _failure(session: AsyncSession, message: str, exc: Exception) -> JSONResponse:
    """Roll back the request's session and render the uniform failure body."""
    await session.rollback()
    if not isinstance(exc, UserServiceError):
        logger.exception("%s: unexpected error", message, exc_info=exc)
        exc = InternalError(str(exc))
    elif exc.status_code >= 500:
        logger.error("%s: %s", message, exc)
    else:
        logger.warning("%s: %s", message, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message, "error": exc.public_message},
    )


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post(
    "/signUp",
    status_code=status.HTTP_201_CREATED,
    response_model=SignUpResponse,
)
async def user_sign_up(
    req: SignUpRequest,
    role: Optional[str] = Query(None, description="USER, ADMIN or GUEST"),
    session: AsyncSession = Depends(get_db_session),
) -> Any:
    """Create a new user."""
    try:
        user = await sign_up(
            session,
            first_name=req.first_name,
            last_name=req.last_name,
            email=req.email,
            password=req.password,
            mobile_number=req.mobile_number,
            role=role,
        )
    except Exception as exc:
        return await _failure(session, SIGN_UP_FAILED, exc)

    return {
        "message": "User Sign Up successfully Completed",
        "user": UserOut.model_validate(user),
    }


@router.post("/login", response_model=LoginResponse)
async def user_login(
    req: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
) -> Any:
    """Login with email + password."""
    try:
        token = await login(session, req.email, req.password)
    except Exception as exc:
        return await _failure(session, LOGIN_FAILED, exc)

    return {"message": "User Logged In successfully", "token": token}


@router.get("/list", response_model=UserListResponse)
async def user_list(
    params: Dict[str, Any] = Depends(list_params),
    session: AsyncSession = Depends(get_db_session),
) -> Any:
    """Search, filter, sort and paginate users."""
    try:
        page = await list_users(session, params)
    except Exception as exc:
        return await _failure(session, LIST_FAILED, exc)

    return {
        "message": "User list retrieved successfully",
        "items": page.items,
        "count": page.count,
    }
