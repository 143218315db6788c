"""
Authentication Endpoints

    POST /api/auth/login
    POST /api/auth/register
    POST /api/auth/refresh
    POST /api/auth/validate
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skycomfort.core.config import get_settings
from skycomfort.core.exceptions import AppError, AuthenticationError, ValidationError, internal_error
from skycomfort.database import get_db
from skycomfort.schemas import (
    ErrorResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UserResponse,
    ValidateTokenRequest,
    envelope,
)
from skycomfort.services.auth import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)


@router.post("/login", summary="Log in with email and password")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    result = await AuthService(db).login(body.email, body.password)

    if result is None:
        raise AuthenticationError("Invalid email or password")

    return envelope(result)


@router.post("/register", status_code=201, summary="Create a passenger or staff account")
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    try:
        result = await AuthService(db).register(body.model_dump())
    except AppError:
        raise
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        logger.info(f"Registration rejected: {body.email} already exists")
        result = None
    except Exception as e:
        logger.exception(f"Error registering {body.email}: {e}")
        raise internal_error(e, "An error occurred during registration", get_settings().expose_error_details)

    if result is None:
        raise ValidationError("Registration failed. User may already exist.")

    return envelope(result)


@router.post("/refresh", summary="Exchange a refresh token for a new token pair")
async def refresh(body: RefreshTokenRequest, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    result = await AuthService(db).refresh_token(body.refresh_token)

    if result is None:
        raise AuthenticationError("Invalid or expired refresh token")

    return envelope(result)


@router.post("/validate", summary="Check an access token")
async def validate(
    body: Optional[ValidateTokenRequest] = None,
    token: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    token = (body.token if body else None) or token

    if not token:
        raise ValidationError("Token is required")

    user = await AuthService(db).validate_token(token)

    if user is None:
        raise AuthenticationError("Invalid or expired token")

    return envelope({"valid": True, "user": UserResponse.model_validate(user)})
