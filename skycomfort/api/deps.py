"""
Request Authentication Dependencies

    get_current_user: bearer token -> active user (401 / 403 otherwise)
    require_staff:    get_current_user plus the staff flag (403 otherwise)
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from skycomfort.core.exceptions import AuthenticationError, PermissionDeniedError
from skycomfort.database import get_db
from skycomfort.models import User
from skycomfort.services.auth import AuthService

# auto_error=False so a missing header gets our envelope instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access denied. No token provided.")

    user = await AuthService(db).validate_token(credentials.credentials)

    if user is None:
        raise AuthenticationError("Invalid or expired token")

    if not user.is_active:
        raise PermissionDeniedError("Account is disabled")

    return user


async def require_staff(user: User = Depends(get_current_user)) -> User:
    if not user.is_staff:
        raise PermissionDeniedError("Access denied. Staff privileges required.")
    return user
