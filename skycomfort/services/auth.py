"""
Authentication Service

Registration, login, token refresh and token validation on top of
UserRepository and the signing helpers in core.security.
"""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from skycomfort.core.security import ACCESS_TOKEN, REFRESH_TOKEN, create_token, decode_token
from skycomfort.models import User
from skycomfort.repositories.users import UserRepository
from skycomfort.schemas import UserResponse

logger = logging.getLogger(__name__)


class AuthService:
    """
    Issues and verifies tokens for users.

    Methods return None on any credential problem; routes turn that
    into the right status code.
    """

    def __init__(self, session: AsyncSession):
        self.users = UserRepository(session)

    def _issue_tokens(self, user: User) -> dict[str, str]:
        return {
            "token": create_token(user.id, ACCESS_TOKEN, {"isStaff": user.is_staff}),
            "refreshToken": create_token(user.id, REFRESH_TOKEN),
        }

    def _auth_result(self, user: User) -> dict[str, Any]:
        return {**self._issue_tokens(user), "user": UserResponse.model_validate(user)}

    async def register(self, data: dict[str, Any]) -> Optional[dict[str, Any]]:
        """
        Create an account and sign tokens for it.

        Returns:
            Tokens and the public user, or None if the email is taken
        """
        if await self.users.find_by_email(data["email"]) is not None:
            logger.info(f"Registration rejected: {data['email']} already exists")
            return None

        user = await self.users.create_user(data)
        return self._auth_result(user)

    async def login(self, email: str, password: str) -> Optional[dict[str, Any]]:
        user = await self.users.find_by_email(email)

        if user is None or not await self.users.verify_password(user, password):
            logger.info(f"Failed login for {email}")
            return None

        logger.info(f"User #{user.id} logged in")
        return self._auth_result(user)

    async def refresh_token(self, refresh_token: str) -> Optional[dict[str, str]]:
        payload = decode_token(refresh_token, REFRESH_TOKEN)
        if payload is None:
            return None

        user_id = payload.get("id")
        if not isinstance(user_id, int):
            return None

        user = await self.users.find_by_id(user_id)
        if user is None or not user.is_active:
            return None

        return self._issue_tokens(user)

    async def validate_token(self, token: str) -> Optional[User]:
        """Resolve an access token to its user, or None."""
        payload = decode_token(token, ACCESS_TOKEN)
        if payload is None:
            return None

        user_id = payload.get("id")
        if not isinstance(user_id, int):
            return None

        return await self.users.find_by_id(user_id)
