"""
User Repository

Account lookups plus password hashing on create/update. The stored
hash never leaves this module except through verify_password.
"""

import logging
from typing import Any, Optional

from skycomfort.core.security import hash_password, verify_password
from skycomfort.models import User
from skycomfort.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    model = User

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self.find_one(email=email.strip().lower())

    async def find_by_flight_and_seat(self, flight_id: str, seat_number: str) -> Optional[User]:
        return await self.find_one(flight_id=flight_id, seat_number=seat_number)

    async def create_user(self, data: dict[str, Any]) -> User:
        """Create an account, hashing the plain-text password."""
        data = dict(data)
        data["email"] = data["email"].strip().lower()
        if data.get("password"):
            data["password"] = hash_password(data["password"])

        user = await self.create(data)
        logger.info(f"User #{user.id} registered ({'staff' if user.is_staff else 'passenger'})")
        return user

    async def update_user(self, id: int, data: dict[str, Any]) -> Optional[User]:
        """Partial update; a new password is re-hashed."""
        data = dict(data)
        if data.get("password"):
            data["password"] = hash_password(data["password"])
        return await self.update(id, data)

    async def verify_password(self, user: User, password: str) -> bool:
        if not user.password:
            return False
        return verify_password(user.password, password)

    async def deactivate_user(self, id: int) -> bool:
        return await self.update(id, {"is_active": False}) is not None

    async def activate_user(self, id: int) -> bool:
        return await self.update(id, {"is_active": True}) is not None
