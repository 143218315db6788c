"""
Service (catalog item) Repository
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select

from skycomfort.models import Service
from skycomfort.repositories.base import BaseRepository


class ServiceRepository(BaseRepository[Service]):
    model = Service

    async def find_newest(self, filters: Optional[dict] = None) -> list[Service]:
        return await self.find_all(filters, order_by=[Service.created_at.desc(), Service.id.desc()])

    async def find_by_type(self, type: str) -> list[Service]:
        return await self.find_newest({"type": type})

    async def find_by_category(self, category: str) -> list[Service]:
        return await self.find_newest({"category": category})

    async def find_by_availability(self, available: bool) -> list[Service]:
        return await self.find_newest({"availability": available})

    async def update_availability(self, id: int, available: bool) -> Optional[Service]:
        return await self.update(id, {"availability": available})

    async def search(self, query: str, available: Optional[bool] = None) -> list[Service]:
        """Case-insensitive match on title or description."""
        pattern = f"%{query}%"
        stmt = select(Service).where(
            or_(Service.title.ilike(pattern), Service.description.ilike(pattern))
        )
        if available is not None:
            stmt = stmt.where(Service.availability == available)
        stmt = stmt.order_by(Service.created_at.desc(), Service.id.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_updated_since(self, since: Optional[datetime]) -> list[Service]:
        """Services changed after a client's last sync (all when since is None)."""
        stmt = select(Service)
        if since is not None:
            stmt = stmt.where(Service.updated_at > since)
        stmt = stmt.order_by(Service.updated_at.desc(), Service.id.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())
