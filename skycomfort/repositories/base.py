"""
Generic Repository Base Class

Wraps an AsyncSession with the find/create/update/delete operations
every entity repository shares. Entity repositories subclass it and
add their own queries.

Writes commit on success. On any exception the session is rolled back
and the exception re-raised, so no partial write survives.
"""

import logging
from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from skycomfort.database import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    CRUD operations over one model class.

    Attributes:
        model: The mapped class this repository manages
        session: Request-scoped database session
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    def _where(self, query, filters: Optional[dict[str, Any]]):
        for field, value in (filters or {}).items():
            query = query.where(getattr(self.model, field) == value)
        return query

    async def find_all(
        self,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[Sequence[Any]] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[ModelT]:
        """Return all rows matching equality filters."""
        query = self._where(select(self.model), filters)
        if order_by is not None:
            query = query.order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_by_id(self, id: int) -> Optional[ModelT]:
        """Return the row with this primary key, or None."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_one(self, **filters: Any) -> Optional[ModelT]:
        """Return the first row matching equality filters, or None."""
        result = await self.session.execute(self._where(select(self.model), filters).limit(1))
        return result.scalar_one_or_none()

    async def count(self, filters: Optional[dict[str, Any]] = None) -> int:
        query = self._where(select(func.count(self.model.id)), filters)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def create(self, data: dict[str, Any]) -> ModelT:
        """Insert a row and return it with server defaults loaded."""
        entity = self.model(**data)
        self.session.add(entity)
        await self._commit()
        await self.session.refresh(entity)
        logger.debug(f"Created {entity!r}")
        return entity

    async def update(self, id: int, data: dict[str, Any]) -> Optional[ModelT]:
        """Apply a partial patch. Returns None when the row does not exist."""
        entity = await self.find_by_id(id)
        if entity is None:
            return None

        for field, value in data.items():
            setattr(entity, field, value)

        await self._commit()
        return await self.find_by_id(id)

    async def delete(self, id: int) -> bool:
        """Delete a row. Returns False when it did not exist."""
        entity = await self.find_by_id(id)
        if entity is None:
            return False

        await self.session.delete(entity)
        await self._commit()
        logger.debug(f"Deleted {self.model.__name__} #{id}")
        return True

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
