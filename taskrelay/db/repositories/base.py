"""Base repository with common CRUD operations."""

from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from taskrelay.db.models import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository bound to a caller-managed transactional session."""

    def __init__(self, session: AsyncSession, model_class: type[T]):
        self.session = session
        self.model_class = model_class

    async def get_by_id(self, id: str) -> T | None:
        """Get entity by primary key."""
        return await self.session.get(self.model_class, id)

    async def create(self, entity: T) -> T:
        """Insert a new entity within the current transaction."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def save(self, entity: T) -> T:
        """Flush pending changes to an existing entity."""
        await self.session.flush()
        await self.session.refresh(entity)
        return entity
