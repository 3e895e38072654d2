"""
Repository Pattern for Database Operations
Provides clean data access layer
"""

from typing import Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from panel.utils.exceptions import RecordNotFoundError

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations"""

    def __init__(self, model: Type[T], db: AsyncSession):
        self.model = model
        self.db = db

    async def get_by_id(self, id: str) -> Optional[T]:
        """Get record by ID"""
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def find(self, id: str) -> T:
        """Get record by ID or raise RecordNotFoundError"""
        instance = await self.get_by_id(id)
        if instance is None:
            raise RecordNotFoundError(f"{self.model.__name__} not found: {id}")
        return instance

    async def create(self, **kwargs) -> T:
        """Create new record"""
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.flush()
        return instance

    async def update(self, instance: T, **kwargs) -> T:
        """Update existing record"""
        for key, value in kwargs.items():
            setattr(instance, key, value)
        await self.db.flush()
        return instance

    async def delete(self, instance: T) -> None:
        """Delete record"""
        await self.db.delete(instance)
        await self.db.flush()

    async def delete_many(self, ids: Sequence[str]) -> int:
        """Delete every record whose ID is in `ids`, returning the count removed"""
        if not ids:
            return 0

        result = await self.db.execute(
            delete(self.model)
            .where(self.model.id.in_(list(ids)))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
