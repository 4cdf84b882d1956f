from __future__ import annotations

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from models.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Session holder shared by the repositories; the caller owns the transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, entity: T) -> T:
        """Stage a new row (flushed by the caller)."""
        self.session.add(entity)
        return entity

    async def get_by_id(self, model: Type[T], id_value: str | int) -> Optional[T]:
        return await self.session.get(model, id_value)
