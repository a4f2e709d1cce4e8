"""
Base repository.

Lookups and inserts shared by the ledger repositories. Balance and
status mutations are not generic; each repository writes them as
conditional UPDATE statements.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository bound to one ledger model and one session.

    Never commits; the calling service owns the transaction.
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        self.model = model
        self.session = session

    async def get_by_id(self, id: int) -> ModelType | None:
        """Get a row by primary key, from the identity map if loaded."""
        return await self.session.get(self.model, id)

    async def get_by(self, **filters: Any) -> ModelType | None:
        """
        Get the single row matching column filters.

        Args:
            **filters: Column equality filters on a unique key

        Returns:
            Matching row or None
        """
        result = await self.session.execute(
            select(self.model).filter_by(**filters)
        )
        return result.scalar_one_or_none()

    async def create(self, **data: Any) -> ModelType:
        """
        Insert a row and flush it.

        The flush surfaces UNIQUE and CHECK violations as IntegrityError
        here, before the caller commits.

        Args:
            **data: Column values

        Returns:
            Inserted row with server defaults loaded
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def count(self, **filters: Any) -> int:
        """Count rows matching column filters."""
        stmt = select(func.count()).select_from(self.model)
        if filters:
            stmt = stmt.filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def exists(self, **filters: Any) -> bool:
        """Check whether any row matches column filters."""
        stmt = select(exists().where(*(
            getattr(self.model, column) == value
            for column, value in filters.items()
        )))
        result = await self.session.execute(stmt)
        return bool(result.scalar())
