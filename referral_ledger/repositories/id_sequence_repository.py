"""
Id sequence repository.

Atomic named counters (replaces counting rows to seed identifiers,
which races under concurrent registration).
"""

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.id_sequence import IdSequence
from referral_ledger.repositories.base import BaseRepository


class IdSequenceRepository(BaseRepository[IdSequence]):
    """Named sequence repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize id sequence repository."""
        super().__init__(IdSequence, session)

    async def next_value(self, name: str) -> int:
        """
        Advance a named sequence and return the new value.

        The counter row is created on first use (value starts at 1).
        The increment is a single UPDATE ... RETURNING, so two callers
        never receive the same value.

        Args:
            name: Sequence name

        Returns:
            Next value
        """
        dialect = self.session.get_bind().dialect.name
        insert_fn = pg_insert if dialect == "postgresql" else sqlite_insert
        await self.session.execute(
            insert_fn(IdSequence)
            .values(name=name, value=0)
            .on_conflict_do_nothing(index_elements=["name"])
        )

        stmt = (
            update(IdSequence)
            .where(IdSequence.name == name)
            .values(value=IdSequence.value + 1)
            .returning(IdSequence.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
