"""
IdSequence model.

Named monotonic counters used to seed human-readable identifiers.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from referral_ledger.models.base import Base


class IdSequence(Base):
    """Named counter, advanced with a single atomic UPDATE."""

    __tablename__ = "id_sequences"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(
        BigInteger, default=0, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<IdSequence(name={self.name!r}, value={self.value})>"
