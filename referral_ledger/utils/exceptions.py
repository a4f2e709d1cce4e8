"""
Exception types raised by ledger services.

Every public operation validates its input and raises one of these before
any write. Transient database errors (SQLAlchemyError) are not wrapped and
propagate to the caller after the session is rolled back.
"""


class LedgerError(Exception):
    """Base class for ledger errors."""
    pass


class ValidationError(LedgerError):
    """Raised for non-positive amounts or malformed identifiers."""
    pass


class NotFoundError(LedgerError):
    """Raised when a profile or withdrawal request does not exist."""
    pass


class ConflictError(LedgerError):
    """Raised on uniqueness conflicts or invalid state transitions."""
    pass


class AllocationExhaustedError(ConflictError):
    """Raised when identifier allocation ran out of attempts.

    Recoverable: the identifier stays unset and allocation can be retried.
    """
    pass


class InsufficientBalanceError(LedgerError):
    """Raised when a withdrawal exceeds the available balance."""

    def __init__(self, available, requested) -> None:
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient balance. Available: {available}, "
            f"Requested: {requested}"
        )
