"""
Withdrawal services package.

This package provides modular withdrawal management functionality:
- withdrawal_request_handler: Request creation and balance hold
- withdrawal_lifecycle_handler: Approval and rejection
- withdrawal_query_service: Queries and history

All components are re-exported for easy importing.
"""

from referral_ledger.services.withdrawal.withdrawal_lifecycle_handler import (
    WithdrawalLifecycleHandler,
)
from referral_ledger.services.withdrawal.withdrawal_query_service import (
    WithdrawalQueryService,
)
from referral_ledger.services.withdrawal.withdrawal_request_handler import (
    WithdrawalRequestHandler,
)


__all__ = [
    "WithdrawalRequestHandler",
    "WithdrawalLifecycleHandler",
    "WithdrawalQueryService",
]
