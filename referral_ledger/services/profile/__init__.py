"""
Profile services package.

- registration: Profile creation under a referrer
- subscription: Subscription status and activation commissions
"""

from referral_ledger.services.profile.registration import (
    ProfileRegistrationService,
)
from referral_ledger.services.profile.subscription import (
    SubscriptionService,
    SubscriptionUpdate,
)


__all__ = [
    "ProfileRegistrationService",
    "SubscriptionService",
    "SubscriptionUpdate",
]
