"""
Referral commission and balance ledger engine.

Multi-level referral commissions triggered by purchase/subscription events
and the withdrawal-request lifecycle over the same profile balances.
"""

__version__ = "1.0.0"
