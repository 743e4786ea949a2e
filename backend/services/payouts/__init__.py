"""
Monthly workshop payout reports.

Reports are computed on demand from DONE bookings and never stored.
"""

from .aggregator import PayoutReport, aggregate_payouts, month_window

__all__ = [
    "PayoutReport",
    "aggregate_payouts",
    "month_window",
]
