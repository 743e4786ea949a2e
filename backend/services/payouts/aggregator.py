"""
Payout aggregation over completed bookings.

Read-only: one report row per workshop with DONE bookings created in the
month. ``workshop_amount`` is derived as ``total_amount - commission`` per
group rather than re-summed, and ``is_paid`` is always False since nothing
records payments.
"""

import calendar
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from django.db.models import Count, Sum
from django.utils import timezone

from repairs.models import Booking
from services.repair_management.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


@dataclass
class PayoutReport:
    """Derived monthly summary of one workshop's completed bookings."""
    id: str
    workshop_id: int
    workshop_name: str
    month: int
    year: int
    total_jobs: int = 0
    total_amount: Decimal = ZERO
    commission: Decimal = ZERO
    workshop_amount: Decimal = ZERO
    is_paid: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def month_window(month: int, year: int) -> Tuple[datetime, datetime]:
    """
    First instant and last second of a calendar month in the current timezone.

    Raises:
        InvalidInputError: If month/year are out of range
    """
    try:
        month, year = int(month), int(year)
    except (TypeError, ValueError):
        raise InvalidInputError("Month and year must be integers")
    if not 1 <= month <= 12:
        raise InvalidInputError("Month must be between 1 and 12")
    if not 1970 <= year <= 9999:
        raise InvalidInputError("Year is out of range")

    last_day = calendar.monthrange(year, month)[1]
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime(year, month, 1, 0, 0, 0), tz)
    end = timezone.make_aware(datetime(year, month, last_day, 23, 59, 59), tz)
    return start, end


def aggregate_payouts(month: int, year: int) -> List[PayoutReport]:
    """
    Build payout reports for every workshop with DONE bookings in the month.

    Args:
        month: Calendar month (1-12)
        year: Calendar year

    Returns:
        PayoutReport list ordered by workshop id
    """
    start, end = month_window(month, year)
    month, year = int(month), int(year)

    rows = (
        Booking.objects.filter(
            status=Booking.Status.DONE,
            created_at__gte=start,
            created_at__lte=end,
        )
        .values("workshop_id", "workshop__company_name")
        .annotate(
            total_jobs=Count("id"),
            total_amount=Sum("total_amount"),
            commission=Sum("commission"),
        )
        .order_by("workshop_id")
    )

    reports: List[PayoutReport] = []
    for index, row in enumerate(rows):
        total_amount = (row["total_amount"] or ZERO).quantize(CENT)
        commission = (row["commission"] or ZERO).quantize(CENT)
        reports.append(PayoutReport(
            id=f"payout-{row['workshop_id']}-{month}-{year}-{index}",
            workshop_id=row["workshop_id"],
            workshop_name=row["workshop__company_name"],
            month=month,
            year=year,
            total_jobs=row["total_jobs"],
            total_amount=total_amount,
            commission=commission,
            workshop_amount=total_amount - commission,
        ))

    logger.info("Aggregated %d payout report(s) for %02d/%d", len(reports), month, year)
    return reports
