"""
Compensatory rest accrual.

Rules, in order:

1. A date range that contains a Sunday accrues nothing.
2. While the bill is not COMPLETED, hours above the daily cap return the
   provisional placeholder weekly_cap / 6 / 6.
3. Otherwise, with day_cap = weekly_cap / 6 and
   per_hour = (day_cap / 6) / day_cap, the accrual is
   min(hours, day_cap) x per_hour.

The amount is hours x worker_count x tariff.
"""

import logging
from decimal import Decimal
from typing import Optional

from .calendar_policy import CalendarPolicy
from .contracts import CompensatoryResult, create_empty_compensatory
from .enums import BillStatus
from .numeric import ZERO, safe_divide, to_decimal

logger = logging.getLogger(__name__)

WORKING_DAYS_PER_WEEK = Decimal("6")


def accrue_compensatory_hours(
    hours,
    weekly_cap,
    has_sunday: bool = False,
    bill_status: Optional[BillStatus] = None,
) -> Decimal:
    """Pure accrual of compensatory hours for a group duration"""
    if has_sunday:
        return ZERO

    worked = max(to_decimal(hours, "compensatory.hours"), ZERO)
    cap = to_decimal(weekly_cap, "compensatory.weekly_cap")
    if cap <= ZERO or worked == ZERO:
        return ZERO

    day_cap = cap / WORKING_DAYS_PER_WEEK
    compensatory_day = day_cap / WORKING_DAYS_PER_WEEK

    if bill_status != BillStatus.COMPLETED and worked > day_cap:
        return compensatory_day

    per_hour = safe_divide(compensatory_day, day_cap, "compensatory.per_hour")
    return min(worked, day_cap) * per_hour


def compensatory_amount(compensatory_hours, worker_count, tariff) -> Decimal:
    return (
        to_decimal(compensatory_hours, "compensatory.hours")
        * Decimal(int(worker_count or 0))
        * to_decimal(tariff, "compensatory.tariff")
    )


class CompensatoryAccrual:
    """Resolves the calendar facts for a range and applies the accrual rules"""

    def __init__(self, calendar: Optional[CalendarPolicy] = None):
        self.calendar = calendar or CalendarPolicy()

    def hours(
        self,
        hours,
        start=None,
        end=None,
        bill_status: Optional[BillStatus] = None,
        weekly_cap=None,
    ) -> Decimal:
        has_sunday = self.calendar.has_sunday_in_range(start, end)
        if weekly_cap is None:
            weekly_cap = self.calendar.provider.get_weekly_hours_cap(has_sunday)
        return accrue_compensatory_hours(hours, weekly_cap, has_sunday, bill_status)

    def result(
        self,
        hours,
        worker_count: int,
        tariff,
        start=None,
        end=None,
        bill_status: Optional[BillStatus] = None,
        include_in_total: bool = False,
        weekly_cap=None,
        reference_total=None,
    ) -> CompensatoryResult:
        """
        Full compensatory block.

        `percentage` is the amount relative to `reference_total` (usually the
        bill's payroll total), 0 when no reference is given.
        """
        result = create_empty_compensatory()
        comp_hours = self.hours(hours, start, end, bill_status, weekly_cap)
        if comp_hours == ZERO:
            return result

        amount = compensatory_amount(comp_hours, worker_count, tariff)
        reference = to_decimal(reference_total)
        result.update(
            {
                "hours": comp_hours,
                "amount": amount,
                "percentage": (
                    safe_divide(amount, reference) * Decimal("100")
                    if reference > ZERO
                    else ZERO
                ),
                "include_in_total": include_in_total,
            }
        )
        logger.debug(
            "Compensatory accrued",
            extra={
                "hours": float(comp_hours),
                "amount": float(amount),
                "worker_count": worker_count,
                "action": "compensatory_accrued",
            },
        )
        return result
