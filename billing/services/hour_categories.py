"""
Hour-category pricing.

A distribution holds the hours each worker spent in each of the eight
categories. Pricing applies the category multiplier to the tariff and
scales by the number of workers in the group:

    amount(category) = hours x multiplier x tariff x worker_count

The billing side and the payroll side share the same multipliers; they
only differ in which Bill columns store the hours.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from .contracts import (
    DistributionResult,
    HoursDistribution,
    create_empty_distribution,
    create_empty_distribution_result,
)
from .enums import DistributionSide, HourCategory
from .numeric import ZERO, safe_sum, to_decimal

logger = logging.getLogger(__name__)


class HourCategoryEngine:
    """Applies the multiplier table to hour distributions"""

    @staticmethod
    def calculate(
        distribution: HoursDistribution,
        tariff,
        worker_count: int,
        side: DistributionSide,
        categories: Optional[Iterable[HourCategory]] = None,
    ) -> DistributionResult:
        """
        Price a distribution.

        Args:
            distribution: hours per category (per worker)
            tariff: hourly rate for this side
            worker_count: workers in the group
            side: billing or payroll
            categories: restrict pricing to these categories (all by default)

        Returns:
            DistributionResult with per-category {hours, multiplier, amount}
        """
        rate = to_decimal(tariff, f"{side}.tariff")
        workers = Decimal(int(worker_count or 0))
        selected = list(categories) if categories is not None else list(HourCategory)

        result = create_empty_distribution_result(int(worker_count or 0), rate)
        hours_detail = result["details"]["hours_detail"]

        for category in selected:
            hours = to_decimal(distribution.get(category.value), f"{side}.{category.value}")
            if hours == ZERO:
                continue
            amount = hours * category.multiplier * rate * workers
            hours_detail[category.value] = {
                "hours": hours,
                "multiplier": category.multiplier,
                "amount": amount,
            }
            result["total_hours"] += hours
            result["total_amount"] += amount

        logger.debug(
            f"Priced {side} distribution",
            extra={
                "side": str(side),
                "total_hours": float(result["total_hours"]),
                "total_amount": float(result["total_amount"]),
                "worker_count": int(worker_count or 0),
                "action": "distribution_priced",
            },
        )
        return result

    @staticmethod
    def flat_total(distribution: HoursDistribution, tariff, worker_count: int) -> Decimal:
        """Flat-rate escape hatch: tariff x sum of raw hours x workers, no multipliers"""
        return (
            to_decimal(tariff, "tariff")
            * HourCategoryEngine.total_hours(distribution)
            * Decimal(int(worker_count or 0))
        )

    @staticmethod
    def total_hours(distribution: HoursDistribution) -> Decimal:
        return safe_sum(distribution.get(c.value) for c in HourCategory)

    @staticmethod
    def ordinary_hours(distribution: HoursDistribution) -> Decimal:
        """Ordinary day + ordinary night hours"""
        return safe_sum(
            distribution.get(c.value) for c in HourCategory if c.is_ordinary
        )

    @staticmethod
    def extra_hours(distribution: HoursDistribution) -> Decimal:
        return safe_sum(distribution.get(c.value) for c in HourCategory if c.is_extra)

    @staticmethod
    def to_columns(
        distribution: HoursDistribution,
        side: DistributionSide,
        categories: Optional[Iterable[HourCategory]] = None,
    ) -> dict:
        """
        Map a distribution to Bill field values for one side.

        Categories outside `categories` are written as 0.
        """
        selected = set(categories) if categories is not None else set(HourCategory)
        return {
            category.column(side): (
                to_decimal(distribution.get(category.value))
                if category in selected
                else ZERO
            )
            for category in HourCategory
        }

    @staticmethod
    def from_bill(bill, side: DistributionSide) -> HoursDistribution:
        """Read a stored distribution back from a Bill"""
        distribution = create_empty_distribution()
        for category in HourCategory:
            distribution[category.value] = to_decimal(getattr(bill, category.column(side)))
        return distribution
