"""
Fixed daily rate groups.

Each side is the daily tariff times the worker count, plus the extra-hour
categories priced at the hourly equivalent tariff / agreed_hours. The
group is dated by its operation, not by the workers' own windows.
"""

from decimal import Decimal

from ..enums import DistributionSide, GroupMode
from ..hour_categories import HourCategoryEngine
from ..numeric import safe_divide, to_decimal
from .base import AbstractBillingStrategy


class JornalStrategy(AbstractBillingStrategy):
    mode = GroupMode.JORNAL

    def calculate(self):
        result = self._base_result()
        billing = self.calculate_billing()
        payroll = self.calculate_payroll()

        start = self.context.get("operation_start")
        result.update(
            {
                "week_number": self._week_number(start),
                "schedule": {"start": start, "end": self.context.get("operation_end")},
                "billing_total": billing["total"],
                "payroll_total": payroll["total"],
                "bill_distribution": billing["distribution"],
                "paysheet_distribution": payroll["distribution"],
                "worked_hours": self.agreed_hours,
                "number_of_hours": HourCategoryEngine.extra_hours(self.paysheet_hours),
                "columns": self.columns(),
            }
        )
        return result

    @property
    def agreed_hours(self) -> Decimal:
        return to_decimal(self.summary.get("agreed_hours"), "agreed_hours")

    @property
    def bill_hours(self):
        return self.group_input.get("bill_hours_distribution") or {}

    @property
    def paysheet_hours(self):
        return self.group_input.get("paysheet_hours_distribution") or {}

    def calculate_billing(self) -> dict:
        return self._side(DistributionSide.BILLING, self.bill_hours, self.facturation_tariff)

    def calculate_payroll(self) -> dict:
        return self._side(DistributionSide.PAYROLL, self.paysheet_hours, self.paysheet_tariff)

    def _side(self, side: DistributionSide, distribution, daily_tariff: Decimal) -> dict:
        hourly_rate = safe_divide(daily_tariff, self.agreed_hours, f"{side}.hourly_rate")
        extras = HourCategoryEngine.calculate(
            distribution,
            hourly_rate,
            self.worker_count,
            side,
            categories=self._extra_categories(),
        )
        total = daily_tariff * Decimal(self.worker_count) + extras["total_amount"]
        return {"total": total, "distribution": extras}

    def columns(self) -> dict:
        extra = self._extra_categories()
        values = HourCategoryEngine.to_columns(
            self.bill_hours, DistributionSide.BILLING, categories=extra
        )
        values.update(
            HourCategoryEngine.to_columns(
                self.paysheet_hours, DistributionSide.PAYROLL, categories=extra
            )
        )
        return values
