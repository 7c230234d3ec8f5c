"""
Alternative paid service groups.

Billing and payroll are resolved independently, each by its own unit:

Billing (facturation unit, falling back to the unit of measure)
    group_tariff YES   group_hours x facturation_tariff
    hours unit         the hourly billing side
    JORNAL             the daily-rate billing side
    anything else      amount x facturation_tariff

Payroll (unit of measure)
    hours unit         the hourly payroll side plus compensatory rest
    JORNAL             the daily-rate payroll side
    anything else      amount x paysheet_tariff

On first creation the payroll compensatory uses a fixed 44-hour week and
the submitted group_hours; recalculation goes through the configured
weekly cap and the calendar instead. Both paths are kept as they are
until the pricing rule is settled.
"""

from decimal import Decimal

from ..compensatory import accrue_compensatory_hours, compensatory_amount
from ..contracts import create_empty_compensatory
from ..enums import (
    BillStatus,
    DistributionSide,
    GroupMode,
    YesNo,
    is_hours_unit,
    is_jornal_unit,
)
from ..hour_categories import HourCategoryEngine
from ..numeric import ZERO, safe_divide, to_decimal
from .base import AbstractBillingStrategy
from .hours import HoursStrategy
from .jornal import JornalStrategy

CREATION_WEEKLY_HOURS = Decimal("44")


class AlternativeServiceStrategy(AbstractBillingStrategy):
    mode = GroupMode.ALTERNATIVE_SERVICE

    def __init__(self, context, calendar=None):
        super().__init__(context, calendar)
        self._hours = HoursStrategy(context, self.calendar)
        self._jornal = JornalStrategy(context, self.calendar)

    @property
    def facturation_unit(self) -> str:
        return str(
            self.summary.get("facturation_unit") or self.summary.get("unit_of_measure") or ""
        ).upper()

    @property
    def paysheet_unit(self) -> str:
        return str(self.summary.get("unit_of_measure") or "").upper()

    @property
    def amount(self) -> Decimal:
        return to_decimal(self.group_input.get("amount"), "amount")

    def calculate(self):
        result = self._base_result()
        billing = self.calculate_billing()
        payroll = self.calculate_payroll()

        bill_hours = HourCategoryEngine.total_hours(self._hours.bill_hours)
        paysheet_hours = HourCategoryEngine.total_hours(self._hours.paysheet_hours)
        columns = HourCategoryEngine.to_columns(
            self._hours.bill_hours, DistributionSide.BILLING
        )
        columns.update(
            HourCategoryEngine.to_columns(self._hours.paysheet_hours, DistributionSide.PAYROLL)
        )

        empty = create_empty_compensatory()
        result.update(
            {
                "amount": self.amount,
                "billing_total": billing["total"],
                "payroll_total": payroll["total"],
                "bill_distribution": billing.get("distribution"),
                "paysheet_distribution": payroll.get("distribution"),
                "compensatory_bill": billing.get("compensatory") or empty,
                "compensatory_payroll": payroll.get("compensatory") or dict(empty),
                "number_of_hours": paysheet_hours or bill_hours,
                "columns": columns,
                "amount_based_rate": not (
                    is_hours_unit(self.facturation_unit)
                    or is_jornal_unit(self.facturation_unit)
                ),
            }
        )
        return result

    def calculate_billing(self) -> dict:
        if YesNo.is_yes(self.summary.get("group_tariff")):
            group_hours = self.submitted_group_hours()
            if group_hours is None:
                group_hours = to_decimal(self.context.get("recorded_group_hours"))
            return {"total": group_hours * self.facturation_tariff}

        if is_hours_unit(self.facturation_unit):
            return self._hours.calculate_billing()
        if is_jornal_unit(self.facturation_unit):
            return self._jornal.calculate_billing()
        return {"total": self.amount * self.facturation_tariff}

    def calculate_payroll(self) -> dict:
        if is_hours_unit(self.paysheet_unit):
            if self._recalculating:
                return self._hours.calculate_payroll()
            side = self._hours.calculate_payroll(with_compensatory=False)
            compensatory = self._creation_compensatory(side["total"])
            side["total"] += compensatory["amount"]
            side["compensatory"] = compensatory
            return side

        if is_jornal_unit(self.paysheet_unit):
            return self._jornal.calculate_payroll()
        return {"total": self.amount * self.paysheet_tariff}

    def _creation_compensatory(self, reference_total: Decimal):
        duration = self.submitted_group_hours() or ZERO
        hours = accrue_compensatory_hours(
            duration, CREATION_WEEKLY_HOURS, bill_status=BillStatus.COMPLETED
        )
        result = create_empty_compensatory()
        if hours == ZERO:
            return result

        amount = compensatory_amount(hours, self.worker_count, self.paysheet_tariff)
        result.update(
            {
                "hours": hours,
                "amount": amount,
                "percentage": safe_divide(amount, reference_total) * Decimal("100"),
                "include_in_total": True,
            }
        )
        return result
