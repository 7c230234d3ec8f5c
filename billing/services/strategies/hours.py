"""
Hourly groups.

Both sides are priced with the category multipliers against their own
distribution and tariff. Compensatory rest is always added to payroll and
added to billing only when the tariff's compensatory flag is YES. A
`full_tariff` of YES bills tariff x raw hours x workers instead.
"""

from decimal import Decimal
from typing import Optional

from ..contracts import HoursDistribution, create_empty_compensatory
from ..enums import DistributionSide, GroupMode, YesNo
from ..hour_categories import HourCategoryEngine
from ..numeric import ZERO, to_decimal
from .base import AbstractBillingStrategy


class HoursStrategy(AbstractBillingStrategy):
    mode = GroupMode.HOURS

    def calculate(self):
        result = self._base_result()
        billing = self.calculate_billing()
        payroll = self.calculate_payroll()

        result.update(
            {
                "billing_total": billing["total"],
                "payroll_total": payroll["total"],
                "bill_distribution": billing["distribution"],
                "paysheet_distribution": payroll["distribution"],
                "compensatory_bill": billing["compensatory"],
                "compensatory_payroll": payroll["compensatory"],
                "worked_hours": self.group_duration(self.bill_hours),
                "number_of_hours": billing["distribution"]["total_hours"],
                "columns": self.columns(),
            }
        )
        return result

    @property
    def bill_hours(self) -> HoursDistribution:
        return self.group_input.get("bill_hours_distribution") or {}

    @property
    def paysheet_hours(self) -> HoursDistribution:
        return self.group_input.get("paysheet_hours_distribution") or {}

    def group_duration(self, distribution: HoursDistribution) -> Decimal:
        """Recorded group_hours first, then the submitted value, then HOD + HON"""
        recorded = self.context.get("recorded_group_hours")
        if recorded is not None and to_decimal(recorded) > ZERO:
            return to_decimal(recorded, "recorded_group_hours")
        submitted = self.submitted_group_hours()
        if submitted is not None and submitted > ZERO:
            return submitted
        return HourCategoryEngine.ordinary_hours(distribution)

    def calculate_billing(self) -> dict:
        return self._side(
            DistributionSide.BILLING,
            self.bill_hours,
            self.facturation_tariff,
            include_compensatory=YesNo.is_yes(self.summary.get("compensatory")),
        )

    def calculate_payroll(self, with_compensatory: bool = True) -> dict:
        return self._side(
            DistributionSide.PAYROLL,
            self.paysheet_hours,
            self.paysheet_tariff,
            include_compensatory=True,
            with_compensatory=with_compensatory,
        )

    def _side(
        self,
        side: DistributionSide,
        distribution: HoursDistribution,
        tariff: Decimal,
        include_compensatory: bool,
        with_compensatory: bool = True,
    ) -> dict:
        priced = HourCategoryEngine.calculate(distribution, tariff, self.worker_count, side)
        if YesNo.is_yes(self.summary.get("full_tariff")):
            priced["total_amount"] = HourCategoryEngine.flat_total(
                distribution, tariff, self.worker_count
            )

        total = priced["total_amount"]
        compensatory = create_empty_compensatory()
        if with_compensatory:
            compensatory = self._compensatory(
                distribution, tariff, total, include_compensatory
            )
            if compensatory["include_in_total"]:
                total += compensatory["amount"]

        return {"total": total, "distribution": priced, "compensatory": compensatory}

    def _compensatory(
        self,
        distribution: HoursDistribution,
        tariff: Decimal,
        reference_total: Decimal,
        include_in_total: bool,
        weekly_cap: Optional[Decimal] = None,
    ):
        return self.accrual.result(
            self.group_duration(distribution),
            self.worker_count,
            tariff,
            start=self.group_start,
            end=self.group_end,
            bill_status=self._bill_status,
            include_in_total=include_in_total,
            weekly_cap=weekly_cap,
            reference_total=reference_total,
        )

    def columns(self) -> dict:
        values = HourCategoryEngine.to_columns(self.bill_hours, DistributionSide.BILLING)
        values.update(
            HourCategoryEngine.to_columns(self.paysheet_hours, DistributionSide.PAYROLL)
        )
        return values
