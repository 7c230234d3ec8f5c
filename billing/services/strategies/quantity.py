from decimal import Decimal

from ..enums import GroupMode
from ..numeric import to_decimal
from .base import AbstractBillingStrategy


class QuantityStrategy(AbstractBillingStrategy):
    """Flat groups: amount x facturation_tariff and amount x paysheet_tariff"""

    mode = GroupMode.QUANTITY

    def calculate(self):
        amount = self.amount
        result = self._base_result()
        submitted_hours = self.submitted_group_hours()
        result.update(
            {
                "amount": amount,
                "billing_total": amount * self.facturation_tariff,
                "payroll_total": amount * self.paysheet_tariff,
                "number_of_hours": submitted_hours or Decimal("0"),
            }
        )
        return result

    @property
    def amount(self) -> Decimal:
        """Submitted amount, or the caller's fallback quantity when omitted"""
        submitted = self.group_input.get("amount")
        if submitted is not None:
            return to_decimal(submitted, "amount")
        return to_decimal(self.context.get("fallback_amount"), "fallback_amount")
