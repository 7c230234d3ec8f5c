"""
Base strategy interface for group billing calculations.

Each calculation mode (JORNAL, HOURS, ALTERNATIVE_SERVICE, QUANTITY) is a
strategy that prices one group from a GroupCalculationContext and returns
a ModeResult. Strategies are pure with respect to persistence: they read
the calendar and configuration but never write.
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from ..calendar_policy import CalendarPolicy
from ..compensatory import CompensatoryAccrual
from ..contracts import (
    GroupBillInput,
    GroupCalculationContext,
    GroupSummary,
    ModeResult,
    WorkerRef,
    create_empty_compensatory,
)
from ..enums import BillStatus, GroupMode, HourCategory
from ..numeric import ZERO, to_decimal

logger = logging.getLogger(__name__)


class AbstractBillingStrategy(ABC):
    """
    Abstract base class for all group calculation strategies.

    Provides the shared context accessors, the empty result skeleton and
    the logging wrapper. Errors are logged and re-raised so the caller can
    record the failing group and continue with its siblings.
    """

    mode: GroupMode = None

    def __init__(
        self,
        context: GroupCalculationContext,
        calendar: Optional[CalendarPolicy] = None,
    ):
        """
        Args:
            context: summary, submitted input and operation data for one group
            calendar: calendar policy (a default one is built when omitted)
        """
        self.context = context
        self.logger = logger
        self.calendar = calendar or CalendarPolicy()
        self.accrual = CompensatoryAccrual(self.calendar)

        self.summary: GroupSummary = context["summary"]
        self.group_input: GroupBillInput = context["group_input"]
        self._operation_id = context.get("operation_id")
        self._group_id = self.summary["group_id"]
        self._bill_status: Optional[BillStatus] = context.get("bill_status")
        self._recalculating = context.get("recalculating", False)

        self._strategy_name = self.__class__.__name__

    @abstractmethod
    def calculate(self) -> ModeResult:
        """
        Price the group.

        Returns:
            ModeResult: totals, distributions and compensatory blocks
        """
        pass

    def calculate_with_logging(self) -> ModeResult:
        """Entry point wrapping calculate() with start/success/error records"""
        self._log_calculation_start()
        try:
            result = self.calculate()
        except Exception as e:
            self._log_calculation_error(e)
            raise
        self._log_calculation_success(result)
        return result

    # Context accessors

    @property
    def workers(self) -> List[WorkerRef]:
        return self.summary.get("workers") or []

    @property
    def worker_count(self) -> int:
        return int(self.summary.get("worker_count") or len(self.workers))

    @property
    def facturation_tariff(self) -> Decimal:
        return to_decimal(self.summary.get("facturation_tariff"), "facturation_tariff")

    @property
    def paysheet_tariff(self) -> Decimal:
        return to_decimal(self.summary.get("paysheet_tariff"), "paysheet_tariff")

    @property
    def group_start(self):
        return (self.summary.get("date_range") or {}).get("start")

    @property
    def group_end(self):
        return (self.summary.get("date_range") or {}).get("end")

    def submitted_group_hours(self) -> Optional[Decimal]:
        value = self.group_input.get("group_hours")
        return None if value is None else to_decimal(value, "group_hours")

    def _week_number(self, value) -> int:
        return self.calendar.week_number(value) if value else 0

    def _base_result(self) -> ModeResult:
        return {
            "group_id": self._group_id,
            "mode": self.mode,
            "week_number": self._week_number(self.group_start),
            "worker_count": self.worker_count,
            "billing_total": ZERO,
            "payroll_total": ZERO,
            "bill_distribution": None,
            "paysheet_distribution": None,
            "compensatory_bill": create_empty_compensatory(),
            "compensatory_payroll": create_empty_compensatory(),
            "amount": ZERO,
            "workers": self.workers,
            "schedule": {"start": self.group_start, "end": self.group_end},
            "worked_hours": ZERO,
            "number_of_hours": ZERO,
            "columns": {},
            "amount_based_rate": self.mode.uses_amount_pay_rate if self.mode else False,
        }

    @staticmethod
    def _extra_categories() -> List[HourCategory]:
        return [category for category in HourCategory if category.is_extra]

    # Logging

    def _log_calculation_start(self) -> None:
        self.logger.info(
            f"Starting {self._strategy_name} group calculation",
            extra={
                "strategy": self._strategy_name,
                "operation_id": self._operation_id,
                "group_id": self._group_id,
                "worker_count": self.worker_count,
                "recalculating": self._recalculating,
                "action": "group_calculation_start",
            },
        )

    def _log_calculation_success(self, result: ModeResult) -> None:
        self.logger.info(
            f"{self._strategy_name} calculation completed",
            extra={
                "strategy": self._strategy_name,
                "operation_id": self._operation_id,
                "group_id": self._group_id,
                "billing_total": float(result["billing_total"]),
                "payroll_total": float(result["payroll_total"]),
                "action": "group_calculation_success",
            },
        )

    def _log_calculation_error(self, error: Exception) -> None:
        self.logger.error(
            f"{self._strategy_name} calculation failed",
            extra={
                "strategy": self._strategy_name,
                "operation_id": self._operation_id,
                "group_id": self._group_id,
                "error_type": type(error).__name__,
                "action": "group_calculation_error",
            },
            exc_info=True,
        )
