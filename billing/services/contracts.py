"""
Data contracts for billing calculations.

This module defines the structures that flow between the classifier, the
calculation strategies, the apportioner and the orchestrator. Inputs are
normalized here once so the strategies can rely on Decimal values and
complete eight-category distributions.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, TypedDict

from core.exceptions import ValidationError
from operations.services.group_summary import GroupSummary, WorkerRef

from .enums import BillStatus, GroupMode, HourCategory
from .numeric import ZERO, to_decimal

__all__ = [
    "GroupSummary",
    "WorkerRef",
    "HoursDistribution",
    "WorkerPay",
    "GroupBillInput",
    "CategoryDetail",
    "DistributionResult",
    "CompensatoryResult",
    "ModeResult",
    "GroupCalculationContext",
    "normalize_distribution",
    "validate_group_input",
    "create_empty_distribution",
    "create_empty_distribution_result",
    "create_empty_compensatory",
]


# Eight named hour-category counts, keyed by HourCategory value
HoursDistribution = Dict[str, Decimal]


class WorkerPay(TypedDict):
    id_worker: int
    pay: Decimal


class GroupBillInput(TypedDict, total=False):
    """Client-submitted billing data for one group"""

    id: str
    bill_hours_distribution: HoursDistribution
    paysheet_hours_distribution: HoursDistribution
    amount: Optional[Decimal]
    group_hours: Optional[Decimal]
    observation: str
    pays: List[WorkerPay]


class CategoryDetail(TypedDict):
    hours: Decimal
    multiplier: Decimal
    amount: Decimal


class DistributionDetails(TypedDict):
    worker_count: int
    tariff: Decimal
    hours_detail: Dict[str, CategoryDetail]


class DistributionResult(TypedDict):
    total_hours: Decimal
    total_amount: Decimal
    details: DistributionDetails


class CompensatoryResult(TypedDict, total=False):
    hours: Decimal
    amount: Decimal
    percentage: Decimal
    include_in_total: bool


class Schedule(TypedDict):
    start: Optional[datetime]
    end: Optional[datetime]


class ModeResult(TypedDict, total=False):
    """Output of one calculation strategy for one group"""

    group_id: str
    mode: GroupMode
    week_number: int
    worker_count: int
    billing_total: Decimal
    payroll_total: Decimal
    bill_distribution: Optional[DistributionResult]
    paysheet_distribution: Optional[DistributionResult]
    compensatory_bill: CompensatoryResult
    compensatory_payroll: CompensatoryResult
    amount: Decimal
    workers: List[WorkerRef]
    schedule: Schedule
    worked_hours: Decimal
    number_of_hours: Decimal
    columns: Dict[str, Decimal]
    amount_based_rate: bool


class GroupCalculationContext(TypedDict, total=False):
    """Everything a strategy needs to price one group"""

    summary: GroupSummary
    group_input: GroupBillInput
    operation_id: int
    operation_start: Optional[datetime]
    operation_end: Optional[datetime]
    bill_status: Optional[BillStatus]
    recorded_group_hours: Optional[Decimal]
    fallback_amount: Decimal
    recalculating: bool
    extra: Dict[str, Any]


def create_empty_distribution() -> HoursDistribution:
    return {category.value: ZERO for category in HourCategory}


def normalize_distribution(raw, field: str = "distribution") -> HoursDistribution:
    """
    Complete a submitted distribution to all eight categories.

    Missing categories read as 0. Unknown keys are rejected, as are
    negative hours.
    """
    distribution = create_empty_distribution()
    if not raw:
        return distribution
    if not isinstance(raw, dict):
        raise ValidationError(f"{field} must be an object of hour categories")

    unknown = [key for key in raw if key not in distribution]
    if unknown:
        raise ValidationError(
            f"Unknown hour categories in {field}: {unknown}",
            details={"field": field, "unknown": unknown},
        )

    for key, value in raw.items():
        hours = to_decimal(value, f"{field}.{key}")
        if hours < ZERO:
            raise ValidationError(
                f"{field}.{key} cannot be negative",
                details={"field": f"{field}.{key}", "value": str(value)},
            )
        distribution[key] = hours
    return distribution


def validate_group_input(raw: dict) -> GroupBillInput:
    """
    Validate and normalize one GroupBillInput.

    Raises:
        ValidationError: missing group id, negative weights, duplicated workers
    """
    if not isinstance(raw, dict):
        raise ValidationError("Each group must be an object")

    group_id = raw.get("id")
    if group_id is None or str(group_id).strip() == "":
        raise ValidationError("Group id is required", details={"field": "id"})

    pays = []
    seen = set()
    for entry in raw.get("pays") or []:
        worker_id = entry.get("id_worker")
        if worker_id is None:
            raise ValidationError(
                "Every pay entry needs id_worker",
                details={"group_id": str(group_id)},
            )
        if worker_id in seen:
            raise ValidationError(
                f"Worker {worker_id} appears twice in pays",
                details={"group_id": str(group_id), "worker_id": worker_id},
            )
        seen.add(worker_id)

        weight = to_decimal(entry.get("pay"), "pays.pay", default=Decimal("1"))
        if weight < ZERO:
            raise ValidationError(
                f"Pay weight for worker {worker_id} cannot be negative",
                details={"group_id": str(group_id), "worker_id": worker_id},
            )
        pays.append({"id_worker": int(worker_id), "pay": weight})

    group: GroupBillInput = {
        "id": str(group_id).strip(),
        "bill_hours_distribution": normalize_distribution(
            raw.get("bill_hours_distribution"), "billHoursDistribution"
        ),
        "paysheet_hours_distribution": normalize_distribution(
            raw.get("paysheet_hours_distribution"), "paysheetHoursDistribution"
        ),
        "amount": (
            None if raw.get("amount") is None else to_decimal(raw["amount"], "amount")
        ),
        "group_hours": (
            None
            if raw.get("group_hours") is None
            else to_decimal(raw["group_hours"], "group_hours")
        ),
        "observation": raw.get("observation") or "",
        "pays": pays,
    }
    return group


def create_empty_distribution_result(worker_count: int = 0, tariff=ZERO) -> DistributionResult:
    return {
        "total_hours": ZERO,
        "total_amount": ZERO,
        "details": {
            "worker_count": worker_count,
            "tariff": to_decimal(tariff),
            "hours_detail": {},
        },
    }


def create_empty_compensatory() -> CompensatoryResult:
    return {
        "hours": ZERO,
        "amount": ZERO,
        "percentage": ZERO,
        "include_in_total": False,
    }
