"""
Group summaries of an operation.

A group is the set of OperationWorker rows sharing a `group_id`. Its
summary combines the group's tariff flags and rates with the worker list
and the date range spanned by the workers' time windows. Summaries are
read-only inputs of the billing engine.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, TypedDict

from ..models import Operation

logger = logging.getLogger(__name__)


class WorkerRef(TypedDict):
    id: int
    name: str
    dni: str


class DateRange(TypedDict):
    start: Optional[datetime]
    end: Optional[datetime]


class GroupSummary(TypedDict):
    group_id: str
    date_range: DateRange
    unit_of_measure: str
    alternative_paid_service: str
    group_tariff: str
    full_tariff: str
    compensatory: str
    facturation_unit: Optional[str]
    facturation_tariff: Decimal
    paysheet_tariff: Decimal
    agreed_hours: Optional[Decimal]
    worker_count: int
    workers: List[WorkerRef]
    code_tariff: str
    task: str
    site: str
    sub_site: str


def _tariff_fields(tariff) -> dict:
    if tariff is None:
        return {
            "unit_of_measure": "",
            "alternative_paid_service": "NO",
            "group_tariff": "NO",
            "full_tariff": "NO",
            "compensatory": "NO",
            "facturation_unit": None,
            "facturation_tariff": Decimal("0"),
            "paysheet_tariff": Decimal("0"),
            "agreed_hours": None,
            "code_tariff": "",
        }
    return {
        "unit_of_measure": (tariff.unit_of_measure or "").upper(),
        "alternative_paid_service": tariff.alternative_paid_service,
        "group_tariff": tariff.group_tariff,
        "full_tariff": tariff.full_tariff,
        "compensatory": tariff.compensatory,
        "facturation_unit": (tariff.facturation_unit or "").upper() or None,
        "facturation_tariff": tariff.facturation_tariff,
        "paysheet_tariff": tariff.paysheet_tariff,
        "agreed_hours": tariff.agreed_hours,
        "code_tariff": tariff.code,
    }


def build_group_summaries(operation: Operation) -> List[GroupSummary]:
    """Build one summary per group of the operation, ordered by group id"""
    rows = (
        operation.worker_windows.select_related("worker", "tariff")
        .order_by("group_id", "id")
    )

    grouped = {}
    for row in rows:
        grouped.setdefault(row.group_id, []).append(row)

    summaries = []
    for group_id, group_rows in grouped.items():
        tariff = next((r.tariff for r in group_rows if r.tariff_id), None)
        if tariff is None:
            logger.warning(
                f"Group {group_id} of operation {operation.pk} has no tariff",
                extra={
                    "operation_id": operation.pk,
                    "group_id": group_id,
                    "action": "group_without_tariff",
                },
            )

        starts = [r.start for r in group_rows if r.start]
        ends = [r.end for r in group_rows if r.end]

        workers = []
        seen = set()
        for row in group_rows:
            if row.worker_id in seen:
                continue
            seen.add(row.worker_id)
            workers.append(
                {"id": row.worker_id, "name": row.worker.name, "dni": row.worker.dni}
            )

        summary = {
            "group_id": str(group_id),
            "date_range": {
                "start": min(starts) if starts else operation.start,
                "end": max(ends) if ends else operation.end,
            },
            "worker_count": len(workers),
            "workers": workers,
            "task": next((r.task for r in group_rows if r.task), ""),
            "site": operation.site,
            "sub_site": operation.sub_site,
        }
        summary.update(_tariff_fields(tariff))
        summaries.append(summary)

    return summaries


def get_group_summary(operation: Operation, group_id) -> Optional[GroupSummary]:
    """Summary of a single group, or None when the operation has no such group"""
    for summary in build_group_summaries(operation):
        if summary["group_id"] == str(group_id):
            return summary
    return None
