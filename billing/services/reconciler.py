"""
Group and operation duration reconciliation.

A group's duration is the mean length of its workers' time windows; the
operation's duration is the sum of its groups' durations. Both figures are
written back whenever a worker window of the group changes.
"""

import logging
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import Sum

from operations.models import Operation, OperationWorker

from .numeric import ZERO, quantize_hours

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = Decimal("3600")


def window_hours(start, end) -> Optional[Decimal]:
    """Length of a window in hours; inverted windows are swapped, empty ones ignored"""
    if start is None or end is None:
        return None
    if end < start:
        logger.warning(
            "Inverted worker window swapped",
            extra={"start": start.isoformat(), "end": end.isoformat(), "action": "window_swapped"},
        )
        start, end = end, start
    seconds = Decimal(int((end - start).total_seconds()))
    if seconds <= ZERO:
        return None
    return seconds / SECONDS_PER_HOUR


class GroupDurationReconciler:
    def compute_group_hours(self, operation_id, group_id) -> Decimal:
        """Mean window length of the group, rounded to 2 decimals (0 without windows)"""
        durations = []
        for window in OperationWorker.objects.for_group(operation_id, group_id):
            hours = window_hours(window.start, window.end)
            if hours is not None:
                durations.append(hours)

        if not durations:
            return ZERO
        return quantize_hours(sum(durations, ZERO) / Decimal(len(durations)))

    def recalculate_group_hours(self, operation_id, group_id) -> dict:
        """
        Recompute and persist the group's duration and then the operation's.

        Returns:
            dict: {"group_hours": Decimal, "op_duration": Decimal}
        """
        from billing.models import Bill

        with transaction.atomic():
            group_hours = self.compute_group_hours(operation_id, group_id)
            updated = Bill.objects.filter(
                operation_id=operation_id, group_id=str(group_id)
            ).update(group_hours=group_hours, number_of_hours=group_hours)
            op_duration = self.recalculate_op_duration(operation_id)

        logger.info(
            f"Group {group_id} duration reconciled",
            extra={
                "operation_id": operation_id,
                "group_id": str(group_id),
                "group_hours": float(group_hours),
                "op_duration": float(op_duration),
                "bills_updated": updated,
                "action": "group_hours_recalculated",
            },
        )
        return {"group_hours": group_hours, "op_duration": op_duration}

    def recalculate_op_duration(self, operation_id) -> Decimal:
        """Sum of the group durations of every bill of the operation"""
        from billing.models import Bill

        total = Bill.objects.filter(operation_id=operation_id).aggregate(
            total=Sum("group_hours")
        )["total"]
        op_duration = quantize_hours(total or ZERO)
        Operation.objects.filter(pk=operation_id).update(op_duration=op_duration)

        logger.debug(
            f"Operation {operation_id} duration set to {op_duration}",
            extra={
                "operation_id": operation_id,
                "op_duration": float(op_duration),
                "action": "op_duration_recalculated",
            },
        )
        return op_duration


def get_reconciler() -> GroupDurationReconciler:
    return GroupDurationReconciler()
