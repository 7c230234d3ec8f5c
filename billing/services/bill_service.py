"""
Bill orchestration service.

BillService is the entry point for creating, updating and reading bills.
For each group it runs classify -> price -> apportion -> persist Bill ->
persist BillDetail rows -> reconcile durations as one transaction, with
the operation (creation) or the bill (updates) locked for the duration.
"""

import logging
import time
from decimal import Decimal
from typing import Dict, List, Optional

from django.core.paginator import EmptyPage, Paginator
from django.db import IntegrityError, transaction

from core.exceptions import APIError, ConflictError, NotFoundError, ValidationError
from core.logging_utils import err_tag, safe_log_worker
from core.pagination import StandardResultsSetPagination
from operations.models import Operation, OperationWorker, Worker
from operations.services.group_summary import build_group_summaries, get_group_summary

from .apportioner import Apportioner
from .calendar_policy import CalendarPolicy
from .classifier import classify_group
from .compensatory import CompensatoryAccrual
from .contracts import (
    CompensatoryResult,
    GroupBillInput,
    GroupCalculationContext,
    GroupSummary,
    ModeResult,
    create_empty_compensatory,
    validate_group_input,
)
from .enums import (
    BillStatus,
    DistributionSide,
    GroupMode,
    HourCategory,
    is_hours_unit,
    is_jornal_unit,
)
from .factory import BillingStrategyFactory, StrategyNotFoundError, get_billing_factory
from .hour_categories import HourCategoryEngine
from .numeric import ZERO, quantize_hours, quantize_money, to_decimal
from .reconciler import GroupDurationReconciler

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = StandardResultsSetPagination.page_size
MAX_PAGE_SIZE = StandardResultsSetPagination.max_page_size

RECALCULATION_FIELDS = (
    "bill_hours_distribution",
    "paysheet_hours_distribution",
    "amount",
    "pays",
    "group_hours",
)
GROUP_DATE_FIELDS = {
    "date_start_group": "date_start",
    "time_start_group": "time_start",
    "date_end_group": "date_end",
    "time_end_group": "time_end",
}


class BillService:
    """
    Orchestrator for group bills.

    Collaborators are injectable so tests can replace the calendar or the
    strategy registry.
    """

    def __init__(
        self,
        factory: Optional[BillingStrategyFactory] = None,
        calendar: Optional[CalendarPolicy] = None,
        reconciler: Optional[GroupDurationReconciler] = None,
        apportioner: Optional[Apportioner] = None,
    ):
        self.factory = factory or get_billing_factory()
        self.calendar = calendar or CalendarPolicy()
        self.reconciler = reconciler or GroupDurationReconciler()
        self.apportioner = apportioner or Apportioner()
        self.accrual = CompensatoryAccrual(self.calendar)

    # Creation

    def create(self, operation_id, groups: List[dict], user=None, fallback_amount=None) -> dict:
        """
        Create one bill per submitted group.

        Request-level problems (missing operation id, empty or malformed
        groups, groups that are not part of the operation) are rejected
        before anything is written. Group-level failures are collected and
        the remaining groups are still processed.

        Returns:
            dict: {"bills": [bill ids], "errors": [{group_id, code, message}]}

        Raises:
            ValidationError: invalid request
            NotFoundError: unknown operation
        """
        if not operation_id:
            raise ValidationError("operation_id is required", details={"field": "operation_id"})
        if not groups:
            raise ValidationError("At least one group is required", details={"field": "groups"})

        group_inputs = [validate_group_input(group) for group in groups]
        seen = set()
        for group_input in group_inputs:
            if group_input["id"] in seen:
                raise ValidationError(
                    f"Group {group_input['id']} is submitted twice",
                    details={"group_id": group_input["id"]},
                )
            seen.add(group_input["id"])

        operation = self._get_operation(operation_id)
        summaries = {s["group_id"]: s for s in build_group_summaries(operation)}
        unknown = [g["id"] for g in group_inputs if g["id"] not in summaries]
        if unknown:
            raise ValidationError(
                f"Groups {unknown} do not belong to operation {operation.pk}",
                details={"operation_id": operation.pk, "unknown_groups": unknown},
            )

        logger.info(
            f"Creating bills for operation {operation.pk}",
            extra={
                "operation_id": operation.pk,
                "group_count": len(group_inputs),
                "action": "bill_create_start",
            },
        )

        bills = []
        errors = []
        for group_input in group_inputs:
            group_id = group_input["id"]
            try:
                bill = self._create_group_bill(
                    operation.pk, summaries[group_id], group_input, user, fallback_amount
                )
                bills.append(bill.pk)
            except APIError as e:
                errors.append({"group_id": group_id, "code": e.code, "message": e.message})
                self._log_group_failure(operation.pk, group_id, e)
            except StrategyNotFoundError as e:
                errors.append({"group_id": group_id, "code": "STRATEGY_NOT_FOUND", "message": str(e)})
                self._log_group_failure(operation.pk, group_id, e)

        self.complete_operation_after_bill_creation(operation.pk)

        logger.info(
            f"Bills created for operation {operation.pk}",
            extra={
                "operation_id": operation.pk,
                "bills_created": len(bills),
                "bills_failed": len(errors),
                "action": "bill_create_complete",
            },
        )
        return {"bills": bills, "errors": errors}

    def _create_group_bill(
        self,
        operation_id,
        summary: GroupSummary,
        group_input: GroupBillInput,
        user=None,
        fallback_amount=None,
    ):
        from billing.models import Bill

        group_id = group_input["id"]
        try:
            with transaction.atomic():
                operation = Operation.objects.select_for_update().get(pk=operation_id)
                if Bill.objects.filter(operation_id=operation_id, group_id=group_id).exists():
                    raise ConflictError(
                        f"Group {group_id} of operation {operation_id} already has a bill",
                        details={"operation_id": operation_id, "group_id": group_id},
                    )

                mode = classify_group(summary)
                context = self._build_context(
                    operation,
                    summary,
                    group_input,
                    fallback_amount=fallback_amount,
                )
                result = self._calculate(mode, context)

                bill = Bill(
                    operation=operation,
                    group_id=group_id,
                    user=user if getattr(user, "is_authenticated", False) else None,
                    observation=group_input.get("observation") or "",
                    group_hours=(
                        quantize_hours(group_input["group_hours"])
                        if group_input.get("group_hours") is not None
                        else None
                    ),
                )
                self._apply_result(bill, result)
                bill.save()

                self._write_details(bill, result, group_input.get("pays"))
                self._reconcile_group(bill, recalculating=False)
        except IntegrityError as e:
            raise ConflictError(
                f"Group {group_id} of operation {operation_id} already has a bill",
                details={"operation_id": operation_id, "group_id": group_id},
            ) from e

        logger.info(
            f"Bill {bill.pk} created for group {group_id}",
            extra={
                "bill_id": bill.pk,
                "operation_id": operation_id,
                "group_id": group_id,
                "mode": str(mode),
                "total_bill": float(bill.total_bill),
                "total_paysheet": float(bill.total_paysheet),
                "action": "bill_created",
            },
        )
        return bill

    # Update

    def update(self, bill_id, data: dict, user=None):
        """
        Update a bill.

        Group dates rewrite the group's worker windows. Observation and
        amount are stored. Submitted distributions, amount and pays are
        priced first; durations are then reconciled and an ACTIVE bill is
        repriced against the reconciled group_hours. A COMPLETED bill only
        has its details refreshed against the current roster.

        Raises:
            NotFoundError: unknown bill
            ConflictError: total changes on a COMPLETED bill
        """
        wants_totals = any(field in data for field in RECALCULATION_FIELDS)

        with transaction.atomic():
            bill = self._get_bill(bill_id, lock=True)
            if bill.is_completed and wants_totals:
                raise ConflictError(
                    f"Bill {bill.pk} is completed; its totals cannot change",
                    details={"bill_id": bill.pk, "status": bill.status},
                )

            dates_changed = self._apply_group_dates(bill, data)

            if "observation" in data:
                bill.observation = data.get("observation") or ""
            if "amount" in data:
                bill.amount = quantize_money(data.get("amount"))

            if not bill.is_completed and wants_totals:
                self._recalculate(bill, data)
            else:
                bill.save()

            self._reconcile_group(bill)

        logger.info(
            f"Bill {bill.pk} updated",
            extra={
                "bill_id": bill.pk,
                "recalculated": wants_totals or dates_changed,
                "dates_changed": dates_changed,
                "action": "bill_updated",
            },
        )
        bill.refresh_from_db()
        return bill

    def _apply_group_dates(self, bill, data: dict) -> bool:
        changes = {
            field: data[key]
            for key, field in GROUP_DATE_FIELDS.items()
            if data.get(key) is not None
        }
        if not changes:
            return False

        windows = OperationWorker.objects.for_group(bill.operation_id, bill.group_id)
        if not windows.exists():
            raise NotFoundError(
                f"No worker windows for group {bill.group_id}",
                details={"operation_id": bill.operation_id, "group_id": bill.group_id},
            )
        windows.update(**changes)
        return True

    def update_status(self, bill_id, status):
        """
        Move a bill along ACTIVE -> COMPLETED.

        Raises:
            ValidationError: unknown status
            ConflictError: COMPLETED -> ACTIVE
        """
        try:
            target = BillStatus.from_string(status)
        except ValueError as e:
            raise ValidationError(str(e), details={"field": "status"}) from e

        with transaction.atomic():
            bill = self._get_bill(bill_id, lock=True)
            current = BillStatus(bill.status)
            if not current.can_transition_to(target):
                raise ConflictError(
                    f"Bill {bill.pk} cannot go from {current} to {target}",
                    details={"bill_id": bill.pk, "from": str(current), "to": str(target)},
                )
            if current != target:
                bill.status = target.value
                bill.save(update_fields=["status", "updated_at"])
                logger.info(
                    f"Bill {bill.pk} status changed to {target}",
                    extra={
                        "bill_id": bill.pk,
                        "from_status": str(current),
                        "to_status": str(target),
                        "action": "bill_status_changed",
                    },
                )
        return bill

    def remove(self, bill_id) -> dict:
        """Delete a bill with its details and re-sum the operation duration"""
        with transaction.atomic():
            bill = self._get_bill(bill_id, lock=True)
            operation_id = bill.operation_id
            group_id = bill.group_id
            bill.delete()
            op_duration = self.reconciler.recalculate_op_duration(operation_id)

        logger.info(
            f"Bill {bill_id} removed",
            extra={
                "bill_id": bill_id,
                "operation_id": operation_id,
                "group_id": group_id,
                "action": "bill_removed",
            },
        )
        return {"id": int(bill_id), "operation_id": operation_id, "op_duration": op_duration}

    def recalculate_bill_after_roster_change(self, bill_id):
        """
        Re-sync a bill with its group's current workers.

        ACTIVE bills are repriced from their stored distributions. COMPLETED
        bills keep their totals and distribution columns; only the worker
        roster and the per-worker split change.
        """
        with transaction.atomic():
            bill = self._get_bill(bill_id, lock=True)
            self._reconcile_group(bill)

        logger.info(
            f"Bill {bill.pk} re-synced with its roster",
            extra={
                "bill_id": bill.pk,
                "status": bill.status,
                "number_of_workers": bill.number_of_workers,
                "action": "bill_roster_resynced",
            },
        )
        bill.refresh_from_db()
        return bill

    def recalculate_group_hours(self, operation_id, group_id) -> dict:
        """Reconcile one group's duration on demand and bring its bill in line"""
        from billing.models import Bill

        operation = self._get_operation(operation_id)
        if not OperationWorker.objects.for_group(operation.pk, group_id).exists():
            raise NotFoundError(
                f"Group {group_id} not found in operation {operation.pk}",
                details={"operation_id": operation.pk, "group_id": str(group_id)},
            )

        with transaction.atomic():
            bill = (
                Bill.objects.select_related("operation")
                .select_for_update()
                .filter(operation_id=operation.pk, group_id=group_id)
                .first()
            )
            if bill is None:
                return self.reconciler.recalculate_group_hours(operation.pk, group_id)
            return self._reconcile_group(bill)

    # Reads

    def find_one(self, bill_id):
        return self._get_bill(bill_id)

    def find_all(self, filters: Optional[dict] = None):
        """Bills matching `filters` (see BillFilter), newest first"""
        from billing.filters import BillFilter

        queryset = self._base_queryset()
        if not filters:
            return queryset

        filterset = BillFilter(filters, queryset=queryset)
        if not filterset.is_valid():
            raise ValidationError(
                "Invalid filters", details={k: list(v) for k, v in filterset.errors.items()}
            )
        return filterset.qs

    def find_paginated(self, filters: Optional[dict] = None) -> dict:
        """
        Page through filtered bills.

        `page` starts at 1; `limit` is capped at 100.
        """
        filters = dict(filters or {})
        page_number = self._positive_int(filters.pop("page", None), 1)
        limit = min(self._positive_int(filters.pop("limit", None), DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

        paginator = Paginator(self.find_all(filters), limit)
        try:
            page = paginator.page(page_number)
            items = list(page.object_list)
        except EmptyPage:
            page = None
            items = []

        return {
            "results": items,
            "pagination": {
                "page": page_number,
                "limit": limit,
                "total": paginator.count,
                "total_pages": paginator.num_pages,
                "has_next": bool(page and page.has_next()),
                "has_previous": page_number > 1,
            },
        }

    def search_stats(self, filters: Optional[dict] = None) -> dict:
        filters = dict(filters or {})
        filters.pop("page", None)
        filters.pop("limit", None)

        start = time.time()
        total = self.find_all(filters).count()
        elapsed_ms = round((time.time() - start) * 1000, 2)

        if total > 10000:
            recommended = 50
        elif total > 1000:
            recommended = 25
        else:
            recommended = 10

        return {
            "total_count": total,
            "query_time_ms": elapsed_ms,
            "has_large_dataset": total > 1000,
            "recommended_page_size": recommended,
        }

    def compensatory_for(self, bill) -> CompensatoryResult:
        """
        Compensatory block shown with a bill.

        Only groups paid by the hour accrue compensatory rest; it is
        computed from the stored duration and never persisted.
        """
        summary = get_group_summary(bill.operation, bill.group_id)
        if summary is None or not is_hours_unit(summary.get("unit_of_measure")):
            return create_empty_compensatory()

        duration = to_decimal(bill.group_hours)
        if duration <= ZERO:
            paysheet = HourCategoryEngine.from_bill(bill, DistributionSide.PAYROLL)
            duration = HourCategoryEngine.ordinary_hours(paysheet)

        return self.accrual.result(
            duration,
            bill.number_of_workers,
            summary.get("paysheet_tariff"),
            start=summary["date_range"]["start"],
            end=summary["date_range"]["end"],
            bill_status=BillStatus(bill.status),
            include_in_total=True,
            reference_total=bill.total_paysheet,
        )

    def calendar_for(self, bill) -> dict:
        summary = get_group_summary(bill.operation, bill.group_id)
        if summary is not None:
            start, end = summary["date_range"]["start"], summary["date_range"]["end"]
        else:
            start, end = bill.operation.start, bill.operation.end
        return self.calendar.describe_range(start, end)

    # Operation completion

    def complete_operation_after_bill_creation(self, operation_id) -> bool:
        """
        Close an operation once every worker window has an end.

        Sets COMPLETED with the latest window end, re-sums op_duration over
        the operation's bills and releases the workers. Failures are logged
        and reported as False.
        """
        try:
            with transaction.atomic():
                operation = Operation.objects.select_for_update().filter(pk=operation_id).first()
                if operation is None:
                    return False

                windows = OperationWorker.objects.filter(operation_id=operation_id)
                if not windows.exists() or windows.open_windows().exists():
                    logger.debug(
                        f"Operation {operation_id} still has open windows",
                        extra={"operation_id": operation_id, "action": "operation_not_completed"},
                    )
                    return False

                latest_end = max(window.end for window in windows)

                operation.status = "COMPLETED"
                operation.date_end = latest_end.date()
                operation.time_end = latest_end.time()
                operation.save(update_fields=["status", "date_end", "time_end", "updated_at"])
                op_duration = self.reconciler.recalculate_op_duration(operation_id)

                workers = Worker.objects.filter(pk__in=windows.values("worker_id"))
                for worker in workers:
                    logger.debug("Releasing worker", extra=safe_log_worker(worker, "worker_released"))
                workers.update(status="AVAILABLE")
        except Exception as e:
            logger.error(
                f"Could not complete operation {operation_id}",
                extra={
                    "operation_id": operation_id,
                    "error": err_tag(e),
                    "action": "operation_completion_failed",
                },
                exc_info=True,
            )
            return False

        logger.info(
            f"Operation {operation_id} completed",
            extra={
                "operation_id": operation_id,
                "op_duration": float(op_duration),
                "action": "operation_completed",
            },
        )
        return True

    # Internals

    def _calculate(self, mode: GroupMode, context: GroupCalculationContext) -> ModeResult:
        calculator = self.factory.create_calculator(mode, context, self.calendar)
        return calculator.calculate_with_logging()

    def _build_context(
        self,
        operation,
        summary: GroupSummary,
        group_input: GroupBillInput,
        bill_status: Optional[BillStatus] = None,
        recorded_group_hours=None,
        fallback_amount=None,
        recalculating: bool = False,
    ) -> GroupCalculationContext:
        return {
            "summary": summary,
            "group_input": group_input,
            "operation_id": operation.pk,
            "operation_start": operation.start,
            "operation_end": operation.end,
            "bill_status": bill_status,
            "recorded_group_hours": recorded_group_hours,
            "fallback_amount": to_decimal(fallback_amount, "fallback_amount"),
            "recalculating": recalculating,
            "extra": {},
        }

    def _apply_result(self, bill, result: ModeResult) -> None:
        bill.week_number = result["week_number"]
        bill.number_of_workers = result["worker_count"]
        bill.number_of_hours = quantize_hours(result["number_of_hours"])
        bill.total_bill = quantize_money(result["billing_total"])
        bill.total_paysheet = quantize_money(result["payroll_total"])
        if result["mode"].uses_amount_pay_rate:
            bill.amount = quantize_money(result["amount"])

        columns = result.get("columns") or {}
        for category in HourCategory:
            for side in DistributionSide:
                field = category.column(side)
                setattr(bill, field, quantize_hours(columns.get(field, ZERO)))

    def _write_details(self, bill, result: ModeResult, pays) -> None:
        from billing.models import BillDetail

        shares = self.apportioner.split(
            bill.total_bill,
            bill.total_paysheet,
            result["workers"],
            pays,
            result["mode"],
            amount=result.get("amount"),
            amount_based_rate=result.get("amount_based_rate"),
            group_id=bill.group_id,
        )
        windows = {
            window.worker_id: window
            for window in OperationWorker.objects.for_group(bill.operation_id, bill.group_id)
        }

        bill.details.all().delete()
        for share in shares:
            window = windows.get(share["worker_id"])
            if window is None:
                raise NotFoundError(
                    f"Worker {share['worker_id']} has no window in group {bill.group_id}",
                    details={"group_id": bill.group_id, "worker_id": share["worker_id"]},
                )
            BillDetail.objects.create(
                bill=bill,
                operation_worker=window,
                pay_rate=share["pay_rate"],
                pay_unit=share["pay_unit"],
                total_bill=share["total_bill"],
                total_paysheet=share["total_paysheet"],
            )

    def _stored_pays(self, bill) -> List[Dict]:
        return [
            {"id_worker": detail.operation_worker.worker_id, "pay": detail.pay_unit}
            for detail in bill.details.select_related("operation_worker")
        ]

    def _group_summary(self, bill) -> GroupSummary:
        summary = get_group_summary(bill.operation, bill.group_id)
        if summary is None:
            raise NotFoundError(
                f"Group {bill.group_id} no longer exists in operation {bill.operation_id}",
                details={"operation_id": bill.operation_id, "group_id": bill.group_id},
            )
        return summary

    def _reconcile_group(self, bill, recalculating: bool = True) -> dict:
        """
        Reconcile the bill's group duration, then bring the bill in line.

        ACTIVE bills are repriced with the reconciled group_hours, since the
        hourly compensatory depends on it. COMPLETED bills keep their totals
        and only re-split them over the current roster.
        """
        durations = self.reconciler.recalculate_group_hours(bill.operation_id, bill.group_id)
        bill.refresh_from_db()
        if bill.is_completed or get_group_summary(bill.operation, bill.group_id) is None:
            self._refresh_details(bill)
            bill.save()
        else:
            self._recalculate(bill, {}, recalculating=recalculating)
        return durations

    def _recalculate(self, bill, data: dict, recalculating: bool = True) -> None:
        """Reprice an ACTIVE bill from submitted values, falling back to stored ones"""
        summary = self._group_summary(bill)
        raw = {
            "id": bill.group_id,
            "bill_hours_distribution": data.get("bill_hours_distribution")
            or HourCategoryEngine.from_bill(bill, DistributionSide.BILLING),
            "paysheet_hours_distribution": data.get("paysheet_hours_distribution")
            or HourCategoryEngine.from_bill(bill, DistributionSide.PAYROLL),
            "amount": data["amount"] if data.get("amount") is not None else bill.amount,
            "group_hours": (
                data["group_hours"] if data.get("group_hours") is not None else bill.group_hours
            ),
            "observation": bill.observation,
            "pays": data.get("pays") or self._stored_pays(bill),
        }
        group_input = validate_group_input(raw)

        mode = classify_group(summary)
        context = self._build_context(
            bill.operation,
            summary,
            group_input,
            bill_status=BillStatus(bill.status),
            recorded_group_hours=bill.group_hours,
            fallback_amount=bill.amount,
            recalculating=recalculating,
        )
        result = self._calculate(mode, context)
        self._apply_result(bill, result)
        if group_input.get("group_hours") is not None:
            bill.group_hours = quantize_hours(group_input["group_hours"])
            bill.number_of_hours = bill.group_hours
        bill.save()
        self._write_details(bill, result, group_input["pays"])

    def _refresh_details(self, bill) -> None:
        """Split the bill's current totals over the group's current workers"""
        summary = get_group_summary(bill.operation, bill.group_id)
        if summary is None:
            bill.details.all().delete()
            bill.number_of_workers = 0
            return

        stored = {pay["id_worker"]: pay["pay"] for pay in self._stored_pays(bill)}
        pays = [
            {"id_worker": worker["id"], "pay": stored.get(worker["id"], Decimal("1"))}
            for worker in summary["workers"]
        ]
        mode = classify_group(summary)
        result = {
            "workers": summary["workers"],
            "mode": mode,
            "amount": bill.amount,
            "amount_based_rate": _uses_amount_rate(mode, summary),
        }
        bill.number_of_workers = summary["worker_count"]
        self._write_details(bill, result, pays)

    def _base_queryset(self):
        from billing.models import Bill

        return Bill.objects.select_related("operation", "user").prefetch_related(
            "details__operation_worker__worker"
        )

    def _get_bill(self, bill_id, lock: bool = False):
        from billing.models import Bill

        queryset = Bill.objects.select_related("operation")
        if lock:
            queryset = queryset.select_for_update()
        bill = queryset.filter(pk=bill_id).first()
        if bill is None:
            raise NotFoundError(f"Bill {bill_id} not found", details={"bill_id": bill_id})
        return bill

    def _get_operation(self, operation_id) -> Operation:
        operation = Operation.objects.filter(pk=operation_id).first()
        if operation is None:
            raise NotFoundError(
                f"Operation {operation_id} not found", details={"operation_id": operation_id}
            )
        return operation

    @staticmethod
    def _positive_int(value, default: int) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        return number if number > 0 else default

    def _log_group_failure(self, operation_id, group_id, error: Exception) -> None:
        logger.warning(
            f"Group {group_id} of operation {operation_id} was not billed",
            extra={
                "operation_id": operation_id,
                "group_id": group_id,
                "error": err_tag(error),
                "error_type": type(error).__name__,
                "action": "bill_group_failed",
            },
        )


def _uses_amount_rate(mode: GroupMode, summary: GroupSummary) -> bool:
    if mode != GroupMode.ALTERNATIVE_SERVICE:
        return mode.uses_amount_pay_rate
    unit = summary.get("facturation_unit") or summary.get("unit_of_measure")
    return not (is_hours_unit(unit) or is_jornal_unit(unit))


def get_bill_service() -> BillService:
    return BillService()
