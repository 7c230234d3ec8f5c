from datetime import time
from decimal import Decimal

from billing.models import Bill
from billing.services.reconciler import GroupDurationReconciler
from operations.models import Operation

from .base import BillingTestBase


class GroupDurationReconcilerTest(BillingTestBase):
    def setUp(self):
        super().setUp()
        self.reconciler = GroupDurationReconciler()
        self.operation = self.make_operation()
        self.tariff = self.make_tariff()

    def test_operation_duration_is_the_sum_of_group_hours(self):
        self.make_group(self.operation, "a", self.tariff, workers=2, end=(None, time(11, 0)))
        self.make_group(self.operation, "b", self.tariff, workers=1, end=(None, time(9, 15)))
        Bill.objects.create(operation=self.operation, group_id="a")
        Bill.objects.create(operation=self.operation, group_id="b")

        first = self.reconciler.recalculate_group_hours(self.operation.pk, "a")
        second = self.reconciler.recalculate_group_hours(self.operation.pk, "b")

        self.assertEqual(first["group_hours"], Decimal("5.00"))
        self.assertEqual(second["group_hours"], Decimal("3.25"))
        self.assertEqual(second["op_duration"], Decimal("8.25"))
        self.operation.refresh_from_db()
        self.assertEqual(self.operation.op_duration, Decimal("8.25"))

    def test_group_hours_is_the_mean_window(self):
        self.add_window(self.operation, self.make_worker(), "a", self.tariff, end=(None, time(10, 0)))
        self.add_window(self.operation, self.make_worker(), "a", self.tariff, end=(None, time(12, 0)))
        bill = Bill.objects.create(operation=self.operation, group_id="a")

        self.reconciler.recalculate_group_hours(self.operation.pk, "a")

        bill.refresh_from_db()
        self.assertEqual(bill.group_hours, Decimal("5.00"))
        self.assertEqual(bill.number_of_hours, Decimal("5.00"))

    def test_inverted_window_is_swapped(self):
        self.add_window(
            self.operation,
            self.make_worker(),
            "a",
            self.tariff,
            start=(None, time(14, 0)),
            end=(None, time(6, 0)),
        )
        self.assertEqual(self.reconciler.compute_group_hours(self.operation.pk, "a"), Decimal("8.00"))

    def test_open_and_empty_windows_are_ignored(self):
        self.add_window(self.operation, self.make_worker(), "a", self.tariff, end=(None, None))
        self.add_window(
            self.operation, self.make_worker(), "a", self.tariff, end=(None, time(6, 0))
        )
        self.add_window(self.operation, self.make_worker(), "a", self.tariff)

        self.assertEqual(self.reconciler.compute_group_hours(self.operation.pk, "a"), Decimal("8.00"))

    def test_no_valid_window_gives_zero(self):
        self.add_window(self.operation, self.make_worker(), "a", self.tariff, end=(None, None))
        self.assertEqual(self.reconciler.compute_group_hours(self.operation.pk, "a"), Decimal("0"))

    def test_recalculation_is_idempotent(self):
        self.make_group(self.operation, "a", self.tariff, workers=3, end=(None, time(13, 20)))
        Bill.objects.create(operation=self.operation, group_id="a")

        first = self.reconciler.recalculate_group_hours(self.operation.pk, "a")
        second = self.reconciler.recalculate_group_hours(self.operation.pk, "a")

        self.assertEqual(first, second)
        self.assertEqual(first["group_hours"], Decimal("7.33"))

    def test_op_duration_without_bills_is_zero(self):
        self.assertEqual(self.reconciler.recalculate_op_duration(self.operation.pk), Decimal("0"))
        self.assertEqual(
            Operation.objects.get(pk=self.operation.pk).op_duration, Decimal("0")
        )
