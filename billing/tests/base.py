"""
Base test class for billing tests that touch the database.

Provides builders for operations, tariffs, workers and their time windows,
and keeps the Holiday table and the cache empty around every test.
"""

from datetime import date, time
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase

from integrations.models import Holiday
from operations.models import Operation, OperationWorker, Tariff, Worker


class BillingTestBase(TestCase):
    # Tuesday 4 March 2025
    DAY = date(2025, 3, 4)

    def setUp(self):
        super().setUp()
        cache.clear()
        Holiday.objects.all().delete()
        self._worker_seq = 0

    def tearDown(self):
        cache.clear()
        super().tearDown()

    def make_operation(self, **kwargs):
        values = {
            "client": "Naviera Andina",
            "site": "Port",
            "sub_site": "Dock 3",
            "status": "INPROGRESS",
            "date_start": self.DAY,
            "time_start": time(6, 0),
        }
        values.update(kwargs)
        return Operation.objects.create(**values)

    def make_tariff(self, code="T-HOURS", **kwargs):
        values = {
            "code": code,
            "unit_of_measure": "HORAS",
            "facturation_tariff": Decimal("15000"),
            "paysheet_tariff": Decimal("10000"),
        }
        values.update(kwargs)
        return Tariff.objects.create(**values)

    def make_worker(self, name=None, status="ASSIGNED"):
        self._worker_seq += 1
        return Worker.objects.create(
            name=name or f"Worker {self._worker_seq}",
            dni=f"{1000000 + self._worker_seq}",
            status=status,
        )

    def add_window(
        self,
        operation,
        worker,
        group_id,
        tariff,
        start=(None, time(6, 0)),
        end=(None, time(14, 0)),
    ):
        """Attach a worker window; a date of None means the test day"""
        start_date, start_time = start
        end_date, end_time = end
        return OperationWorker.objects.create(
            operation=operation,
            worker=worker,
            group_id=group_id,
            tariff=tariff,
            task="Loading",
            date_start=start_date or self.DAY,
            time_start=start_time,
            date_end=(end_date or self.DAY) if end_time else None,
            time_end=end_time,
        )

    def make_group(self, operation, group_id, tariff, workers=2, **window):
        """Create `workers` workers with identical windows in one group"""
        created = []
        for _ in range(workers):
            worker = self.make_worker()
            self.add_window(operation, worker, group_id, tariff, **window)
            created.append(worker)
        return created
