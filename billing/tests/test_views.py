"""
API tests for the bill endpoints.
"""

from datetime import time
from decimal import Decimal

from rest_framework import status
from rest_framework.test import APIClient

from django.contrib.auth.models import User

from billing.models import Bill

from .base import BillingTestBase


class BillAPITestBase(BillingTestBase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.user = User.objects.create_user(username="supervisor", password="pass1234")
        self.client.force_authenticate(user=self.user)
        self.operation = self.make_operation()
        self.tariff = self.make_tariff(
            "T-BOX", unit_of_measure="CAJAS", facturation_tariff=Decimal("50"), paysheet_tariff=Decimal("30")
        )
        self.workers = self.make_group(self.operation, "g1", self.tariff, workers=2, end=(None, None))

    def create_payload(self, group_id="g1", amount=100):
        return {
            "operation_id": self.operation.pk,
            "groups": [
                {
                    "id": group_id,
                    "amount": amount,
                    "pays": [{"id_worker": w.pk, "pay": 1} for w in self.workers],
                }
            ],
        }


class BillCreateAPITest(BillAPITestBase):
    def test_requires_authentication(self):
        anonymous = APIClient()
        response = anonymous.get("/api/v1/bills/")
        self.assertIn(
            response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
        )

    def test_create_returns_bills_with_details(self):
        response = self.client.post("/api/v1/bills/", self.create_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["errors"], [])
        bill = response.data["bills"][0]
        self.assertEqual(Decimal(bill["total_bill"]), Decimal("5000.00"))
        self.assertEqual(len(bill["details"]), 2)
        self.assertEqual(Bill.objects.get().user, self.user)

    def test_missing_groups_is_rejected(self):
        response = self.client.post(
            "/api/v1/bills/", {"operation_id": self.operation.pk, "groups": []}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")

    def test_unknown_operation(self):
        payload = self.create_payload()
        payload["operation_id"] = 987654
        response = self.client.post("/api/v1/bills/", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_duplicate_group_reports_conflict(self):
        self.client.post("/api/v1/bills/", self.create_payload(), format="json")

        response = self.client.post("/api/v1/bills/", self.create_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["bills"], [])
        self.assertEqual(response.data["errors"][0]["code"], "CONFLICT")


class BillDetailAPITest(BillAPITestBase):
    def setUp(self):
        super().setUp()
        response = self.client.post("/api/v1/bills/", self.create_payload(), format="json")
        self.bill_id = response.data["bills"][0]["id"]
        self.url = f"/api/v1/bills/{self.bill_id}/"

    def test_get_includes_compensatory_and_calendar(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("compensatory", response.data)
        self.assertEqual(response.data["calendar"]["week_number"], 10)

    def test_patch_amount_recomputes(self):
        response = self.client.patch(self.url, {"amount": "20"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["total_bill"]), Decimal("1000.00"))

    def test_completed_bill_rejects_totals(self):
        self.client.patch(f"{self.url}status/", {"status": "COMPLETED"}, format="json")

        response = self.client.patch(self.url, {"amount": "20"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "CONFLICT")

    def test_status_cannot_go_back(self):
        ok = self.client.patch(f"{self.url}status/", {"status": "COMPLETED"}, format="json")
        back = self.client.patch(f"{self.url}status/", {"status": "ACTIVE"}, format="json")

        self.assertEqual(ok.status_code, status.HTTP_200_OK)
        self.assertEqual(ok.data["status"], "COMPLETED")
        self.assertEqual(back.status_code, status.HTTP_409_CONFLICT)

    def test_delete(self):
        response = self.client.delete(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], self.bill_id)
        self.assertFalse(Bill.objects.filter(pk=self.bill_id).exists())

    def test_unknown_bill(self):
        response = self.client.get("/api/v1/bills/424242/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class BillListingAPITest(BillAPITestBase):
    def setUp(self):
        super().setUp()
        self.client.post("/api/v1/bills/", self.create_payload(), format="json")

    def test_list_and_search(self):
        self.assertEqual(len(self.client.get("/api/v1/bills/").data), 1)
        self.assertEqual(len(self.client.get("/api/v1/bills/", {"search": "nothing"}).data), 0)

    def test_paginated(self):
        response = self.client.get("/api/v1/bills/paginated/", {"page": 1, "limit": 5})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["pagination"]["total"], 1)
        self.assertEqual(response.data["pagination"]["limit"], 5)

    def test_invalid_filter(self):
        response = self.client.get("/api/v1/bills/", {"dateStart": "not-a-date"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_stats(self):
        response = self.client.get("/api/v1/bills/search-stats/")
        self.assertEqual(response.data["total_count"], 1)


class RecalculateGroupHoursAPITest(BillAPITestBase):
    def test_recalculates_after_windows_close(self):
        self.client.post("/api/v1/bills/", self.create_payload(), format="json")
        self.operation.worker_windows.update(date_end=self.DAY, time_end=time(10, 30))

        response = self.client.post(
            "/api/v1/bills/recalculate-group-hours/",
            {"operation_id": self.operation.pk, "group_id": "g1"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"group_hours": "4.50", "op_duration": "4.50"})

    def test_unknown_group(self):
        response = self.client.post(
            "/api/v1/bills/recalculate-group-hours/",
            {"operation_id": self.operation.pk, "group_id": "zzz"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
