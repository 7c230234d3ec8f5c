from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from operations.models import Operation, OperationWorker

from .services.enums import BillStatus


def _money(**kwargs):
    return models.DecimalField(max_digits=15, decimal_places=2, default=0, **kwargs)


def _hours(**kwargs):
    return models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(Decimal("0"))],
        **kwargs,
    )


class Bill(models.Model):
    """
    Invoice (facturación) and payroll (nómina) figures of one group.

    The `fac_*` columns hold the billing hour distribution and the plain
    columns the payroll one. Totals are what the strategies computed; the
    per-worker split lives in BillDetail.
    """

    operation = models.ForeignKey(Operation, on_delete=models.CASCADE, related_name="bills")
    group_id = models.CharField(max_length=64)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bills",
    )

    week_number = models.PositiveSmallIntegerField(default=0)
    amount = _money(help_text="Submitted quantity (quantity and alternative groups)")
    number_of_workers = models.PositiveIntegerField(default=0)
    number_of_hours = _hours()
    group_hours = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Mean duration of the group's worker windows",
    )

    total_bill = _money()
    total_paysheet = _money()

    # Payroll hour distribution
    hod = _hours()
    hon = _hours()
    hed = _hours()
    hen = _hours()
    hfod = _hours()
    hfon = _hours()
    hfed = _hours()
    hfen = _hours()

    # Billing hour distribution
    fac_hod = _hours()
    fac_hon = _hours()
    fac_hed = _hours()
    fac_hen = _hours()
    fac_hfod = _hours()
    fac_hfon = _hours()
    fac_hfed = _hours()
    fac_hfen = _hours()

    status = models.CharField(
        max_length=20, choices=BillStatus.choices(), default=BillStatus.ACTIVE.value
    )
    observation = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Bill {self.pk} - operation {self.operation_id} group {self.group_id}"

    @property
    def is_completed(self) -> bool:
        return self.status == BillStatus.COMPLETED.value

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["operation", "group_id"], name="unique_bill_per_group"
            )
        ]
        indexes = [
            models.Index(fields=["status"], name="bill_status_idx"),
            models.Index(fields=["operation", "group_id"], name="bill_operation_group_idx"),
        ]


class BillDetail(models.Model):
    """One worker's share of a Bill"""

    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name="details")
    operation_worker = models.ForeignKey(
        OperationWorker, on_delete=models.CASCADE, related_name="bill_details"
    )
    pay_rate = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    pay_unit = models.DecimalField(max_digits=10, decimal_places=2, default=1)
    total_bill = _money()
    total_paysheet = _money()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Detail {self.pk} of bill {self.bill_id}"

    class Meta:
        ordering = ["bill", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["bill", "operation_worker"], name="unique_detail_per_worker"
            )
        ]
