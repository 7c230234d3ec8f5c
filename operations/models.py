from datetime import datetime

from django.db import models

from .querysets import OperationWorkerManager

YES_NO_CHOICES = [
    ("YES", "Yes"),
    ("NO", "No"),
]


class Worker(models.Model):
    """Field worker that can be assigned to operations"""

    STATUS_CHOICES = [
        ("AVAILABLE", "Available"),
        ("ASSIGNED", "Assigned"),
        ("DISABLED", "Disabled"),
    ]

    name = models.CharField(max_length=150)
    dni = models.CharField(max_length=30, unique=True, help_text="Identity document")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="AVAILABLE")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ["name"]


class Tariff(models.Model):
    """
    Billing/payroll rates and calculation flags for a service.

    `unit_of_measure` drives the calculation mode: HORAS/HOURS, JORNAL or
    any quantity unit (CAJAS, TONELADAS, ...). `facturation_unit` may
    override the billing side for alternative paid services.
    """

    code = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    unit_of_measure = models.CharField(max_length=30)
    facturation_unit = models.CharField(max_length=30, blank=True, null=True)
    facturation_tariff = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    paysheet_tariff = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    agreed_hours = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Hours covered by one jornal",
    )
    alternative_paid_service = models.CharField(max_length=3, choices=YES_NO_CHOICES, default="NO")
    group_tariff = models.CharField(max_length=3, choices=YES_NO_CHOICES, default="NO")
    full_tariff = models.CharField(max_length=3, choices=YES_NO_CHOICES, default="NO")
    compensatory = models.CharField(max_length=3, choices=YES_NO_CHOICES, default="NO")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.code} ({self.unit_of_measure})"

    class Meta:
        ordering = ["code"]


class Operation(models.Model):
    """Work operation; groups of workers are attached through OperationWorker"""

    STATUS_CHOICES = [
        ("PENDING", "Pending"),
        ("INPROGRESS", "In progress"),
        ("COMPLETED", "Completed"),
        ("CANCELED", "Canceled"),
    ]

    client = models.CharField(max_length=150, blank=True, default="")
    site = models.CharField(max_length=150, blank=True, default="")
    sub_site = models.CharField(max_length=150, blank=True, default="")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="PENDING")
    date_start = models.DateField()
    time_start = models.TimeField()
    date_end = models.DateField(null=True, blank=True)
    time_end = models.TimeField(null=True, blank=True)
    op_duration = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Sum of the group durations of this operation",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Operation {self.pk} - {self.client} ({self.status})"

    @property
    def start(self):
        return datetime.combine(self.date_start, self.time_start)

    @property
    def end(self):
        if self.date_end and self.time_end:
            return datetime.combine(self.date_end, self.time_end)
        return None

    class Meta:
        ordering = ["-date_start", "-id"]


class OperationWorker(models.Model):
    """Time window of one worker inside one group of an operation"""

    operation = models.ForeignKey(
        Operation, on_delete=models.CASCADE, related_name="worker_windows"
    )
    worker = models.ForeignKey(
        Worker, on_delete=models.CASCADE, related_name="assignments"
    )
    group_id = models.CharField(max_length=64, db_index=True)
    tariff = models.ForeignKey(
        Tariff,
        on_delete=models.PROTECT,
        related_name="assignments",
        null=True,
        blank=True,
    )
    task = models.CharField(max_length=150, blank=True, default="")
    date_start = models.DateField(null=True, blank=True)
    time_start = models.TimeField(null=True, blank=True)
    date_end = models.DateField(null=True, blank=True)
    time_end = models.TimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OperationWorkerManager()

    def __str__(self):
        return f"{self.worker} @ operation {self.operation_id} group {self.group_id}"

    @property
    def start(self):
        if self.date_start and self.time_start:
            return datetime.combine(self.date_start, self.time_start)
        return None

    @property
    def end(self):
        if self.date_end and self.time_end:
            return datetime.combine(self.date_end, self.time_end)
        return None

    class Meta:
        ordering = ["operation", "group_id", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["operation", "worker", "group_id"],
                name="unique_worker_per_group",
            )
        ]
