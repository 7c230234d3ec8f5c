import decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("operations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Bill",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("group_id", models.CharField(max_length=64)),
                ("week_number", models.PositiveSmallIntegerField(default=0)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        help_text="Submitted quantity (quantity and alternative groups)",
                        max_digits=15,
                    ),
                ),
                ("number_of_workers", models.PositiveIntegerField(default=0)),
                (
                    "number_of_hours",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "group_hours",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Mean duration of the group's worker windows",
                        max_digits=10,
                        null=True,
                    ),
                ),
                ("total_bill", models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ("total_paysheet", models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                (
                    "hod",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "hon",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "hed",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "hen",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "hfod",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "hfon",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "hfed",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "hfen",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "fac_hod",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "fac_hon",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "fac_hed",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "fac_hen",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "fac_hfod",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "fac_hfon",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "fac_hfed",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "fac_hfen",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("COMPLETED", "Completed")],
                        default="ACTIVE",
                        max_length=20,
                    ),
                ),
                ("observation", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "operation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bills",
                        to="operations.operation",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bills",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status"], name="bill_status_idx"),
                    models.Index(
                        fields=["operation", "group_id"],
                        name="bill_operation_group_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("operation", "group_id"), name="unique_bill_per_group"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="BillDetail",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("pay_rate", models.DecimalField(decimal_places=4, default=0, max_digits=15)),
                ("pay_unit", models.DecimalField(decimal_places=2, default=1, max_digits=10)),
                ("total_bill", models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ("total_paysheet", models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "bill",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="details",
                        to="billing.bill",
                    ),
                ),
                (
                    "operation_worker",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bill_details",
                        to="operations.operationworker",
                    ),
                ),
            ],
            options={
                "ordering": ["bill", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("bill", "operation_worker"),
                        name="unique_detail_per_worker",
                    )
                ],
            },
        ),
    ]
