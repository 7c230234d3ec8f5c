import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Worker",
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
                ("name", models.CharField(max_length=150)),
                (
                    "dni",
                    models.CharField(
                        help_text="Identity document", max_length=30, unique=True
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("AVAILABLE", "Available"),
                            ("ASSIGNED", "Assigned"),
                            ("DISABLED", "Disabled"),
                        ],
                        default="AVAILABLE",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Tariff",
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
                ("code", models.CharField(max_length=50, unique=True)),
                (
                    "description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("unit_of_measure", models.CharField(max_length=30)),
                (
                    "facturation_unit",
                    models.CharField(blank=True, max_length=30, null=True),
                ),
                (
                    "facturation_tariff",
                    models.DecimalField(decimal_places=2, default=0, max_digits=15),
                ),
                (
                    "paysheet_tariff",
                    models.DecimalField(decimal_places=2, default=0, max_digits=15),
                ),
                (
                    "agreed_hours",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Hours covered by one jornal",
                        max_digits=6,
                        null=True,
                    ),
                ),
                (
                    "alternative_paid_service",
                    models.CharField(
                        choices=[("YES", "Yes"), ("NO", "No")],
                        default="NO",
                        max_length=3,
                    ),
                ),
                (
                    "group_tariff",
                    models.CharField(
                        choices=[("YES", "Yes"), ("NO", "No")],
                        default="NO",
                        max_length=3,
                    ),
                ),
                (
                    "full_tariff",
                    models.CharField(
                        choices=[("YES", "Yes"), ("NO", "No")],
                        default="NO",
                        max_length=3,
                    ),
                ),
                (
                    "compensatory",
                    models.CharField(
                        choices=[("YES", "Yes"), ("NO", "No")],
                        default="NO",
                        max_length=3,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["code"]},
        ),
        migrations.CreateModel(
            name="Operation",
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
                ("client", models.CharField(blank=True, default="", max_length=150)),
                ("site", models.CharField(blank=True, default="", max_length=150)),
                ("sub_site", models.CharField(blank=True, default="", max_length=150)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("INPROGRESS", "In progress"),
                            ("COMPLETED", "Completed"),
                            ("CANCELED", "Canceled"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("date_start", models.DateField()),
                ("time_start", models.TimeField()),
                ("date_end", models.DateField(blank=True, null=True)),
                ("time_end", models.TimeField(blank=True, null=True)),
                (
                    "op_duration",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Sum of the group durations of this operation",
                        max_digits=10,
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["-date_start", "-id"]},
        ),
        migrations.CreateModel(
            name="OperationWorker",
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
                ("group_id", models.CharField(db_index=True, max_length=64)),
                ("task", models.CharField(blank=True, default="", max_length=150)),
                ("date_start", models.DateField(blank=True, null=True)),
                ("time_start", models.TimeField(blank=True, null=True)),
                ("date_end", models.DateField(blank=True, null=True)),
                ("time_end", models.TimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "operation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="worker_windows",
                        to="operations.operation",
                    ),
                ),
                (
                    "tariff",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assignments",
                        to="operations.tariff",
                    ),
                ),
                (
                    "worker",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="operations.worker",
                    ),
                ),
            ],
            options={"ordering": ["operation", "group_id", "id"]},
        ),
        migrations.AddConstraint(
            model_name="operationworker",
            constraint=models.UniqueConstraint(
                fields=("operation", "worker", "group_id"),
                name="unique_worker_per_group",
            ),
        ),
    ]
