from django.contrib import admin

from .models import Operation, OperationWorker, Tariff, Worker


@admin.register(Worker)
class WorkerAdmin(admin.ModelAdmin):
    list_display = ("name", "dni", "status")
    list_filter = ("status",)
    search_fields = ("name", "dni")


@admin.register(Tariff)
class TariffAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "unit_of_measure",
        "facturation_unit",
        "facturation_tariff",
        "paysheet_tariff",
        "alternative_paid_service",
        "compensatory",
    )
    list_filter = ("unit_of_measure", "alternative_paid_service", "compensatory")
    search_fields = ("code", "description")


class OperationWorkerInline(admin.TabularInline):
    model = OperationWorker
    extra = 0
    fields = (
        "worker",
        "group_id",
        "tariff",
        "date_start",
        "time_start",
        "date_end",
        "time_end",
    )


@admin.register(Operation)
class OperationAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "site", "status", "date_start", "op_duration")
    list_filter = ("status", "date_start")
    search_fields = ("client", "site", "sub_site")
    date_hierarchy = "date_start"
    inlines = [OperationWorkerInline]
