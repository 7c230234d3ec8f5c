from django.contrib import admin

from .models import Bill, BillDetail


class BillDetailInline(admin.TabularInline):
    model = BillDetail
    extra = 0
    fields = ("operation_worker", "pay_unit", "pay_rate", "total_bill", "total_paysheet")
    readonly_fields = ("total_bill", "total_paysheet")


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "operation",
        "group_id",
        "status",
        "number_of_workers",
        "group_hours",
        "total_bill",
        "total_paysheet",
        "created_at",
    )
    list_filter = ("status", "created_at")
    search_fields = ("group_id", "operation__client", "operation__site")
    readonly_fields = ("created_at", "updated_at")
    inlines = [BillDetailInline]
