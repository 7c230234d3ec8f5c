from django.contrib import admin

from .models import Holiday


@admin.register(Holiday)
class HolidayAdmin(admin.ModelAdmin):
    list_display = ("date", "name", "country", "is_holiday")
    list_filter = ("is_holiday", "country", "date")
    search_fields = ("name",)
    ordering = ("-date",)
    date_hierarchy = "date"
