"""
Calendar policy: Sundays, holidays, week numbers and the weekly hour cap.

Aware datetimes are read in the business time zone (settings.TIME_ZONE)
before their calendar day is taken; naive ones are already local.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional, Union

import pytz

from django.conf import settings
from django.utils import timezone

from configuration.provider import ConfigurationProvider, get_configuration_provider

DateLike = Union[date, datetime]

SUNDAY = 6  # date.weekday()


def _as_date(value: Optional[DateLike]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = value.astimezone(pytz.timezone(settings.TIME_ZONE))
        return value.date()
    return value


class CalendarPolicy:
    def __init__(self, provider: Optional[ConfigurationProvider] = None):
        self.provider = provider or get_configuration_provider()

    @staticmethod
    def week_number(value: DateLike) -> int:
        """ISO week number (weeks start on Monday)"""
        return _as_date(value).isocalendar()[1]

    @staticmethod
    def is_sunday(value: DateLike) -> bool:
        return _as_date(value).weekday() == SUNDAY

    @staticmethod
    def has_sunday_in_range(start: Optional[DateLike], end: Optional[DateLike]) -> bool:
        """
        True when any calendar day between start and end (inclusive) is a Sunday.

        An open range (no end) only checks the start day.
        """
        first = _as_date(start)
        last = _as_date(end) or first
        if first is None:
            return False
        if last < first:
            first, last = last, first
        if (last - first).days >= 6:
            return True

        current = first
        while current <= last:
            if current.weekday() == SUNDAY:
                return True
            current += timedelta(days=1)
        return False

    @staticmethod
    def holidays_in_range(start: Optional[DateLike], end: Optional[DateLike]) -> List[date]:
        from integrations.models import Holiday

        first = _as_date(start)
        last = _as_date(end) or first
        if first is None:
            return []
        if last < first:
            first, last = last, first
        return list(
            Holiday.objects.filter(date__range=(first, last), is_holiday=True)
            .order_by("date")
            .values_list("date", flat=True)
        )

    def is_holiday(self, value: DateLike) -> bool:
        day = _as_date(value)
        return bool(self.holidays_in_range(day, day))

    def weekly_hours_cap(self, start: Optional[DateLike], end: Optional[DateLike]) -> int:
        """Configured weekly cap; a different value applies when the range has a Sunday"""
        return self.provider.get_weekly_hours_cap(self.has_sunday_in_range(start, end))

    def describe_range(self, start: Optional[DateLike], end: Optional[DateLike]) -> dict:
        """Calendar facts shown alongside a bill"""
        return {
            "has_sunday": self.has_sunday_in_range(start, end),
            "holidays": [d.isoformat() for d in self.holidays_in_range(start, end)],
            "week_number": self.week_number(start) if start else None,
        }
