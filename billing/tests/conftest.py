"""
Fixtures and builders for billing engine tests.

Engine tests run without the database: the calendar gets a stub
configuration provider and the summaries are plain dicts.
"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock

import pytest

# Tuesday; the window 06:00-14:00 holds no Sunday
WEEKDAY_START = datetime(2025, 3, 4, 6, 0)
WEEKDAY_END = datetime(2025, 3, 4, 14, 0)
# Saturday to Sunday
WEEKEND_START = datetime(2025, 3, 8, 18, 0)
WEEKEND_END = datetime(2025, 3, 9, 2, 0)


def make_provider(weekly=44, weekly_sunday=48):
    provider = Mock()
    provider.get_weekly_hours_cap.side_effect = lambda has_sunday: (
        weekly_sunday if has_sunday else weekly
    )
    return provider


def make_calendar(weekly=44, weekly_sunday=48):
    from billing.services.calendar_policy import CalendarPolicy

    return CalendarPolicy(provider=make_provider(weekly, weekly_sunday))


def make_summary(**overrides):
    """GroupSummary for a two-worker hourly group on a weekday"""
    workers = overrides.pop(
        "workers",
        [
            {"id": 1, "name": "Ana Ruiz", "dni": "10203040"},
            {"id": 2, "name": "Luis Gómez", "dni": "50607080"},
        ],
    )
    summary = {
        "group_id": "g-1",
        "date_range": {"start": WEEKDAY_START, "end": WEEKDAY_END},
        "unit_of_measure": "HORAS",
        "alternative_paid_service": "NO",
        "group_tariff": "NO",
        "full_tariff": "NO",
        "compensatory": "NO",
        "facturation_unit": None,
        "facturation_tariff": Decimal("0"),
        "paysheet_tariff": Decimal("0"),
        "agreed_hours": None,
        "worker_count": len(workers),
        "workers": workers,
        "code_tariff": "T-1",
        "task": "Loading",
        "site": "Port",
        "sub_site": "Dock 3",
    }
    summary.update(overrides)
    if "worker_count" not in overrides:
        summary["worker_count"] = len(summary["workers"])
    return summary


def make_group_input(**raw):
    from billing.services.contracts import validate_group_input

    raw.setdefault("id", "g-1")
    return validate_group_input(raw)


def make_context(summary=None, group_input=None, **kwargs):
    """
    Build a GroupCalculationContext for one group.

    kwargs override context keys (bill_status, recorded_group_hours, ...).
    """
    summary = summary or make_summary()
    context = {
        "summary": summary,
        "group_input": group_input or make_group_input(id=summary["group_id"]),
        "operation_id": 1,
        "operation_start": WEEKDAY_START,
        "operation_end": WEEKDAY_END,
        "bill_status": None,
        "recorded_group_hours": None,
        "fallback_amount": Decimal("0"),
        "recalculating": False,
        "extra": {},
    }
    context.update(kwargs)
    return context


@pytest.fixture
def calendar():
    return make_calendar()
