from decimal import Decimal

import pytest

from billing.services.compensatory import (
    CompensatoryAccrual,
    accrue_compensatory_hours,
    compensatory_amount,
)
from billing.services.enums import BillStatus

from .conftest import WEEKDAY_END, WEEKDAY_START, WEEKEND_END, WEEKEND_START, make_calendar

FOUR_PLACES = Decimal("0.0001")


def q(value):
    return value.quantize(FOUR_PLACES)


class TestAccrueCompensatoryHours:
    def test_full_day_on_a_44_hour_week(self):
        hours = accrue_compensatory_hours(
            Decimal("8"), 44, has_sunday=False, bill_status=BillStatus.COMPLETED
        )
        assert q(hours) == Decimal("1.2222")

    def test_sunday_in_range_accrues_nothing(self):
        for status in (None, BillStatus.ACTIVE, BillStatus.COMPLETED):
            assert accrue_compensatory_hours(Decimal("8"), 48, True, status) == Decimal("0")

    def test_provisional_placeholder_while_not_completed(self):
        hours = accrue_compensatory_hours(Decimal("12"), 44, bill_status=BillStatus.ACTIVE)
        assert hours == Decimal("44") / 6 / 6

    def test_missing_status_is_not_completed(self):
        assert accrue_compensatory_hours(Decimal("12"), 44) == Decimal("44") / 6 / 6

    def test_short_day_is_proportional(self):
        hours = accrue_compensatory_hours(Decimal("3"), 44, bill_status=BillStatus.COMPLETED)
        assert q(hours) == Decimal("0.5000")

    def test_effective_hours_are_capped_at_the_day(self):
        capped = accrue_compensatory_hours(Decimal("20"), 44, bill_status=BillStatus.COMPLETED)
        full = accrue_compensatory_hours(Decimal("44") / 6, 44, bill_status=BillStatus.COMPLETED)
        assert q(capped) == q(full)

    @pytest.mark.parametrize("hours", [None, "", "nan", -4, 0])
    def test_invalid_or_empty_hours(self, hours):
        assert accrue_compensatory_hours(hours, 44, bill_status=BillStatus.COMPLETED) == 0

    def test_amount(self):
        assert compensatory_amount(Decimal("1.5"), 2, Decimal("10000")) == Decimal("30000")


class TestCompensatoryAccrual:
    def test_uses_configured_cap_for_the_range(self):
        accrual = CompensatoryAccrual(make_calendar(weekly=42))
        hours = accrual.hours(
            Decimal("7"), WEEKDAY_START, WEEKDAY_END, BillStatus.COMPLETED
        )
        assert q(hours) == Decimal("1.1667")

    def test_sunday_range_returns_empty_result(self):
        accrual = CompensatoryAccrual(make_calendar())
        result = accrual.result(
            Decimal("8"),
            2,
            Decimal("10000"),
            start=WEEKEND_START,
            end=WEEKEND_END,
            bill_status=BillStatus.COMPLETED,
            include_in_total=True,
        )
        assert result["hours"] == 0
        assert result["amount"] == 0
        assert result["include_in_total"] is False

    def test_result_amount_and_percentage(self):
        accrual = CompensatoryAccrual(make_calendar())
        result = accrual.result(
            Decimal("8"),
            2,
            Decimal("10000"),
            start=WEEKDAY_START,
            end=WEEKDAY_END,
            bill_status=BillStatus.COMPLETED,
            include_in_total=True,
            reference_total=Decimal("160000"),
        )

        assert q(result["hours"]) == Decimal("1.2222")
        assert result["amount"].quantize(Decimal("0.01")) == Decimal("24444.44")
        assert result["percentage"].quantize(Decimal("0.01")) == Decimal("15.28")
        assert result["include_in_total"] is True
