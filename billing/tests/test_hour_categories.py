"""
Tests for hour-category pricing and the multiplier table.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from billing.services.enums import MULTIPLIERS, DistributionSide, HourCategory
from billing.services.hour_categories import HourCategoryEngine


class TestMultiplierTable:
    def test_every_category_has_a_multiplier(self):
        assert set(MULTIPLIERS) == set(HourCategory)

    @pytest.mark.parametrize(
        "lower,higher",
        [
            (HourCategory.HOD, HourCategory.HED),
            (HourCategory.HED, HourCategory.HFOD),
            (HourCategory.HFOD, HourCategory.HFED),
            (HourCategory.HOD, HourCategory.HON),
            (HourCategory.HFED, HourCategory.HFEN),
        ],
    )
    def test_ordering(self, lower, higher):
        assert lower.multiplier < higher.multiplier

    def test_columns_per_side(self):
        assert HourCategory.HFEN.column(DistributionSide.BILLING) == "fac_hfen"
        assert HourCategory.HFEN.column(DistributionSide.PAYROLL) == "hfen"


class TestHourCategoryEngine:
    def test_amount_is_hours_times_multiplier_tariff_and_workers(self):
        result = HourCategoryEngine.calculate(
            {"HOD": Decimal("8"), "HON": Decimal("2")},
            Decimal("100"),
            3,
            DistributionSide.PAYROLL,
        )

        assert result["total_hours"] == Decimal("10")
        # 8 x 1.00 x 100 x 3 + 2 x 1.35 x 100 x 3
        assert result["total_amount"] == Decimal("3210")
        assert result["details"]["hours_detail"]["HON"]["amount"] == Decimal("810")
        assert result["details"]["worker_count"] == 3

    def test_zero_categories_are_left_out_of_the_detail(self):
        result = HourCategoryEngine.calculate(
            {"HOD": Decimal("4")}, Decimal("10"), 1, DistributionSide.BILLING
        )
        assert list(result["details"]["hours_detail"]) == ["HOD"]

    def test_restricting_categories(self):
        result = HourCategoryEngine.calculate(
            {"HOD": Decimal("8"), "HED": Decimal("2")},
            Decimal("10"),
            1,
            DistributionSide.BILLING,
            categories=[HourCategory.HED],
        )
        assert result["total_hours"] == Decimal("2")
        assert result["total_amount"] == Decimal("25")

    def test_non_numeric_hours_count_as_zero(self):
        result = HourCategoryEngine.calculate(
            {"HOD": "abc", "HON": None}, Decimal("10"), 1, DistributionSide.PAYROLL
        )
        assert result["total_amount"] == Decimal("0")

    def test_flat_total_ignores_multipliers(self):
        distribution = {"HOD": Decimal("4"), "HED": Decimal("2"), "HFEN": Decimal("1")}
        assert HourCategoryEngine.flat_total(distribution, Decimal("100"), 3) == Decimal("2100")

    def test_ordinary_and_extra_hours(self):
        distribution = {"HOD": 6, "HON": 2, "HED": 1, "HFEN": Decimal("0.5"), "HFOD": 3}
        assert HourCategoryEngine.ordinary_hours(distribution) == Decimal("8")
        assert HourCategoryEngine.extra_hours(distribution) == Decimal("1.5")
        assert HourCategoryEngine.total_hours(distribution) == Decimal("12.5")

    def test_to_columns_writes_unselected_categories_as_zero(self):
        columns = HourCategoryEngine.to_columns(
            {"HOD": Decimal("8"), "HED": Decimal("2")},
            DistributionSide.BILLING,
            categories=[HourCategory.HED],
        )
        assert len(columns) == 8
        assert columns["fac_hod"] == Decimal("0")
        assert columns["fac_hed"] == Decimal("2")

    def test_from_bill_reads_back_one_side(self):
        values = {c.column(DistributionSide.PAYROLL): Decimal("0") for c in HourCategory}
        values.update({c.column(DistributionSide.BILLING): Decimal("0") for c in HourCategory})
        values["hon"] = Decimal("3")
        values["fac_hon"] = Decimal("5")
        bill = SimpleNamespace(**values)

        assert HourCategoryEngine.from_bill(bill, DistributionSide.PAYROLL)["HON"] == Decimal("3")
        assert HourCategoryEngine.from_bill(bill, DistributionSide.BILLING)["HON"] == Decimal("5")
