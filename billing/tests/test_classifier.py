import pytest

from billing.services.classifier import classify_group, find_groups_by_criteria
from billing.services.enums import GroupMode
from core.exceptions import ConflictError

from .conftest import make_summary


class TestClassifyGroup:
    @pytest.mark.parametrize(
        "unit,alternative,expected",
        [
            ("JORNAL", "NO", GroupMode.JORNAL),
            ("HORAS", "NO", GroupMode.HOURS),
            ("HOURS", "NO", GroupMode.HOURS),
            ("horas", "NO", GroupMode.HOURS),
            ("JORNAL", "YES", GroupMode.ALTERNATIVE_SERVICE),
            ("HORAS", "YES", GroupMode.ALTERNATIVE_SERVICE),
            ("CAJAS", "YES", GroupMode.ALTERNATIVE_SERVICE),
            ("CAJAS", "NO", GroupMode.QUANTITY),
            ("", "NO", GroupMode.QUANTITY),
        ],
    )
    def test_each_summary_maps_to_one_mode(self, unit, alternative, expected):
        summary = make_summary(unit_of_measure=unit, alternative_paid_service=alternative)
        assert classify_group(summary) is expected

    def test_classification_is_deterministic(self):
        summary = make_summary(unit_of_measure="TONELADAS")
        assert {classify_group(summary) for _ in range(5)} == {GroupMode.QUANTITY}

    @pytest.mark.parametrize("facturation_unit", ["HORAS", "JORNAL"])
    def test_quantity_with_facturation_override_conflicts(self, facturation_unit):
        summary = make_summary(unit_of_measure="CAJAS", facturation_unit=facturation_unit)
        with pytest.raises(ConflictError):
            classify_group(summary)

    def test_quantity_facturation_unit_of_quantity_kind_is_allowed(self):
        summary = make_summary(unit_of_measure="CAJAS", facturation_unit="CAJAS")
        assert classify_group(summary) is GroupMode.QUANTITY


class TestFindGroupsByCriteria:
    @pytest.fixture
    def summaries(self):
        return [
            make_summary(group_id="a", unit_of_measure="HORAS"),
            make_summary(group_id="b", unit_of_measure="HOURS"),
            make_summary(group_id="c", unit_of_measure="JORNAL"),
            make_summary(group_id="d", unit_of_measure="HORAS", alternative_paid_service="YES"),
        ]

    def test_hours_unit_matches_both_spellings(self, summaries):
        found = find_groups_by_criteria(
            summaries, {"unit_of_measure": "HOURS", "alternative_paid_service": "NO"}
        )
        assert [s["group_id"] for s in found] == ["a", "b"]

    def test_intersects_with_requested_groups(self, summaries):
        found = find_groups_by_criteria(
            summaries, {"unit_of_measure": "HORAS"}, requested_ids=["b", "d", "zzz"]
        )
        assert [s["group_id"] for s in found] == ["b", "d"]

    def test_alternative_only(self, summaries):
        found = find_groups_by_criteria(summaries, {"alternative_paid_service": "YES"})
        assert [s["group_id"] for s in found] == ["d"]

    def test_no_criteria_returns_everything(self, summaries):
        assert len(find_groups_by_criteria(summaries)) == 4
