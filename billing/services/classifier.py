"""
Group classification.

Every group summary maps to exactly one GroupMode. The mapping depends on
three tariff fields only: unit_of_measure, alternative_paid_service and
facturation_unit.
"""

import logging
from typing import Iterable, List, Optional

from core.exceptions import ConflictError

from .contracts import GroupSummary
from .enums import GroupMode, YesNo, is_hours_unit, is_jornal_unit

logger = logging.getLogger(__name__)


def has_facturation_override(summary: GroupSummary) -> bool:
    """True when the tariff bills by its own hour or JORNAL unit"""
    unit = summary.get("facturation_unit")
    return is_hours_unit(unit) or is_jornal_unit(unit)


def classify_group(summary: GroupSummary) -> GroupMode:
    """
    Resolve the calculation mode of a group.

    Raises:
        ConflictError: a quantity group whose tariff overrides the
            facturation unit with hours or JORNAL
    """
    if YesNo.is_yes(summary.get("alternative_paid_service")):
        return GroupMode.ALTERNATIVE_SERVICE

    unit = summary.get("unit_of_measure")
    if is_jornal_unit(unit):
        return GroupMode.JORNAL
    if is_hours_unit(unit):
        return GroupMode.HOURS

    if has_facturation_override(summary):
        raise ConflictError(
            f"Group {summary.get('group_id')} is billed by quantity but its tariff "
            f"declares facturation unit {summary.get('facturation_unit')}",
            details={
                "group_id": summary.get("group_id"),
                "facturation_unit": summary.get("facturation_unit"),
            },
        )
    return GroupMode.QUANTITY


def find_groups_by_criteria(
    summaries: Iterable[GroupSummary],
    criteria: Optional[dict] = None,
    requested_ids: Optional[Iterable] = None,
) -> List[GroupSummary]:
    """
    Filter summaries by tariff fields and by the groups in the request.

    `criteria` may hold `unit_of_measure` and/or `alternative_paid_service`;
    an hours unit matches both HORAS and HOURS.
    """
    criteria = criteria or {}
    wanted = None if requested_ids is None else {str(i) for i in requested_ids}

    matches = []
    for summary in summaries:
        if wanted is not None and str(summary["group_id"]) not in wanted:
            continue

        unit = criteria.get("unit_of_measure")
        if unit is not None:
            if is_hours_unit(unit):
                if not is_hours_unit(summary.get("unit_of_measure")):
                    continue
            elif str(summary.get("unit_of_measure") or "").upper() != str(unit).upper():
                continue

        alternative = criteria.get("alternative_paid_service")
        if alternative is not None and YesNo.is_yes(
            summary.get("alternative_paid_service")
        ) != YesNo.is_yes(alternative):
            continue

        matches.append(summary)

    logger.debug(
        "Groups filtered by criteria",
        extra={
            "criteria": {k: str(v) for k, v in criteria.items()},
            "matched": len(matches),
            "action": "groups_filtered",
        },
    )
    return matches
