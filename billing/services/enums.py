"""
Enumerations for the billing calculation system.

This module defines the closed vocabularies used across the engine:
calculation modes, bill states, hour categories and distribution sides.
"""

from decimal import Decimal
from enum import Enum


class GroupMode(Enum):
    """
    Calculation mode of a group.

    Every group summary maps to exactly one mode (see classifier.classify_group).
    """

    JORNAL = "jornal"
    """Fixed daily rate per worker plus priced extra hours"""

    HOURS = "hours"
    """Hourly rate with category multipliers and compensatory accrual"""

    ALTERNATIVE_SERVICE = "alternative_service"
    """Billing and payroll resolved independently by their own units"""

    QUANTITY = "quantity"
    """Flat amount x tariff"""

    def __str__(self):
        return self.value

    @property
    def display_name(self) -> str:
        return {
            GroupMode.JORNAL: "Jornal",
            GroupMode.HOURS: "Hours",
            GroupMode.ALTERNATIVE_SERVICE: "Alternative service",
            GroupMode.QUANTITY: "Quantity",
        }[self]

    @property
    def uses_amount_pay_rate(self) -> bool:
        """Whether BillDetail.pay_rate is the amount-scaled share ratio"""
        return self in (GroupMode.QUANTITY, GroupMode.ALTERNATIVE_SERVICE)

    @classmethod
    def from_string(cls, value: str) -> "GroupMode":
        """
        Parse mode from string (case-insensitive).

        Raises:
            ValueError: If value is not a known mode
        """
        if not value:
            raise ValueError("Empty group mode")

        normalized = value.lower().strip().replace("-", "_")
        for mode in cls:
            if mode.value == normalized:
                return mode

        valid = [m.value for m in cls]
        raise ValueError(f"Invalid group mode '{value}'. Valid options: {valid}")


class BillStatus(Enum):
    """Bill lifecycle: ACTIVE --(explicit update)--> COMPLETED (terminal)"""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"

    def __str__(self):
        return self.value

    @classmethod
    def choices(cls):
        return [(status.value, status.value.title()) for status in cls]

    @classmethod
    def from_string(cls, value: str) -> "BillStatus":
        try:
            return cls((value or "").upper().strip())
        except ValueError:
            valid = [s.value for s in cls]
            raise ValueError(f"Invalid bill status '{value}'. Valid options: {valid}")

    def can_transition_to(self, target: "BillStatus") -> bool:
        if target == self:
            return True
        return self == BillStatus.ACTIVE and target == BillStatus.COMPLETED


class DistributionSide(Enum):
    """Which of the two parallel distributions a calculation applies to"""

    BILLING = "billing"
    """Facturación: invoice side, persisted in fac_* columns"""

    PAYROLL = "payroll"
    """Nómina: payroll side, persisted in the plain category columns"""

    def __str__(self):
        return self.value


class HourCategory(Enum):
    """
    The eight hour categories.

    Multipliers are a closed table shared by billing and payroll:
    ordinary < extra < holiday-ordinary < holiday-extra, day < night.
    """

    HOD = "HOD"
    """Ordinary day"""

    HON = "HON"
    """Ordinary night"""

    HED = "HED"
    """Extra (overtime) day"""

    HEN = "HEN"
    """Extra (overtime) night"""

    HFOD = "HFOD"
    """Holiday ordinary day"""

    HFON = "HFON"
    """Holiday ordinary night"""

    HFED = "HFED"
    """Holiday extra day"""

    HFEN = "HFEN"
    """Holiday extra night"""

    def __str__(self):
        return self.value

    @property
    def multiplier(self) -> Decimal:
        return MULTIPLIERS[self]

    @property
    def is_extra(self) -> bool:
        return self in (
            HourCategory.HED,
            HourCategory.HEN,
            HourCategory.HFED,
            HourCategory.HFEN,
        )

    @property
    def is_ordinary(self) -> bool:
        return self in (HourCategory.HOD, HourCategory.HON)

    def column(self, side: DistributionSide) -> str:
        """Bill model field holding this category for the given side"""
        base = self.value.lower()
        return f"fac_{base}" if side == DistributionSide.BILLING else base


MULTIPLIERS = {
    HourCategory.HOD: Decimal("1.00"),
    HourCategory.HON: Decimal("1.35"),
    HourCategory.HED: Decimal("1.25"),
    HourCategory.HEN: Decimal("1.75"),
    HourCategory.HFOD: Decimal("1.75"),
    HourCategory.HFON: Decimal("2.10"),
    HourCategory.HFED: Decimal("2.00"),
    HourCategory.HFEN: Decimal("2.50"),
}


class YesNo(Enum):
    YES = "YES"
    NO = "NO"

    def __str__(self):
        return self.value

    @classmethod
    def is_yes(cls, value) -> bool:
        return str(value or "").upper().strip() == cls.YES.value


HOURS_UNITS = frozenset({"HORAS", "HOURS"})
JORNAL_UNIT = "JORNAL"


def is_hours_unit(unit) -> bool:
    return str(unit or "").upper().strip() in HOURS_UNITS


def is_jornal_unit(unit) -> bool:
    return str(unit or "").upper().strip() == JORNAL_UNIT
