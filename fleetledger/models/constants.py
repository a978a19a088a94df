"""Domain constants and enumerations.

Enum member order is significant: ``ExpenseCategory`` declaration order is the
canonical order used to break ties in category breakdowns, and ``Account``
declaration order is the line order of a rendered receipt.
"""

from enum import Enum
from typing import Dict


class VehicleClass(str, Enum):
    PASSENGER = "passenger"  # "binek": partially deductible
    COMMERCIAL = "commercial"  # "ticari": fully deductible

    @property
    def label(self) -> str:
        return VEHICLE_CLASS_LABELS[self]


class ExpenseCategory(str, Enum):
    FUEL = "fuel"
    REPAIR = "repair"
    MAINTENANCE = "maintenance"
    PARKING = "parking"
    WASH = "wash"
    TIRES = "tires"
    SPARE_PARTS = "spare_parts"
    INSURANCE = "insurance"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @property
    def rank(self) -> int:
        return CATEGORY_ORDER[self]


class Account(str, Enum):
    GENERAL_EXPENSE = "770"
    DEDUCTIBLE_VAT = "191"
    NON_DEDUCTIBLE_EXPENSE = "689"
    PAYABLE = "320"

    @property
    def label(self) -> str:
        return ACCOUNT_LABELS[self]

    @property
    def is_credit(self) -> bool:
        return self is Account.PAYABLE


VEHICLE_CLASS_LABELS: Dict[VehicleClass, str] = {
    VehicleClass.PASSENGER: "Passenger",
    VehicleClass.COMMERCIAL: "Commercial",
}

CATEGORY_LABELS: Dict[ExpenseCategory, str] = {
    ExpenseCategory.FUEL: "Fuel",
    ExpenseCategory.REPAIR: "Repair",
    ExpenseCategory.MAINTENANCE: "Maintenance",
    ExpenseCategory.PARKING: "Parking",
    ExpenseCategory.WASH: "Wash",
    ExpenseCategory.TIRES: "Tires",
    ExpenseCategory.SPARE_PARTS: "Spare Parts",
    ExpenseCategory.INSURANCE: "Insurance",
    ExpenseCategory.OTHER: "Other",
}

CATEGORY_ORDER: Dict[ExpenseCategory, int] = {
    c: i for i, c in enumerate(ExpenseCategory)
}

ACCOUNT_LABELS: Dict[Account, str] = {
    Account.GENERAL_EXPENSE: "General Administrative Expenses",
    Account.DEDUCTIBLE_VAT: "Deductible VAT",
    Account.NON_DEDUCTIBLE_EXPENSE: "Non-Deductible Expenses",
    Account.PAYABLE: "Suppliers",
}

# Statutory share of a passenger vehicle expense (and its VAT) that may be deducted.
PASSENGER_DEDUCTIBLE_RATIO = 0.70

VAT_RATE_MIN = 0.0  # inclusive
VAT_RATE_MAX = 100.0  # exclusive

# Two postings (or a posting and its gross) are considered equal within this bound.
BALANCE_TOLERANCE = 1e-6
