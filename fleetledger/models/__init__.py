"""Pydantic domain models for the fleet expense ledger."""

from .constants import (
    Account,
    ExpenseCategory,
    VehicleClass,
)  # re-export
from .expense import Expense, ExpenseIn
from .vehicle import Vehicle, VehicleIn

__all__ = [
    "Account",
    "ExpenseCategory",
    "VehicleClass",
    "Expense",
    "ExpenseIn",
    "Vehicle",
    "VehicleIn",
]
