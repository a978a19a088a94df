"""Ledger rule engine.

Turns one expense and its owning vehicle into a four account posting:

    770 General administrative expenses  (debit)
    191 Deductible input VAT             (debit)
    689 Non-deductible expenses          (debit)
    320 Suppliers / payable              (credit)

Commercial vehicles deduct the full base and the full VAT. Passenger vehicles
deduct only 70% of the base and the VAT attributable to that slice; the
remaining 30% of the base plus its VAT is booked to 689. Debits always sum to
the gross amount credited to 320.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Tuple

from fleetledger.core.exceptions import UnresolvedVehicleReference
from fleetledger.models.constants import (
    BALANCE_TOLERANCE,
    PASSENGER_DEDUCTIBLE_RATIO,
    Account,
    VehicleClass,
)
from fleetledger.models.expense import Expense, ExpenseIn
from fleetledger.models.vehicle import Vehicle
from fleetledger.services.money import compute_base, validate_amount, validate_rate


@dataclass(frozen=True)
class LedgerPosting:
    general_expense: float  # 770
    deductible_vat: float  # 191
    non_deductible_expense: float  # 689
    payable: float  # 320

    def amount(self, account: Account) -> float:
        if account is Account.GENERAL_EXPENSE:
            return self.general_expense
        if account is Account.DEDUCTIBLE_VAT:
            return self.deductible_vat
        if account is Account.NON_DEDUCTIBLE_EXPENSE:
            return self.non_deductible_expense
        if account is Account.PAYABLE:
            return self.payable
        raise ValueError(f"unsupported account {account!r}")

    def lines(self) -> Iterator[Tuple[Account, float]]:
        for account in Account:
            yield account, self.amount(account)

    @property
    def debit_total(self) -> float:
        return self.general_expense + self.deductible_vat + self.non_deductible_expense

    def is_balanced(self, tolerance: float = BALANCE_TOLERANCE) -> bool:
        return abs(self.debit_total - self.payable) <= tolerance

    def as_dict(self) -> dict[str, float]:
        return {account.value: value for account, value in self.lines()}


def compute_posting(expense: ExpenseIn, vehicle: Vehicle) -> LedgerPosting:
    gross = validate_amount(expense.gross_amount)
    rate = validate_rate(expense.vat_rate)
    base = compute_base(gross, rate)

    vehicle_class = vehicle.vehicle_class
    if vehicle_class is VehicleClass.COMMERCIAL:
        return LedgerPosting(
            general_expense=base,
            deductible_vat=gross - base,
            non_deductible_expense=0.0,
            payable=gross,
        )
    if vehicle_class is VehicleClass.PASSENGER:
        deductible_portion = base * PASSENGER_DEDUCTIBLE_RATIO
        deductible_vat = deductible_portion * rate / 100
        remainder = base - deductible_portion
        remainder_vat = remainder * rate / 100
        return LedgerPosting(
            general_expense=deductible_portion,
            deductible_vat=deductible_vat,
            non_deductible_expense=remainder + remainder_vat,
            payable=gross,
        )
    raise ValueError(f"unsupported vehicle class {vehicle_class!r}")


def index_vehicles(vehicles: Iterable[Vehicle]) -> dict[str, Vehicle]:
    return {v.id: v for v in vehicles}


def resolve_vehicle(vehicles: Mapping[str, Vehicle], expense: Expense) -> Vehicle:
    vehicle = vehicles.get(expense.vehicle_id)
    if vehicle is None:
        raise UnresolvedVehicleReference(expense.id, expense.vehicle_id)
    return vehicle
