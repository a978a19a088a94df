"""Aggregation over a filtered expense collection.

Design notes:
    Pure functions over explicit inputs (expenses + vehicle lookup), recomputed
    on every call. Sums use ``math.fsum`` so totals do not depend on the order
    the storage layer returned the records in.

    An expense whose vehicle id cannot be resolved still counts towards
    ``record_count``, ``total_gross`` and the category breakdown, but is left
    out of the 770 / 191 / 689 account totals.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple

from fleetledger.core.exceptions import UnresolvedVehicleReference
from fleetledger.models.constants import ExpenseCategory
from fleetledger.models.expense import Expense
from fleetledger.models.vehicle import Vehicle
from fleetledger.services.ledger import compute_posting, resolve_vehicle

logger = logging.getLogger("fleetledger.aggregation")


@dataclass(frozen=True)
class ExpenseFilter:
    """Unset fields match everything."""

    vehicle_id: Optional[str] = None
    category: Optional[ExpenseCategory] = None

    def matches(self, expense: Expense) -> bool:
        if self.vehicle_id is not None and expense.vehicle_id != self.vehicle_id:
            return False
        if self.category is not None and expense.category != self.category:
            return False
        return True


@dataclass(frozen=True)
class CategoryBreakdownItem:
    category: ExpenseCategory
    total_gross: float
    count: int


@dataclass(frozen=True)
class Summary:
    record_count: int
    total_gross: float
    total_general_expense: float  # 770
    total_deductible_vat: float  # 191
    total_non_deductible_expense: float  # 689
    unresolved_count: int = 0
    categories: Tuple[CategoryBreakdownItem, ...] = ()


def filter_expenses(
    expenses: Iterable[Expense], expense_filter: Optional[ExpenseFilter] = None
) -> List[Expense]:
    expense_filter = expense_filter or ExpenseFilter()
    return [e for e in expenses if expense_filter.matches(e)]


def compute_category_breakdown(
    expenses: Iterable[Expense],
) -> List[CategoryBreakdownItem]:
    """Group by category, largest gross first; ties follow category declaration order."""
    grouped: dict[ExpenseCategory, List[float]] = {}
    for e in expenses:
        grouped.setdefault(e.category, []).append(e.gross_amount)
    items = [
        CategoryBreakdownItem(category=c, total_gross=math.fsum(v), count=len(v))
        for c, v in grouped.items()
    ]
    items.sort(key=lambda i: (-i.total_gross, i.category.rank))
    return items


def aggregate(
    expenses: Iterable[Expense],
    vehicles: Mapping[str, Vehicle],
    expense_filter: Optional[ExpenseFilter] = None,
) -> Summary:
    selected = filter_expenses(expenses, expense_filter)
    general: List[float] = []
    deductible_vat: List[float] = []
    non_deductible: List[float] = []
    unresolved = 0
    for expense in selected:
        try:
            vehicle = resolve_vehicle(vehicles, expense)
        except UnresolvedVehicleReference as exc:
            logger.warning(
                "excluded from account totals: %s",
                exc,
                extra={"expense_id": exc.expense_id, "vehicle_id": exc.vehicle_id},
            )
            unresolved += 1
            continue
        posting = compute_posting(expense, vehicle)
        general.append(posting.general_expense)
        deductible_vat.append(posting.deductible_vat)
        non_deductible.append(posting.non_deductible_expense)

    return Summary(
        record_count=len(selected),
        total_gross=math.fsum(e.gross_amount for e in selected),
        total_general_expense=math.fsum(general),
        total_deductible_vat=math.fsum(deductible_vat),
        total_non_deductible_expense=math.fsum(non_deductible),
        unresolved_count=unresolved,
        categories=tuple(compute_category_breakdown(selected)),
    )
