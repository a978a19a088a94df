"""Response models shared by the routers.

Amounts are rounded to two decimals here, at the presentation boundary; the
services underneath work with unrounded floats.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from fleetledger.models import Expense, ExpenseCategory, Vehicle, VehicleClass
from fleetledger.services.aggregation import CategoryBreakdownItem
from fleetledger.services.ledger import LedgerPosting
from fleetledger.services.money import compute_base, round2


class PostingOut(BaseModel):
    general_expense: float  # 770
    deductible_vat: float  # 191
    non_deductible_expense: float  # 689
    payable: float  # 320
    balanced: bool

    @classmethod
    def from_posting(cls, posting: LedgerPosting) -> "PostingOut":
        return cls(
            general_expense=round2(posting.general_expense),
            deductible_vat=round2(posting.deductible_vat),
            non_deductible_expense=round2(posting.non_deductible_expense),
            payable=round2(posting.payable),
            balanced=posting.is_balanced(),
        )


class VehicleOut(BaseModel):
    id: str
    plate: str
    vehicle_class: VehicleClass
    vehicle_class_label: str
    created_at: Optional[datetime] = None
    expense_count: int = 0

    @classmethod
    def from_vehicle(cls, vehicle: Vehicle, expense_count: int = 0) -> "VehicleOut":
        return cls(
            id=vehicle.id,
            plate=vehicle.plate,
            vehicle_class=vehicle.vehicle_class,
            vehicle_class_label=vehicle.vehicle_class.label,
            created_at=vehicle.created_at,
            expense_count=expense_count,
        )


class ExpenseOut(BaseModel):
    id: str
    vehicle_id: str
    category: ExpenseCategory
    category_label: str
    gross_amount: float
    vat_rate: float
    base_amount: float
    vat_amount: float
    date: datetime
    note: str
    created_at: Optional[datetime] = None
    # None when the vehicle no longer exists
    posting: Optional[PostingOut] = None

    @classmethod
    def from_expense(
        cls, expense: Expense, posting: Optional[LedgerPosting] = None
    ) -> "ExpenseOut":
        base = compute_base(expense.gross_amount, expense.vat_rate)
        return cls(
            id=expense.id,
            vehicle_id=expense.vehicle_id,
            category=expense.category,
            category_label=expense.category.label,
            gross_amount=round2(expense.gross_amount),
            vat_rate=expense.vat_rate,
            base_amount=round2(base),
            vat_amount=round2(expense.gross_amount - base),
            date=expense.date,
            note=expense.note,
            created_at=expense.created_at,
            posting=PostingOut.from_posting(posting) if posting else None,
        )


class VehicleDetail(BaseModel):
    vehicle: VehicleOut
    expense_count: int
    total_gross: float
    expenses: List[ExpenseOut]


class PostingPreview(BaseModel):
    vehicle: VehicleOut
    gross_amount: float
    vat_rate: float
    base_amount: float
    vat_amount: float
    posting: PostingOut


class CategoryBreakdownOut(BaseModel):
    category: ExpenseCategory
    label: str
    total_gross: float
    count: int

    @classmethod
    def from_item(cls, item: CategoryBreakdownItem) -> "CategoryBreakdownOut":
        return cls(
            category=item.category,
            label=item.category.label,
            total_gross=round2(item.total_gross),
            count=item.count,
        )


class SummaryOut(BaseModel):
    vehicle_count: int
    record_count: int
    total_gross: float
    total_general_expense: float
    total_deductible_vat: float
    total_non_deductible_expense: float
    unresolved_count: int
    categories: List[CategoryBreakdownOut]


class Snapshot(BaseModel):
    vehicles: List[Vehicle]
    expenses: List[Expense]


class RestoreResult(BaseModel):
    vehicles: int
    expenses: int
