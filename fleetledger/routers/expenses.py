from typing import List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse

from fleetledger.core.config import Settings
from fleetledger.db.dal import Database
from fleetledger.models import ExpenseCategory, Vehicle
from fleetledger.models.expense import ExpenseIn
from fleetledger.routers.deps import get_app_settings, get_db
from fleetledger.routers.schemas import ExpenseOut, PostingOut, PostingPreview, VehicleOut
from fleetledger.services.ledger import compute_posting
from fleetledger.services.money import compute_base, compute_vat_amount, round2
from fleetledger.services.reports import render_receipt

router = APIRouter(prefix="/expenses", tags=["expenses"])


# Helpers ----------------------------------------------------------


def _prepare_input(
    payload: ExpenseIn, db: Database, settings: Settings
) -> tuple[ExpenseIn, Vehicle]:
    """Apply form defaults and form-level checks; return input + owning vehicle."""
    vat_rate = payload.vat_rate if payload.vat_rate is not None else settings.default_vat_rate
    if not settings.form_vat_rate_min <= vat_rate <= settings.form_vat_rate_max:
        raise HTTPException(
            status_code=422,
            detail=(
                f"vat_rate must be between {settings.form_vat_rate_min:g} "
                f"and {settings.form_vat_rate_max:g}"
            ),
        )
    vehicle = db.get_vehicle(payload.vehicle_id)
    if vehicle is None:
        raise HTTPException(status_code=422, detail="vehicle not found")
    prepared = payload.model_copy(
        update={"vat_rate": vat_rate, "date": payload.date or datetime.now()}
    )
    return prepared, vehicle


# Routes -----------------------------------------------------------
@router.post(
    "/", response_model=ExpenseOut, status_code=201, summary="Record an expense"
)
async def create_expense(
    payload: ExpenseIn,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    prepared, vehicle = _prepare_input(payload, db, settings)
    # Posting raises on bad input; nothing is written in that case.
    posting = compute_posting(prepared, vehicle)
    expense = db.add_expense(prepared)
    return ExpenseOut.from_expense(expense, posting)


@router.post(
    "/preview",
    response_model=PostingPreview,
    summary="Compute the posting for an unsaved expense",
)
async def preview_expense(
    payload: ExpenseIn,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    prepared, vehicle = _prepare_input(payload, db, settings)
    posting = compute_posting(prepared, vehicle)
    return PostingPreview(
        vehicle=VehicleOut.from_vehicle(vehicle),
        gross_amount=round2(prepared.gross_amount),
        vat_rate=prepared.vat_rate,
        base_amount=round2(compute_base(prepared.gross_amount, prepared.vat_rate)),
        vat_amount=round2(compute_vat_amount(prepared.gross_amount, prepared.vat_rate)),
        posting=PostingOut.from_posting(posting),
    )


@router.get(
    "/", response_model=List[ExpenseOut], summary="List expenses with optional filters"
)
async def list_expenses_endpoint(
    vehicle_id: Optional[str] = Query(None, description="Filter by vehicle id"),
    category: Optional[ExpenseCategory] = Query(None, description="Filter by category"),
    db: Database = Depends(get_db),
):
    vehicles = db.vehicles_by_id()
    rows = db.list_expenses(vehicle_id=vehicle_id, category=category)
    out = []
    for e in rows:
        vehicle = vehicles.get(e.vehicle_id)
        out.append(
            ExpenseOut.from_expense(e, compute_posting(e, vehicle) if vehicle else None)
        )
    return out


@router.get("/{expense_id}", response_model=ExpenseOut, summary="Expense detail")
async def get_expense(expense_id: str, db: Database = Depends(get_db)):
    expense = db.get_expense(expense_id)
    if expense is None:
        raise HTTPException(status_code=404, detail="expense not found")
    vehicle = db.get_vehicle(expense.vehicle_id)
    return ExpenseOut.from_expense(
        expense, compute_posting(expense, vehicle) if vehicle else None
    )


@router.get(
    "/{expense_id}/receipt",
    response_class=PlainTextResponse,
    summary="Plain-text accounting receipt for one expense",
)
async def expense_receipt(
    expense_id: str,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    expense = db.get_expense(expense_id)
    if expense is None:
        raise HTTPException(status_code=404, detail="expense not found")
    vehicle = db.get_vehicle(expense.vehicle_id)
    if vehicle is None:
        raise HTTPException(status_code=404, detail="vehicle not found for expense")
    posting = compute_posting(expense, vehicle)
    return PlainTextResponse(
        render_receipt(expense, vehicle, posting, currency_suffix=settings.currency_suffix)
    )


@router.delete("/{expense_id}", status_code=204, summary="Delete an expense")
async def delete_expense(expense_id: str, db: Database = Depends(get_db)):
    try:
        db.delete_expense(expense_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="expense not found")
    return None
