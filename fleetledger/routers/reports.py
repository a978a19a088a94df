from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from fleetledger.db.dal import Database
from fleetledger.models import ExpenseCategory
from fleetledger.routers.deps import get_db
from fleetledger.routers.schemas import CategoryBreakdownOut, SummaryOut
from fleetledger.services.aggregation import ExpenseFilter, aggregate
from fleetledger.services.money import round2
from fleetledger.services.reports import render_table

router = APIRouter(prefix="/reports", tags=["reports"])

CSV_FILENAME = "fleet-expenses.csv"


@router.get(
    "/summary",
    response_model=SummaryOut,
    summary="Account totals and category breakdown over filtered expenses",
)
async def summary_endpoint(
    vehicle_id: Optional[str] = Query(None, description="Filter by vehicle id"),
    category: Optional[ExpenseCategory] = Query(None, description="Filter by category"),
    db: Database = Depends(get_db),
):
    """Aggregate the whole store; filtering happens in the aggregation service.

    Expenses whose vehicle was deleted still count in record_count / total_gross
    but contribute nothing to the 770 / 191 / 689 totals.
    """
    vehicles = db.vehicles_by_id()
    summary = aggregate(
        db.list_expenses(),
        vehicles,
        ExpenseFilter(vehicle_id=vehicle_id, category=category),
    )
    return SummaryOut(
        vehicle_count=len(vehicles),
        record_count=summary.record_count,
        total_gross=round2(summary.total_gross),
        total_general_expense=round2(summary.total_general_expense),
        total_deductible_vat=round2(summary.total_deductible_vat),
        total_non_deductible_expense=round2(summary.total_non_deductible_expense),
        unresolved_count=summary.unresolved_count,
        categories=[CategoryBreakdownOut.from_item(i) for i in summary.categories],
    )


@router.get(
    "/export.csv",
    response_class=Response,
    summary="All expenses with their postings as CSV",
)
async def export_csv(db: Database = Depends(get_db)):
    text = render_table(db.list_expenses(), db.vehicles_by_id())
    return Response(
        content=text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )
