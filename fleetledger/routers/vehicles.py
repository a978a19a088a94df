from typing import List

from fastapi import APIRouter, Depends, HTTPException

from fleetledger.db.dal import Database
from fleetledger.models.vehicle import VehicleIn
from fleetledger.routers.deps import get_db
from fleetledger.routers.schemas import ExpenseOut, VehicleDetail, VehicleOut
from fleetledger.services.aggregation import ExpenseFilter, aggregate
from fleetledger.services.ledger import compute_posting
from fleetledger.services.money import round2

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.post("/", response_model=VehicleOut, status_code=201, summary="Add a vehicle")
async def create_vehicle(payload: VehicleIn, db: Database = Depends(get_db)):
    vehicle = db.add_vehicle(payload)
    return VehicleOut.from_vehicle(vehicle)


@router.get(
    "/", response_model=List[VehicleOut], summary="List vehicles with expense counts"
)
async def list_vehicles(db: Database = Depends(get_db)):
    counts = db.count_expenses_by_vehicle()
    return [
        VehicleOut.from_vehicle(v, expense_count=counts.get(v.id, 0))
        for v in db.list_vehicles()
    ]


@router.get(
    "/{vehicle_id}",
    response_model=VehicleDetail,
    summary="Vehicle with its expense history (newest first)",
)
async def get_vehicle(vehicle_id: str, db: Database = Depends(get_db)):
    vehicle = db.get_vehicle(vehicle_id)
    if vehicle is None:
        raise HTTPException(status_code=404, detail="vehicle not found")
    expenses = db.list_expenses(vehicle_id=vehicle_id)
    summary = aggregate(
        expenses, {vehicle.id: vehicle}, ExpenseFilter(vehicle_id=vehicle_id)
    )
    return VehicleDetail(
        vehicle=VehicleOut.from_vehicle(vehicle, expense_count=summary.record_count),
        expense_count=summary.record_count,
        total_gross=round2(summary.total_gross),
        expenses=[
            ExpenseOut.from_expense(e, compute_posting(e, vehicle)) for e in expenses
        ],
    )


@router.delete(
    "/{vehicle_id}",
    status_code=204,
    summary="Delete a vehicle (its expenses are kept)",
)
async def delete_vehicle(vehicle_id: str, db: Database = Depends(get_db)):
    try:
        db.delete_vehicle(vehicle_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="vehicle not found")
    return None
