import sqlite3

from fastapi import APIRouter, Depends, HTTPException

from fleetledger.db.dal import Database
from fleetledger.routers.deps import get_db
from fleetledger.routers.schemas import RestoreResult, Snapshot

router = APIRouter(prefix="/backup", tags=["backup"])


@router.get("/", response_model=Snapshot, summary="Export every vehicle and expense")
async def export_backup(db: Database = Depends(get_db)):
    return db.export_snapshot()


@router.put(
    "/",
    response_model=RestoreResult,
    summary="Replace every vehicle and expense with the supplied snapshot",
)
async def restore_backup(payload: Snapshot, db: Database = Depends(get_db)):
    try:
        db.replace_all(payload.vehicles, payload.expenses)
    except sqlite3.IntegrityError as e:
        raise HTTPException(status_code=422, detail=f"invalid snapshot: {e}") from e
    return RestoreResult(vehicles=len(payload.vehicles), expenses=len(payload.expenses))
