"""Database schema DDL definitions and initialization utilities.

Tables:
  - vehicles: fleet vehicles (plate + immutable class)
  - expenses: individual VAT-inclusive expense records
  - metadata: key/value store (schema version)

expenses.vehicle_id intentionally carries no foreign key: deleting a vehicle
keeps its expenses, which then hold a dangling reference.
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

VEHICLES_DDL = f"""
CREATE TABLE IF NOT EXISTS vehicles (
    id TEXT PRIMARY KEY,
    plate TEXT NOT NULL CHECK (length(plate) > 0),
    vehicle_class TEXT NOT NULL CHECK (vehicle_class IN ('passenger','commercial')),
    seq INTEGER NOT NULL DEFAULT 0, -- insertion order
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXPENSES_DDL = f"""
CREATE TABLE IF NOT EXISTS expenses (
    id TEXT PRIMARY KEY,
    vehicle_id TEXT NOT NULL,
    category TEXT NOT NULL,
    gross_amount REAL NOT NULL CHECK (gross_amount > 0),
    vat_rate REAL NOT NULL CHECK (vat_rate >= 0 AND vat_rate < 100),
    date TEXT NOT NULL, -- ISO datetime (naive UTC)
    note TEXT NOT NULL DEFAULT '',
    seq INTEGER NOT NULL DEFAULT 0, -- insertion order
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXPENSES_VEHICLE_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_vehicle_date ON expenses(vehicle_id, date);"
)
EXPENSES_CATEGORY_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_category ON expenses(category);"
)

# Installed by migration v2; a vehicle's class is fixed once created.
VEHICLE_CLASS_IMMUTABLE_TRIGGER_DDL = """
CREATE TRIGGER IF NOT EXISTS trg_vehicles_class_immutable
BEFORE UPDATE OF vehicle_class ON vehicles
WHEN NEW.vehicle_class IS NOT OLD.vehicle_class
BEGIN
    SELECT RAISE(ABORT, 'vehicle_class is immutable');
END;
"""

DDL_ORDER: Sequence[str] = (
    VEHICLES_DDL,
    EXPENSES_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        for ddl in (EXPENSES_VEHICLE_INDEX_DDL, EXPENSES_CATEGORY_INDEX_DDL):
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
