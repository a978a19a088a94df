"""Data Access Layer for vehicles and expenses.

Responsibilities
----------------
- Add, fetch, list and delete vehicle / expense records. Records are never
  updated in place; a change is a delete followed by a new add.
- Hand records back as immutable pydantic models so the ledger services only
  ever see plain value collections.
- Export and atomically replace the whole store (backup / restore).
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from fleetledger.models import Expense, ExpenseCategory, ExpenseIn, Vehicle, VehicleIn

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

logger = logging.getLogger("fleetledger.db")


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", ""))


def _row_to_vehicle(row: sqlite3.Row) -> Vehicle:
    return Vehicle(
        id=row["id"],
        plate=row["plate"],
        vehicle_class=row["vehicle_class"],
        created_at=_parse_timestamp(row["created_at"]),
    )


def _row_to_expense(row: sqlite3.Row) -> Expense:
    return Expense(
        id=row["id"],
        vehicle_id=row["vehicle_id"],
        category=row["category"],
        gross_amount=row["gross_amount"],
        vat_rate=row["vat_rate"],
        date=datetime.fromisoformat(row["date"]),
        note=row["note"] or "",
        created_at=_parse_timestamp(row["created_at"]),
    )


def _timestamp_sql(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="milliseconds") + "Z" if value else None


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _next_seq(cur: sqlite3.Cursor, table: str) -> int:
        cur.execute(f"SELECT COALESCE(MAX(seq), 0) + 1 FROM {table}")
        return int(cur.fetchone()[0])

    # ------------------------------------------------------------------
    # Vehicles
    def add_vehicle(self, vehicle: VehicleIn) -> Vehicle:
        vehicle_id = str(uuid.uuid4())
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO vehicles (id, plate, vehicle_class, seq, created_at)
                VALUES (?, ?, ?, ?, ({UTC_NOW_SQL}))
                """,
                (
                    vehicle_id,
                    vehicle.plate,
                    vehicle.vehicle_class.value,
                    self._next_seq(cur, "vehicles"),
                ),
            )
            conn.commit()
        logger.info(
            "vehicle added plate=%s", vehicle.plate, extra={"vehicle_id": vehicle_id}
        )
        stored = self.get_vehicle(vehicle_id)
        if stored is None:
            raise RuntimeError("vehicle not found after insert")
        return stored

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM vehicles WHERE id = ?", (vehicle_id,))
            row = cur.fetchone()
            return _row_to_vehicle(row) if row else None

    def list_vehicles(self) -> List[Vehicle]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM vehicles ORDER BY seq ASC")
            return [_row_to_vehicle(r) for r in cur.fetchall()]

    def vehicles_by_id(self) -> Dict[str, Vehicle]:
        return {v.id: v for v in self.list_vehicles()}

    def delete_vehicle(self, vehicle_id: str) -> None:
        """Delete a vehicle. Its expenses are kept and become unresolved."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM vehicles WHERE id = ?", (vehicle_id,))
            if cur.rowcount == 0:
                raise ValueError("vehicle not found")
            conn.commit()
        logger.info("vehicle deleted", extra={"vehicle_id": vehicle_id})

    # ------------------------------------------------------------------
    # Expenses
    def add_expense(self, expense: ExpenseIn) -> Expense:
        if expense.vat_rate is None or expense.date is None:
            raise ValueError("vat_rate and date must be resolved before insert")
        expense_id = str(uuid.uuid4())
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO expenses (
                    id, vehicle_id, category, gross_amount, vat_rate, date, note,
                    seq, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ({UTC_NOW_SQL}))
                """,
                (
                    expense_id,
                    expense.vehicle_id,
                    expense.category.value,
                    expense.gross_amount,
                    expense.vat_rate,
                    expense.date.isoformat(),
                    expense.note,
                    self._next_seq(cur, "expenses"),
                ),
            )
            conn.commit()
        logger.info(
            "expense added gross=%s",
            expense.gross_amount,
            extra={"expense_id": expense_id, "vehicle_id": expense.vehicle_id},
        )
        stored = self.get_expense(expense_id)
        if stored is None:
            raise RuntimeError("expense not found after insert")
        return stored

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM expenses WHERE id = ?", (expense_id,))
            row = cur.fetchone()
            return _row_to_expense(row) if row else None

    def list_expenses(
        self,
        vehicle_id: Optional[str] = None,
        category: Optional[ExpenseCategory] = None,
    ) -> List[Expense]:
        clauses: List[str] = []
        params: List[Any] = []
        if vehicle_id:
            clauses.append("vehicle_id = ?")
            params.append(vehicle_id)
        if category:
            clauses.append("category = ?")
            params.append(ExpenseCategory(category).value)
        where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
        sql = f"SELECT * FROM expenses{where} ORDER BY date DESC, seq DESC"
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(sql, params)
            return [_row_to_expense(r) for r in cur.fetchall()]

    def count_expenses_by_vehicle(self) -> Dict[str, int]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT vehicle_id, COUNT(*) AS n FROM expenses GROUP BY vehicle_id"
            )
            return {r["vehicle_id"]: int(r["n"]) for r in cur.fetchall()}

    def delete_expense(self, expense_id: str) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
            if cur.rowcount == 0:
                raise ValueError("expense not found")
            conn.commit()
        logger.info("expense deleted", extra={"expense_id": expense_id})

    # ------------------------------------------------------------------
    # Whole-store snapshot (backup / restore)
    def export_snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM vehicles ORDER BY seq ASC")
            vehicles = [_row_to_vehicle(r) for r in cur.fetchall()]
            cur.execute("SELECT * FROM expenses ORDER BY seq ASC")
            expenses = [_row_to_expense(r) for r in cur.fetchall()]
        return {
            "vehicles": [v.model_dump(mode="json") for v in vehicles],
            "expenses": [e.model_dump(mode="json") for e in expenses],
        }

    def replace_all(
        self, vehicles: Sequence[Vehicle], expenses: Sequence[Expense]
    ) -> None:
        """Replace both collections in one transaction (all or nothing)."""
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM expenses")
            cur.execute("DELETE FROM vehicles")
            for seq, v in enumerate(vehicles, start=1):
                cur.execute(
                    f"""
                    INSERT INTO vehicles (id, plate, vehicle_class, seq, created_at)
                    VALUES (?, ?, ?, ?, COALESCE(?, ({UTC_NOW_SQL})))
                    """,
                    (v.id, v.plate, v.vehicle_class.value, seq, _timestamp_sql(v.created_at)),
                )
            for seq, e in enumerate(expenses, start=1):
                cur.execute(
                    f"""
                    INSERT INTO expenses (
                        id, vehicle_id, category, gross_amount, vat_rate, date, note,
                        seq, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, COALESCE(?, ({UTC_NOW_SQL})))
                    """,
                    (
                        e.id,
                        e.vehicle_id,
                        e.category.value,
                        e.gross_amount,
                        e.vat_rate,
                        e.date.isoformat(),
                        e.note,
                        seq,
                        _timestamp_sql(e.created_at),
                    ),
                )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info(
            "store replaced vehicles=%d expenses=%d", len(vehicles), len(expenses)
        )
