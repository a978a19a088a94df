"""Plain-text renderers for a single posting (receipt) and the expense table (CSV).

Both functions only format values produced by the money / ledger layers and
never mutate their inputs, so identical inputs always give identical text.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping

from fleetledger.core.exceptions import UnresolvedVehicleReference
from fleetledger.models.constants import Account
from fleetledger.models.expense import Expense
from fleetledger.models.vehicle import Vehicle
from fleetledger.services.ledger import LedgerPosting, compute_posting, resolve_vehicle
from fleetledger.services.money import compute_base, format_amount, format_rate

logger = logging.getLogger("fleetledger.reports")

RECEIPT_TITLE = "EXPENSE RECEIPT"
POSTING_TITLE = "LEDGER POSTING"
RULE = "─" * 37
RECEIPT_DATE_FORMAT = "%d.%m.%Y"

CSV_HEADER = "Date,Plate,VehicleClass,Category,Gross,VatRate,Base,770,191,689,320,Note"
CSV_DELIMITER = ","


def _money(value: float, currency_suffix: str) -> str:
    return f"{format_amount(value)} {currency_suffix}"


def _show_account_line(account: Account, value: float) -> bool:
    if account is Account.PAYABLE:
        return True
    if account in (
        Account.GENERAL_EXPENSE,
        Account.DEDUCTIBLE_VAT,
        Account.NON_DEDUCTIBLE_EXPENSE,
    ):
        return value != 0
    raise ValueError(f"unsupported account {account!r}")


def render_receipt(
    expense: Expense,
    vehicle: Vehicle,
    posting: LedgerPosting,
    currency_suffix: str = "TL",
) -> str:
    lines: List[str] = [
        RECEIPT_TITLE,
        "",
        f"Date: {expense.date.strftime(RECEIPT_DATE_FORMAT)}",
        f"Vehicle: {vehicle.plate} ({vehicle.vehicle_class.label})",
        f"Category: {expense.category.label}",
        f"Gross Amount: {_money(expense.gross_amount, currency_suffix)}",
        f"VAT Rate: %{format_rate(expense.vat_rate)}",
        f"Base Amount: {_money(compute_base(expense.gross_amount, expense.vat_rate), currency_suffix)}",
    ]
    if expense.note:
        lines.append(f"Note: {expense.note}")
    lines += ["", RULE, POSTING_TITLE, RULE, ""]

    for account, value in posting.lines():
        if not _show_account_line(account, value):
            continue
        side = "Credit" if account.is_credit else "Debit"
        lines.append(f"{account.value} - {account.label} ({side})")
        lines.append(f"     {_money(value, currency_suffix)}")
        lines.append("")

    return "\n".join(lines[:-1]) + "\n"


def _csv_cell(text: str) -> str:
    if any(ch in text for ch in (CSV_DELIMITER, '"', "\n", "\r")):
        return _csv_quoted(text)
    return text


def _csv_quoted(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def render_table(expenses: Iterable[Expense], vehicles: Mapping[str, Vehicle]) -> str:
    """Render every expense whose vehicle resolves as one CSV row, newest first.

    Equal dates keep expense id order. The note column is always quoted.
    """
    ordered = sorted(sorted(expenses, key=lambda e: e.id), key=lambda e: e.date, reverse=True)
    rows = [CSV_HEADER]
    for expense in ordered:
        try:
            vehicle = resolve_vehicle(vehicles, expense)
        except UnresolvedVehicleReference as exc:
            logger.warning(
                "skipped CSV row: %s",
                exc,
                extra={"expense_id": exc.expense_id, "vehicle_id": exc.vehicle_id},
            )
            continue
        posting = compute_posting(expense, vehicle)
        cells = [
            expense.date.date().isoformat(),
            _csv_cell(vehicle.plate),
            vehicle.vehicle_class.value,
            expense.category.value,
            format_amount(expense.gross_amount),
            format_rate(expense.vat_rate),
            format_amount(compute_base(expense.gross_amount, expense.vat_rate)),
        ]
        cells += [format_amount(value) for _, value in posting.lines()]
        cells.append(_csv_quoted(expense.note))
        rows.append(CSV_DELIMITER.join(cells))
    return "\n".join(rows) + "\n"
