from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import VAT_RATE_MAX, VAT_RATE_MIN, ExpenseCategory


def _parse_decimal_text(value: Any) -> Any:
    """Accept form text such as ``"1250,50"`` (comma decimal separator)."""
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            raise ValueError("amount cannot be empty")
        return text
    return value


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Mixed aware/naive datetimes cannot be compared when sorting by date.
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ExpenseIn(BaseModel):
    vehicle_id: str
    category: ExpenseCategory
    gross_amount: float = Field(
        ..., gt=0, allow_inf_nan=False, description="VAT inclusive amount"
    )
    vat_rate: Optional[float] = Field(
        None, ge=VAT_RATE_MIN, lt=VAT_RATE_MAX, allow_inf_nan=False
    )
    date: Optional[datetime] = None
    note: str = ""

    @field_validator("gross_amount", "vat_rate", mode="before")
    @classmethod
    def _decimal_comma(cls, value: Any) -> Any:
        return _parse_decimal_text(value)

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(value)

    @field_validator("note", mode="before")
    @classmethod
    def _note_text(cls, value: Any) -> Any:
        return "" if value is None else value


class Expense(ExpenseIn):
    """Stored expense record. Base and VAT amount are derived, never stored."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    vat_rate: float = Field(..., ge=VAT_RATE_MIN, lt=VAT_RATE_MAX, allow_inf_nan=False)
    date: datetime
    created_at: Optional[datetime] = None
