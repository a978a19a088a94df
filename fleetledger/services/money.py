"""Money / VAT arithmetic and rounding helpers.

Amounts are carried as floats through every calculation and aggregation;
rounding happens only when a value is formatted for presentation, so totals
never accumulate per-record rounding error.
"""

from __future__ import annotations

import math
import numbers
from decimal import Decimal, ROUND_HALF_UP

from fleetledger.core.exceptions import InvalidAmount, InvalidRate
from fleetledger.models.constants import VAT_RATE_MAX, VAT_RATE_MIN


def _as_float(value: object, name: str) -> float:
    """Coerce ints, floats and Decimals; anything else is a caller bug."""
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise TypeError(f"{name} must be a real number, got {type(value).__name__}")
    if isinstance(value, Decimal) and value.is_snan():
        return math.nan
    return float(value)


def validate_amount(gross: float) -> float:
    value = _as_float(gross, "gross amount")
    if not math.isfinite(value) or value <= 0:
        raise InvalidAmount(gross)
    return value


def validate_rate(vat_rate: float) -> float:
    value = _as_float(vat_rate, "VAT rate")
    if not (VAT_RATE_MIN <= value < VAT_RATE_MAX):
        raise InvalidRate(vat_rate)
    return value


def compute_base(gross: float, vat_rate: float) -> float:
    """Return the VAT-exclusive base ("matrah") of a VAT-inclusive amount.

    Raises InvalidAmount for ``gross <= 0`` and InvalidRate for a rate outside
    ``[0, 100)``. A zero rate returns the gross unchanged.
    """
    gross = validate_amount(gross)
    vat_rate = validate_rate(vat_rate)
    return gross / (1 + vat_rate / 100)


def compute_vat_amount(gross: float, vat_rate: float) -> float:
    return validate_amount(gross) - compute_base(gross, vat_rate)


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_amount(value: float) -> str:
    """Format to exactly two decimals (``1000`` -> ``"1000.00"``)."""
    rounded = round2(value)
    if rounded == 0:
        rounded = 0.0  # no "-0.00"
    return f"{rounded:.2f}"


def format_rate(vat_rate: float) -> str:
    """Format a VAT percentage with no decimals (``20.0`` -> ``"20"``).

    Uses printf-style ``%.0f`` rounding, so exact halves go to the even
    neighbour (``12.5`` -> ``"12"``).
    """
    return "%.0f" % float(vat_rate)
