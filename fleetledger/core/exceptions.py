"""Error taxonomy of the ledger engine.

``InvalidAmount`` and ``InvalidRate`` are raised by the arithmetic / posting
layer and propagate to the caller untouched. ``UnresolvedVehicleReference`` is
only raised by :func:`fleetledger.services.ledger.resolve_vehicle`; aggregation
and rendering catch it and skip the affected expense.
"""


class LedgerError(ValueError):
    """Base class for caller errors detected by the ledger engine."""

    code = "ledger_error"


class InvalidAmount(LedgerError):
    code = "invalid_amount"

    def __init__(self, amount: float):
        self.amount = amount
        super().__init__(
            f"gross amount must be a finite number greater than 0, got {amount!r}"
        )


class InvalidRate(LedgerError):
    code = "invalid_rate"

    def __init__(self, rate: float):
        self.rate = rate
        super().__init__(f"VAT rate must be within [0, 100), got {rate!r}")


class UnresolvedVehicleReference(LookupError):
    def __init__(self, expense_id: str, vehicle_id: str):
        self.expense_id = expense_id
        self.vehicle_id = vehicle_id
        super().__init__(
            f"expense {expense_id} references unknown vehicle {vehicle_id}"
        )
