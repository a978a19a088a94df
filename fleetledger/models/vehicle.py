from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from .constants import VehicleClass


class VehicleIn(BaseModel):
    plate: str
    vehicle_class: VehicleClass

    @field_validator("plate")
    @classmethod
    def _plate_not_blank(cls, value: str) -> str:
        # Free-form; only normalized to the uppercase convention.
        if not value or not value.strip():
            raise ValueError("plate cannot be empty")
        return value.strip().upper()


class Vehicle(VehicleIn):
    """Stored vehicle. Immutable: the class must never change after creation."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    created_at: datetime | None = None
