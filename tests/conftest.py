from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from fleetledger.core.config import Settings
from fleetledger.db.dal import Database
from fleetledger.db.migrate import apply_migrations
from fleetledger.main import create_app
from fleetledger.models import Expense, ExpenseCategory, Vehicle, VehicleClass


def make_vehicle(
    vehicle_id: str = "v-passenger",
    plate: str = "34 ABC 123",
    vehicle_class: VehicleClass = VehicleClass.PASSENGER,
) -> Vehicle:
    return Vehicle(id=vehicle_id, plate=plate, vehicle_class=vehicle_class)


def make_expense(
    expense_id: str = "e-1",
    vehicle_id: str = "v-passenger",
    gross_amount: float = 1200.0,
    vat_rate: float = 20.0,
    category: ExpenseCategory = ExpenseCategory.FUEL,
    date: datetime = datetime(2024, 5, 1, 10, 30),
    note: str = "",
) -> Expense:
    return Expense(
        id=expense_id,
        vehicle_id=vehicle_id,
        category=category,
        gross_amount=gross_amount,
        vat_rate=vat_rate,
        date=date,
        note=note,
    )


@pytest.fixture
def passenger() -> Vehicle:
    return make_vehicle()


@pytest.fixture
def commercial() -> Vehicle:
    return make_vehicle("v-commercial", "06 XYZ 99", VehicleClass.COMMERCIAL)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path, db_path=tmp_path / "test.sqlite3")


@pytest.fixture
def db(settings) -> Database:
    apply_migrations(settings.db_path)
    return Database(settings.db_path)


@pytest.fixture
def client(settings):
    app = create_app(settings_override=settings)
    with TestClient(app) as c:
        yield c
