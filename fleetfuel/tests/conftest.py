# fleetfuel/tests/conftest.py
from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from fleetfuel.app import create_app
from fleetfuel.config import Settings
from fleetfuel.engines import AnalyticsEngine, LifecycleEngine, Registry, StatusHistoryEngine
from fleetfuel.persistence import MemoryAdapter
from fleetfuel.store import RecordStore

PROJECT = "Project A"
OTHER_PROJECT = "Project B"


@pytest.fixture
def store():
    return RecordStore()


@pytest.fixture
def lifecycle(store):
    return LifecycleEngine(store)


@pytest.fixture
def status_engine(store):
    return StatusHistoryEngine(store)


@pytest.fixture
def registry(store):
    return Registry(store)


@pytest.fixture
def analytics(store):
    return AnalyticsEngine(store)


@pytest.fixture
def fleet(store, status_engine, registry):
    """Two diesel/petrol vehicles and one supplier on PROJECT, plus one vehicle on OTHER_PROJECT."""
    truck = status_engine.register_vehicle(
        project_id=PROJECT, vehicle_name="Tipper 1", vehicle_number="KA-01-1111",
        fuel_type="Diesel", start_date=date(2024, 1, 1),
    )
    jeep = status_engine.register_vehicle(
        project_id=PROJECT, vehicle_name="Site Jeep", vehicle_number="KA-01-2222",
        fuel_type="Petrol", start_date=date(2024, 1, 1),
    )
    other = status_engine.register_vehicle(
        project_id=OTHER_PROJECT, vehicle_name="Loader", vehicle_number="KA-02-3333",
        fuel_type="Diesel", start_date=date(2024, 1, 1),
    )
    supplier = registry.add_supplier(project_id=PROJECT, supplier_name="Highway Fuels")
    store.dirty.clear()
    return {"truck": truck, "jeep": jeep, "other": other, "supplier": supplier}


@pytest.fixture
def refuel(lifecycle, fleet):
    """Open (and optionally close) a fuel entry for a vehicle of the fleet."""
    def _refuel(vehicle="truck", litres=10.0, opening_km=1000.0, closing_km=None,
                when=datetime(2024, 3, 1, 9, 30), price=None):
        entry = lifecycle.open_fuel_entry(
            vehicle_id=fleet[vehicle].id, supplier_id=fleet["supplier"].id, date=when,
            litres=litres, opening_km=opening_km, price_per_litre=price,
        )
        if closing_km is not None:
            lifecycle.close_fuel_entry(entry.id, closing_km)
        return entry
    return _refuel


@pytest.fixture
def adapter():
    return MemoryAdapter()


@pytest.fixture
def client(adapter):
    # failures must come back as HTTP responses, not raise inside the test
    app = create_app(Settings(storage_backend="memory", log_level="WARNING"), adapter=adapter)
    return TestClient(app, raise_server_exceptions=False)
