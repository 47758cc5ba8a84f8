# fleetfuel/tests/test_persistence.py
import json
from datetime import date, datetime

import pytest

from fleetfuel.config import Settings
from fleetfuel.engines import LifecycleEngine, Registry, StatusHistoryEngine
from fleetfuel.persistence import JsonFileAdapter, MemoryAdapter, Repository, make_adapter, serialize
from fleetfuel.store import COLLECTIONS, DAILY_LOGS, FUEL_ENTRIES, SUPPLIERS, VEHICLES


class CountingAdapter(MemoryAdapter):
    """MemoryAdapter that records every save call."""

    def __init__(self, initial=None):
        self.saves = []
        super().__init__(initial)
        self.saves.clear()

    def save(self, key, records):
        self.saves.append(key)
        super().save(key, records)


LEGACY = {
    "vehicles": [{
        "id": "v1700000000000", "projectId": "Project A", "vehicleName": "Hired Tipper",
        "vehicleNumber": "KA-01-7777", "vehicleType": "Rent – Daily", "fuelType": "Diesel",
        "status": "Active", "startDate": "2024-01-01T00:00:00.000Z", "rentRate": 2500,
    }],
    "fuelEntries": [{
        "id": "f1700000000001", "date": "2024-03-01T04:00:00.000Z", "projectId": "Project A",
        "vehicleId": "v1700000000000", "vehicleName": "Hired Tipper", "fuelType": "Diesel",
        "supplierId": "s1700000000002", "supplierName": "Highway Fuels", "litres": 10,
        "openingKm": 1000, "closingKm": None, "distance": None, "mileage": None,
        "status": "open", "pricePerLitre": 96.5, "totalCost": 965,
    }],
    "dailyLogs": [{
        "id": "d1700000000003", "date": "2024-03-01T02:30:00.000Z", "projectId": "Project A",
        "vehicleId": "v1700000000000", "vehicleName": "Hired Tipper",
        "openingKm": 990, "closingKm": 1010, "distance": 20, "status": "closed",
    }],
    "suppliers": [{
        "id": "s1700000000002", "projectId": "Project A", "supplierName": "Highway Fuels",
        "contactPerson": "R. Rao", "phoneNumber": "+91 90000 00000",
    }],
}


def _populate(store):
    status = StatusHistoryEngine(store)
    truck = status.register_vehicle(project_id="Project A", vehicle_name="Tipper 1", vehicle_number="KA-1",
                                    fuel_type="Diesel", start_date=date(2024, 1, 1))
    status.change_status(truck.id, date(2024, 2, 1), "breakdown")
    status.change_status(truck.id, date(2024, 2, 5), "repaired")
    supplier = Registry(store).add_supplier(project_id="Project A", supplier_name="Highway Fuels")
    lifecycle = LifecycleEngine(store)
    entry = lifecycle.open_fuel_entry(vehicle_id=truck.id, supplier_id=supplier.id,
                                      date=datetime(2024, 3, 1, 9, 30), litres=10, opening_km=1000,
                                      price_per_litre=100)
    lifecycle.close_fuel_entry(entry.id, 1450)
    lifecycle.open_daily_log(truck.id, datetime(2024, 3, 2, 6, 0), 1450)
    return truck, supplier, entry


def test_serialized_records_use_camel_case_and_iso_dates(store):
    truck, _, entry = _populate(store)
    raw = serialize([entry])[0]
    assert raw["vehicleId"] == truck.id
    assert raw["openingKm"] == 1000 and raw["closingKm"] == 1450
    assert raw["date"] == "2024-03-01T09:30:00"

    v = serialize([truck])[0]
    assert v["status"] == "Active"
    assert v["startDate"] == "2024-02-05"
    assert v["statusHistory"][0] == {
        "status": "Active", "startDate": "2024-01-01", "endDate": "2024-02-01", "reason": "Initial registration",
    }


@pytest.mark.parametrize("backend", ["memory", "json"])
def test_round_trip_restores_equal_store(store, tmp_path, backend):
    adapter = MemoryAdapter() if backend == "memory" else JsonFileAdapter(tmp_path / "data")
    _populate(store)
    saved = Repository(adapter).commit(store)
    assert saved == list(COLLECTIONS)
    assert not store.dirty

    loaded = Repository(adapter).load()
    for key in COLLECTIONS:
        assert loaded.collection(key) == store.collection(key)
    entry = next(iter(loaded.fuel_entries.values()))
    assert isinstance(entry.date, datetime)
    assert loaded.vehicles[next(iter(store.vehicles))].status_history[1].end_date == date(2024, 2, 5)


def test_commit_saves_only_dirty_collections(store):
    adapter = CountingAdapter()
    repo = Repository(adapter)
    truck, _, entry = _populate(store)
    repo.commit(store)
    adapter.saves.clear()

    LifecycleEngine(store).open_fuel_entry(vehicle_id=truck.id, supplier_id=entry.supplier_id,
                                           date=datetime(2024, 3, 3), litres=5, opening_km=1450)
    assert repo.commit(store) == [FUEL_ENTRIES]
    assert adapter.saves == [FUEL_ENTRIES]

    assert repo.commit(store) == []                   # nothing touched since
    assert adapter.saves == [FUEL_ENTRIES]


def test_repeated_mutations_save_collection_once(store):
    adapter = CountingAdapter()
    _populate(store)
    Repository(adapter).commit(store)
    assert sorted(adapter.saves) == sorted(COLLECTIONS)


def test_save_all_writes_every_collection(store):
    adapter = CountingAdapter()
    assert Repository(adapter).save_all(store) == list(COLLECTIONS)
    assert adapter.load(VEHICLES) == []


def test_missing_collections_load_empty(tmp_path):
    store = Repository(JsonFileAdapter(tmp_path / "nothing-here")).load()
    assert store.vehicles == {} and store.fuel_entries == {}
    assert not (tmp_path / "nothing-here").exists()


def test_json_adapter_writes_one_file_per_collection(tmp_path):
    adapter = JsonFileAdapter(tmp_path)
    adapter.save(SUPPLIERS, [{"id": "s1", "projectId": "P", "supplierName": "X"}])
    assert json.loads((tmp_path / "suppliers.json").read_text(encoding="utf-8"))[0]["supplierName"] == "X"
    assert [p.name for p in tmp_path.iterdir()] == ["suppliers.json"]


def test_legacy_records_load(tmp_path):
    adapter = JsonFileAdapter(tmp_path)
    for key, records in LEGACY.items():
        adapter.save(key, records)
    store = Repository(adapter).load()

    vehicle = store.vehicles["v1700000000000"]
    assert vehicle.vehicle_type == "Rent - Daily"
    assert vehicle.status == "Active"
    assert len(vehicle.status_history) == 1

    entry = store.fuel_entries["f1700000000001"]
    assert entry.date.tzinfo is None
    assert entry.closing_km == 0 and entry.distance == 0 and entry.mileage == 0
    assert entry.is_open

    log = store.daily_logs["d1700000000003"]
    assert log.distance == 20
    assert store.suppliers["s1700000000002"].address is None


def test_legacy_open_entry_can_be_closed_and_saved(tmp_path):
    adapter = MemoryAdapter(LEGACY)
    repo = Repository(adapter)
    store = repo.load()
    LifecycleEngine(store).close_fuel_entry("f1700000000001", 1250)
    assert repo.commit(store) == [FUEL_ENTRIES]

    raw = adapter.load(FUEL_ENTRIES)[0]
    assert raw["status"] == "closed"
    assert raw["distance"] == 250
    assert raw["mileage"] == 25
    assert adapter.load(DAILY_LOGS) == LEGACY["dailyLogs"]    # untouched collection keeps its original form


def test_make_adapter_follows_settings(tmp_path):
    assert isinstance(make_adapter(Settings(storage_backend="memory")), MemoryAdapter)
    adapter = make_adapter(Settings(storage_backend="json", data_dir=str(tmp_path)))
    assert isinstance(adapter, JsonFileAdapter)
    assert adapter.directory == tmp_path


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("FLEETFUEL_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("FLEETFUEL_MILEAGE_BENCHMARK", "12.5")
    settings = Settings()
    assert settings.storage_backend == "memory"
    assert settings.mileage_benchmark == 12.5
