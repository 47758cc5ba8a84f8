""" RecordStore holds the four in-memory collections (vehicles, fuel entries, daily logs, suppliers) keyed by id.

It carries no business rules. Besides containment it hands out identifiers, answers the lookups the engines need
(raising ReferentialFailure for unknown ids) and remembers which collections were touched since the last commit so the
repository can save exactly those. """

from __future__ import annotations
import time
from typing import Dict, Iterable, List, Optional, Set

from .errors import ReferentialFailure
from .models import DailyLogEntry, FuelEntry, Supplier, Vehicle

VEHICLES = "vehicles"
FUEL_ENTRIES = "fuelEntries"
DAILY_LOGS = "dailyLogs"
SUPPLIERS = "suppliers"
COLLECTIONS = (VEHICLES, FUEL_ENTRIES, DAILY_LOGS, SUPPLIERS)


class RecordStore:
    def __init__(
        self,
        vehicles: Optional[Iterable[Vehicle]] = None,
        fuel_entries: Optional[Iterable[FuelEntry]] = None,
        daily_logs: Optional[Iterable[DailyLogEntry]] = None,
        suppliers: Optional[Iterable[Supplier]] = None,
    ):
        self.vehicles: Dict[str, Vehicle] = {v.id: v for v in vehicles or []}
        self.fuel_entries: Dict[str, FuelEntry] = {e.id: e for e in fuel_entries or []}
        self.daily_logs: Dict[str, DailyLogEntry] = {d.id: d for d in daily_logs or []}
        self.suppliers: Dict[str, Supplier] = {s.id: s for s in suppliers or []}
        self.dirty: Set[str] = set()
        self._last_stamp = 0

    # ---------- identity ----------
    def new_id(self, prefix: str) -> str:
        """Time-based id (prefix + epoch millis), bumped so it never repeats inside this store."""
        stamp = max(int(time.time() * 1000), self._last_stamp + 1)
        while self._taken(f"{prefix}{stamp}"):
            stamp += 1
        self._last_stamp = stamp
        return f"{prefix}{stamp}"

    def _taken(self, record_id: str) -> bool:
        return any(record_id in c for c in (self.vehicles, self.fuel_entries, self.daily_logs, self.suppliers))

    # ---------- change tracking ----------
    def mark_dirty(self, key: str) -> None:
        if key not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {key}")
        self.dirty.add(key)

    def collection(self, key: str) -> Dict:
        return {
            VEHICLES: self.vehicles,
            FUEL_ENTRIES: self.fuel_entries,
            DAILY_LOGS: self.daily_logs,
            SUPPLIERS: self.suppliers,
        }[key]

    # ---------- lookups ----------
    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        try:
            return self.vehicles[vehicle_id]
        except KeyError as e:
            raise ReferentialFailure("vehicle", vehicle_id) from e

    def get_supplier(self, supplier_id: str) -> Supplier:
        try:
            return self.suppliers[supplier_id]
        except KeyError as e:
            raise ReferentialFailure("supplier", supplier_id) from e

    def get_fuel_entry(self, entry_id: str) -> FuelEntry:
        try:
            return self.fuel_entries[entry_id]
        except KeyError as e:
            raise ReferentialFailure("fuel_entry", entry_id) from e

    def get_daily_log(self, log_id: str) -> DailyLogEntry:
        try:
            return self.daily_logs[log_id]
        except KeyError as e:
            raise ReferentialFailure("daily_log", log_id) from e

    def fuel_entries_for(self, vehicle_id: str) -> List[FuelEntry]:
        return [e for e in self.fuel_entries.values() if e.vehicle_id == vehicle_id]

    def daily_logs_for(self, vehicle_id: str) -> List[DailyLogEntry]:
        return [d for d in self.daily_logs.values() if d.vehicle_id == vehicle_id]

    def open_fuel_entry_for(self, vehicle_id: str) -> Optional[FuelEntry]:
        return next((e for e in self.fuel_entries_for(vehicle_id) if e.is_open), None)

    def open_daily_log_for(self, vehicle_id: str) -> Optional[DailyLogEntry]:
        return next((d for d in self.daily_logs_for(vehicle_id) if d.is_open), None)

    # ---------- containment ----------
    def add_vehicle(self, vehicle: Vehicle) -> None:
        self.vehicles[vehicle.id] = vehicle
        self.mark_dirty(VEHICLES)

    def add_supplier(self, supplier: Supplier) -> None:
        self.suppliers[supplier.id] = supplier
        self.mark_dirty(SUPPLIERS)

    def add_fuel_entry(self, entry: FuelEntry) -> None:
        self.fuel_entries[entry.id] = entry
        self.mark_dirty(FUEL_ENTRIES)

    def add_daily_log(self, log: DailyLogEntry) -> None:
        self.daily_logs[log.id] = log
        self.mark_dirty(DAILY_LOGS)

    def remove(self, key: str, record_id: str) -> None:
        del self.collection(key)[record_id]
        self.mark_dirty(key)
