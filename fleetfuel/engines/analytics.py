""" AnalyticsEngine derives every statistic the views show from the record store. It only reads: calling any query
twice without a mutation in between returns equal results, and nothing here writes to the store.

Per-vehicle figures follow the vehicle detail view:
    total_distance  - sum of distance over CLOSED fuel entries
    total_litres    - sum of litres over ALL fuel entries (fuel is spent as soon as it is dispensed)
    total_cost      - sum of total_cost over ALL fuel entries
    avg_mileage     - total_distance / total_litres, 0 when no litres were recorded
and the daily-log trail is set against them (km_difference, mileage_difference) as a discrepancy signal.

Project-level figures follow the dashboard and use closed entries only. Ratios go through _ratio(), so an empty set
yields 0 rather than a division error or NaN. """

from __future__ import annotations
import math
from datetime import date, timedelta
from typing import Dict, List, Optional

from ..errors import ValidationFailure
from ..models import (
    FUEL_TYPES, DailyBreakdown, DailyLogEntry, DailyTotals, FuelEntry, HistoryRow, ProjectSummary, RecordFilter,
    RecordKind, RentalCost, Vehicle, VehiclePerformance, VehicleStats,
)
from ..store import RecordStore

DAYS_PER_BILLING_MONTH = 30
DEFAULT_MILEAGE_BENCHMARK = 15.0


def _ratio(num: float, den: float) -> float:
    if den > 0:
        value = num / den
        return value if math.isfinite(value) else 0.0
    return 0.0


def _in_range(day: date, date_from: Optional[date], date_to: Optional[date]) -> bool:
    if date_from is not None and day < date_from:
        return False
    if date_to is not None and day > date_to:
        return False
    return True


def _name_matches(query: str, *names: Optional[str]) -> bool:
    return any(query in (n or "").lower() for n in names)


def matches_fuel_entry(entry: FuelEntry, f: RecordFilter) -> bool:
    if f.project_id is not None and entry.project_id != f.project_id:
        return False
    if f.fuel_type is not None and entry.fuel_type != f.fuel_type:
        return False
    if f.vehicle_id is not None and entry.vehicle_id != f.vehicle_id:
        return False
    if f.supplier_id is not None and entry.supplier_id != f.supplier_id:
        return False
    if f.status is not None and entry.status != f.status:
        return False
    if not _in_range(entry.date.date(), f.date_from, f.date_to):
        return False
    query = (f.search or "").strip().lower()
    if query and not _name_matches(query, entry.vehicle_name, entry.supplier_name):
        return False
    return True


def matches_daily_log(log: DailyLogEntry, f: RecordFilter) -> bool:
    # daily logs carry no supplier or fuel type, so those predicates exclude them
    if f.supplier_id is not None or f.fuel_type is not None:
        return False
    if f.project_id is not None and log.project_id != f.project_id:
        return False
    if f.vehicle_id is not None and log.vehicle_id != f.vehicle_id:
        return False
    if f.status is not None and log.status != f.status:
        return False
    if not _in_range(log.date.date(), f.date_from, f.date_to):
        return False
    query = (f.search or "").strip().lower()
    if query and not _name_matches(query, log.vehicle_name):
        return False
    return True


def billing_days(start: date, end: date) -> int:
    """Whole days from start to end, rounded up, counting both endpoints."""
    return math.ceil((end - start) / timedelta(days=1)) + 1


def billing_units(vehicle_type: str, days: int):
    if vehicle_type == "Rent - Monthly":
        return "month", math.ceil(days / DAYS_PER_BILLING_MONTH)
    if vehicle_type == "Rent - Daily":
        return "day", days
    if vehicle_type == "Rent - Hourly":
        return "hour", days * 24
    raise ValueError(f"not a rental vehicle type: {vehicle_type}")


class AnalyticsEngine:
    def __init__(self, store: RecordStore, mileage_benchmark: float = DEFAULT_MILEAGE_BENCHMARK):
        self.store = store
        self.mileage_benchmark = mileage_benchmark

    # ---------- selection ----------
    def fuel_entries(self, f: Optional[RecordFilter] = None) -> List[FuelEntry]:
        f = f or RecordFilter()
        rows = [e for e in self.store.fuel_entries.values() if matches_fuel_entry(e, f)]
        return sorted(rows, key=lambda e: e.date, reverse=True)

    def daily_logs(self, f: Optional[RecordFilter] = None) -> List[DailyLogEntry]:
        f = f or RecordFilter()
        rows = [d for d in self.store.daily_logs.values() if matches_daily_log(d, f)]
        return sorted(rows, key=lambda d: d.date, reverse=True)

    def cumulative_distance(self, f: Optional[RecordFilter] = None) -> float:
        return sum(e.distance for e in self.fuel_entries(f) if not e.is_open)

    # ---------- per vehicle ----------
    def vehicle_stats(self, vehicle_id: str) -> VehicleStats:
        vehicle = self.store.get_vehicle(vehicle_id)
        entries = self.store.fuel_entries_for(vehicle.id)
        logs = self.store.daily_logs_for(vehicle.id)

        total_distance = sum(e.distance for e in entries if not e.is_open)
        total_litres = sum(e.litres for e in entries)
        total_cost = sum(e.total_cost for e in entries)
        avg_mileage = _ratio(total_distance, total_litres)

        log_km = sum(d.distance or 0.0 for d in logs if not d.is_open)
        log_mileage = _ratio(log_km, total_litres)

        return VehicleStats(
            vehicle_id=vehicle.id,
            total_distance=total_distance,
            total_litres=total_litres,
            total_cost=total_cost,
            avg_mileage=avg_mileage,
            total_entries=len(entries),
            daily_log_total_km=log_km,
            daily_log_avg_mileage=log_mileage,
            km_difference=log_km - total_distance,
            mileage_difference=log_mileage - avg_mileage,
        )

    def rental_cost(self, vehicle_id: str, as_of: Optional[date] = None) -> RentalCost:
        vehicle = self.store.get_vehicle(vehicle_id)
        if not vehicle.is_rental:
            raise ValidationFailure("not_rental", f"Vehicle {vehicle.vehicle_number} is not rented")
        if vehicle.rent_rate is None:
            raise ValidationFailure("rate_missing", f"Vehicle {vehicle.vehicle_number} has no rent rate", "rent_rate")

        start = vehicle.start_date
        end = vehicle.end_date or as_of or date.today()
        if end < start:
            raise ValidationFailure(
                "date_before_start", f"Billing end {end} is before the rental start {start}", "as_of"
            )
        days = billing_days(start, end)
        unit, units = billing_units(vehicle.vehicle_type, days)
        return RentalCost(
            vehicle_id=vehicle.id,
            vehicle_type=vehicle.vehicle_type,
            rate=vehicle.rent_rate,
            start_date=start,
            end_date=end,
            days=days,
            billing_unit=unit,
            units=units,
            total_rent_cost=vehicle.rent_rate * units,
        )

    def daily_breakdown(
        self, vehicle_id: str, date_from: Optional[date] = None, date_to: Optional[date] = None
    ) -> DailyBreakdown:
        vehicle = self.store.get_vehicle(vehicle_id)
        f = RecordFilter(vehicle_id=vehicle.id, status="closed", date_from=date_from, date_to=date_to)

        grouped: Dict[date, DailyTotals] = {}
        for e in self.fuel_entries(f):
            day = grouped.setdefault(e.date.date(), DailyTotals(day=e.date.date()))
            day.distance += e.distance
            day.litres += e.litres
            day.cost += e.total_cost
            day.count += 1

        days = sorted(grouped.values(), key=lambda d: d.day, reverse=True)
        return DailyBreakdown(
            vehicle_id=vehicle.id,
            days=days,
            total_distance=sum(d.distance for d in days),
            total_litres=sum(d.litres for d in days),
            total_cost=sum(d.cost for d in days),
        )

    # ---------- per project ----------
    def _closed_project_entries(self, project_id: str) -> List[FuelEntry]:
        return self.fuel_entries(RecordFilter(project_id=project_id, status="closed"))

    def project_summary(self, project_id: str) -> ProjectSummary:
        closed = self._closed_project_entries(project_id)
        vehicles = [v for v in self.store.vehicles.values() if v.project_id == project_id]
        total_distance = sum(e.distance for e in closed)
        total_litres = sum(e.litres for e in closed)
        return ProjectSummary(
            project_id=project_id,
            total_cost=sum(e.total_cost for e in closed),
            total_distance=total_distance,
            total_litres=total_litres,
            avg_mileage=_ratio(total_distance, total_litres),
            vehicle_count=len(vehicles),
            active_vehicles=sum(1 for v in vehicles if v.status == "Active"),
            supplier_count=sum(1 for s in self.store.suppliers.values() if s.project_id == project_id),
            open_fuel_entries=sum(1 for e in self.store.fuel_entries.values()
                                  if e.project_id == project_id and e.is_open),
            open_daily_logs=sum(1 for d in self.store.daily_logs.values()
                                if d.project_id == project_id and d.is_open),
        )

    def cost_by_fuel_type(self, project_id: str) -> Dict[str, float]:
        out = {ft: 0.0 for ft in FUEL_TYPES}
        for e in self._closed_project_entries(project_id):
            out[e.fuel_type] += e.total_cost
        return out

    def litres_by_fuel_type(self, project_id: str) -> Dict[str, float]:
        out = {ft: 0.0 for ft in FUEL_TYPES}
        for e in self._closed_project_entries(project_id):
            out[e.fuel_type] += e.litres
        return out

    def vehicle_performance(
        self, project_id: str, limit: int = 5, benchmark: Optional[float] = None
    ) -> List[VehiclePerformance]:
        benchmark = benchmark or self.mileage_benchmark
        closed = self._closed_project_entries(project_id)
        ranked: List[VehiclePerformance] = []
        for vehicle in self.store.vehicles.values():
            if vehicle.project_id != project_id:
                continue
            mine = [e for e in closed if e.vehicle_id == vehicle.id]
            total_km = sum(e.distance for e in mine)
            if total_km <= 0:
                continue
            avg = _ratio(total_km, sum(e.litres for e in mine))
            rate = min(_ratio(avg, benchmark) * 100, 100.0) if avg > 0 else 0.0
            ranked.append(VehiclePerformance(
                vehicle_id=vehicle.id,
                vehicle_name=vehicle.vehicle_name,
                vehicle_number=vehicle.vehicle_number,
                total_km=total_km,
                total_cost=sum(e.total_cost for e in mine),
                avg_mileage=avg,
                performance_rate=rate,
            ))
        ranked.sort(key=lambda p: p.performance_rate, reverse=True)
        return ranked[:limit]

    def today_entries(self, project_id: str, today: Optional[date] = None) -> List[FuelEntry]:
        today = today or date.today()
        return self.fuel_entries(RecordFilter(project_id=project_id, status="closed", date_from=today, date_to=today))

    def available_vehicles(self, project_id: str, kind: RecordKind = "fuel") -> List[Vehicle]:
        """Active vehicles of the project that can take a new open record of the given kind."""
        busy = {
            r.vehicle_id
            for r in (self.store.fuel_entries.values() if kind == "fuel" else self.store.daily_logs.values())
            if r.is_open
        }
        return [
            v for v in self.store.vehicles.values()
            if v.project_id == project_id and v.status == "Active" and v.id not in busy
        ]

    # ---------- combined history ----------
    def history(self, f: Optional[RecordFilter] = None) -> List[HistoryRow]:
        rows: List[HistoryRow] = [_fuel_row(e) for e in self.fuel_entries(f)]
        rows.extend(_log_row(d) for d in self.daily_logs(f))
        return sorted(rows, key=lambda r: r.date, reverse=True)


def _fuel_row(e: FuelEntry) -> HistoryRow:
    return HistoryRow(
        id=f"fuel-{e.id}", kind="fuel", record_id=e.id, date=e.date,
        vehicle_id=e.vehicle_id, vehicle_name=e.vehicle_name,
        fuel_type=e.fuel_type, supplier_name=e.supplier_name,
        litres=e.litres, price_per_litre=e.price_per_litre,
        opening_km=e.opening_km, closing_km=e.closing_km, distance=e.distance, mileage=e.mileage,
        total_cost=e.total_cost, status=e.status,
        opening_km_photo=e.opening_km_photo, closing_km_photo=e.closing_km_photo,
    )


def _log_row(d: DailyLogEntry) -> HistoryRow:
    return HistoryRow(
        id=f"dailylog-{d.id}", kind="dailylog", record_id=d.id, date=d.date,
        vehicle_id=d.vehicle_id, vehicle_name=d.vehicle_name,
        opening_km=d.opening_km, closing_km=d.closing_km, distance=d.distance,
        status=d.status,
        opening_km_photo=d.opening_km_photo, closing_km_photo=d.closing_km_photo,
    )