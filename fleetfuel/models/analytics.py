""" Read models produced by the analytics engine, plus the RecordFilter used to select fuel entries and daily logs.

All of these are derived on demand from the record store; none of them is ever persisted. """

from datetime import date, datetime
from typing import List, Literal, Optional

from .base import Record
from .fuel_entry import RecordStatus
from .vehicle import FuelType, VehicleStatus, VehicleType

RecordKind = Literal["fuel", "dailylog"]
BillingUnit = Literal["month", "day", "hour"]


class RecordFilter(Record):
    """Composable predicates; every field that is set must match. Date bounds include both boundary days."""
    project_id: Optional[str] = None
    fuel_type: Optional[FuelType] = None
    vehicle_id: Optional[str] = None
    supplier_id: Optional[str] = None
    status: Optional[RecordStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = None                      # substring of vehicle or supplier name, case-insensitive


class VehicleStats(Record):
    vehicle_id: str
    total_distance: float                             # closed fuel entries only
    total_litres: float                               # every fuel entry, open or closed
    total_cost: float
    avg_mileage: float
    total_entries: int
    daily_log_total_km: float
    daily_log_avg_mileage: float
    km_difference: float                              # daily_log_total_km - total_distance
    mileage_difference: float                         # daily_log_avg_mileage - avg_mileage


class RentalCost(Record):
    vehicle_id: str
    vehicle_type: VehicleType
    rate: float
    start_date: date
    end_date: date
    days: int
    billing_unit: BillingUnit
    units: int
    total_rent_cost: float


class ProjectSummary(Record):
    project_id: str
    total_cost: float
    total_distance: float
    total_litres: float
    avg_mileage: float
    vehicle_count: int
    active_vehicles: int
    supplier_count: int
    open_fuel_entries: int
    open_daily_logs: int


class VehiclePerformance(Record):
    vehicle_id: str
    vehicle_name: str
    vehicle_number: str
    total_km: float
    total_cost: float
    avg_mileage: float
    performance_rate: float                           # percent of the benchmark mileage, capped at 100


class DailyTotals(Record):
    day: date
    distance: float = 0.0
    litres: float = 0.0
    cost: float = 0.0
    count: int = 0


class DailyBreakdown(Record):
    vehicle_id: str
    days: List[DailyTotals]                           # newest day first
    total_distance: float
    total_litres: float
    total_cost: float


class HistoryRow(Record):
    id: str                                           # "<kind>-<record id>", unique across both kinds
    kind: RecordKind
    record_id: str
    date: datetime
    vehicle_id: str
    vehicle_name: str
    fuel_type: Optional[FuelType] = None
    supplier_name: Optional[str] = None
    litres: Optional[float] = None
    price_per_litre: Optional[float] = None
    opening_km: float
    closing_km: Optional[float] = None
    distance: Optional[float] = None
    mileage: Optional[float] = None
    total_cost: Optional[float] = None
    status: RecordStatus
    opening_km_photo: Optional[str] = None
    closing_km_photo: Optional[str] = None


class TimelineRow(Record):
    period_number: int                                # oldest period is 1
    status: VehicleStatus
    start_date: date
    end_date: Optional[date] = None
    reason: Optional[str] = None
    duration_days: int
