from .base import Record
from .vehicle import (
    Vehicle, StatusPeriod, check_history,
    FuelType, VehicleType, VehicleStatus,
    FUEL_TYPES, VEHICLE_TYPES, RENTAL_TYPES,
)
from .fuel_entry import FuelEntry, RecordStatus
from .daily_log import DailyLogEntry
from .supplier import Supplier

from .analytics import (
    RecordFilter, RecordKind,
    VehicleStats, RentalCost, ProjectSummary, VehiclePerformance,
    DailyTotals, DailyBreakdown, HistoryRow, TimelineRow,
)
from .api_schemas import (
    RegisterVehicleRequest, UpdateVehicleRequest, StatusChangeRequest,
    SupplierRequest, OpenFuelEntryRequest, OpenDailyLogRequest, CloseRequest,
    DeleteResponse, HealthResponse,
)
