from datetime import date, datetime
from typing import Literal, Optional

from pydantic import field_validator

from .base import Record
from .vehicle import FuelType, VehicleStatus, VehicleType, normalise_vehicle_type

# Request bodies stay loose on numbers: range checks belong to the engines so they come back as named failures.


class RegisterVehicleRequest(Record):
    project_id: str
    vehicle_name: str
    vehicle_number: str
    vehicle_type: VehicleType = "Own Vehicle"
    fuel_type: FuelType
    status: VehicleStatus = "Active"
    start_date: date
    rent_rate: Optional[float] = None

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def _vehicle_type(cls, v):
        return normalise_vehicle_type(v)


class UpdateVehicleRequest(Record):
    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    vehicle_type: Optional[VehicleType] = None
    fuel_type: Optional[FuelType] = None
    rent_rate: Optional[float] = None

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def _vehicle_type(cls, v):
        return normalise_vehicle_type(v)


class StatusChangeRequest(Record):
    effective_date: date
    reason: str = ""


class SupplierRequest(Record):
    project_id: str
    supplier_name: str
    contact_person: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None


class OpenFuelEntryRequest(Record):
    vehicle_id: str
    supplier_id: str
    date: datetime
    litres: float
    opening_km: float
    price_per_litre: Optional[float] = None
    opening_km_photo: Optional[str] = None


class OpenDailyLogRequest(Record):
    vehicle_id: str
    date: datetime
    opening_km: float
    opening_km_photo: Optional[str] = None


class CloseRequest(Record):
    closing_km: float
    closing_km_photo: Optional[str] = None


class DeleteResponse(Record):
    status: Literal["ok"] = "ok"
    deleted: str


class HealthResponse(Record):
    status: str
    vehicles: int
    fuel_entries: int
    daily_logs: int
    suppliers: int
