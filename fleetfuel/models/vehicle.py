# Defines the Vehicle model, its Active/Inactive status history and the closed tag sets used across the fleet.

from datetime import date
from typing import Any, List, Literal, Optional       # Type hints for lists, tags and optional values
from pydantic import computed_field, field_validator, model_validator

from .base import Record, coerce_date

VehicleStatus = Literal["Active", "Inactive"]
FuelType = Literal["Petrol", "Diesel", "Electric"]
VehicleType = Literal["Own Vehicle", "Rent - Monthly", "Rent - Daily", "Rent - Hourly"]

FUEL_TYPES: List[str] = ["Petrol", "Diesel", "Electric"]
VEHICLE_TYPES: List[str] = ["Own Vehicle", "Rent - Monthly", "Rent - Daily", "Rent - Hourly"]
RENTAL_TYPES = {"Rent - Monthly", "Rent - Daily", "Rent - Hourly"}


def normalise_vehicle_type(v):
    # older records spell the rental tags with an en dash
    if isinstance(v, str):
        return v.replace("–", "-")
    return v


class StatusPeriod(Record):                           # One interval with a single status
    status: VehicleStatus                             # Active or Inactive
    start_date: date                                  # First day of the period
    end_date: Optional[date] = None                   # None while the period is ongoing
    reason: Optional[str] = None                      # Free-text reason given at the transition

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_dates(cls, v):
        return coerce_date(v)

    @property
    def is_open(self) -> bool:
        return self.end_date is None

    def duration_days(self, today: Optional[date] = None) -> int:
        """Days covered by the period, counting both the first and the last day."""
        end = self.end_date or today or date.today()
        return (end - self.start_date).days + 1


def check_history(periods: List[StatusPeriod]) -> None:
    """Raise ValueError unless the periods form one gap-free, non-overlapping timeline."""
    if not periods:
        raise ValueError("status history must contain at least one period")
    for i, p in enumerate(periods):
        last = i == len(periods) - 1
        if p.end_date is None and not last:
            raise ValueError(f"period {i + 1} is open but is not the last period")
        if p.end_date is not None and p.end_date < p.start_date:
            raise ValueError(f"period {i + 1} ends before it starts")
        if not last:
            nxt = periods[i + 1]
            if nxt.start_date != p.end_date:
                raise ValueError(
                    f"period {i + 2} starts {nxt.start_date} but period {i + 1} ends {p.end_date}"
                )
            if nxt.status == p.status:
                raise ValueError(f"periods {i + 1} and {i + 2} carry the same status {p.status}")


class Vehicle(Record):                                # Vehicle data model
    id: str                                           # Unique vehicle identifier
    project_id: str                                   # Project the vehicle is deployed on
    vehicle_name: str                                 # Display name
    vehicle_number: str                               # Registration number
    vehicle_type: VehicleType = "Own Vehicle"         # Ownership / rental arrangement
    fuel_type: FuelType                               # Fuel the vehicle runs on
    rent_rate: Optional[float] = None                 # Rate per billing unit for rented vehicles
    status_history: List[StatusPeriod]                # Full Active/Inactive timeline, oldest first

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def _normalise_vehicle_type(cls, v):
        return normalise_vehicle_type(v)

    @model_validator(mode="before")                   # Records without a history get one from their top-level status
    @classmethod
    def _upgrade_flat_status(cls, data: Any):
        if not isinstance(data, dict):
            return data
        if data.get("statusHistory") or data.get("status_history"):
            return data
        start = data.get("startDate") or data.get("start_date")
        if start is None:
            return data
        period = {"status": data.get("status") or "Active", "startDate": start,
                  "reason": "Initial registration"}
        return {**data, "statusHistory": [period]}

    @model_validator(mode="after")
    def _check_timeline(self):
        check_history(self.status_history)
        return self

    @property
    def current_period(self) -> StatusPeriod:
        return self.status_history[-1]

    @computed_field(alias="status")
    @property
    def status(self) -> VehicleStatus:
        return self.current_period.status

    @computed_field(alias="startDate")
    @property
    def start_date(self) -> date:
        # start of the latest Active stint; first period if the vehicle never ran
        for period in reversed(self.status_history):
            if period.status == "Active":
                return period.start_date
        return self.status_history[0].start_date

    @computed_field(alias="endDate")
    @property
    def end_date(self) -> Optional[date]:
        current = self.current_period
        if current.status == "Active":
            return None
        if any(p.status == "Active" for p in self.status_history[:-1]):
            return current.start_date                 # day the vehicle was taken out of service
        return None

    @property
    def is_rental(self) -> bool:
        return self.vehicle_type in RENTAL_TYPES
