# Odometer-only trip record; the daily log trail is compared against fuel-entry distance for the same vehicle.

from datetime import datetime
from typing import Optional
from pydantic import field_validator

from .base import Record, coerce_datetime
from .fuel_entry import RecordStatus


class DailyLogEntry(Record):
    id: str
    date: datetime
    project_id: str
    vehicle_id: str
    vehicle_name: str = ""
    opening_km: float
    closing_km: Optional[float] = None                # Unset until the log is closed
    distance: Optional[float] = None
    status: RecordStatus = "open"
    opening_km_photo: Optional[str] = None
    closing_km_photo: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, v):
        return coerce_datetime(v)

    @property
    def is_open(self) -> bool:
        return self.status == "open"
