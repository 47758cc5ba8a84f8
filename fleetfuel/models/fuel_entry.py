""" The FuelEntry model represents one refuelling event together with the odometer trip that follows it.

A fuel entry is created "open" with the opening odometer reading and the litres dispensed. Closing it records the
closing reading, from which distance and mileage are derived. Those two values (and total_cost, derived from the price
at creation) are the only computed fields; everything else is supplied by the caller and never changes on close.

Vehicle and supplier names are snapshots taken at creation, so history rows stay readable after a rename or delete. """

from datetime import datetime
from typing import Literal, Optional
from pydantic import field_validator

from .base import Record, coerce_datetime
from .vehicle import FuelType

RecordStatus = Literal["open", "closed"]


class FuelEntry(Record):
    id: str
    date: datetime                                    # When the fuel was dispensed
    project_id: str
    vehicle_id: str
    vehicle_name: str = ""
    fuel_type: FuelType                               # Copied from the vehicle at creation
    supplier_id: str
    supplier_name: str = ""
    litres: float
    opening_km: float
    closing_km: float = 0.0                           # 0 while open
    distance: float = 0.0                             # closing_km - opening_km once closed
    mileage: float = 0.0                              # distance / litres once closed
    status: RecordStatus = "open"
    price_per_litre: Optional[float] = None
    total_cost: float = 0.0                           # price_per_litre * litres, 0 when no price was given
    opening_km_photo: Optional[str] = None            # Opaque attachment references
    closing_km_photo: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, v):
        return coerce_datetime(v)

    @field_validator("closing_km", "distance", "mileage", "total_cost", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0.0 if v is None else v

    @property
    def is_open(self) -> bool:
        return self.status == "open"
