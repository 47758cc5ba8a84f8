""" LifecycleEngine drives the two-phase life of fuel entries and daily logs:

open  - validate the inputs, refuse a second open record of the same kind for the vehicle, create the record "open"
        with placeholder zeros for the closing values;
close - validate the closing reading against the opening one and update the stored record in place: closing_km,
        distance (closing - opening), mileage (distance / litres, fuel entries only) and status "closed".

Every precondition is checked before the store is touched, so a rejected call leaves no trace. Closing edits the
record that is already in the store rather than removing and re-adding it, which keeps its id and position and means
no reader can ever observe the entry missing. """

from __future__ import annotations
import logging
import math
from datetime import datetime
from typing import Optional

from ..errors import ValidationFailure
from ..models import DailyLogEntry, FuelEntry
from ..models.base import coerce_datetime
from ..store import DAILY_LOGS, FUEL_ENTRIES, RecordStore

logger = logging.getLogger("fleetfuel.lifecycle")


def _reject(code: str, message: str, field: Optional[str] = None) -> ValidationFailure:
    logger.warning("Rejected (%s): %s", code, message)
    return ValidationFailure(code, message, field)


def _require_date(value) -> datetime:
    if value is None or value == "":
        raise _reject("field_required", "Please select a date", "date")
    try:
        when = coerce_datetime(value)
    except ValueError as e:
        raise _reject("invalid_field", "Date is not a valid date and time", "date") from e
    if not isinstance(when, datetime):
        raise _reject("invalid_field", "Date is not a valid date and time", "date")
    return when


def _as_number(value) -> float:
    """float(value), or NaN when the value is missing or not numeric."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _require_reading(value, field: str) -> float:
    if value is None:
        raise _reject("field_required", f"Please enter {field.replace('_', ' ')}", field)
    value = _as_number(value)
    if not math.isfinite(value) or value < 0:
        raise _reject("reading_negative", f"{field.replace('_', ' ').capitalize()} must be a number >= 0", field)
    return value


class LifecycleEngine:
    def __init__(self, store: RecordStore):
        self.store = store

    # ---------- fuel entries ----------
    def open_fuel_entry(
        self,
        vehicle_id: str,
        supplier_id: str,
        date,
        litres: float,
        opening_km: float,
        price_per_litre: Optional[float] = None,
        opening_km_photo: Optional[str] = None,
    ) -> FuelEntry:
        vehicle = self.store.get_vehicle(vehicle_id)
        supplier = self.store.get_supplier(supplier_id)
        when = _require_date(date)

        litres = _as_number(litres)
        if not math.isfinite(litres) or litres <= 0:
            raise _reject("litres_not_positive", "Please enter valid litres (> 0)", "litres")
        opening_km = _require_reading(opening_km, "opening_km")

        if price_per_litre is not None:
            price_per_litre = _as_number(price_per_litre)
            if not math.isfinite(price_per_litre) or price_per_litre < 0:
                raise _reject("price_negative", "Price per litre must be a number >= 0", "price_per_litre")

        existing = self.store.open_fuel_entry_for(vehicle.id)
        if existing is not None:
            raise _reject(
                "open_record_exists",
                f"Vehicle {vehicle.vehicle_number} already has an open fuel entry ({existing.id}). Please close it first.",
                "vehicle_id",
            )

        total_cost = price_per_litre * litres if price_per_litre and price_per_litre > 0 else 0.0
        entry = FuelEntry(
            id=self.store.new_id("f"),
            date=when,
            project_id=vehicle.project_id,
            vehicle_id=vehicle.id,
            vehicle_name=vehicle.vehicle_name,
            fuel_type=vehicle.fuel_type,
            supplier_id=supplier.id,
            supplier_name=supplier.supplier_name,
            litres=litres,
            opening_km=opening_km,
            closing_km=0.0,
            distance=0.0,
            mileage=0.0,
            status="open",
            price_per_litre=price_per_litre,
            total_cost=total_cost,
            opening_km_photo=opening_km_photo or None,
        )
        self.store.add_fuel_entry(entry)
        logger.info("Opened fuel entry %s for vehicle %s (%.2f L at %.1f km)",
                    entry.id, vehicle.id, litres, opening_km)
        return entry

    def close_fuel_entry(
        self, entry_id: str, closing_km: float, closing_km_photo: Optional[str] = None
    ) -> FuelEntry:
        entry = self.store.get_fuel_entry(entry_id)
        if not entry.is_open:
            raise _reject("already_closed", f"Fuel entry {entry.id} is already closed")
        closing_km = _require_reading(closing_km, "closing_km")
        if closing_km < entry.opening_km:
            raise _reject("closing_below_opening", "Closing km must be >= opening km", "closing_km")

        distance = closing_km - entry.opening_km
        entry.closing_km = closing_km
        entry.distance = distance
        entry.mileage = distance / entry.litres       # litres > 0 is guaranteed at open time
        entry.status = "closed"
        if closing_km_photo:
            entry.closing_km_photo = closing_km_photo
        self.store.mark_dirty(FUEL_ENTRIES)
        logger.info("Closed fuel entry %s: %.1f km, %.2f km/l", entry.id, distance, entry.mileage)
        return entry

    def delete_fuel_entry(self, entry_id: str) -> FuelEntry:
        entry = self.store.get_fuel_entry(entry_id)
        self.store.remove(FUEL_ENTRIES, entry.id)
        logger.info("Deleted fuel entry %s", entry.id)
        return entry

    # ---------- daily logs ----------
    def open_daily_log(
        self, vehicle_id: str, date, opening_km: float, opening_km_photo: Optional[str] = None
    ) -> DailyLogEntry:
        vehicle = self.store.get_vehicle(vehicle_id)
        when = _require_date(date)
        opening_km = _require_reading(opening_km, "opening_km")

        existing = self.store.open_daily_log_for(vehicle.id)
        if existing is not None:
            raise _reject(
                "open_record_exists",
                f"Vehicle {vehicle.vehicle_number} already has an open daily log ({existing.id}). Please close it first.",
                "vehicle_id",
            )

        log = DailyLogEntry(
            id=self.store.new_id("d"),
            date=when,
            project_id=vehicle.project_id,
            vehicle_id=vehicle.id,
            vehicle_name=vehicle.vehicle_name,
            opening_km=opening_km,
            status="open",
            opening_km_photo=opening_km_photo or None,
        )
        self.store.add_daily_log(log)
        logger.info("Opened daily log %s for vehicle %s at %.1f km", log.id, vehicle.id, opening_km)
        return log

    def close_daily_log(
        self, log_id: str, closing_km: float, closing_km_photo: Optional[str] = None
    ) -> DailyLogEntry:
        log = self.store.get_daily_log(log_id)
        if not log.is_open:
            raise _reject("already_closed", f"Daily log {log.id} is already closed")
        closing_km = _require_reading(closing_km, "closing_km")
        if closing_km < log.opening_km:
            raise _reject("closing_below_opening", "Closing km cannot be less than opening km", "closing_km")

        log.closing_km = closing_km
        log.distance = closing_km - log.opening_km
        log.status = "closed"
        if closing_km_photo:
            log.closing_km_photo = closing_km_photo
        self.store.mark_dirty(DAILY_LOGS)
        logger.info("Closed daily log %s: %.1f km", log.id, log.distance)
        return log

    def delete_daily_log(self, log_id: str) -> DailyLogEntry:
        log = self.store.get_daily_log(log_id)
        self.store.remove(DAILY_LOGS, log.id)
        logger.info("Deleted daily log %s", log.id)
        return log
