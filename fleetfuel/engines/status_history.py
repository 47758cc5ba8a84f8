""" StatusHistoryEngine owns vehicle registration and the Active/Inactive timeline.

A vehicle's history is an ordered list of StatusPeriod records. Only the last period may be open, and each period
starts on the day the previous one ended. A status change always flips the current status: it closes the open period
at the effective date and appends a new open period starting on that same date. The vehicle's status, start_date and
end_date are projections of that list (see models/vehicle.py), so there is nothing else to keep in sync. """

from __future__ import annotations
import logging
from datetime import date
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..errors import ValidationFailure
from ..models import StatusPeriod, TimelineRow, Vehicle
from ..models.base import coerce_date
from ..store import VEHICLES, RecordStore

logger = logging.getLogger("fleetfuel.status")

INITIAL_REASON = "Initial registration"

_DAY = TypeAdapter(date)
_RATE = TypeAdapter(float)


def _reject(code: str, message: str, field: Optional[str] = None) -> ValidationFailure:
    logger.warning("Rejected (%s): %s", code, message)
    return ValidationFailure(code, message, field)


def parse_day(value, field: str) -> date:
    """Date, datetime or ISO string (date-only or full timestamp) to a calendar day."""
    try:
        return _DAY.validate_python(coerce_date(value))
    except ValueError as e:                           # pydantic ValidationError is a ValueError too
        raise _reject("invalid_field", f"{field.replace('_', ' ').capitalize()} is not a valid date", field) from e


def parse_rate(value) -> Optional[float]:
    if value is None:
        return None
    try:
        rate = _RATE.validate_python(value)
    except PydanticValidationError as e:
        raise _reject("invalid_field", "Rent rate must be a number", "rent_rate") from e
    if not rate >= 0:                                 # also refuses NaN
        raise _reject("rate_negative", "Rent rate must be >= 0", "rent_rate")
    return rate


def flip(status: str) -> str:
    return "Inactive" if status == "Active" else "Active"


def period_duration(period: StatusPeriod, today: Optional[date] = None) -> int:
    """floor(days between start and end-or-today) + 1, so a period that starts and ends on one day lasts 1 day."""
    return period.duration_days(today)


class StatusHistoryEngine:
    def __init__(self, store: RecordStore):
        self.store = store

    def register_vehicle(
        self,
        project_id: str,
        vehicle_name: str,
        vehicle_number: str,
        fuel_type: str,
        start_date,
        vehicle_type: str = "Own Vehicle",
        status: str = "Active",
        rent_rate: Optional[float] = None,
    ) -> Vehicle:
        if not (project_id or "").strip():
            raise _reject("field_required", "Please select a project", "project_id")
        if not (vehicle_name or "").strip() or not (vehicle_number or "").strip():
            raise _reject("field_required", "Please fill all required fields", "vehicle_name")
        if start_date is None:
            raise _reject("field_required", "Please select a start date", "start_date")
        start = parse_day(start_date, "start_date")
        rent_rate = parse_rate(rent_rate)

        try:
            vehicle = Vehicle(
                id=self.store.new_id("v"),
                project_id=project_id.strip(),
                vehicle_name=vehicle_name.strip(),
                vehicle_number=vehicle_number.strip(),
                vehicle_type=vehicle_type,
                fuel_type=fuel_type,
                rent_rate=rent_rate,
                status_history=[StatusPeriod(status=status, start_date=start,
                                             reason=INITIAL_REASON)],
            )
        except PydanticValidationError as e:
            raise _reject("invalid_field", str(e.errors()[0]["msg"])) from e
        self.store.add_vehicle(vehicle)
        logger.info("Registered vehicle %s (%s) on %s as %s",
                    vehicle.id, vehicle.vehicle_number, vehicle.project_id, status)
        return vehicle

    def change_status(self, vehicle_id: str, effective_date, reason: str) -> Vehicle:
        vehicle = self.store.get_vehicle(vehicle_id)
        if not (reason or "").strip():
            raise _reject("reason_required", "Please provide a reason for status change", "reason")
        if effective_date is None:
            raise _reject("field_required", "Please select the effective date", "effective_date")
        effective = parse_day(effective_date, "effective_date")

        current = vehicle.current_period
        if effective < current.start_date:
            raise _reject(
                "date_before_period_start",
                f"Effective date {effective} is before the current period start {current.start_date}",
                "effective_date",
            )

        new_status = flip(current.status)
        closed = current.model_copy(update={"end_date": effective})
        opened = StatusPeriod(status=new_status, start_date=effective, reason=reason.strip())
        vehicle.status_history = [*vehicle.status_history[:-1], closed, opened]
        self.store.mark_dirty(VEHICLES)
        logger.info("Vehicle %s: %s -> %s on %s (%s)",
                    vehicle.id, current.status, new_status, effective, opened.reason)
        return vehicle

    def status_timeline(self, vehicle_id: str, today: Optional[date] = None) -> List[TimelineRow]:
        """History rows newest first, numbered from the oldest period, with inclusive durations."""
        vehicle = self.store.get_vehicle(vehicle_id)
        rows = [
            TimelineRow(
                period_number=i + 1,
                status=p.status,
                start_date=p.start_date,
                end_date=p.end_date,
                reason=p.reason,
                duration_days=period_duration(p, today),
            )
            for i, p in enumerate(vehicle.status_history)
        ]
        return rows[::-1]
