# fleetfuel/models/base.py
""" Shared base for every stored record and API payload.

Records are written to storage and to the wire with camelCase keys (vehicleId, openingKm, ...) while the Python side
works with snake_case attributes. Either spelling is accepted on input so previously saved collections load unchanged.

The date helpers normalise what comes back from storage: ISO datetimes (with or without a trailing 'Z') are turned into
naive local values, and date-only fields accept a full timestamp and keep its calendar day. """

from datetime import date, datetime, time
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))


def to_naive_local(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def coerce_date(value: Any) -> Any:
    """Accept a date, a datetime or an ISO string (date or datetime) and hand back a date."""
    if isinstance(value, datetime):
        return to_naive_local(value).date()
    if isinstance(value, str) and "T" in value:
        return to_naive_local(_parse_iso(value)).date()
    return value


def coerce_datetime(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_naive_local(value)
    if isinstance(value, date):                        # bare day -> midnight
        return datetime.combine(value, time())
    if isinstance(value, str) and value.strip():
        return to_naive_local(_parse_iso(value))
    return value
