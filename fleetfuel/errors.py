""" Failure types raised by the engines.

ValidationFailure  - the caller can fix the input (bad quantity, second open record, closing below opening, ...).
ReferentialFailure - the operation names a vehicle, supplier or record that is not in the store.

Both are raised before any mutation, so a failed operation leaves the record store exactly as it was. """

from typing import Optional


class FleetError(Exception):
    """Base class for every failure the engines report to their caller."""


class ValidationFailure(FleetError, ValueError):
    def __init__(self, code: str, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.field = field

    def to_dict(self):
        out = {"code": self.code, "detail": self.message}
        if self.field:
            out["field"] = self.field
        return out


class ReferentialFailure(FleetError, LookupError):
    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        self.code = f"{kind}_not_found"
        self.message = f"{kind.replace('_', ' ').capitalize()} '{record_id}' not found"
        super().__init__(self.message)

    def to_dict(self):
        return {"code": self.code, "detail": self.message}
