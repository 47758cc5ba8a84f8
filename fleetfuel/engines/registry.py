# Supplier create/delete plus vehicle edit and delete; the plain bookkeeping around the lifecycle engines.

from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationFailure
from ..models import Supplier, Vehicle
from ..store import SUPPLIERS, VEHICLES, RecordStore
from .status_history import parse_rate

logger = logging.getLogger("fleetfuel.registry")

EDITABLE_VEHICLE_FIELDS = ("vehicle_name", "vehicle_number", "vehicle_type", "fuel_type", "rent_rate")


def _reject(code: str, message: str, field: Optional[str] = None) -> ValidationFailure:
    logger.warning("Rejected (%s): %s", code, message)
    return ValidationFailure(code, message, field)


class Registry:
    def __init__(self, store: RecordStore):
        self.store = store

    def add_supplier(
        self,
        project_id: str,
        supplier_name: str,
        contact_person: Optional[str] = None,
        phone_number: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Supplier:
        if not (project_id or "").strip():
            raise _reject("field_required", "Please select a project", "project_id")
        if not (supplier_name or "").strip():
            raise _reject("field_required", "Please enter supplier name", "supplier_name")
        supplier = Supplier(
            id=self.store.new_id("s"),
            project_id=project_id.strip(),
            supplier_name=supplier_name.strip(),
            contact_person=contact_person or None,
            phone_number=phone_number or None,
            address=address or None,
        )
        self.store.add_supplier(supplier)
        logger.info("Added supplier %s (%s)", supplier.id, supplier.supplier_name)
        return supplier

    def delete_supplier(self, supplier_id: str) -> Supplier:
        # entries keep their supplier_name snapshot, so removal needs no cascade
        supplier = self.store.get_supplier(supplier_id)
        self.store.remove(SUPPLIERS, supplier.id)
        logger.info("Deleted supplier %s", supplier.id)
        return supplier

    def update_vehicle(self, vehicle_id: str, **changes: Any) -> Vehicle:
        """Edit descriptive fields. Existing entries keep the fuel type and name they were created with."""
        vehicle = self.store.get_vehicle(vehicle_id)
        unknown = set(changes) - set(EDITABLE_VEHICLE_FIELDS)
        if unknown:
            raise _reject("field_not_editable", f"Cannot edit: {', '.join(sorted(unknown))}")

        updates: Dict[str, Any] = {k: v for k, v in changes.items() if v is not None}
        for key in ("vehicle_name", "vehicle_number"):
            if key in updates:
                updates[key] = str(updates[key]).strip()
                if not updates[key]:
                    raise _reject("field_required", "Please fill all required fields", key)
        if "rent_rate" in updates:
            updates["rent_rate"] = parse_rate(updates["rent_rate"])

        try:
            candidate = Vehicle.model_validate({**vehicle.model_dump(), **updates})
        except PydanticValidationError as e:
            raise _reject("invalid_field", str(e.errors()[0]["msg"])) from e

        for key, value in updates.items():
            setattr(vehicle, key, getattr(candidate, key))
        self.store.mark_dirty(VEHICLES)
        logger.info("Updated vehicle %s: %s", vehicle.id, ", ".join(sorted(updates)) or "no changes")
        return vehicle

    def delete_vehicle(self, vehicle_id: str, force: bool = False) -> Vehicle:
        """Refuse while fuel entries or daily logs reference the vehicle, unless the operator forces it."""
        vehicle = self.store.get_vehicle(vehicle_id)
        in_use = len(self.store.fuel_entries_for(vehicle.id)) + len(self.store.daily_logs_for(vehicle.id))
        if in_use and not force:
            raise _reject(
                "vehicle_in_use",
                f"Vehicle {vehicle.vehicle_number} is referenced by {in_use} record(s); delete with force to confirm",
                "vehicle_id",
            )
        self.store.remove(VEHICLES, vehicle.id)
        logger.info("Deleted vehicle %s (%s referencing records kept)", vehicle.id, in_use)
        return vehicle
