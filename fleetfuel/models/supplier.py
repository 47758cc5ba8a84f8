from typing import Optional

from .base import Record


class Supplier(Record):                               # Fuel station / vendor a project buys from
    id: str
    project_id: str
    supplier_name: str
    contact_person: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
