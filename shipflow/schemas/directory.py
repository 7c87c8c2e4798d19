import uuid
from typing import Optional

from .base import BaseSchema

class CarrierSchema(BaseSchema):
    carrier_id: uuid.UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

class DriverSchema(BaseSchema):
    driver_id: uuid.UUID
    carrier_id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    name: Optional[str] = None
    license_number: Optional[str] = None
