import uuid
from pydantic import Field
from typing import Optional, List
from datetime import datetime

from .base import BaseSchema, TimestampMixin
from .order import OrderSchema
from ..models.enums import ShipmentStatus

class CreateShipmentSchema(BaseSchema):
    """
    Request body untuk create shipment.
    ID dibiarkan sebagai string supaya format yang salah dilaporkan oleh service
    sebagai ValidationError dengan reason yang jelas.
    """
    order_ids: List[str] = Field(default_factory=list)
    carrier_id: Optional[str] = None

class ShipmentSchema(BaseSchema, TimestampMixin):
    shipment_id: uuid.UUID
    carrier_id: uuid.UUID
    driver_id: Optional[uuid.UUID] = None
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    status: ShipmentStatus

class ShipmentWithOrdersSchema(ShipmentSchema):
    """Shipment beserta member order-nya (driver cargo manifest)"""
    orders: List[OrderSchema] = Field(default_factory=list)

class CarrierShipmentSchema(ShipmentSchema):
    order_count: int = 0

class ShipmentCreatedSchema(BaseSchema):
    shipment_id: uuid.UUID
    driver_id: uuid.UUID
    carrier_id: uuid.UUID
    orders_updated: int
