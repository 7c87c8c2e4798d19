import base64
import uuid
from pydantic import field_validator, field_serializer
from typing import Optional
from datetime import datetime

from .base import BaseSchema, TimestampMixin
from .validators import validate_positive_number, validate_not_blank
from ..models.enums import OrderStatus

class OrderCreateSchema(BaseSchema):
    customer_id: uuid.UUID
    origin_address: str
    destination_address: str
    weight: float

    @field_validator('origin_address', 'destination_address')
    @classmethod
    def address_not_blank(cls, v):
        return validate_not_blank(v)

    @field_validator('weight')
    @classmethod
    def weight_positive(cls, v):
        return validate_positive_number(v)

class OrderUpdateSchema(BaseSchema):
    """Semua field optional; hanya field yang dikirim yang diterapkan"""
    origin_address: Optional[str] = None
    destination_address: Optional[str] = None
    weight: Optional[float] = None
    carrier_id: Optional[uuid.UUID] = None
    status: Optional[OrderStatus] = None
    error_message: Optional[str] = None

    @field_validator('origin_address', 'destination_address')
    @classmethod
    def address_not_blank(cls, v):
        return validate_not_blank(v)

    @field_validator('weight')
    @classmethod
    def weight_positive(cls, v):
        return validate_positive_number(v)

class OrderSchema(BaseSchema, TimestampMixin):
    order_id: uuid.UUID
    customer_id: uuid.UUID
    carrier_id: Optional[uuid.UUID] = None
    shipment_id: Optional[uuid.UUID] = None
    origin_address: str
    destination_address: str
    weight: float
    status: OrderStatus
    order_date: datetime
    tracking_id: str
    actual_delivery_time: Optional[datetime] = None
    proof_of_delivery: Optional[bytes] = None
    error_message: Optional[str] = None

    @field_serializer('proof_of_delivery')
    def encode_proof(self, value: Optional[bytes]) -> Optional[str]:
        # Blob dikirim balik ke client sebagai base64
        if value is None:
            return None
        return base64.b64encode(value).decode('ascii')

class OrderTrackingSchema(BaseSchema):
    """Public tracking view; tidak mengekspos customer_id"""
    tracking_id: str
    order_date: datetime
    origin_address: str
    destination_address: str
    weight: float
    status: OrderStatus
    shipment_id: Optional[uuid.UUID] = None
    actual_delivery_time: Optional[datetime] = None
    proof_of_delivery: Optional[bytes] = None
    error_message: Optional[str] = None
    carrier_id: Optional[uuid.UUID] = None
    carrier_name: Optional[str] = None

    @field_serializer('proof_of_delivery')
    def encode_proof(self, value: Optional[bytes]) -> Optional[str]:
        if value is None:
            return None
        return base64.b64encode(value).decode('ascii')
