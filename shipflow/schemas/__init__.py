"""
Schemas Package
===============

Pydantic schemas untuk serialization dan validation
"""

from .base import (
    BaseSchema,
    PaginationSchema,
    TimestampMixin,
)

# ==================== ORDER DOMAIN ====================
from .order import (
    OrderCreateSchema, OrderUpdateSchema, OrderSchema, OrderTrackingSchema
)

# ==================== SHIPPING DOMAIN ====================
from .shipment import (
    CreateShipmentSchema, ShipmentSchema, ShipmentWithOrdersSchema,
    CarrierShipmentSchema, ShipmentCreatedSchema
)

# ==================== DELIVERY DOMAIN ====================
from .delivery import (
    LocationSchema, ConfirmDeliverySchema, ReportAnomalySchema
)

# ==================== DIRECTORY & NOTIFICATION ====================
from .directory import CarrierSchema, DriverSchema
from .notification import NotificationRequestSchema

__all__ = [
    'BaseSchema', 'PaginationSchema', 'TimestampMixin',
    'OrderCreateSchema', 'OrderUpdateSchema', 'OrderSchema', 'OrderTrackingSchema',
    'CreateShipmentSchema', 'ShipmentSchema', 'ShipmentWithOrdersSchema',
    'CarrierShipmentSchema', 'ShipmentCreatedSchema',
    'LocationSchema', 'ConfirmDeliverySchema', 'ReportAnomalySchema',
    'CarrierSchema', 'DriverSchema',
    'NotificationRequestSchema',
]
