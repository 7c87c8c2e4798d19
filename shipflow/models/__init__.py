"""
Shipflow Models Package
=======================

Database models untuk order/shipment lifecycle.

Domain Structure:
- Core: Base model dan timestamp helper
- Orders: Order (satu permintaan pengiriman)
- Shipping: Shipment (batch order per carrier/driver)
- Directory: Carrier, Driver, User (read-only dari sisi core)
"""

# ==================== CORE IMPORTS ====================

from .base import Base, BaseModel, utcnow
from .enums import (
    OrderStatus,
    ShipmentStatus,
    UserRole,
    NotificationType,
    NotificationSeverity,
)

# ==================== ORDER DOMAIN ====================

from .order import Order, generate_tracking_id

# ==================== SHIPPING DOMAIN ====================

from .shipment import Shipment

# ==================== DIRECTORY DOMAIN ====================

from .directory import Carrier, Driver, User

__all__ = [
    'Base', 'BaseModel', 'utcnow',
    'OrderStatus', 'ShipmentStatus', 'UserRole', 'NotificationType', 'NotificationSeverity',
    'Order', 'generate_tracking_id',
    'Shipment',
    'Carrier', 'Driver', 'User',
]
