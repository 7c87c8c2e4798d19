# shipflow/models/enums.py
# Status dan tipe yang dipersist sebagai string name (Pending, InTransit, ...)

import enum


class OrderStatus(str, enum.Enum):
    PENDING = 'Pending'
    IN_TRANSIT = 'InTransit'
    DELIVERED = 'Delivered'
    FAILED = 'Failed'


class ShipmentStatus(str, enum.Enum):
    PENDING = 'Pending'
    IN_TRANSIT = 'InTransit'
    DELIVERED = 'Delivered'
    CANCELLED = 'Cancelled'


class UserRole(str, enum.Enum):
    CUSTOMER = 'Customer'
    WAREHOUSE_STAFF = 'WarehouseStaff'
    CSR = 'Csr'
    DRIVER = 'Driver'
    LOGISTICS_MANAGER = 'LogisticsManager'


class NotificationType(str, enum.Enum):
    ORDER_CREATED = 'ORDER_CREATED'
    CARRIER_CHANGED = 'CARRIER_CHANGED'
    SHIPMENT_STATUS_UPDATED = 'SHIPMENT_STATUS_UPDATED'
    DELIVERY_EXCEPTION = 'DELIVERY_EXCEPTION'
    ORDER_ASSIGNED = 'ORDER_ASSIGNED'
    ORDER_DISPATCHED = 'ORDER_DISPATCHED'


class NotificationSeverity(str, enum.Enum):
    INFO = 'INFO'
    WARNING = 'WARNING'
    ERROR = 'ERROR'


def enum_values(enum_class):
    """values_callable untuk sqlalchemy.Enum supaya yang disimpan adalah value, bukan member name"""
    return [member.value for member in enum_class]
