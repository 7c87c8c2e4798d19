# shipflow/models/order.py
# Model untuk Order: satu permintaan pengiriman dari satu customer

import secrets
import uuid
from sqlalchemy import (
    Column, String, ForeignKey, Text, DateTime, Float, LargeBinary, Enum, Uuid
)
from .base import BaseModel, utcnow
from .enums import OrderStatus, enum_values


def generate_tracking_id() -> str:
    """Public tracking id, terpisah dari order_id internal"""
    return f"TRK{secrets.token_hex(5).upper()}"


class Order(BaseModel):
    """Model untuk Order yang dikelompokkan ke dalam Shipment"""
    __tablename__ = 'orders'

    order_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id = Column(Uuid, nullable=False, index=True)

    # Carrier di-set lewat assign; shipment di-set saat order masuk batch shipment
    carrier_id = Column(Uuid, ForeignKey('carriers.carrier_id'), nullable=True, index=True)
    shipment_id = Column(Uuid, ForeignKey('shipments.shipment_id'), nullable=True, index=True)

    origin_address = Column(Text, nullable=False)
    destination_address = Column(Text, nullable=False)
    weight = Column(Float, nullable=False)

    status = Column(
        Enum(OrderStatus, name='order_status', native_enum=False, values_callable=enum_values, length=20),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True
    )
    order_date = Column(DateTime, nullable=False, default=utcnow)
    tracking_id = Column(String(20), unique=True, nullable=False, index=True, default=generate_tracking_id)

    # Delivery outcome
    actual_delivery_time = Column(DateTime, nullable=True)
    proof_of_delivery = Column(LargeBinary, nullable=True)
    error_message = Column(Text, nullable=True)

    def __repr__(self):
        return f'<Order {self.order_id} {self.status.value if self.status else None}>'
