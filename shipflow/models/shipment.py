# shipflow/models/shipment.py
# Model untuk Shipment: batch order dengan satu carrier dan satu driver

import uuid
from sqlalchemy import Column, ForeignKey, DateTime, Enum, Uuid
from .base import BaseModel
from .enums import ShipmentStatus, enum_values


class Shipment(BaseModel):
    """Model untuk Shipment; member order = semua Order dengan shipment_id yang sama"""
    __tablename__ = 'shipments'

    shipment_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    carrier_id = Column(Uuid, ForeignKey('carriers.carrier_id'), nullable=False, index=True)
    driver_id = Column(Uuid, ForeignKey('drivers.driver_id'), nullable=True, index=True)

    departure_time = Column(DateTime, nullable=True)
    arrival_time = Column(DateTime, nullable=True)

    # Hanya berubah ke InTransit lewat reconciliation
    status = Column(
        Enum(ShipmentStatus, name='shipment_status', native_enum=False, values_callable=enum_values, length=20),
        nullable=False,
        default=ShipmentStatus.PENDING,
        index=True
    )

    def __repr__(self):
        return f'<Shipment {self.shipment_id} {self.status.value if self.status else None}>'
