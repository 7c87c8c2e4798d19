# shipflow/models/directory.py
# Master data read-only untuk core: carrier, driver, dan user (penerima notifikasi)

import uuid
from sqlalchemy import Column, String, ForeignKey, Enum, Uuid
from .base import BaseModel
from .enums import UserRole, enum_values


class Carrier(BaseModel):
    """Organisasi transportasi yang menyediakan driver"""
    __tablename__ = 'carriers'

    carrier_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(100))
    phone = Column(String(20))

    def __repr__(self):
        return f'<Carrier {self.name}>'


class Driver(BaseModel):
    """Driver yang berafiliasi dengan satu carrier"""
    __tablename__ = 'drivers'

    driver_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    carrier_id = Column(Uuid, ForeignKey('carriers.carrier_id'), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey('users.user_id'), nullable=True)
    name = Column(String(100))
    license_number = Column(String(50))

    def __repr__(self):
        return f'<Driver {self.name or self.driver_id}>'


class User(BaseModel):
    """User minimal: cukup untuk mencari penerima notifikasi berdasarkan role"""
    __tablename__ = 'users'

    user_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(100), unique=True, nullable=False, index=True)
    first_name = Column(String(50))
    last_name = Column(String(50))
    role = Column(
        Enum(UserRole, name='user_role', native_enum=False, values_callable=enum_values, length=30),
        nullable=False,
        index=True
    )

    @property
    def full_name(self):
        return ' '.join(part for part in (self.first_name, self.last_name) if part).strip()

    def __repr__(self):
        return f'<User {self.email} ({self.role.value if self.role else None})>'
