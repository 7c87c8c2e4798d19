"""
Directory Service
=================

Lookup read-only untuk carrier, driver pool, dan penerima notifikasi (user by role)
"""

from typing import List, Optional
import uuid

from sqlalchemy import select

from ..base import BaseService
from ..exceptions import CarrierNotFoundError, DependencyError, InternalError
from ...models import Carrier, Driver, User, UserRole
from ...schemas import CarrierSchema, DriverSchema

NOT_ASSIGNED = 'Not assigned'
UNKNOWN_CUSTOMER = 'Customer'
UNKNOWN_EMAIL = 'Email not available'

class DirectoryService(BaseService):
    """Service untuk carrier/driver directory dan recipient lookup"""

    # ---------- Carriers ----------

    async def get_carrier(self, carrier_id: uuid.UUID) -> Carrier:
        result = await self._execute(
            select(Carrier).where(Carrier.carrier_id == carrier_id), 'get_carrier'
        )
        carrier = result.scalars().first()
        if not carrier:
            raise CarrierNotFoundError(carrier_id)
        return carrier

    async def get_carrier_name(self, carrier_id: Optional[uuid.UUID], default: str = NOT_ASSIGNED) -> str:
        """Nama carrier untuk pesan notifikasi; fallback ke placeholder"""
        if carrier_id is None:
            return default
        result = await self._execute(
            select(Carrier.name).where(Carrier.carrier_id == carrier_id), 'get_carrier_name'
        )
        return result.scalar() or default

    async def list_carriers(self) -> List[dict]:
        result = await self._execute(select(Carrier).order_by(Carrier.name), 'list_carriers')
        return [CarrierSchema.model_validate(c).model_dump(mode='json') for c in result.scalars().all()]

    # ---------- Drivers ----------

    async def list_driver_ids(self, carrier_id: uuid.UUID) -> List[uuid.UUID]:
        """Driver pool untuk carrier; kegagalan lookup -> DependencyError"""
        try:
            result = await self._execute(
                select(Driver.driver_id).where(Driver.carrier_id == carrier_id).order_by(Driver.driver_id),
                'list_driver_ids'
            )
        except InternalError as e:
            raise DependencyError('DIRECTORY', f"driver lookup failed: {e.message}")
        return list(result.scalars().all())

    async def list_drivers(self, carrier_id) -> List[dict]:
        carrier_id = self._parse_uuid(carrier_id, 'carrier_id')
        await self.get_carrier(carrier_id)
        result = await self._execute(
            select(Driver).where(Driver.carrier_id == carrier_id).order_by(Driver.name),
            'list_drivers'
        )
        return [DriverSchema.model_validate(d).model_dump(mode='json') for d in result.scalars().all()]

    # ---------- Recipients ----------

    async def list_user_ids_by_role(self, role: UserRole) -> List[uuid.UUID]:
        result = await self._execute(
            select(User.user_id).where(User.role == role), 'list_user_ids_by_role'
        )
        return list(result.scalars().all())

    async def _get_user(self, user_id) -> Optional[User]:
        if user_id is None:
            return None
        result = await self._execute(select(User).where(User.user_id == user_id), 'get_user')
        return result.scalars().first()

    async def get_customer_name(self, customer_id) -> str:
        user = await self._get_user(customer_id)
        if user and user.full_name:
            return user.full_name
        return UNKNOWN_CUSTOMER

    async def get_customer_email(self, customer_id) -> str:
        user = await self._get_user(customer_id)
        if user and user.email:
            return user.email
        return UNKNOWN_EMAIL
