"""
Shipment Service
================

CRITICAL SERVICE untuk Shipment assignment: batch order -> satu carrier, satu driver
"""

from typing import Dict, Any, List, Optional
import random
import uuid

from sqlalchemy import select, update, func

from ..base import BaseService, transactional
from ..exceptions import (
    ValidationError, OrderNotValidError, NoDriverAvailableError, ConflictError
)
from ...models import Order, Shipment, OrderStatus, ShipmentStatus
from ...schemas import (
    CreateShipmentSchema, ShipmentSchema, ShipmentWithOrdersSchema,
    CarrierShipmentSchema, ShipmentCreatedSchema, OrderSchema
)

class ShipmentService(BaseService):
    """CRITICAL SERVICE untuk Shipment management"""

    def __init__(self, db_session, current_user: str = None, notification_service=None,
                 directory_service=None, rng: random.Random = None, **kwargs):
        super().__init__(db_session, current_user, notification_service, **kwargs)
        self.directory_service = directory_service
        self.rng = rng or random.Random()

    @transactional
    async def create_shipment(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Buat shipment dari batch order.

        Semua validasi dilakukan sebelum mutasi apapun. Insert shipment dan link
        order berada dalam satu transaksi: semua ter-commit atau tidak sama sekali.
        """
        payload = self._validate_schema(CreateShipmentSchema, data or {})

        if not payload.order_ids:
            raise ValidationError("Order list cannot be empty", field='order_ids')
        carrier_id = self._parse_uuid(payload.carrier_id, 'carrier_id')
        order_ids = self._collect_order_ids(payload.order_ids)

        # Semua order harus ada, Pending, dan belum punya shipment
        await self._check_orders_eligible(order_ids)

        await self.directory_service.get_carrier(carrier_id)

        driver_ids = await self.directory_service.list_driver_ids(carrier_id)
        if not driver_ids:
            raise NoDriverAvailableError(carrier_id)
        driver_id = self.rng.choice(driver_ids)

        shipment = Shipment(
            carrier_id=carrier_id,
            driver_id=driver_id,
            status=ShipmentStatus.PENDING
        )
        self.db_session.add(shipment)
        await self._flush()

        result = await self._execute(
            update(Order)
            .where(
                Order.order_id.in_(order_ids),
                Order.status == OrderStatus.PENDING,
                Order.shipment_id.is_(None)
            )
            .values(shipment_id=shipment.shipment_id, carrier_id=carrier_id)
            .execution_options(synchronize_session=False),
            'link_orders'
        )
        if result.rowcount != len(order_ids):
            raise ConflictError(
                f"Only {result.rowcount} of {len(order_ids)} orders could be linked; "
                "orders changed while the shipment was being created",
                'Order'
            )

        self.logger.info(
            f"Shipment {shipment.shipment_id} created with {len(order_ids)} orders, "
            f"carrier {carrier_id}, driver {driver_id}"
        )
        return ShipmentCreatedSchema(
            shipment_id=shipment.shipment_id,
            driver_id=driver_id,
            carrier_id=carrier_id,
            orders_updated=result.rowcount
        ).model_dump(mode='json')

    def _collect_order_ids(self, raw_ids: List[str]) -> List[uuid.UUID]:
        """Parse dan dedupe order id; urutan kemunculan pertama dipertahankan"""
        order_ids = []
        for raw in raw_ids:
            order_id = self._parse_uuid(raw, 'order_ids')
            if order_id not in order_ids:
                order_ids.append(order_id)
        return order_ids

    async def _check_orders_eligible(self, order_ids: List[uuid.UUID]):
        result = await self._execute(
            select(Order.order_id, Order.status, Order.shipment_id).where(Order.order_id.in_(order_ids)),
            'check_orders'
        )
        rows = {row.order_id: row for row in result.all()}

        for order_id in order_ids:
            row = rows.get(order_id)
            if row is None:
                raise OrderNotValidError(order_id, 'order does not exist')
            if row.status != OrderStatus.PENDING:
                raise OrderNotValidError(order_id, f"status is {row.status.value}")
            if row.shipment_id is not None:
                raise OrderNotValidError(order_id, f"already linked to shipment {row.shipment_id}")

    # ==================== READS ====================

    async def get(self, shipment_id) -> Dict[str, Any]:
        shipment_id = self._parse_uuid(shipment_id, 'shipment_id')
        shipment = await self._get_or_404(Shipment, shipment_id, 'Shipment')
        return ShipmentSchema.model_validate(shipment).model_dump(mode='json')

    async def list_shipments(self, status: Optional[str] = None, carrier_id=None,
                             driver_id=None) -> List[Dict[str, Any]]:
        query = select(Shipment)
        if status:
            query = query.where(Shipment.status == self._parse_status(status))
        if carrier_id:
            query = query.where(Shipment.carrier_id == self._parse_uuid(carrier_id, 'carrier_id'))
        if driver_id:
            query = query.where(Shipment.driver_id == self._parse_uuid(driver_id, 'driver_id'))

        result = await self._execute(
            query.order_by(Shipment.created_at.desc()).execution_options(populate_existing=True),
            'list_shipments'
        )
        return [ShipmentSchema.model_validate(s).model_dump(mode='json') for s in result.scalars().all()]

    async def get_with_orders(self, shipment_id) -> Dict[str, Any]:
        shipment_id = self._parse_uuid(shipment_id, 'shipment_id')
        shipment = await self._get_or_404(Shipment, shipment_id, 'Shipment')
        orders = await self._member_orders([shipment_id])
        return self._with_orders(shipment, orders.get(shipment_id, []))

    async def driver_manifest(self, driver_id) -> List[Dict[str, Any]]:
        """Cargo manifest driver: shipment InTransit beserta order-nya"""
        driver_id = self._parse_uuid(driver_id, 'driver_id')
        result = await self._execute(
            select(Shipment)
            .where(Shipment.driver_id == driver_id, Shipment.status == ShipmentStatus.IN_TRANSIT)
            .order_by(Shipment.created_at.desc())
            .execution_options(populate_existing=True),
            'driver_manifest'
        )
        shipments = result.scalars().all()
        orders = await self._member_orders([s.shipment_id for s in shipments])
        return [self._with_orders(s, orders.get(s.shipment_id, [])) for s in shipments]

    async def carrier_shipments(self, carrier_id) -> List[Dict[str, Any]]:
        carrier_id = self._parse_uuid(carrier_id, 'carrier_id')
        await self.directory_service.get_carrier(carrier_id)

        order_count = func.count(Order.order_id).label('order_count')
        result = await self._execute(
            select(Shipment, order_count)
            .outerjoin(Order, Order.shipment_id == Shipment.shipment_id)
            .where(Shipment.carrier_id == carrier_id)
            .group_by(Shipment.shipment_id)
            .order_by(Shipment.created_at.desc())
            .execution_options(populate_existing=True),
            'carrier_shipments'
        )
        items = []
        for shipment, count in result.all():
            data = ShipmentSchema.model_validate(shipment).model_dump()
            items.append(CarrierShipmentSchema(**data, order_count=count).model_dump(mode='json'))
        return items

    async def _member_orders(self, shipment_ids: List[uuid.UUID]) -> Dict[uuid.UUID, List[Order]]:
        grouped = {shipment_id: [] for shipment_id in shipment_ids}
        if not shipment_ids:
            return grouped
        result = await self._execute(
            select(Order)
            .where(Order.shipment_id.in_(shipment_ids))
            .order_by(Order.order_date)
            .execution_options(populate_existing=True),
            'member_orders'
        )
        for order in result.scalars().all():
            grouped[order.shipment_id].append(order)
        return grouped

    @staticmethod
    def _with_orders(shipment: Shipment, orders: List[Order]) -> Dict[str, Any]:
        data = ShipmentSchema.model_validate(shipment).model_dump()
        data['orders'] = [OrderSchema.model_validate(o) for o in orders]
        return ShipmentWithOrdersSchema(**data).model_dump(mode='json')

    @staticmethod
    def _parse_status(value: str) -> ShipmentStatus:
        try:
            return ShipmentStatus(value)
        except ValueError:
            allowed = ', '.join(s.value for s in ShipmentStatus)
            raise ValidationError(f"Invalid status '{value}'. Allowed: {allowed}", field='status')
