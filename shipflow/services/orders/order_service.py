"""
Order Service
=============

CRITICAL SERVICE untuk Order lifecycle: create, carrier assignment, dan update
status beserta notifikasi dan reconciliation shipment.
"""

from functools import partial
from typing import Dict, Any, List, Optional

from sqlalchemy import select, update

from ..base import BaseService, transactional
from ..exceptions import ValidationError, NotFoundError, ConflictError
from ..integration.notification_service import UNKNOWN_ERROR
from ...models import Order, OrderStatus, UserRole, utcnow, generate_tracking_id
from ...schemas import OrderCreateSchema, OrderUpdateSchema, OrderSchema, OrderTrackingSchema

_EDITABLE_FIELDS = ('origin_address', 'destination_address', 'weight')

class OrderService(BaseService):
    """CRITICAL SERVICE untuk Order lifecycle"""

    def __init__(self, db_session, current_user: str = None, notification_service=None,
                 directory_service=None, reconciler=None, **kwargs):
        super().__init__(db_session, current_user, notification_service, **kwargs)
        self.directory_service = directory_service
        self.reconciler = reconciler

    # ==================== MUTATIONS ====================

    @transactional
    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Buat order baru dalam status Pending tanpa carrier dan shipment"""
        payload = self._validate_schema(OrderCreateSchema, data or {})

        order = Order(
            customer_id=payload.customer_id,
            origin_address=payload.origin_address,
            destination_address=payload.destination_address,
            weight=payload.weight,
            status=OrderStatus.PENDING,
            order_date=utcnow(),
            tracking_id=generate_tracking_id()
        )
        self.db_session.add(order)
        await self._flush()

        self.logger.info(f"Order {order.order_id} created for customer {order.customer_id}")

        self._after_commit(partial(self._notify_customer_created, order.order_id, order.customer_id))
        self._after_commit(partial(self._notify_staff_created, order.order_id, order.customer_id))
        return self._serialize(order)

    @transactional
    async def assign_carrier(self, order_id, carrier_id) -> Dict[str, Any]:
        """
        One-shot carrier assignment. Status tetap Pending.

        Compare-and-swap: hanya berhasil kalau carrier_id masih NULL, jadi dua
        request yang bersamaan tidak bisa sama-sama menang.
        """
        order_id = self._parse_uuid(order_id, 'order_id')
        carrier_id = self._parse_uuid(carrier_id, 'carrier_id')

        await self.directory_service.get_carrier(carrier_id)

        result = await self._execute(
            update(Order)
            .where(Order.order_id == order_id, Order.carrier_id.is_(None))
            .values(carrier_id=carrier_id)
            .execution_options(synchronize_session=False),
            'assign_carrier'
        )
        if result.rowcount == 0:
            # Bedakan order tidak ada vs carrier sudah di-assign
            await self._get_or_404(Order, order_id, 'Order')
            raise ConflictError(f"Order {order_id} already has a carrier assigned", 'Order')

        order = await self._get_or_404(Order, order_id, 'Order')
        self.logger.info(f"Carrier {carrier_id} assigned to order {order_id}")
        return self._serialize(order)

    @transactional
    async def update(self, order_id, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        General mutator untuk address, weight, carrier, dan status.

        Write bersifat conditional terhadap (status, carrier_id) yang dibaca di
        awal; kalau order berubah di antaranya -> ConflictError. Reconciliation
        shipment berjalan di transaksi yang sama, notifikasi setelah commit.
        """
        order_id = self._parse_uuid(order_id, 'order_id')
        payload = self._validate_schema(OrderUpdateSchema, data or {})
        changes = payload.model_dump(exclude_unset=True)

        order = await self._get_or_404(Order, order_id, 'Order')
        old_carrier_id = order.carrier_id
        old_status = order.status

        values = {field: changes[field] for field in _EDITABLE_FIELDS if changes.get(field) is not None}

        # carrier_id null berarti "tidak berubah"
        new_carrier_id = changes.get('carrier_id') or old_carrier_id
        carrier_changed = new_carrier_id != old_carrier_id
        if carrier_changed:
            await self.directory_service.get_carrier(new_carrier_id)
            values['carrier_id'] = new_carrier_id

        new_status = changes.get('status') or old_status
        status_changed = new_status != old_status
        error_message = changes.get('error_message')
        failure_reason = None

        if error_message is not None and new_status != OrderStatus.FAILED:
            raise ValidationError("error_message can only be set on Failed orders", field='error_message')

        if new_status == OrderStatus.FAILED and (status_changed or error_message is not None):
            failure_reason = error_message or UNKNOWN_ERROR
            values['error_message'] = failure_reason
        if status_changed:
            values['status'] = new_status
            if old_status == OrderStatus.FAILED:
                values['error_message'] = None
            if old_status == OrderStatus.DELIVERED:
                values['proof_of_delivery'] = None
                values['actual_delivery_time'] = None

        if values:
            carrier_guard = (
                Order.carrier_id.is_(None) if old_carrier_id is None
                else Order.carrier_id == old_carrier_id
            )
            result = await self._execute(
                update(Order)
                .where(Order.order_id == order_id, Order.status == old_status, carrier_guard)
                .values(**values)
                .execution_options(synchronize_session=False),
                'update_order'
            )
            if result.rowcount == 0:
                raise ConflictError(f"Order {order_id} was modified concurrently, retry the update", 'Order')
            order = await self._get_or_404(Order, order_id, 'Order')

        if order.status == OrderStatus.IN_TRANSIT and order.shipment_id is not None:
            await self.reconciler.reconcile(order.shipment_id)

        if carrier_changed:
            self._after_commit(partial(
                self._notify_carrier_changed, order_id, old_carrier_id, new_carrier_id
            ))
        if status_changed:
            self._after_commit(partial(
                self._notify_status_changed, order_id, order.customer_id, old_status, new_status
            ))
            if new_status == OrderStatus.IN_TRANSIT and order.carrier_id is not None:
                self._after_commit(partial(
                    self._notify_dispatched, order_id, order.customer_id, order.carrier_id
                ))
            elif new_status == OrderStatus.FAILED:
                self._after_commit(partial(
                    self._notify_customer_failed, order_id, order.customer_id, failure_reason
                ))
                self._after_commit(partial(self._notify_staff_failed, order_id, failure_reason))

        self.logger.info(
            f"Order {order_id} updated (status {old_status.value} -> {order.status.value}, "
            f"carrier changed: {carrier_changed})"
        )
        return self._serialize(order)

    # ==================== READS ====================

    async def get(self, order_id) -> Dict[str, Any]:
        order_id = self._parse_uuid(order_id, 'order_id')
        order = await self._get_or_404(Order, order_id, 'Order')
        return self._serialize(order)

    async def list_orders(self, status: Optional[str] = None, customer_id=None,
                          page: int = 1, per_page: int = 20) -> Dict[str, Any]:
        query = select(Order)
        if status:
            query = query.where(Order.status == self._parse_status(status))
        if customer_id:
            query = query.where(Order.customer_id == self._parse_uuid(customer_id, 'customer_id'))
        query = query.order_by(Order.order_date.desc()).execution_options(populate_existing=True)

        page_result = await self._paginate_query(query, page, per_page)
        return {
            'items': [self._serialize(o) for o in page_result['items']],
            'pagination': page_result['pagination']
        }

    async def list_customer_orders(self, customer_id) -> List[Dict[str, Any]]:
        customer_id = self._parse_uuid(customer_id, 'customer_id')
        result = await self._execute(
            select(Order)
            .where(Order.customer_id == customer_id)
            .order_by(Order.order_date.desc())
            .execution_options(populate_existing=True),
            'list_customer_orders'
        )
        return [self._serialize(o) for o in result.scalars().all()]

    async def track(self, tracking_id: str) -> Dict[str, Any]:
        """Public tracking view by tracking_id; proof dikembalikan base64"""
        if tracking_id is None or not str(tracking_id).strip():
            raise ValidationError("tracking_id is required", field='tracking_id')
        tracking_id = str(tracking_id).strip().upper()

        result = await self._execute(
            select(Order).where(Order.tracking_id == tracking_id).execution_options(populate_existing=True),
            'track'
        )
        order = result.scalars().first()
        if not order:
            raise NotFoundError('Order', tracking_id)

        view = OrderTrackingSchema.model_validate(order)
        if order.carrier_id is not None:
            view.carrier_name = await self.directory_service.get_carrier_name(order.carrier_id, default=None)
        return view.model_dump(mode='json')

    # ==================== HELPERS ====================

    @staticmethod
    def _serialize(order: Order) -> Dict[str, Any]:
        return OrderSchema.model_validate(order).model_dump(mode='json')

    @staticmethod
    def _parse_status(value: str) -> OrderStatus:
        try:
            return OrderStatus(value)
        except ValueError:
            allowed = ', '.join(s.value for s in OrderStatus)
            raise ValidationError(f"Invalid status '{value}'. Allowed: {allowed}", field='status')

    # ==================== NOTIFICATIONS ====================
    # Masing-masing didaftarkan sebagai callback post-commit terpisah supaya
    # kegagalan satu tidak menghentikan yang lain.

    async def _notify_customer_created(self, order_id, customer_id):
        if self.notification_service:
            await self.notification_service.send_order_created(order_id, customer_id)

    async def _notify_staff_created(self, order_id, customer_id):
        if self.notification_service:
            customer_name = await self.directory_service.get_customer_name(customer_id)
            staff_ids = await self.directory_service.list_user_ids_by_role(UserRole.WAREHOUSE_STAFF)
            await self.notification_service.send_new_order_to_staff(order_id, customer_name, staff_ids)

    async def _notify_carrier_changed(self, order_id, old_carrier_id, new_carrier_id):
        if self.notification_service:
            old_name = await self.directory_service.get_carrier_name(old_carrier_id)
            new_name = await self.directory_service.get_carrier_name(new_carrier_id)
            staff_ids = await self.directory_service.list_user_ids_by_role(UserRole.WAREHOUSE_STAFF)
            await self.notification_service.send_carrier_changed(order_id, old_name, new_name, staff_ids)

    async def _notify_status_changed(self, order_id, customer_id, old_status: OrderStatus,
                                     new_status: OrderStatus):
        if self.notification_service:
            await self.notification_service.send_status_changed(
                order_id, old_status.value, new_status.value, customer_id
            )

    async def _notify_dispatched(self, order_id, customer_id, carrier_id):
        if self.notification_service:
            carrier_name = await self.directory_service.get_carrier_name(carrier_id, default=None)
            if carrier_name:
                await self.notification_service.send_order_dispatched(order_id, carrier_name, customer_id)

    async def _notify_customer_failed(self, order_id, customer_id, reason: str):
        if self.notification_service:
            await self.notification_service.send_order_failed(order_id, reason, customer_id)

    async def _notify_staff_failed(self, order_id, reason: str):
        if self.notification_service:
            staff_ids = await self.directory_service.list_user_ids_by_role(UserRole.WAREHOUSE_STAFF)
            await self.notification_service.send_staff_order_failed(order_id, reason, staff_ids)
