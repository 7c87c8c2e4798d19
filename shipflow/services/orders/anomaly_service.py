"""
Anomaly Report Service
======================

Driver melaporkan masalah pengiriman: order menjadi Failed dan CSR, customer,
serta warehouse staff diberi tahu.
"""

from functools import partial
from typing import Dict, Any

from sqlalchemy import update

from ..base import BaseService, transactional
from ..exceptions import ValidationError
from ...models import Order, OrderStatus, UserRole
from ...schemas import ReportAnomalySchema

ANOMALY_TYPE = 'Delivery anomaly'

class AnomalyReportService(BaseService):
    """Service untuk anomaly reporting"""

    def __init__(self, db_session, current_user: str = None, notification_service=None,
                 directory_service=None, **kwargs):
        super().__init__(db_session, current_user, notification_service, **kwargs)
        self.directory_service = directory_service

    @transactional
    async def report_anomaly(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = self._validate_schema(ReportAnomalySchema, data or {})

        if payload.order_id is None or not payload.order_id.strip():
            raise ValidationError("order_id is required", field='order_id')
        if payload.error_message is None or not payload.error_message.strip():
            raise ValidationError("error_message is required", field='error_message')
        order_id = self._parse_uuid(payload.order_id, 'order_id')
        error_message = payload.error_message

        order = await self._get_or_404(Order, order_id, 'Order')

        # carrier_id dan shipment_id tidak disentuh
        await self._execute(
            update(Order)
            .where(Order.order_id == order_id)
            .values(
                status=OrderStatus.FAILED,
                error_message=error_message,
                # Keluar dari Delivered: proof tidak boleh tertinggal
                proof_of_delivery=None,
                actual_delivery_time=None
            )
            .execution_options(synchronize_session=False),
            'report_anomaly'
        )
        self.logger.warning(f"Anomaly reported for order {order_id}: {error_message}")

        self._after_commit(partial(self._notify_csrs, order_id, order.customer_id, error_message))
        self._after_commit(partial(self._notify_customer, order_id, order.customer_id, error_message))
        self._after_commit(partial(self._notify_staff, order_id, error_message))

        return {
            'success': True,
            'order_id': str(order_id),
            'error_message': error_message,
            'new_status': OrderStatus.FAILED.value
        }

    async def _notify_csrs(self, order_id, customer_id, error_message: str):
        if self.notification_service:
            customer_email = await self.directory_service.get_customer_email(customer_id)
            csr_ids = await self.directory_service.list_user_ids_by_role(UserRole.CSR)
            await self.notification_service.send_anomaly_to_csrs(
                order_id, ANOMALY_TYPE, error_message, customer_email, csr_ids
            )

    async def _notify_customer(self, order_id, customer_id, error_message: str):
        if self.notification_service:
            await self.notification_service.send_order_failed(order_id, error_message, customer_id)

    async def _notify_staff(self, order_id, error_message: str):
        if self.notification_service:
            staff_ids = await self.directory_service.list_user_ids_by_role(UserRole.WAREHOUSE_STAFF)
            await self.notification_service.send_staff_order_failed(order_id, error_message, staff_ids)
