"""
Delivery Confirmation Service
=============================

Driver mengirim proof of delivery (foto/tanda tangan, base64). Order langsung
menjadi Delivered dari status apapun.
"""

from functools import partial
from typing import Dict, Any
import base64
import binascii

from sqlalchemy import update

from ..base import BaseService, transactional
from ..exceptions import ValidationError
from ...models import Order, OrderStatus, utcnow
from ...schemas import ConfirmDeliverySchema

class DeliveryConfirmationService(BaseService):
    """Service untuk konfirmasi delivery dengan proof of delivery"""

    @transactional
    async def confirm_delivery(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = self._validate_schema(ConfirmDeliverySchema, data or {})

        if not payload.order_id:
            raise ValidationError("order_id is required", field='order_id')
        if not payload.proof_data:
            raise ValidationError("proof_data is required", field='proof_data')
        order_id = self._parse_uuid(payload.order_id, 'order_id')

        order = await self._get_or_404(Order, order_id, 'Order')
        old_status = order.status
        proof = self._decode_proof(payload.proof_data)

        delivered_at = utcnow()
        await self._execute(
            update(Order)
            .where(Order.order_id == order_id)
            .values(
                status=OrderStatus.DELIVERED,
                proof_of_delivery=proof,
                actual_delivery_time=delivered_at,
                error_message=None
            )
            .execution_options(synchronize_session=False),
            'confirm_delivery'
        )

        self.logger.info(f"Delivery confirmed for order {order_id} ({len(proof)} bytes of proof)")
        if payload.location:
            self.logger.info(
                f"Delivery location for order {order_id}: "
                f"{payload.location.latitude}, {payload.location.longitude}"
            )

        if self.notification_service:
            self._after_commit(partial(
                self.notification_service.send_delivery_confirmed,
                order_id, old_status.value, order.customer_id
            ))

        return {
            'success': True,
            'order_id': str(order_id),
            'proof_type': payload.proof_type,
            'timestamp': payload.timestamp,
            'delivered_at': delivered_at.isoformat()
        }

    @staticmethod
    def _decode_proof(proof_data: str) -> bytes:
        try:
            return base64.b64decode(proof_data, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("proof_data must be valid base64 encoded data", field='proof_data')
