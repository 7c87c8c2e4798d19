"""
Shipment Reconciler
===================

Menurunkan Shipment.status dari status member order-nya.

Satu-satunya transisi: Pending -> InTransit, ketika shipment punya minimal
satu order dan semua order sudah InTransit. Tidak pernah commit sendiri;
transaksi milik caller.
"""

from typing import NamedTuple
import uuid

from sqlalchemy import select, update, func, case

from ..base import BaseService
from ...models import Order, Shipment, OrderStatus, ShipmentStatus

class ReconcileResult(NamedTuple):
    total: int
    in_transit: int
    updated: bool

class ShipmentReconciler(BaseService):
    """Service untuk reconciliation status shipment"""

    async def reconcile(self, shipment_id: uuid.UUID) -> ReconcileResult:
        counts = await self._execute(
            select(
                func.count(Order.order_id),
                func.coalesce(
                    func.sum(case((Order.status == OrderStatus.IN_TRANSIT, 1), else_=0)), 0
                )
            ).where(Order.shipment_id == shipment_id),
            'reconcile_count'
        )
        total, in_transit = counts.one()
        total, in_transit = int(total or 0), int(in_transit or 0)

        if total == 0 or in_transit != total:
            self.logger.debug(f"Shipment {shipment_id}: {in_transit}/{total} in transit, no change")
            return ReconcileResult(total, in_transit, False)

        result = await self._execute(
            update(Shipment)
            .where(Shipment.shipment_id == shipment_id, Shipment.status == ShipmentStatus.PENDING)
            .values(status=ShipmentStatus.IN_TRANSIT)
            .execution_options(synchronize_session=False),
            'reconcile_update'
        )
        updated = result.rowcount > 0
        if updated:
            self.logger.info(f"Shipment {shipment_id} moved to InTransit ({total} orders in transit)")
        return ReconcileResult(total, in_transit, updated)
