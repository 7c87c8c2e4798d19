"""
Notification Service
====================

Port untuk meminta notifikasi ke user (customer, warehouse staff, CSR).

Core hanya *meminta* notifikasi. Penyimpanan dan rendering di sisi penerima
adalah urusan notification service eksternal. Semua kegagalan di sini di-log
dan ditelan, tidak pernah dilempar balik ke caller.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional, Iterable

import requests
from jinja2 import Template

from ..exceptions import DependencyError
from ...models.enums import NotificationType, NotificationSeverity
from ...schemas.notification import NotificationRequestSchema

logger = logging.getLogger(__name__)

NOT_DEFINED = 'Not defined'
UNKNOWN_ERROR = 'Unknown error'

# ==================== TRANSPORTS ====================

class NotificationTransport(ABC):
    """Mengirim satu payload notifikasi ke tujuan akhirnya"""

    @abstractmethod
    async def send(self, payload: Dict[str, Any]) -> None:
        pass

class HttpNotificationTransport(NotificationTransport):
    """POST JSON ke notification service via requests (di worker thread)"""

    def __init__(self, base_url: str, timeout: float = 5.0):
        self.url = f"{base_url.rstrip('/')}/api/notifications"
        self.timeout = timeout

    async def send(self, payload: Dict[str, Any]) -> None:
        def post():
            response = requests.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()

        try:
            await asyncio.to_thread(post)
        except requests.exceptions.Timeout:
            raise DependencyError('NOTIFICATION', 'notification service request timeout')
        except requests.exceptions.ConnectionError:
            raise DependencyError('NOTIFICATION', 'cannot connect to notification service')
        except requests.exceptions.RequestException as e:
            raise DependencyError('NOTIFICATION', f"request failed: {str(e)}")

async def _deliver(transport: NotificationTransport, payload: Dict[str, Any]) -> bool:
    try:
        await transport.send(payload)
        return True
    except Exception as e:
        logger.warning(
            f"Failed to deliver {payload.get('type')} notification to {payload.get('user_id')}: {str(e)}"
        )
        return False

# ==================== DISPATCHERS ====================

class InlineNotificationDispatcher:
    """Kirim langsung di task caller (CLI dan test)"""

    def __init__(self, transport: NotificationTransport):
        self.transport = transport

    async def submit(self, payload: Dict[str, Any]) -> None:
        await _deliver(self.transport, payload)

class BackgroundNotificationDispatcher:
    """
    Bounded queue + worker pool.

    Request path hanya melakukan put_nowait; worker yang mengirim ke transport.
    Kalau queue penuh, request di-drop dengan warning. Urutan pengiriman antar
    penerima tidak dijamin.
    """

    def __init__(self, transport: NotificationTransport, workers: int = 4, queue_size: int = 1000):
        self.transport = transport
        self.worker_count = max(1, workers)
        self.queue_size = queue_size
        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._workers)

    async def start(self):
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"notification-worker-{index}")
            for index in range(self.worker_count)
        ]
        logger.info(f"Notification dispatcher started with {self.worker_count} workers")

    async def stop(self, drain_timeout: float = 5.0):
        if not self.running:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Dropping {self._queue.qsize()} undelivered notifications on shutdown")
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
        logger.info("Notification dispatcher stopped")

    async def join(self):
        """Tunggu sampai semua notifikasi di queue sudah diproses"""
        if self._queue is not None:
            await self._queue.join()

    async def submit(self, payload: Dict[str, Any]) -> None:
        if not self.running:
            logger.debug("Dispatcher not running, delivering notification inline")
            await _deliver(self.transport, payload)
            return
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning(f"Notification queue full, dropping {payload.get('type')} for {payload.get('user_id')}")

    async def _worker(self, index: int):
        while True:
            payload = await self._queue.get()
            try:
                await _deliver(self.transport, payload)
            finally:
                self._queue.task_done()

# ==================== SERVICE ====================

class NotificationService:
    """Service untuk membangun dan meminta notifikasi"""

    def __init__(self, dispatcher):
        self.dispatcher = dispatcher
        self.templates = self._load_templates()
        self.logger = logging.getLogger(self.__class__.__name__)

    async def notify(self, recipient_id, event_type: NotificationType, title: str, message: str,
                     related_entity_id=None, severity: NotificationSeverity = NotificationSeverity.INFO,
                     metadata: Dict[str, Any] = None, related_entity_type: str = 'ORDER') -> bool:
        """Minta satu notifikasi. Tidak pernah raise; return False kalau gagal di-submit."""
        try:
            request = NotificationRequestSchema(
                user_id=recipient_id,
                type=event_type,
                title=title,
                message=message,
                related_entity_type=related_entity_type,
                related_entity_id=related_entity_id,
                severity=severity,
                metadata=metadata or {}
            )
            await self.dispatcher.submit(request.model_dump(mode='json'))
            return True
        except Exception as e:
            self.logger.warning(f"Failed to request {event_type} notification for {recipient_id}: {str(e)}")
            return False

    async def notify_many(self, recipient_ids: Iterable, event_type: NotificationType, title: str,
                          message: str, **kwargs) -> int:
        """Fan-out ke banyak penerima; kegagalan satu penerima tidak menghentikan yang lain"""
        sent = 0
        for recipient_id in recipient_ids:
            if await self.notify(recipient_id, event_type, title, message, **kwargs):
                sent += 1
        return sent

    # ---------- Order lifecycle ----------

    async def send_order_created(self, order_id, customer_id) -> bool:
        title, message = self.render('ORDER_CREATED_CUSTOMER')
        return await self.notify(customer_id, NotificationType.ORDER_CREATED, title, message,
                                 related_entity_id=order_id)

    async def send_new_order_to_staff(self, order_id, customer_name: str, staff_ids: Iterable) -> int:
        title, message = self.render('ORDER_CREATED_STAFF', customer_name=customer_name)
        return await self.notify_many(staff_ids, NotificationType.ORDER_CREATED, title, message,
                                      related_entity_id=order_id)

    async def send_carrier_changed(self, order_id, old_carrier: str, new_carrier: str,
                                   staff_ids: Iterable) -> int:
        old_carrier = old_carrier or NOT_DEFINED
        title, message = self.render('CARRIER_CHANGED', old_carrier=old_carrier, new_carrier=new_carrier)
        return await self.notify_many(
            staff_ids, NotificationType.CARRIER_CHANGED, title, message,
            related_entity_id=order_id, severity=NotificationSeverity.WARNING,
            metadata={'oldCarrier': old_carrier, 'newCarrier': new_carrier}
        )

    async def send_status_changed(self, order_id, old_status: str, new_status: str, customer_id) -> bool:
        title, message = self.render('STATUS_CHANGED', old_status=old_status, new_status=new_status)
        return await self.notify(
            customer_id, NotificationType.SHIPMENT_STATUS_UPDATED, title, message,
            related_entity_id=order_id,
            metadata={'oldStatus': old_status, 'newStatus': new_status}
        )

    async def send_order_dispatched(self, order_id, carrier_name: str, customer_id) -> bool:
        title, message = self.render('ORDER_DISPATCHED', carrier_name=carrier_name)
        return await self.notify(
            customer_id, NotificationType.ORDER_DISPATCHED, title, message,
            related_entity_id=order_id, metadata={'carrier': carrier_name}
        )

    async def send_order_failed(self, order_id, error_message: str, customer_id) -> bool:
        error_message = error_message or UNKNOWN_ERROR
        title, message = self.render('ORDER_FAILED_CUSTOMER', error_message=error_message)
        return await self.notify(
            customer_id, NotificationType.DELIVERY_EXCEPTION, title, message,
            related_entity_id=order_id, severity=NotificationSeverity.ERROR,
            metadata={'errorMessage': error_message}
        )

    async def send_staff_order_failed(self, order_id, error_message: str, staff_ids: Iterable) -> int:
        error_message = error_message or UNKNOWN_ERROR
        title, message = self.render('ORDER_FAILED_STAFF', error_message=error_message)
        return await self.notify_many(
            staff_ids, NotificationType.DELIVERY_EXCEPTION, title, message,
            related_entity_id=order_id, severity=NotificationSeverity.ERROR,
            metadata={'errorMessage': error_message}
        )

    async def send_anomaly_to_csrs(self, order_id, anomaly_type: str, description: str,
                                   customer_email: str, csr_ids: Iterable) -> int:
        title, message = self.render(
            'ANOMALY_REPORTED', anomaly_type=anomaly_type,
            description=description, customer_email=customer_email
        )
        return await self.notify_many(
            csr_ids, NotificationType.DELIVERY_EXCEPTION, title, message,
            related_entity_id=order_id, severity=NotificationSeverity.ERROR,
            metadata={'anomalyType': anomaly_type, 'description': description,
                      'customerEmail': customer_email}
        )

    async def send_delivery_confirmed(self, order_id, old_status: str, customer_id) -> bool:
        title, message = self.render('DELIVERY_CONFIRMED')
        return await self.notify(
            customer_id, NotificationType.SHIPMENT_STATUS_UPDATED, title, message,
            related_entity_id=order_id,
            metadata={'oldStatus': old_status, 'newStatus': 'Delivered'}
        )

    # ---------- Templates ----------

    def render(self, template_key: str, **context):
        """Render (title, message) dari template"""
        template = self.templates[template_key]
        return template['title'].render(**context), template['message'].render(**context)

    def _load_templates(self) -> Dict[str, Dict[str, Template]]:
        """Load notification templates - in production, load from database or files"""
        raw = {
            'ORDER_CREATED_CUSTOMER': {
                'title': 'Order created successfully',
                'message': 'Your order has been registered and is being processed.'
            },
            'ORDER_CREATED_STAFF': {
                'title': 'New order received',
                'message': 'A new order was placed by {{ customer_name }}. Preparation required.'
            },
            'CARRIER_CHANGED': {
                'title': 'Carrier changed',
                'message': 'The carrier for this order changed from {{ old_carrier }} to {{ new_carrier }}. Adjust the dispatch.'
            },
            'STATUS_CHANGED': {
                'title': 'Order status updated',
                'message': 'Your order moved from {{ old_status }} to {{ new_status }}.'
            },
            'ORDER_DISPATCHED': {
                'title': 'Order dispatched',
                'message': 'Your order has been dispatched via {{ carrier_name }}.'
            },
            'ORDER_FAILED_CUSTOMER': {
                'title': 'Problem with your order',
                'message': 'Your order failed. Reason: {{ error_message }}'
            },
            'ORDER_FAILED_STAFF': {
                'title': 'Order failed',
                'message': 'The order failed. Reason: {{ error_message }}'
            },
            'ANOMALY_REPORTED': {
                'title': 'Anomaly reported',
                'message': 'Order of customer ({{ customer_email }}) has an anomaly: {{ anomaly_type }} - {{ description }}'
            },
            'DELIVERY_CONFIRMED': {
                'title': 'Order delivered',
                'message': 'Your order has been delivered.'
            },
        }
        return {
            key: {part: Template(text) for part, text in parts.items()}
            for key, parts in raw.items()
        }
