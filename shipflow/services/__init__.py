"""
Shipflow Services Module
========================

Services layer untuk order/shipment lifecycle
Menggunakan dependency injection pattern untuk service management
"""

from .base import BaseService, transactional
from .exceptions import *

# Orders Domain
from .orders import (
    OrderService, DeliveryConfirmationService, AnomalyReportService
)

# Shipping Domain
from .shipping import (
    DirectoryService, ShipmentReconciler, ReconcileResult, ShipmentService
)

# Integration Domain
from .integration import (
    NotificationService, NotificationTransport, HttpNotificationTransport,
    InlineNotificationDispatcher, BackgroundNotificationDispatcher
)

__all__ = [
    # Base Classes
    'BaseService', 'transactional',

    # Orders Domain
    'OrderService', 'DeliveryConfirmationService', 'AnomalyReportService',

    # Shipping Domain
    'DirectoryService', 'ShipmentReconciler', 'ReconcileResult', 'ShipmentService',

    # Integration Domain
    'NotificationService', 'NotificationTransport', 'HttpNotificationTransport',
    'InlineNotificationDispatcher', 'BackgroundNotificationDispatcher',

    # Registry
    'ServiceRegistry', 'create_service_registry',
]


class ServiceRegistry:
    """
    Service Registry untuk dependency injection
    Mengelola lifecycle dan dependencies antar services dalam satu request
    """

    def __init__(self, db_session, config: dict, notification_service=None,
                 current_user: str = None, rng=None):
        self.db_session = db_session
        self.config = config
        self.current_user = current_user
        self.rng = rng
        self._services = {'notification': notification_service}

        # Initialize core services first
        self._init_core_services()

        # Initialize domain services
        self._init_domain_services()

    def _common(self) -> dict:
        return {
            'db_session': self.db_session,
            'current_user': self.current_user,
            'notification_service': self._services['notification'],
            'store_timeout': self.config.get('STORE_TIMEOUT_SECONDS', 10.0),
        }

    def _init_core_services(self):
        """Initialize core services yang diperlukan services lain"""
        self._services['directory'] = DirectoryService(**self._common())
        self._services['reconciler'] = ShipmentReconciler(**self._common())

    def _init_domain_services(self):
        """Initialize domain services dengan dependencies"""

        # Orders Domain
        self._services['order'] = OrderService(
            **self._common(),
            directory_service=self._services['directory'],
            reconciler=self._services['reconciler']
        )

        self._services['delivery'] = DeliveryConfirmationService(**self._common())

        self._services['anomaly'] = AnomalyReportService(
            **self._common(),
            directory_service=self._services['directory']
        )

        # Shipping Domain
        self._services['shipment'] = ShipmentService(
            **self._common(),
            directory_service=self._services['directory'],
            rng=self.rng
        )

    # Property accessors untuk easy access

    @property
    def directory(self) -> DirectoryService:
        return self._services['directory']

    @property
    def reconciler(self) -> ShipmentReconciler:
        return self._services['reconciler']

    @property
    def order(self) -> OrderService:
        return self._services['order']

    @property
    def delivery(self) -> DeliveryConfirmationService:
        return self._services['delivery']

    @property
    def anomaly(self) -> AnomalyReportService:
        return self._services['anomaly']

    @property
    def shipment(self) -> ShipmentService:
        return self._services['shipment']

    @property
    def notification(self) -> NotificationService:
        return self._services['notification']


def create_service_registry(db_session, config: dict, notification_service=None,
                            current_user: str = None, rng=None) -> ServiceRegistry:
    """Factory function untuk create service registry"""
    return ServiceRegistry(db_session, config, notification_service, current_user, rng)
