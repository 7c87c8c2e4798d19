"""
Orders Domain Services
======================

Services untuk order lifecycle, delivery confirmation, dan anomaly reporting
"""

from .order_service import OrderService
from .delivery_service import DeliveryConfirmationService
from .anomaly_service import AnomalyReportService

__all__ = ['OrderService', 'DeliveryConfirmationService', 'AnomalyReportService']
