"""
Shipping Domain Services
========================

Services untuk shipment assignment, reconciliation, dan carrier/driver directory
"""

from .directory_service import DirectoryService
from .reconciler import ShipmentReconciler, ReconcileResult
from .shipment_service import ShipmentService

__all__ = ['DirectoryService', 'ShipmentReconciler', 'ReconcileResult', 'ShipmentService']
