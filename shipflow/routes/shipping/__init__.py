from .shipment_routes import shipment_router
from .carrier_routes import carrier_router

__all__ = ['shipment_router', 'carrier_router']
