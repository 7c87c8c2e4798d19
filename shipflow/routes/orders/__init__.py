from .order_routes import order_router

__all__ = ['order_router']
