"""
Integration Domain Services
===========================

Services untuk komunikasi dengan sistem eksternal (notification service)
"""

from .notification_service import (
    NotificationService,
    NotificationTransport,
    HttpNotificationTransport,
    InlineNotificationDispatcher,
    BackgroundNotificationDispatcher,
)

__all__ = [
    'NotificationService',
    'NotificationTransport',
    'HttpNotificationTransport',
    'InlineNotificationDispatcher',
    'BackgroundNotificationDispatcher',
]
