"""
API Dependencies
================

FastAPI dependencies for the Shipflow application.
"""

from fastapi import Depends, Request

from .services import create_service_registry
from .database import get_db_session
from .config import settings

# Dependency untuk get service registry
async def get_service_registry(
    request: Request,
    db_session = Depends(get_db_session)
):
    """Service registry per request; notification service dibagi di level aplikasi"""
    return create_service_registry(
        db_session=db_session,
        config=settings.model_dump(),
        notification_service=request.app.state.notification_service,
        rng=getattr(request.app.state, 'rng', None)
    )
