"""
Shipflow Application Factory
============================

Pusat perakitan aplikasi FastAPI menggunakan Application Factory Pattern.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import time
import uuid

# Import semua router dari modulnya masing-masing
from .routes.orders import order_router
from .routes.shipping import shipment_router, carrier_router

# Import services dan dependencies
from .services import (
    NotificationService, HttpNotificationTransport, BackgroundNotificationDispatcher
)
from .services.exceptions import (
    ShipflowException, ValidationError, NotFoundError, ConflictError,
    DependencyError, InternalError
)
from .responses import APIResponse
from .config import settings

logger = logging.getLogger(__name__)

_STATUS_BY_EXCEPTION = (
    (ValidationError, status.HTTP_400_BAD_REQUEST, "Validation Error"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (ConflictError, status.HTTP_409_CONFLICT, "Conflict"),
    (DependencyError, status.HTTP_502_BAD_GATEWAY, "Dependency Error"),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error"),
)

def setup_logging():
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

def setup_middleware(app: FastAPI):
    """Setup semua middleware aplikasi."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS
    )

    @app.middleware("http")
    async def add_request_id_and_process_time(request: Request, call_next):
        request_id = str(uuid.uuid4())
        start_time = time.time()

        request.state.request_id = request_id
        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Request-ID"] = request_id
        return response

def _error_response(request: Request, status_code: int, error: str, exc: ShipflowException):
    return JSONResponse(
        status_code=status_code,
        content=APIResponse.error(
            error=error,
            **exc.to_dict(),
            request_id=getattr(request.state, 'request_id', None)
        )
    )

def setup_exception_handlers(app: FastAPI):
    """Setup semua custom exception handlers."""

    @app.exception_handler(ShipflowException)
    async def shipflow_exception_handler(request: Request, exc: ShipflowException):
        for exc_class, status_code, error in _STATUS_BY_EXCEPTION:
            if isinstance(exc, exc_class):
                if status_code >= 500:
                    logger.error(f"{error}: {exc.message}")
                return _error_response(request, status_code, error, exc)
        return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error",
                               InternalError())

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = '.'.join(str(part) for part in first.get('loc', ()) if part != 'body') or None
        return _error_response(
            request, status.HTTP_400_BAD_REQUEST, "Validation Error",
            ValidationError(first.get('msg', 'Invalid request'), field=field)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        # Nama exception internal tidak pernah dikirim ke client
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error",
                               InternalError("An unexpected error occurred"))

def setup_routes(app: FastAPI):
    """Daftarkan (include) semua router ke aplikasi."""
    # Endpoint sistem
    @app.get("/health", tags=["System"])
    async def health_check():
        return {"status": "healthy", "timestamp": time.time()}

    @app.get("/", tags=["System"])
    async def root():
        return {"message": "Shipflow API", "version": "1.0.0", "docs": "/docs"}

    app.include_router(order_router, prefix="/api/orders", tags=["Orders"])
    app.include_router(shipment_router, prefix="/api/shipments", tags=["Shipments"])
    app.include_router(carrier_router, prefix="/api/carriers", tags=["Carriers"])

def create_app(notification_transport=None, rng=None) -> FastAPI:
    """
    Application Factory: Membuat dan mengkonfigurasi instance FastAPI.

    notification_transport dan rng bisa di-inject (test); default-nya HTTP ke
    notification service dan random.Random().
    """
    setup_logging()

    transport = notification_transport or HttpNotificationTransport(
        settings.NOTIFICATION_SERVICE_URL, timeout=settings.NOTIFICATION_TIMEOUT_SECONDS
    )
    dispatcher = BackgroundNotificationDispatcher(
        transport,
        workers=settings.NOTIFICATION_WORKERS,
        queue_size=settings.NOTIFICATION_QUEUE_SIZE
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Shipflow API starting up")
        await dispatcher.start()
        yield
        await dispatcher.stop()
        logger.info("Shipflow API shutting down")

    # 1. Buat instance FastAPI
    app = FastAPI(
        title="Shipflow API",
        description="Order and shipment lifecycle API",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.notification_dispatcher = dispatcher
    app.state.notification_service = NotificationService(dispatcher)
    app.state.rng = rng

    # 2. Setup Middleware
    setup_middleware(app)

    # 3. Setup Exception Handlers
    setup_exception_handlers(app)

    # 4. Setup Routes
    setup_routes(app)

    logger.debug("FastAPI app created and configured")
    return app
