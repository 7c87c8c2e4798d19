"""
Shipflow Test Configuration

Provides fixtures for service and API testing:
- engine / session_factory: in-memory SQLite (aiosqlite) per test
- directory: seeded carriers, drivers, customer, warehouse staff and CSR
- recording_transport / failing_transport: fake notification transports
- services: ServiceRegistry wired with an inline notification dispatcher
"""
import random
import uuid
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from shipflow.models import Base, Carrier, Driver, User, UserRole, Order
from shipflow.services import (
    create_service_registry, NotificationService, NotificationTransport,
    InlineNotificationDispatcher
)
from shipflow.services.exceptions import DependencyError


class RecordingTransport(NotificationTransport):
    """Menyimpan setiap payload yang dikirim"""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    async def send(self, payload: Dict[str, Any]) -> None:
        self.sent.append(payload)

    def of_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [p for p in self.sent if p['type'] == event_type]

    def recipients(self, event_type: str) -> List[str]:
        return [p['user_id'] for p in self.of_type(event_type)]


class FailingTransport(NotificationTransport):
    """Notification service yang selalu tidak bisa dihubungi"""

    def __init__(self):
        self.attempts = 0

    async def send(self, payload: Dict[str, Any]) -> None:
        self.attempts += 1
        raise DependencyError('NOTIFICATION', 'cannot connect to notification service')


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def directory(session_factory):
    """
    C1 punya driver D1 dan D2, C2 tidak punya driver.
    Satu customer, dua warehouse staff, satu CSR.
    """
    ids = SimpleNamespace(
        c1=uuid.uuid4(), c2=uuid.uuid4(),
        d1=uuid.uuid4(), d2=uuid.uuid4(),
        customer=uuid.uuid4(),
        staff=[uuid.uuid4(), uuid.uuid4()],
        csr=uuid.uuid4(),
    )
    async with session_factory() as session:
        session.add_all([
            Carrier(carrier_id=ids.c1, name="Fast Freight"),
            Carrier(carrier_id=ids.c2, name="Slow Boat"),
        ])
        session.add_all([
            User(user_id=ids.customer, email="alice@example.com", first_name="Alice",
                 last_name="Smith", role=UserRole.CUSTOMER),
            User(user_id=ids.staff[0], email="staff1@example.com", role=UserRole.WAREHOUSE_STAFF),
            User(user_id=ids.staff[1], email="staff2@example.com", role=UserRole.WAREHOUSE_STAFF),
            User(user_id=ids.csr, email="csr@example.com", role=UserRole.CSR),
        ])
        await session.flush()
        session.add_all([
            Driver(driver_id=ids.d1, carrier_id=ids.c1, name="Dan"),
            Driver(driver_id=ids.d2, carrier_id=ids.c1, name="Dora"),
        ])
        await session.commit()
    return ids


@pytest.fixture
def recording_transport():
    return RecordingTransport()


@pytest.fixture
def failing_transport():
    return FailingTransport()


def build_registry(session, transport, seed: int = 7, store_timeout: float = 5.0):
    notification_service = NotificationService(InlineNotificationDispatcher(transport))
    return create_service_registry(
        db_session=session,
        config={'STORE_TIMEOUT_SECONDS': store_timeout},
        notification_service=notification_service,
        rng=random.Random(seed),
    )


@pytest.fixture
def services(db_session, recording_transport, directory):
    return build_registry(db_session, recording_transport)


@pytest.fixture
def failing_services(db_session, failing_transport, directory):
    return build_registry(db_session, failing_transport)


@pytest.fixture
def order_data(directory):
    def make(**overrides):
        data = {
            'customer_id': str(directory.customer),
            'origin_address': 'Rua A, 1, Lisboa',
            'destination_address': 'Rua B, 2, Porto',
            'weight': 2.5,
        }
        data.update(overrides)
        return data
    return make


@pytest.fixture
def fetch_order(session_factory):
    """Baca order dari session baru, bukan dari identity map milik service"""
    async def fetch(order_id) -> Order:
        async with session_factory() as session:
            return await session.get(Order, uuid.UUID(str(order_id)))
    return fetch
