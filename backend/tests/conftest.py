"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own transaction that rolls back after the test.
- The database comes from ``TEST_DATABASE_URL``; by default an in-memory
  SQLite database (aiosqlite) is used. Point it at a PostgreSQL database
  (``postgresql+asyncpg://.../viewingdesk_test``) to run against the
  production dialect.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.api.deps import get_notification_dispatcher, get_reservation_config
from app.auth.security import create_token_pair, hash_password
from app.database import Base, get_db
from app.main import app
from app.models.applicant import Applicant
from app.models.property import Property
from app.models.user import User
from app.models.viewing_slot import SlotStatus, ViewingSlot
from app.models.viewing_token import ViewingToken
from app.reservations.authorization import AuthorizationResolver
from app.reservations.config import ReservationConfig
from app.reservations.engine import ReservationEngine
from app.reservations.errors import NotificationError
from app.reservations.notifications import ViewingNotification

_test_db_url = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _make_engine() -> AsyncEngine:
    if not _test_db_url.startswith("sqlite"):
        return create_async_engine(_test_db_url, echo=False, pool_pre_ping=True)

    engine = create_async_engine(
        _test_db_url,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite's implicit transactions break SAVEPOINT; let SQLAlchemy emit BEGIN itself.
    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


# ---------------------------------------------------------------------------
# Session-scoped: create / drop all tables once per test session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine():
    """Create a session-scoped engine tied to the session event loop."""
    engine = _make_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def setup_test_db(test_engine):
    """Create all tables at the start of the session and drop them at the end."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(test_engine, setup_test_db) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


# ---------------------------------------------------------------------------
# Reservation engine collaborators
# ---------------------------------------------------------------------------


class RecordingDispatcher:
    """Dispatcher double that keeps every notification it is handed."""

    def __init__(self) -> None:
        self.sent: list[ViewingNotification] = []

    async def dispatch(self, notification: ViewingNotification) -> None:
        self.sent.append(notification)


class FailingDispatcher:
    """Dispatcher double whose transport is always down."""

    def __init__(self) -> None:
        self.attempts = 0

    async def dispatch(self, notification: ViewingNotification) -> None:
        self.attempts += 1
        raise NotificationError("SMTP server unreachable")


@pytest.fixture
def reservation_config() -> ReservationConfig:
    """Default engine policies; override in a test class to switch modes."""
    return ReservationConfig()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def engine(reservation_config: ReservationConfig, dispatcher) -> ReservationEngine:
    return ReservationEngine(reservation_config, AuthorizationResolver(reservation_config), dispatcher)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    dispatcher,
    reservation_config: ReservationConfig,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test DB session and doubles."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_reservation_config] = lambda: reservation_config

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: agent
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_agent(db_session: AsyncSession) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"agent-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name="Test Agent",
        is_active=True,
        role="agent",
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def auth_headers(test_agent: User) -> dict[str, str]:
    tokens = create_token_pair(str(test_agent.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


# ---------------------------------------------------------------------------
# Convenience fixtures: property, applicants, slots, tokens
# ---------------------------------------------------------------------------

# 2030-05-14 is a Tuesday in CEST (UTC+2): 07:00 UTC renders as 09:00 in Prague.
VIEWING_DAY = datetime(2030, 5, 14)


def utc_at(hour: int, minute: int = 0, day: datetime = VIEWING_DAY) -> datetime:
    """Naive UTC timestamp on the shared viewing day."""
    return day.replace(hour=hour, minute=minute)


@pytest_asyncio.fixture
async def test_property(db_session: AsyncSession, test_agent: User) -> Property:
    prop = Property(
        owner_id=test_agent.id,
        property_code=f"077-NP{uuid.uuid4().hex[:5].upper()}",
        business_type="sale",
        configuration="3+kk",
        address="Vinohradská 12, Praha 2",
        status="available",
    )
    db_session.add(prop)
    await db_session.flush()
    await db_session.refresh(prop)
    return prop


@pytest_asyncio.fixture
async def make_applicant(db_session: AsyncSession) -> Callable[..., Awaitable[Applicant]]:
    async def _make(full_name: str = "Jana Nováková", email: str | None = None, phone: str | None = None) -> Applicant:
        unique = uuid.uuid4().hex[:8]
        applicant = Applicant(
            full_name=full_name,
            email=email or f"applicant-{unique}@test.com",
            phone=phone or f"+420{uuid.uuid4().int % 10**9:09d}",
            agreed_to_gdpr=True,
        )
        db_session.add(applicant)
        await db_session.flush()
        await db_session.refresh(applicant)
        return applicant

    return _make


@pytest_asyncio.fixture
async def applicant(make_applicant) -> Applicant:
    return await make_applicant()


@pytest_asyncio.fixture
async def make_slot(db_session: AsyncSession, test_property: Property) -> Callable[..., Awaitable[ViewingSlot]]:
    async def _make(
        start: datetime,
        minutes: int = 30,
        status: SlotStatus = SlotStatus.AVAILABLE,
        occupant: Applicant | None = None,
        prop: Property | None = None,
    ) -> ViewingSlot:
        slot = ViewingSlot(
            property_id=(prop or test_property).id,
            start_at=start,
            end_at=start + timedelta(minutes=minutes),
            status=status.value,
            occupant_id=occupant.id if occupant else None,
        )
        db_session.add(slot)
        await db_session.flush()
        await db_session.refresh(slot)
        return slot

    return _make


@pytest_asyncio.fixture
async def make_token(db_session: AsyncSession, test_property: Property) -> Callable[..., Awaitable[ViewingToken]]:
    async def _make(
        applicant: Applicant,
        prop: Property | None = None,
        is_active: bool = True,
        used: bool = False,
    ) -> ViewingToken:
        token = ViewingToken(
            token=uuid.uuid4().hex,
            property_id=(prop or test_property).id,
            applicant_id=applicant.id,
            is_active=is_active,
            used=used,
        )
        db_session.add(token)
        await db_session.flush()
        await db_session.refresh(token)
        return token

    return _make
