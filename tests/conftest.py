"""
Shared test fixtures.

Service tests get a file-backed SQLite database (so concurrent sessions see
each other's commits), a scripted payment gateway and a recording mailer.
API tests get a TestClient running the real lifespan against the same kind
of database, seeded before startup.
"""

import asyncio
from datetime import date
from types import SimpleNamespace

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Settings
from app.core.database import Base
from app.main import create_app
from app.models import Booking, BookingStatus, Court, User, UserRole, Venue
from app.services.booking_service import BookingService
from app.services.email_service import EmailService
from app.services.notifications import NotificationQueue
from app.services.payment_gateway import PaymentGateway, PaymentResult

BOOKING_DATE = date(2030, 1, 15)


# ── Fakes ──────────────────────────────────────────────────────────────────


class ScriptedPaymentGateway(PaymentGateway):
    """Returns queued outcomes in order, then succeeds."""

    def __init__(self, outcomes=None, delay: float = 0.0, error: Exception = None):
        self.outcomes = list(outcomes or [])
        self.delay = delay
        self.error = error
        self.requests = []

    async def process_payment(self, request):
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        success = self.outcomes.pop(0) if self.outcomes else True
        if success:
            return PaymentResult(
                success=True,
                transaction_id=f"txn_test_{request.booking_id}",
                message="Payment was successful.",
            )
        return PaymentResult(success=False, message="Payment failed due to an error.")


class RecordingEmailService(EmailService):
    """Collects messages instead of sending them."""

    def __init__(self, fail: bool = False):
        super().__init__(api_key=None, from_email="noreply@quickcourt.test")
        self.fail = fail
        self.sent = []

    async def send(self, message):
        if self.fail:
            raise RuntimeError("mail provider unavailable")
        self.sent.append(message)
        return True


# ── Seeding ────────────────────────────────────────────────────────────────


async def seed_database(session: AsyncSession) -> SimpleNamespace:
    """Users of every role, an approved venue and a ₹45/hr court open 06:00-22:00."""
    player = User(name="Test Player", email="player@example.com", role=UserRole.USER)
    other_player = User(name="Other Player", email="other@example.com", role=UserRole.USER)
    owner = User(name="Venue Owner", email="owner@example.com", role=UserRole.FACILITY_OWNER)
    other_owner = User(name="Other Owner", email="owner2@example.com", role=UserRole.FACILITY_OWNER)
    admin = User(name="Admin", email="admin@example.com", role=UserRole.ADMIN)
    session.add_all([player, other_player, owner, other_owner, admin])
    await session.flush()

    venue = Venue(
        owner_id=owner.id,
        name="Smash Arena",
        city="Ahmedabad",
        sport_types=["Badminton"],
        is_approved=True,
        timezone="Asia/Kolkata",
    )
    session.add(venue)
    await session.flush()

    court = Court(
        venue_id=venue.id,
        name="Court 1",
        sport_type="Badminton",
        price_per_hour=45.0,
        operating_start="06:00",
        operating_end="22:00",
    )
    session.add(court)
    await session.commit()

    return SimpleNamespace(
        player=player,
        other_player=other_player,
        owner=owner,
        other_owner=other_owner,
        admin=admin,
        venue=venue,
        court=court,
    )


# ── Service fixtures ───────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory over a fresh SQLite database file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(db_session):
    return await seed_database(db_session)


@pytest.fixture
def gateway():
    return ScriptedPaymentGateway()


@pytest.fixture
def email_service():
    return RecordingEmailService()


@pytest_asyncio.fixture
async def notifier(email_service):
    queue = NotificationQueue(email_service, maxsize=10)
    await queue.start()
    yield queue
    await queue.stop()


@pytest.fixture
def booking_service(gateway, notifier):
    return BookingService(
        payment_gateway=gateway,
        notifier=notifier,
        payment_timeout=1.0,
        cancellation_lead_hours=24,
        pending_timeout_minutes=15,
    )


# ── API fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def api_env(tmp_path):
    """
    A seeded database plus the pieces needed to build an app against it.

    Tests can tweak `settings` before asking for `client`.
    """
    url = f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"

    async def _prepare():
        engine = create_async_engine(url)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with factory() as session:
            data = await seed_database(session)
        await engine.dispose()
        return data

    data = asyncio.run(_prepare())

    settings = Settings(
        _env_file=None,
        DATABASE_URL=url,
        DEBUG=False,
        COMPLETION_SWEEP_ENABLED=False,
        PAYMENT_TIMEOUT_SECONDS=2.0,
    )

    return SimpleNamespace(
        settings=settings,
        data=data,
        gateway=ScriptedPaymentGateway(),
        email_service=RecordingEmailService(),
    )


@pytest.fixture
def client(api_env):
    app = create_app(
        api_env.settings,
        payment_gateway=api_env.gateway,
        email_service=api_env.email_service,
    )

    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc


def auth(user) -> dict:
    """Headers identifying the caller."""
    return {"X-User-Id": str(user.id)}


def insert_pending_booking(api_env, start_time="10:00", end_time="11:00") -> int:
    """Write a Pending hold straight into the API database, as if a charge were in flight."""
    data = api_env.data

    async def _insert():
        engine = create_async_engine(api_env.settings.DATABASE_URL)
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with factory() as session:
            booking = Booking(
                user_id=data.player.id,
                venue_id=data.venue.id,
                court_id=data.court.id,
                date=BOOKING_DATE,
                start_time=start_time,
                end_time=end_time,
                total_price=45.0,
                status=BookingStatus.PENDING,
            )
            session.add(booking)
            await session.commit()
            booking_id = booking.id
        await engine.dispose()
        return booking_id

    return asyncio.run(_insert())
