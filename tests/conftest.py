"""
Pytest configuration file.
"""
from datetime import date, time, timedelta
from unittest.mock import MagicMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import hallbook.models  # noqa: F401
from hallbook.core.security import create_access_token
from hallbook.database import Base, get_db
from hallbook.main import app
from hallbook.models import Booking, Hall, Profile

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

EVENT_DATE = date.today() + timedelta(days=7)


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; emit it ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    """Session shared by fixtures, service calls and API requests."""
    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(db):
    """HTTP client against the app, using the test session."""

    async def override_get_db():
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def mock_email_task():
    """Mock the Celery email task to avoid touching a broker."""
    task = MagicMock()
    with patch("hallbook.tasks.send_email_notification", task):
        yield task


@pytest.fixture
def auth_headers():
    """Build a bearer header for a profile."""

    def _headers(profile: Profile) -> dict[str, str]:
        token = create_access_token({"sub": str(profile.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers


# =============================================================================
# Profiles
# =============================================================================
async def _profile(db, **values) -> Profile:
    profile = Profile(**values)
    db.add(profile)
    await db.commit()
    return profile


@pytest_asyncio.fixture
async def faculty_it(db):
    return await _profile(
        db,
        email="faculty.it@college.edu",
        name="Priya Raman",
        mobile_number="9876543210",
        role="faculty",
        department="IT",
    )


@pytest_asyncio.fixture
async def faculty_cse(db):
    return await _profile(
        db, email="faculty.cse@college.edu", name="Arun Kumar", role="faculty", department="CSE"
    )


@pytest_asyncio.fixture
async def hod_it(db):
    return await _profile(
        db, email="hod.it@college.edu", name="Dr. Meena Iyer", role="hod", department="IT"
    )


@pytest_asyncio.fixture
async def hod_cse(db):
    return await _profile(
        db, email="hod.cse@college.edu", name="Dr. Suresh Babu", role="hod", department="CSE"
    )


@pytest_asyncio.fixture
async def principal(db):
    return await _profile(
        db, email="principal@college.edu", name="Dr. Lakshmi Narayanan", role="principal"
    )


@pytest_asyncio.fixture
async def pro(db):
    return await _profile(db, email="pro@college.edu", name="Karthik Raja", role="pro")


@pytest_asyncio.fixture
async def chairman(db):
    return await _profile(db, email="chairman@college.edu", name="Mr. S. Venkatesan", role="chairman")


@pytest_asyncio.fixture
async def admin(db):
    return await _profile(db, email="admin@college.edu", name="Hall Admin", role="admin")


# =============================================================================
# Halls
# =============================================================================
async def _hall(db, **values) -> Hall:
    defaults = {
        "block": "Main Block",
        "hall_type": "Auditorium",
        "has_ac": True,
        "has_mic": True,
        "has_projector": True,
        "has_audio_system": True,
    }
    defaults.update(values)
    hall = Hall(**defaults)
    db.add(hall)
    await db.commit()
    return hall


@pytest_asyncio.fixture
async def hall_h(db):
    return await _hall(db, name="Hall H", capacity=200)


@pytest_asyncio.fixture
async def hall_k(db):
    return await _hall(db, name="Hall K", block="East Block", capacity=150)


@pytest_asyncio.fixture
async def small_hall(db):
    return await _hall(
        db, name="Smart Room 1", block="West Block", hall_type="Smart Classroom", capacity=30
    )


# =============================================================================
# Bookings
# =============================================================================
@pytest.fixture
def make_booking(db):
    """Insert a booking directly, bypassing the creation rules."""

    async def _make(hall: Hall, faculty: Profile, **overrides) -> Booking:
        values = {
            "hall_id": hall.id,
            "faculty_id": faculty.id,
            "faculty_name": faculty.name,
            "organizer_name": f"{faculty.department} Association",
            "department": faculty.department,
            "institution_type": "Engineering",
            "event_name": "Guest Lecture",
            "event_date": EVENT_DATE,
            "start_time": time(10, 0),
            "end_time": time(11, 0),
            "attendees_count": 50,
            "hod_name": "Dr. Meena Iyer",
            "status": "pending_hod",
        }
        values.update(overrides)
        booking = Booking(**values)
        db.add(booking)
        await db.commit()
        return booking

    return _make
