"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh in-memory SQLite database (via aiosqlite) so the
suite runs without a PostgreSQL server. The HTTP client shares the test
session through a `get_db` override, and outbound email is captured by a
recording notifier instead of hitting the email microservice.
"""

from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.session import get_db
from app.core.security import hash_password, get_token_issuer
from app.models.user import User, Tourist, Business, ROLE_TOURIST, ROLE_BUSINESS
from app.models.event import Event, PriceCategory
from app.services.notification_service import get_notifier

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "testpassword123"


class RecordingNotifier:
    """Stands in for EmailNotifier; keeps every dispatched email in memory."""

    def __init__(self):
        self.sent = []

    def dispatch(self, to, subject, content):
        self.sent.append({"to": to, "subject": subject, "content": content})
        return None

    @property
    def pending(self):
        return 0

    async def drain(self):
        return None


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables in a private in-memory database and yield a session on it."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        hide_parameters=True,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, notifier: RecordingNotifier) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB and notifier dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db_session: AsyncSession, name: str, email: str, role: str) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(TEST_PASSWORD),
        role=role,
        contact_no="+15550100",
    )
    db_session.add(user)
    await db_session.flush()
    db_session.add(Tourist(id=user.id) if role == ROLE_TOURIST else Business(id=user.id))
    await db_session.commit()
    await db_session.refresh(user)
    return user


def _headers_for(user: User) -> dict:
    issued = get_token_issuer().issue(user_id=user.id, name=user.name, role=user.role)
    return {"Authorization": f"Bearer {issued.token}"}


@pytest_asyncio.fixture
async def tourist_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Tina Tourist", "tourist@example.com", ROLE_TOURIST)


@pytest_asyncio.fixture
async def other_tourist(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Omar Other", "other@example.com", ROLE_TOURIST)


@pytest_asyncio.fixture
async def business_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Bay Tours", "business@example.com", ROLE_BUSINESS)


@pytest_asyncio.fixture
async def rival_business(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Rival Tours", "rival@example.com", ROLE_BUSINESS)


@pytest_asyncio.fixture
async def tourist_headers(tourist_user: User) -> dict:
    return _headers_for(tourist_user)


@pytest_asyncio.fixture
async def other_tourist_headers(other_tourist: User) -> dict:
    return _headers_for(other_tourist)


@pytest_asyncio.fixture
async def business_headers(business_user: User) -> dict:
    return _headers_for(business_user)


@pytest_asyncio.fixture
async def rival_business_headers(rival_business: User) -> dict:
    return _headers_for(rival_business)


async def _create_event(
    db_session: AsyncSession,
    business: User,
    name: str,
    maximum_count: int,
    prices: list,
    days_ahead: int = 30,
    status: str = "active",
) -> Event:
    event = Event(
        business_id=business.id,
        name=name,
        description="A test event",
        category="Music",
        location="Harbour Stage",
        date=datetime.now(timezone.utc) + timedelta(days=days_ahead),
        maximum_count=maximum_count,
        status=status,
    )
    db_session.add(event)
    await db_session.flush()
    for label, price in prices:
        db_session.add(PriceCategory(event_id=event.id, name=label, price=Decimal(price)))
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, business_user: User) -> Event:
    """10 tickets, a 5.00 general tier and a 12.50 VIP tier."""
    return await _create_event(
        db_session, business_user, "Harbour Concert", 10, [("General", "5.00"), ("VIP", "12.50")]
    )


@pytest_asyncio.fixture
async def other_event(db_session: AsyncSession, business_user: User) -> Event:
    return await _create_event(
        db_session, business_user, "Old Town Walk", 50, [("Standard", "20.00")], days_ahead=10
    )


@pytest_asyncio.fixture
async def inactive_event(db_session: AsyncSession, business_user: User) -> Event:
    return await _create_event(
        db_session, business_user, "Postponed Festival", 100, [("Standard", "8.00")], status="inactive"
    )


async def _price_category_id(db_session: AsyncSession, event: Event, name: str) -> int:
    result = await db_session.execute(
        select(PriceCategory.id).where(PriceCategory.event_id == event.id, PriceCategory.name == name)
    )
    return result.scalar_one()


@pytest_asyncio.fixture
async def general_price_id(db_session: AsyncSession, test_event: Event) -> int:
    return await _price_category_id(db_session, test_event, "General")


@pytest_asyncio.fixture
async def vip_price_id(db_session: AsyncSession, test_event: Event) -> int:
    return await _price_category_id(db_session, test_event, "VIP")
