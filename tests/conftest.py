from datetime import datetime, timedelta, timezone
from typing import Iterable

import uuid

import pytest
from jose import jwt
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.core.realtime import LiveSessionHub
from app.core.security import ACCESS_TOKEN_TYPE
from app.database import get_db, init_db
from app.models.order import Order
from app.models.user import User, UserRole
from app.services.customer_emails import CustomerMailer
from app.services.admin_notifications import (
    Channel,
    ChannelAdapter,
    DatabaseSettingsProvider,
    DeliveryOutcome,
    NotificationDispatcher,
    SettingsSnapshot,
    SettingsUnavailable,
    WallChannel,
)


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class RecordingEmailChannel(ChannelAdapter):
    """Email channel that records calls and fails for chosen addresses."""

    channel = Channel.EMAIL

    def __init__(self, fail_for: Iterable[str] = ()):
        self.fail_for = set(fail_for)
        self.calls = []

    async def deliver(self, event_type, recipient, payload):
        self.calls.append((event_type, recipient.email, payload))
        if recipient.email in self.fail_for:
            return DeliveryOutcome.failed("Recipient rejected")
        return DeliveryOutcome.ok()


class RecordingWallChannel(ChannelAdapter):
    channel = Channel.WALL

    def __init__(self, fail_for: Iterable[str] = ()):
        self.fail_for = set(fail_for)
        self.calls = []

    def accepts(self, recipient):
        return recipient.has_wall

    async def deliver(self, event_type, recipient, payload):
        self.calls.append((event_type, recipient.user_id, payload))
        if recipient.email in self.fail_for:
            return DeliveryOutcome.failed("Could not store wall notification")
        return DeliveryOutcome.ok()


class RecordingEmailService:
    """Stands in for the SMTP transport; records each send."""

    def __init__(self, result=(True, None), raises: Exception = None):
        self.result = result
        self.raises = raises
        self.sent = []

    @property
    def is_configured(self):
        return True

    def send_email(self, to_email, subject, html_content, text_content=None):
        self.sent.append({"to": to_email, "subject": subject, "html": html_content, "text": text_content})
        if self.raises is not None:
            raise self.raises
        return self.result


class StaticSettingsProvider:
    def __init__(self, snapshot: SettingsSnapshot):
        self.snapshot = snapshot
        self.calls = 0

    async def get_snapshot(self):
        self.calls += 1
        return self.snapshot


class UnavailableSettingsProvider:
    async def get_snapshot(self):
        raise SettingsUnavailable("database is down")


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so concurrent sessions see each other's commits."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def create_user(session: AsyncSession, name: str, email: str, role: str = UserRole.CUSTOMER.value, is_active: bool = True) -> User:
    user = User(name=name, email=email, role=role, is_active=is_active)
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def customer(db):
    return await create_user(db, "Asha Customer", "asha@example.com")


@pytest.fixture
async def other_customer(db):
    return await create_user(db, "Ravi Customer", "ravi@example.com")


@pytest.fixture
async def admin(db):
    return await create_user(db, "Meera Admin", "meera@skyelectro.test", role=UserRole.ADMIN.value)


@pytest.fixture
async def second_admin(db):
    return await create_user(db, "Kiran Admin", "kiran@skyelectro.test", role=UserRole.ADMIN.value)


async def set_order_state(session_factory, order_id, status: str, updated_at: datetime = None) -> None:
    """Move an order directly, bypassing the transition map."""
    async with session_factory() as session:
        await session.execute(
            update(Order)
            .where(Order.id == uuid.UUID(str(order_id)))
            .values(status=status, updated_at=updated_at or datetime.now(timezone.utc))
        )
        await session.commit()


def create_access_token(user_id, token_type: str = ACCESS_TOKEN_TYPE, expires_in: timedelta = timedelta(minutes=30)) -> str:
    """Sign a token the way the account service does."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "type": token_type,
        "iat": now,
        "exp": now + expires_in,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


@pytest.fixture
def email_channel():
    return RecordingEmailChannel()


@pytest.fixture
def live_sessions():
    return LiveSessionHub()


@pytest.fixture
def dispatcher(session_factory, email_channel, live_sessions):
    return NotificationDispatcher(
        settings_provider=DatabaseSettingsProvider(session_factory),
        channels=[email_channel, WallChannel(session_factory, live_sessions)],
        fallback_email="owner@skyelectro.test",
        delivery_timeout=5.0,
    )


@pytest.fixture
def customer_email_service():
    return RecordingEmailService()


@pytest.fixture
def customer_mailer(customer_email_service):
    return CustomerMailer(customer_email_service)


@pytest.fixture
async def client(session_factory, dispatcher, live_sessions, customer_mailer):
    from app.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.state.notification_dispatcher = dispatcher
    app.state.live_sessions = live_sessions
    app.state.customer_mailer = customer_mailer
    app.state.session_factory = session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()
