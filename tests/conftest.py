"""
Test configuration and fixtures for the Portal Home Hub API.
Provides an in-memory database, recording email and payment doubles, test data factories
and authenticated clients.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
import uuid
from datetime import timedelta
from types import SimpleNamespace
from typing import AsyncGenerator, Dict, List, Optional, Tuple

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.main import app
from app.database import Base, get_db
from app.models.user import User, UserType, AdminLevel, ApprovalStatus
from app.models.property import Property, PropertyStatus, ListingType, ListedByType
from app.models.pricing import PricingPlan, PlanType
from app.models.vetting import AgentVetting, VettingStatus
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository
from app.repositories.pricing import PricingRepository
from app.repositories.vetting import VettingRepository
from app.services.auth import AuthService
from app.services.notification import NotificationService
from app.services.payment_gateway import PaymentGatewayClient
from app.utils.datetime_utils import utc_now
from app.utils.dependencies import get_notification_service, get_payment_gateway


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "testpassword123"


class RecordingNotifier(NotificationService):
    """Notification service that keeps sent emails in memory instead of calling the provider."""

    def __init__(self):
        super().__init__(api_url="http://email.test", api_key="test-key")
        self.sent: List[Tuple[str, str, str]] = []

    async def send_email(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        self.sent.append((to, subject, html))
        return True

    def recipients(self) -> List[str]:
        return [to for to, _, _ in self.sent]

    def subjects_for(self, to: str) -> List[str]:
        return [subject for recipient, subject, _ in self.sent if recipient == to]


class RecordingPaymentIntents:
    """Payment-intent service of the Stripe client double; records params and replies with a fixed intent."""

    def __init__(self, calls: List[Dict], intent: Optional[SimpleNamespace] = None, error: Optional[Exception] = None):
        self.calls = calls
        self.intent = intent or SimpleNamespace(id="pi_123", client_secret="pi_123_secret")
        self.error = error

    async def create_async(self, params: Optional[Dict] = None, options: Optional[Dict] = None):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return self.intent


class RecordingStripeClient:
    """Stands in for stripe.StripeClient; only v1.payment_intents is used by the gateway."""

    def __init__(self, calls: List[Dict], **kwargs):
        self.v1 = SimpleNamespace(payment_intents=RecordingPaymentIntents(calls, **kwargs))


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def gateway_requests() -> List[Dict]:
    """Params of every payment intent the gateway double received."""
    return []


@pytest.fixture
def gateway(gateway_requests) -> PaymentGatewayClient:
    """Payment gateway backed by a Stripe client double that accepts every intent."""
    return PaymentGatewayClient(secret_key="sk_test", client=RecordingStripeClient(gateway_requests))


@pytest.fixture
async def client(db_session: AsyncSession, notifier, gateway) -> AsyncGenerator[AsyncClient, None]:
    """Async test client sharing the test session and the recording doubles."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_service] = lambda: notifier
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as async_client:
        yield async_client

    app.dependency_overrides.clear()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create(db_session: AsyncSession, **kwargs) -> User:
        data = {
            "email": f"user-{uuid.uuid4().hex[:8]}@example.com",
            "password": TEST_PASSWORD,
            "first_name": "Test",
            "last_name": "User",
            "phone": "+592 600-0000",
            "user_type": UserType.AGENT,
            "country_id": "GY",
            "is_verified": True,
        }
        data.update(kwargs)
        return await UserRepository(db_session).create_user(data)

    @staticmethod
    async def create_admin(db_session: AsyncSession, level: AdminLevel, country_id: str = "GY", **kwargs) -> User:
        return await UserFactory.create(
            db_session,
            user_type=UserType.ADMIN,
            admin_level=level,
            country_id=country_id,
            first_name=kwargs.pop("first_name", f"{level.value.capitalize()}"),
            last_name=kwargs.pop("last_name", f"Admin {country_id}"),
            **kwargs
        )


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def listing_data(**kwargs) -> Dict:
        data = {
            "title": "Three Bedroom Family Home",
            "description": "Two-storey concrete home with a large yard near schools.",
            "listing_type": ListingType.SALE,
            "property_type": "house",
            "price": 45_000_000,
            "currency": "GYD",
            "bedrooms": 3,
            "bathrooms": 2,
            "region": "Demerara-Mahaica",
            "city": "Georgetown",
            "amenities": ["parking"],
        }
        data.update(kwargs)
        return data

    @staticmethod
    async def create(db_session: AsyncSession, owner: User, **kwargs) -> Property:
        data = PropertyFactory.listing_data(**kwargs)
        data.setdefault("user_id", owner.id)
        data.setdefault("country_id", owner.country_id)
        data.setdefault("status", PropertyStatus.PENDING)
        data.setdefault("listed_by_type", ListedByType.AGENT)
        return await PropertyRepository(db_session).create_property(data)

    @staticmethod
    async def create_draft(db_session: AsyncSession, owner: User, expires_in_days: int = 30, **kwargs) -> Property:
        data = {
            "user_id": owner.id,
            "country_id": owner.country_id,
            "status": PropertyStatus.DRAFT,
            "listing_type": ListingType.SALE,
            "listed_by_type": ListedByType.AGENT,
            "amenities": [],
            "draft_expires_at": utc_now() + timedelta(days=expires_in_days),
        }
        data.update(kwargs)
        return await PropertyRepository(db_session).create_property(data)


class PlanFactory:
    """Factory for creating pricing plans."""

    @staticmethod
    async def create(db_session: AsyncSession, **kwargs) -> PricingPlan:
        data = {
            "plan_name": "Agent Basic Monthly",
            "user_type": UserType.AGENT,
            "plan_type": PlanType.SUBSCRIPTION,
            "price": 1_500_000,
            "country_id": "GY",
            "features": ["10 active listings"],
            "display_order": 1,
        }
        data.update(kwargs)
        return await PricingRepository(db_session).create(data)


class VettingFactory:
    """Factory for agent applications."""

    @staticmethod
    async def create(db_session: AsyncSession, agent: User, **kwargs) -> AgentVetting:
        data = {
            "user_id": agent.id,
            "first_name": agent.first_name,
            "last_name": agent.last_name,
            "email": agent.email,
            "phone": agent.phone,
            "company_name": "Coastal Realty",
            "license_number": "LIC-001",
            "country_id": agent.country_id,
            "status": VettingStatus.PENDING_REVIEW,
            "submitted_at": utc_now(),
        }
        data.update(kwargs)
        return await VettingRepository(db_session).create(data)


# User fixtures
@pytest.fixture
async def test_agent(db_session: AsyncSession) -> User:
    """Vetted agent in Guyana."""
    return await UserFactory.create(
        db_session, email="agent@example.com", first_name="Alice", last_name="Agent"
    )


@pytest.fixture
async def unverified_agent(db_session: AsyncSession) -> User:
    return await UserFactory.create(
        db_session, email="newagent@example.com", first_name="Nina", last_name="Newcomer", is_verified=False
    )


@pytest.fixture
async def other_agent(db_session: AsyncSession) -> User:
    return await UserFactory.create(
        db_session, email="other@example.com", first_name="Oscar", last_name="Other"
    )


@pytest.fixture
async def jm_agent(db_session: AsyncSession) -> User:
    return await UserFactory.create(
        db_session, email="jmagent@example.com", first_name="Jerome", last_name="Kingston", country_id="JM"
    )


@pytest.fixture
async def approved_landlord(db_session: AsyncSession) -> User:
    return await UserFactory.create(
        db_session,
        email="landlord@example.com",
        first_name="Lara",
        last_name="Landlord",
        user_type=UserType.LANDLORD,
        approval_status=ApprovalStatus.APPROVED,
    )


@pytest.fixture
async def pending_owner(db_session: AsyncSession) -> User:
    """FSBO owner waiting for account approval."""
    return await UserFactory.create(
        db_session,
        email="owner@example.com",
        first_name="Omar",
        last_name="Owner",
        user_type=UserType.OWNER,
        approval_status=ApprovalStatus.PENDING,
        is_verified=False,
    )


@pytest.fixture
async def super_admin(db_session: AsyncSession) -> User:
    return await UserFactory.create_admin(db_session, AdminLevel.SUPER, email="super@example.com")


@pytest.fixture
async def gy_owner_admin(db_session: AsyncSession) -> User:
    return await UserFactory.create_admin(db_session, AdminLevel.OWNER, email="gyowner@example.com")


@pytest.fixture
async def gy_basic_admin(db_session: AsyncSession) -> User:
    return await UserFactory.create_admin(db_session, AdminLevel.BASIC, email="gybasic@example.com")


@pytest.fixture
async def jm_owner_admin(db_session: AsyncSession) -> User:
    return await UserFactory.create_admin(db_session, AdminLevel.OWNER, country_id="JM", email="jmowner@example.com")


@pytest.fixture
async def pending_property(db_session: AsyncSession, test_agent: User) -> Property:
    return await PropertyFactory.create(db_session, test_agent)


@pytest.fixture
async def active_property(db_session: AsyncSession, test_agent: User) -> Property:
    return await PropertyFactory.create(
        db_session, test_agent, title="Modern Apartment in Kitty", status=PropertyStatus.ACTIVE
    )


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header with a fresh access token for the user."""
    access_token, _ = AuthService(None).create_tokens(user)
    return {"Authorization": f"Bearer {access_token}"}
