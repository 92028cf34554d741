"""
Tests for database models.
Tests model behavior, validation and serialization.
"""

import pytest
from datetime import timedelta
from sqlalchemy import BigInteger

from app.models.user import User, UserType, AdminLevel, ApprovalStatus
from app.models.property import Property, PropertyStatus, ListedByType
from app.models.pricing import PricingPlan, PlanType
from app.models.payment import PaymentReference, ReferenceStatus
from app.utils.datetime_utils import utc_now
from tests.conftest import UserFactory, PropertyFactory, TEST_PASSWORD


class TestUserModel:
    """Test User model functionality."""

    @pytest.mark.asyncio
    async def test_create_user_hashes_password(self, db_session):
        user = await UserFactory.create(db_session, email="Hash.Test@Example.com")

        assert user.id is not None
        assert user.email == "hash.test@example.com"
        assert user.hashed_password != TEST_PASSWORD
        assert user.verify_password(TEST_PASSWORD) is True
        assert user.verify_password("wrongpassword") is False

    def test_validate_email_format(self):
        assert User.validate_email_format("Agent@Example.COM") == "agent@example.com"
        with pytest.raises(ValueError):
            User.validate_email_format("not-an-email")

    def test_short_password_is_rejected(self):
        with pytest.raises(ValueError):
            User.hash_password("short")

    def test_admin_flags(self):
        admin = User(user_type=UserType.ADMIN, admin_level=AdminLevel.SUPER)
        levelless = User(user_type=UserType.ADMIN, admin_level=None)
        agent = User(user_type=UserType.AGENT)

        assert admin.is_admin and admin.is_super_admin
        assert not levelless.is_admin
        assert not agent.is_admin

    def test_account_approval_applies_to_landlords_and_owners(self):
        assert User(user_type=UserType.LANDLORD).requires_account_approval
        assert User(user_type=UserType.OWNER).requires_account_approval
        assert not User(user_type=UserType.AGENT).requires_account_approval

    @pytest.mark.asyncio
    async def test_to_dict_excludes_password(self, db_session):
        user = await UserFactory.create(
            db_session, user_type=UserType.LANDLORD, approval_status=ApprovalStatus.PENDING
        )
        data = user.to_dict()

        assert "hashed_password" not in data
        assert data["user_type"] == "landlord"
        assert data["approval_status"] == "pending"
        assert data["full_name"] == "Test User"
        assert data["subscription_status"] == "none"


class TestPropertyModel:
    """Test Property model functionality."""

    @pytest.mark.asyncio
    async def test_public_statuses(self, db_session, test_agent):
        active = await PropertyFactory.create(db_session, test_agent, status=PropertyStatus.ACTIVE)
        pending = await PropertyFactory.create(db_session, test_agent)

        assert active.is_public
        assert not pending.is_public

    def test_missing_required_fields_in_order(self):
        draft = Property(status=PropertyStatus.DRAFT, title="Beach house", price=100, city="  ")
        assert draft.missing_required_fields() == [
            "description", "property_type", "bedrooms", "bathrooms", "region", "city"
        ]

    def test_validate_all_rejects_out_of_range_values(self):
        with pytest.raises(ValueError, match="price"):
            Property(price=0).validate_all()
        with pytest.raises(ValueError, match="bedrooms"):
            Property(bedrooms=51).validate_all()
        with pytest.raises(ValueError, match="House size"):
            Property(house_size_value=-5).validate_all()
        Property(price=1, bedrooms=0, bathrooms=50).validate_all()

    def test_draft_expiry(self):
        now = utc_now()
        expired = Property(status=PropertyStatus.DRAFT, draft_expires_at=now - timedelta(minutes=1))
        fresh = Property(status=PropertyStatus.DRAFT, draft_expires_at=now + timedelta(days=1))
        published = Property(status=PropertyStatus.PENDING, draft_expires_at=now - timedelta(days=1))

        assert expired.is_draft_expired(now)
        assert not fresh.is_draft_expired(now)
        assert not published.is_draft_expired(now)

    def test_draft_summary(self):
        assert Property(property_type="house", location="Bel Air", price=500).draft_summary() == "house • Bel Air • $500"
        assert Property().draft_summary() == "Incomplete Draft"

    @pytest.mark.asyncio
    async def test_price_above_int32_range(self, db_session, test_agent):
        assert isinstance(Property.__table__.c.price.type, BigInteger)

        prop = await PropertyFactory.create(db_session, test_agent, price=9_500_000_000)
        await db_session.refresh(prop)
        assert prop.price == 9_500_000_000

    @pytest.mark.asyncio
    async def test_to_dict(self, db_session, test_agent):
        prop = await PropertyFactory.create(db_session, test_agent, listed_by_type=ListedByType.AGENT)
        data = prop.to_dict()

        assert data["status"] == "pending"
        assert data["listed_by_type"] == "agent"
        assert data["country_id"] == "GY"
        assert data["user_id"] == str(test_agent.id)
        assert data["amenities"] == ["parking"]


class TestPricingPlanModel:

    @pytest.mark.parametrize("name,plan_type,internal", [
        ("Agent Basic Monthly", PlanType.SUBSCRIPTION, False),
        ("Admin Comp Plan", PlanType.SUBSCRIPTION, True),
        ("Featured Upgrade +30 days", PlanType.SUBSCRIPTION, True),
        ("Spotlight", PlanType.FEATURED_UPGRADE, True),
    ])
    def test_internal_plans(self, name, plan_type, internal):
        assert PricingPlan(plan_name=name, plan_type=plan_type).is_internal is internal


class TestPaymentReferenceModel:

    def test_is_expired(self):
        now = utc_now()
        reference = PaymentReference(status=ReferenceStatus.PENDING, expires_at=now - timedelta(seconds=1))
        assert reference.is_expired(now)
        reference.expires_at = now + timedelta(hours=1)
        assert not reference.is_expired(now)
