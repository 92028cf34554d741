#!/usr/bin/env python3
"""
Database management script.
Creates, drops and resets tables and seeds default pricing plans and a super admin.
"""

import asyncio
import argparse
import getpass
import logging
import sys
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from app.config import settings
from app.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from app.models.pricing import PricingPlan, PlanType
from app.models.user import User, UserType, AdminLevel
from app.repositories.user import UserRepository

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _plan(country_id: str, user_type: UserType, plan_name: str, price: int, **extra: Any) -> Dict[str, Any]:
    return {
        "country_id": country_id,
        "user_type": user_type,
        "plan_name": plan_name,
        "price": price,
        "plan_type": extra.pop("plan_type", PlanType.SUBSCRIPTION),
        **extra,
    }


# Prices in minor units of the country currency
DEFAULT_PLANS: List[Dict[str, Any]] = [
    _plan("GY", UserType.AGENT, "Agent Basic Monthly", 1500000, max_properties=10,
          listing_duration_days=30, features=["10 active listings", "Email support"], display_order=1),
    _plan("GY", UserType.AGENT, "Agent Pro Monthly", 3500000, max_properties=50,
          listing_duration_days=30, featured_listings_included=3, is_popular=True,
          features=["50 active listings", "3 featured listings", "Priority support"], display_order=2),
    _plan("GY", UserType.LANDLORD, "Landlord Rental Listing", 500000, plan_type=PlanType.PROPERTY_LISTING,
          max_properties=1, listing_duration_days=60, features=["1 rental listing", "60 days"], display_order=1),
    _plan("GY", UserType.OWNER, "FSBO Basic Listing", 1000000, plan_type=PlanType.PROPERTY_LISTING,
          max_properties=1, listing_duration_days=90, features=["1 sale listing", "90 days"], display_order=1),
    _plan("GY", UserType.OWNER, "FSBO Premium Listing", 2000000, plan_type=PlanType.PROPERTY_LISTING,
          max_properties=1, listing_duration_days=90, featured_listings_included=1, is_popular=True,
          features=["1 sale listing", "Featured placement", "90 days"], display_order=2),
    _plan("GY", UserType.AGENT, "Featured Upgrade +30 days", 500000, plan_type=PlanType.FEATURED_UPGRADE,
          listing_duration_days=30, display_order=99),
    _plan("JM", UserType.AGENT, "Agent Basic Monthly - Jamaica", 1200000, max_properties=10,
          listing_duration_days=30, features=["10 active listings", "Email support"], display_order=1),
    _plan("JM", UserType.OWNER, "FSBO Basic Listing - Jamaica", 1500000, plan_type=PlanType.PROPERTY_LISTING,
          max_properties=1, listing_duration_days=90, features=["1 sale listing", "90 days"], display_order=1),
    _plan("JM", UserType.OWNER, "FSBO Premium Listing - Jamaica", 3000000, plan_type=PlanType.PROPERTY_LISTING,
          max_properties=1, listing_duration_days=90, featured_listings_included=1, is_popular=True,
          features=["1 sale listing", "Featured placement", "90 days"], display_order=2),
]


async def seed_pricing_plans() -> int:
    """Insert default plans that don't exist yet (matched on country and plan name)."""
    created = 0
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(PricingPlan.country_id, PricingPlan.plan_name))
        existing = {(row.country_id, row.plan_name) for row in result}

        for plan_data in DEFAULT_PLANS:
            if (plan_data["country_id"], plan_data["plan_name"]) in existing:
                continue
            session.add(PricingPlan(**plan_data))
            created += 1

        await session.commit()

    logger.info(f"Pricing plans seeded: {created} created, {len(DEFAULT_PLANS) - created} already present")
    return created


async def seed_super_admin(email: str, password: str, country_id: str) -> Optional[User]:
    """Create the first super admin unless the email is already registered."""
    async with AsyncSessionLocal() as session:
        repo = UserRepository(session)
        if await repo.get_by_email(email):
            logger.info(f"User {email} already exists, skipping super admin seed")
            return None

        admin = await repo.create_user({
            "email": email,
            "password": password,
            "first_name": "System",
            "last_name": "Administrator",
            "user_type": UserType.ADMIN,
            "admin_level": AdminLevel.SUPER,
            "country_id": country_id,
            "is_verified": True,
        })
        logger.info(f"Super admin created: {admin.email} ({admin.country_id})")
        return admin


async def reset_database() -> None:
    """Drop and recreate every table."""
    if not settings.is_development and not settings.is_testing:
        raise RuntimeError("Database reset is only allowed in development or test mode")
    logger.warning("Resetting database - all data will be lost!")
    await drop_tables()
    await create_tables()
    logger.info("Database reset completed")


async def _run(args: argparse.Namespace) -> None:
    try:
        if args.command == "create":
            await create_tables()
        elif args.command == "drop":
            await drop_tables()
        elif args.command == "reset":
            await reset_database()
            if args.seed:
                await seed_pricing_plans()
        elif args.command == "seed":
            await seed_pricing_plans()
            if args.admin_email:
                password = args.admin_password or getpass.getpass("Super admin password: ")
                await seed_super_admin(args.admin_email, password, args.admin_country.upper())
    finally:
        await close_db_connection()


def main():
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Portal Home Hub database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")
    subparsers.add_parser("drop", help="Drop all tables (not allowed in production)")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate all tables (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")
    reset_parser.add_argument("--seed", action="store_true", help="Seed default pricing plans afterwards")

    seed_parser = subparsers.add_parser("seed", help="Seed default pricing plans and optionally a super admin")
    seed_parser.add_argument("--admin-email", help="Create a super admin with this email")
    seed_parser.add_argument("--admin-password", help="Password for the super admin (prompted if omitted)")
    seed_parser.add_argument("--admin-country", default=settings.default_country, help="Super admin's country")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "reset" and not args.confirm:
        logger.error("Database reset requires --confirm flag")
        sys.exit(1)

    try:
        asyncio.run(_run(args))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
