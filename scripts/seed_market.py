#!/usr/bin/env python3
"""
Seed market reference data and, optionally, an admin account.

This script:
1. Inserts the default commodities if the table is empty
2. Inserts the default mandi prices if the table is empty
3. Creates a verified admin account when --admin-email is given

Usage:
  python scripts/seed_market.py [--admin-email admin@example.com --admin-password secret]

Run `alembic upgrade head` first so the tables exist.
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from agrimandi.config.settings import get_settings
from agrimandi.domain.models.account import Account
from agrimandi.domain.models.commodity import Commodity
from agrimandi.domain.models.mandi_price import MandiPrice
from agrimandi.domain.value_objects.role import Role
from agrimandi.infrastructure.auth.password import PasswordHasher
from agrimandi.infrastructure.db.session import (
    SQLAlchemyUnitOfWork,
    create_engine,
    create_session_factory,
)

DEFAULT_COMMODITIES = [
    ("Wheat", Decimal("2150")),
    ("Rice", Decimal("1800")),
    ("Onion", Decimal("1500")),
    ("Potato", Decimal("2500")),
]

# state, district, crop, today, yesterday
DEFAULT_MANDI_PRICES = [
    ("Maharashtra", "Pune", "Wheat", Decimal("2150"), Decimal("2120")),
    ("Maharashtra", "Pune", "Rice", Decimal("1800"), Decimal("1820")),
    ("Maharashtra", "Nashik", "Onion", Decimal("1500"), Decimal("1480")),
    ("Karnataka", "Bengaluru", "Potato", Decimal("2500"), Decimal("2550")),
]


async def seed(admin_email: str | None, admin_password: str | None, admin_name: str) -> None:
    settings = get_settings()
    engine = create_engine(settings.database_url)
    session_factory = create_session_factory(engine)

    try:
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            if await uow.commodities.count() == 0:
                for name, price in DEFAULT_COMMODITIES:
                    await uow.commodities.add(Commodity.create(name=name, price=price))
                print(f"✅ Seeded {len(DEFAULT_COMMODITIES)} commodities")
            else:
                print("ℹ️  Commodities already present, skipping")

            if await uow.mandi_prices.count() == 0:
                for state, district, crop, today, yesterday in DEFAULT_MANDI_PRICES:
                    await uow.mandi_prices.add(
                        MandiPrice.create(
                            state=state,
                            district=district,
                            crop=crop,
                            today_price=today,
                            yesterday_price=yesterday,
                        )
                    )
                print(f"✅ Seeded {len(DEFAULT_MANDI_PRICES)} mandi prices")
            else:
                print("ℹ️  Mandi prices already present, skipping")

            if admin_email:
                existing = await uow.accounts.get_by_email(admin_email)
                if existing:
                    print(f"ℹ️  Account {admin_email} already exists (role: {existing.role.value})")
                else:
                    account = Account.create(
                        name=admin_name,
                        email=admin_email,
                        hashed_password=PasswordHasher().hash(admin_password),
                        role=Role.ADMIN,
                        is_verified=True,
                    )
                    await uow.accounts.add(account)
                    print(f"✅ Created admin account {account.email} (ID: {account.id})")

            await uow.commit()
    except Exception as exc:
        print(f"\n❌ Error seeding data: {exc}")
        import traceback

        traceback.print_exc()
        sys.exit(1)
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed commodities, mandi prices and an admin")
    parser.add_argument("--admin-email", help="Create a verified admin with this email")
    parser.add_argument("--admin-password", help="Password for the admin account")
    parser.add_argument("--admin-name", default="Administrator", help="Display name for the admin")
    args = parser.parse_args()

    if args.admin_email and not args.admin_password:
        parser.error("--admin-password is required with --admin-email")

    asyncio.run(seed(args.admin_email, args.admin_password, args.admin_name))


if __name__ == "__main__":
    main()
