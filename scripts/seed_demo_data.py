"""
Seed demo data for CVM Capital.

Usage:
    python scripts/seed_demo_data.py

Or with custom DATABASE_URL:
    DATABASE_URL="postgresql://..." python scripts/seed_demo_data.py

This script creates:
- The administrator account and default profit split (if missing)
- Two investors and three partners (one inactive) with deposits
- A processed period with its profit distribution
- A pending period and one pending withdrawal request
"""

import argparse
import asyncio
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.db import engine, get_db_context
from cvm_capital.main import ensure_initial_data
from cvm_capital.models import (
    EntryKind,
    Investor,
    Partner,
    ParticipantKind,
    RequestKind,
    User,
    UserRole,
)
from cvm_capital.services import approvals, distribution, ledger, periods
from cvm_capital.utils.password import hash_password

DEMO_PASSWORD = "demo123"

DEMO_INVESTORS = [
    {"first_name": "Ana", "last_name": "Souza", "email": "ana@example.com", "deposit": "10000.00"},
    {"first_name": "Bruno", "last_name": "Lima", "email": "bruno@example.com", "deposit": "30000.00"},
]

DEMO_PARTNERS = [
    {"name": "Carla Mendes", "username": "carla", "deposit": "5000.00", "active": True},
    {"name": "Diego Rocha", "username": "diego", "deposit": "5000.00", "active": True},
    {"name": "Eva Prado", "username": "eva", "deposit": "2000.00", "active": False},
]


async def create_investor(db: AsyncSession, data: dict) -> Investor:
    """Create an investor with an opening deposit, or reuse it."""
    result = await db.execute(select(Investor).where(Investor.email == data["email"]))
    investor = result.scalar_one_or_none()
    if investor:
        print(f"Investor {data['email']} already exists")
        return investor

    investor = Investor(
        first_name=data["first_name"],
        last_name=data["last_name"],
        email=data["email"],
        password_hash=hash_password(DEMO_PASSWORD),
    )
    db.add(investor)
    await db.flush()
    await ledger.append_entry(
        db,
        owner_id=investor.id,
        owner_kind=ParticipantKind.INVESTOR,
        kind=EntryKind.DEPOSIT,
        amount=Decimal(data["deposit"]),
        description="Opening deposit",
    )
    print(f"Created investor {investor.display_name} with {data['deposit']}")
    return investor


async def create_partner(db: AsyncSession, data: dict, admin: User) -> Partner:
    """Create a partner with an opening deposit, or reuse it."""
    result = await db.execute(select(Partner).where(Partner.username == data["username"]))
    partner = result.scalar_one_or_none()
    if partner:
        print(f"Partner {data['username']} already exists")
        return partner

    partner = Partner(
        name=data["name"],
        username=data["username"],
        password_hash=hash_password(DEMO_PASSWORD),
        is_active=data["active"],
        created_by_user_id=admin.id,
    )
    db.add(partner)
    await db.flush()
    await ledger.append_entry(
        db,
        owner_id=partner.id,
        owner_kind=ParticipantKind.PARTNER,
        kind=EntryKind.DEPOSIT,
        amount=Decimal(data["deposit"]),
        description="Opening deposit",
    )
    print(f"Created partner {partner.name} ({'active' if partner.is_active else 'inactive'})")
    return partner


async def seed_all(year: int, month: int, profit_percentage: Decimal):
    """Seed all demo data."""
    print("\n=== Creating demo data ===\n")

    async with get_db_context() as db:
        await ensure_initial_data(db)
        admin = await db.scalar(select(User).where(User.role == UserRole.ADMIN).limit(1))

        investors = [await create_investor(db, data) for data in DEMO_INVESTORS]
        for data in DEMO_PARTNERS:
            await create_partner(db, data, admin)
        await db.commit()

        if await periods.get_pending_period(db) is not None or await periods.list_periods(db):
            print("\nPeriods already exist; skipping distribution")
            return

        start, end, label = periods.month_range(month, year)
        period = await periods.create_period(db, 1, label, start, end, user_id=admin.id)
        await db.commit()

        result = await distribution.commit_distribution(
            db, period.id, profit_percentage, user_id=admin.id
        )
        print(f"\nProcessed {label}: gross profit {result.preview.gross_profit}")
        for allocation in result.preview.allocations:
            print(f"  - {allocation.name}: {allocation.total}")

        next_month = month % 12 + 1
        next_year = year + (1 if month == 12 else 0)
        start, end, label = periods.month_range(next_month, next_year)
        await periods.create_period(db, 2, label, start, end, user_id=admin.id)

        await approvals.submit_request(
            db,
            owner_kind=ParticipantKind.INVESTOR,
            owner_id=investors[0].id,
            kind=RequestKind.WITHDRAWAL,
            amount=Decimal("500.00"),
            note="Demo withdrawal",
        )
        await db.commit()

    await engine.dispose()

    print("\n" + "=" * 50)
    print("DEMO DATA CREATED SUCCESSFULLY!")
    print("=" * 50)
    print(f"""
Logins (password {DEMO_PASSWORD}):
  - Investors: {', '.join(d['email'] for d in DEMO_INVESTORS)}
  - Partners: {', '.join(d['username'] for d in DEMO_PARTNERS)}
    """)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo data for CVM Capital")
    parser.add_argument("--year", type=int, default=2025, help="Year of the processed period")
    parser.add_argument("--month", type=int, default=3, help="Month of the processed period")
    parser.add_argument("--profit", type=Decimal, default=Decimal("10"), help="Profit percentage")

    args = parser.parse_args()

    asyncio.run(seed_all(year=args.year, month=args.month, profit_percentage=args.profit))
