"""
Pytest configuration and fixtures.
"""

import itertools
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cvm_capital.auth.jwt import COOKIE_NAME, create_access_token
from cvm_capital.db import get_db
from cvm_capital.main import app
from cvm_capital.models import (
    AccountingPeriod,
    Base,
    EntryKind,
    Investor,
    Partner,
    User,
    UserRole,
)
from cvm_capital.services import ledger, periods, profit_config
from cvm_capital.utils.password import hash_password

# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "secret123"


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


class Factory:
    """Creates accounts, entries and periods in the test session."""

    _counter = itertools.count(1)

    def __init__(self, db: AsyncSession):
        self.db = db

    async def admin(self, role: UserRole = UserRole.ADMIN) -> User:
        n = next(self._counter)
        user = User(
            username=f"{role.value}{n}",
            password_hash=hash_password(TEST_PASSWORD),
            role=role,
            display_name=f"Staff {n}",
            is_active=True,
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def investor(
        self,
        deposit: Optional[str] = None,
        first_name: str = "Investor",
        with_password: bool = False,
    ) -> Investor:
        n = next(self._counter)
        investor = Investor(
            first_name=first_name,
            last_name=str(n),
            email=f"investor{n}@example.com",
            password_hash=hash_password(TEST_PASSWORD) if with_password else None,
        )
        self.db.add(investor)
        await self.db.flush()
        if deposit:
            await self.entry(investor, EntryKind.DEPOSIT, deposit)
        return investor

    async def partner(
        self,
        deposit: Optional[str] = None,
        active: bool = True,
        with_password: bool = False,
    ) -> Partner:
        n = next(self._counter)
        partner = Partner(
            name=f"Partner {n}",
            username=f"partner{n}",
            password_hash=hash_password(TEST_PASSWORD) if with_password else None,
            is_active=active,
        )
        self.db.add(partner)
        await self.db.flush()
        if deposit:
            await self.entry(partner, EntryKind.DEPOSIT, deposit)
        return partner

    async def entry(self, owner, kind: EntryKind, amount: str, period_id: Optional[int] = None):
        return await ledger.append_entry(
            self.db,
            owner_id=owner.id,
            owner_kind=owner.kind,
            kind=kind,
            amount=Decimal(amount),
            period_id=period_id,
        )

    async def period(
        self,
        sequence_number: int = 1,
        month: int = 3,
        year: int = 2025,
        label: Optional[str] = None,
    ) -> AccountingPeriod:
        start, end, month_label = periods.month_range(month, year)
        return await periods.create_period(
            self.db, sequence_number, label or month_label, start, end
        )

    async def dated_period(self, sequence_number: int, start: date, end: date, label: str = "Custom"):
        return await periods.create_period(self.db, sequence_number, label, start, end)

    async def config(self, proportional: str = "70", exclusive: str = "30"):
        return await profit_config.save_config(
            self.db, Decimal(proportional), Decimal(exclusive)
        )


@pytest_asyncio.fixture
async def factory(db_session):
    return Factory(db_session)


@pytest_asyncio.fixture
async def client(db_session):
    """HTTP client bound to the app, sharing the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def login_as(client):
    """Returns a function that puts a valid auth cookie on the client."""

    def _login(subject_id: int, role: str) -> None:
        client.cookies.set(COOKIE_NAME, create_access_token(subject_id, role))

    return _login
