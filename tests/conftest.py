"""Pytest configuration and fixtures."""
import os
import uuid
from datetime import datetime, UTC
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Ensure the economy core uses a dedicated SQLite database during tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_DIR"] = "logs/test"

from profile_economy.config import get_settings
from profile_economy.models import Account
from profile_economy.services.catalog import build_catalog


BASE_DIR = Path(__file__).resolve().parent.parent
TEST_DB_PATH = BASE_DIR / "test.db"
settings = get_settings()


class FixedClock:
    """Settable clock for services that take ``clock=``."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply database migrations against the test database."""
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()

    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    command.upgrade(alembic_cfg, "head")

    yield

    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            # Still open on some platforms; removed on the next run
            pass


@pytest.fixture
async def test_engine():
    """Engine on the migrated test database."""
    engine = create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,
    )

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Independent sessions, one per simulated request."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()
        await session.close()


@pytest.fixture
def catalog():
    return build_catalog()


@pytest.fixture
def fixed_clock():
    return FixedClock(datetime(2025, 3, 14, 15, 30, tzinfo=UTC))


@pytest.fixture
async def account_factory(session_factory):
    """Factory for committed test accounts with chosen balances."""

    async def _create_account(
        reputation: int = 0,
        spendable_xp: int = 0,
        experience: int = 0,
        achievements: dict | None = None,
        free_gift_credits: int = 0,
    ) -> uuid.UUID:
        account_id = uuid.uuid4()
        async with session_factory() as session:
            session.add(Account(
                account_id=account_id,
                display_name=f"tester_{account_id.hex[:8]}",
                reputation=reputation,
                spendable_xp=spendable_xp,
                experience=experience,
                achievements=achievements or {},
                free_gift_credits=free_gift_credits,
            ))
            await session.commit()
        return account_id

    return _create_account
