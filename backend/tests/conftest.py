# backend/tests/conftest.py
"""
Shared fixtures: a fresh in-memory SQLite store per test.

Services commit, so each test gets its own engine instead of a rolled-back
outer transaction.
"""

from datetime import date
import os

# Must be set before rehome_ops.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("IS_TESTING", "true")
os.environ.setdefault("CITY_UNIVERSE", "Amsterdam,Utrecht,Rotterdam")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rehome_ops.core.config import Settings
from rehome_ops.database import Base

# Import models so Base.metadata is populated for create_all.
import rehome_ops.models  # noqa: F401
from rehome_ops.services.availability_service import AvailabilityService
from rehome_ops.services.schedule_editor import ScheduleEditorService

TEST_CITIES = ["Amsterdam", "Utrecht", "Rotterdam"]


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(db_engine) -> Session:
    SessionLocal = sessionmaker(bind=db_engine, expire_on_commit=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def today() -> date:
    return date(2025, 6, 15)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        city_universe=TEST_CITIES,
        business_timezone="Europe/Amsterdam",
        schedule_horizon_same_year=True,
        schedule_horizon_max_days=366,
        max_calendar_year_offset=10,
        is_testing=True,
    )


@pytest.fixture
def availability_service(db, test_settings, today) -> AvailabilityService:
    return AvailabilityService(db, config=test_settings, today_provider=lambda: today)


@pytest.fixture
def editor(db, test_settings) -> ScheduleEditorService:
    return ScheduleEditorService(db, config=test_settings)
