"""
Shared pytest fixtures for solar summaries tests.

Provides fixtures for:
- In-memory summary store
- Mock database session and identity provider
- Aggregation settings pinned to a known timezone
- Time freezing
"""
import os
from datetime import datetime, time, timezone
from zoneinfo import ZoneInfo

import pytest
from unittest.mock import AsyncMock, MagicMock

# Test environment configuration
os.environ.setdefault("ENVIRONMENT", "test")

from solar_summaries.config import AggregationSettings  # noqa: E402
from tests.fakes import InMemorySummaryStore  # noqa: E402


COLOMBO = ZoneInfo("Asia/Colombo")


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def colombo():
    """Asia/Colombo zone (UTC+05:30, no DST)."""
    return COLOMBO


@pytest.fixture
def local_dt(colombo):
    """
    Build an aware datetime in Colombo local time.

    Usage:
        local_dt(2024, 3, 10, 14)  # 14:00 local
    """
    def _build(year, month, day, hour=12, minute=0):
        return datetime(year, month, day, hour, minute, tzinfo=colombo)
    return _build


@pytest.fixture
def freeze_time():
    """
    Fixture for freezing time in tests.

    Usage:
        def test_something(freeze_time):
            with freeze_time("2024-03-10 12:00:00"):
                # time is frozen
    """
    from freezegun import freeze_time as _freeze_time
    return _freeze_time


# ============================================================================
# Settings Fixtures
# ============================================================================

@pytest.fixture
def aggregation_settings():
    """Aggregation settings independent of the environment."""
    return AggregationSettings(
        default_timezone="Asia/Colombo",
        device_timezones={},
        finalize_cutoff=time(23, 0),
        scheduled_days=2,
        backfill_days=30,
        live_retention_days=14,
        prune_enabled=True,
    )


# ============================================================================
# Store / Session Fixtures
# ============================================================================

@pytest.fixture
def store():
    """Empty in-memory summary store."""
    return InMemorySummaryStore()


@pytest.fixture
def mock_db_session():
    """
    Mock database session for repository unit tests.

    Returns an AsyncMock that can be configured per test.
    """
    session = AsyncMock()
    result = MagicMock()
    result.scalars.return_value.all.return_value = []
    result.all.return_value = []
    result.rowcount = 0
    session.execute = AsyncMock(return_value=result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def mock_identity():
    """Mock identity provider."""
    identity = AsyncMock()
    identity.verify_token = AsyncMock(return_value=None)
    identity.get_user = AsyncMock()
    identity.list_users = AsyncMock(return_value=[])
    identity.update_user_metadata = AsyncMock()
    identity.delete_user = AsyncMock(return_value=None)
    return identity


@pytest.fixture
def utc_clock():
    """
    Build a fixed clock returning the given UTC instant.

    Usage:
        service = DailySummaryService(store, settings, clock=utc_clock(2024, 3, 10, 12))
    """
    def _build(year, month, day, hour=0, minute=0):
        instant = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
        return lambda: instant
    return _build
