"""
Pytest fixtures for the workshop test suite.

Provides:
- In-memory SQLite sessions with the pay_periods table created
- A deterministic clock pinned to 2024-03-12 12:00 UTC
- The packaged default configuration
- Structured-log capture
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from workshop_config import WorkshopConfig, get_active_config
from workshop_engines.pay_period import PayPeriodResolver
from workshop_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from workshop_kernel.domain.clock import DeterministicClock
from workshop_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from workshop_kernel.services.pay_period_service import PayPeriodService

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

FIXED_NOW = datetime(2024, 3, 12, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture workshop_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            assert any(r["message"] == "pay_period_paid" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("workshop_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Time and configuration
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def config() -> WorkshopConfig:
    return get_active_config()


@pytest.fixture
def test_actor_id():
    return TEST_ACTOR_ID


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Fresh in-memory database per test; the session is rolled back at the end."""
    init_engine_from_url("sqlite://")
    create_tables()
    db_session = get_session()
    try:
        yield db_session
    finally:
        db_session.rollback()
        db_session.close()
        drop_tables()
        reset_engine()


@pytest.fixture
def pay_period_service(session, clock) -> PayPeriodService:
    return PayPeriodService(session, PayPeriodResolver(), clock)


@pytest.fixture
def base_salary() -> Decimal:
    return Decimal("50000")
