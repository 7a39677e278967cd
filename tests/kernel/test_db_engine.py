"""Tests for engine lifecycle and session_scope()."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from workshop_kernel.db.engine import (
    DATABASE_URL_ENV,
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_env,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from workshop_kernel.models.pay_period import PayPeriodModel


@pytest.fixture
def sqlite_engine():
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


def _row(user_id: str) -> PayPeriodModel:
    return PayPeriodModel(
        user_id=user_id,
        start_date=date(2024, 3, 6),
        end_date=date(2024, 3, 20),
        base_salary=Decimal("50000"),
        created_by_id=uuid4(),
    )


def _count() -> int:
    with session_scope() as session:
        return session.execute(select(func.count()).select_from(PayPeriodModel)).scalar_one()


class TestSessionScope:
    def test_commits_on_success(self, sqlite_engine):
        with session_scope() as session:
            session.add(_row("tech-1"))

        assert _count() == 1

    def test_rolls_back_on_error(self, sqlite_engine):
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                session.add(_row("tech-1"))
                session.flush()
                raise RuntimeError("boom")

        assert _count() == 0

    def test_savepoint_rollback_keeps_outer_work(self, sqlite_engine):
        with session_scope() as session:
            session.add(_row("tech-1"))
            savepoint = session.begin_nested()
            session.add(_row("tech-2"))
            session.flush()
            savepoint.rollback()

        assert _count() == 1

    def test_money_round_trips_as_decimal(self, sqlite_engine):
        with session_scope() as session:
            session.add(_row("tech-1"))

        with session_scope() as session:
            stored = session.execute(select(PayPeriodModel)).scalar_one()
            assert stored.base_salary == Decimal("50000")
            assert isinstance(stored.created_by_id, type(uuid4()))


class TestEngineLifecycle:
    def test_accessors_require_init(self):
        reset_engine()
        with pytest.raises(RuntimeError):
            get_engine()
        with pytest.raises(RuntimeError):
            get_session()

    def test_init_from_env(self, monkeypatch):
        monkeypatch.setenv(DATABASE_URL_ENV, "sqlite://")
        try:
            assert init_engine_from_env().dialect.name == "sqlite"
        finally:
            reset_engine()

    def test_init_from_env_requires_variable(self, monkeypatch):
        monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
        with pytest.raises(RuntimeError):
            init_engine_from_env()
