"""Database layer - engine, base classes and column types."""

from workshop_kernel.db.base import Base, TrackedBase, UUIDString
from workshop_kernel.db.engine import (
    build_engine,
    create_tables,
    get_engine,
    get_session,
    init_engine_from_env,
    init_engine_from_url,
    session_scope,
)
from workshop_kernel.db.types import Money, round_money, to_decimal

__all__ = [
    "Base",
    "Money",
    "TrackedBase",
    "UUIDString",
    "build_engine",
    "create_tables",
    "get_engine",
    "get_session",
    "init_engine_from_env",
    "init_engine_from_url",
    "round_money",
    "session_scope",
    "to_decimal",
]
