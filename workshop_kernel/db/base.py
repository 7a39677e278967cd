"""
Module: workshop_kernel.db.base
Responsibility: Declarative base for the workshop's ORM tables and the
    audit columns every stored row carries.
Architecture position: Kernel > DB.  Imported by models/ only; never imports
    from models/, services/ or outer layers.

Invariants enforced:
    - Primary keys are uuid4 values, stored as 36-character strings so the
      same schema works on SQLite (tests) and PostgreSQL.
    - Python ``Decimal`` annotations map to Numeric(38, 9); money is never a
      float column.
    - Every row records who created it; updates record who changed it.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """``uuid.UUID`` in Python, String(36) in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        date: Date,
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Abstract base adding audit columns.

    ``created_at`` / ``updated_at`` are database timestamps; business times
    such as ``paid_at`` come from the injected Clock and live on the model.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )
    created_by_id: Mapped[UUID] = mapped_column(nullable=False)
    updated_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
