"""
Module: workshop_kernel.models.pay_period
Responsibility: ORM persistence for worker pay periods -- the stored result
    of a payroll aggregation run and its payment status.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - One row per (user_id, start_date, end_date) (uq_pay_period_user_range):
      the idempotent upsert key.
    - status only advances OPEN -> CALCULATED -> PAID (enforced by
      PayPeriodService; the PAID write is a conditional UPDATE).
    - pay_period_events holds exactly the events the latest calculation
      included, one row per (pay_period_id, event_id).

Failure modes:
    - IntegrityError on a duplicate (user, range) insert racing another
      writer; PayPeriodService re-reads and updates instead.

Audit relevance:
    paid_at / paid_by_id record who confirmed a payment and when.  Once a
    row is PAID its totals are never rewritten.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop_kernel.db.base import Base, TrackedBase, UUIDString
from workshop_kernel.db.types import Money
from workshop_kernel.domain.pay_period import PayPeriodInfo, PayPeriodStatus, PeriodEventRef
from workshop_kernel.domain.time_range import TimeRange


class PayPeriodModel(TrackedBase):
    """
    Stored pay period for one worker.

    Guarantees:
        - start_date <= end_date (ranges come from TimeRange).
        - Money columns are Numeric(38, 9); never float.
    """

    __tablename__ = "pay_periods"

    __table_args__ = (
        UniqueConstraint(
            "user_id", "start_date", "end_date", name="uq_pay_period_user_range"
        ),
        Index("idx_pay_period_status", "status"),
        Index("idx_pay_period_user", "user_id"),
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Period boundaries (inclusive)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    base_salary: Mapped[Money] = mapped_column(nullable=False)
    total_additions: Mapped[Money] = mapped_column(nullable=False, default=Decimal("0"))
    total_deductions: Mapped[Money] = mapped_column(nullable=False, default=Decimal("0"))
    final_amount: Mapped[Money] = mapped_column(nullable=False, default=Decimal("0"))
    event_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(
        String(20),
        default=PayPeriodStatus.OPEN.value,
        nullable=False,
    )

    calculated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    paid_by_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    events: Mapped[list["PayPeriodEventModel"]] = relationship(
        "PayPeriodEventModel",
        back_populates="pay_period",
        cascade="all, delete-orphan",
        order_by=lambda: [PayPeriodEventModel.event_date, PayPeriodEventModel.event_id],
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<PayPeriodModel {self.user_id} "
            f"{self.start_date}..{self.end_date}: {self.status}>"
        )

    @property
    def range(self) -> TimeRange:
        return TimeRange(self.start_date, self.end_date)

    @property
    def is_paid(self) -> bool:
        return self.status == PayPeriodStatus.PAID.value

    def to_dto(self) -> PayPeriodInfo:
        return PayPeriodInfo(
            id=self.id,
            user_id=self.user_id,
            range=self.range,
            base_salary=self.base_salary,
            total_additions=self.total_additions,
            total_deductions=self.total_deductions,
            final_amount=self.final_amount,
            event_count=self.event_count,
            status=PayPeriodStatus(self.status),
            calculated_at=self.calculated_at,
            paid_at=self.paid_at,
            paid_by_id=self.paid_by_id,
            events=tuple(
                sorted((e.to_ref() for e in self.events), key=lambda r: (r.day, r.event_id))
            ),
        )


class PayPeriodEventModel(Base):
    """One payroll event a stored period was calculated from."""

    __tablename__ = "pay_period_events"

    __table_args__ = (
        UniqueConstraint(
            "pay_period_id", "event_id", name="uq_pay_period_event"
        ),
        Index("idx_pay_period_event_event", "event_id"),
    )

    pay_period_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("pay_periods.id"),
        nullable=False,
    )
    event_id: Mapped[str] = mapped_column(String(64), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    kind: Mapped[str] = mapped_column(String(30), nullable=False)
    amount: Mapped[Money] = mapped_column(nullable=False)

    pay_period: Mapped["PayPeriodModel"] = relationship(
        "PayPeriodModel",
        back_populates="events",
        foreign_keys=[pay_period_id],
    )

    def __repr__(self) -> str:
        return f"<PayPeriodEvent {self.event_id} {self.kind} {self.amount}>"

    def to_ref(self) -> PeriodEventRef:
        return PeriodEventRef(
            event_id=self.event_id,
            day=self.event_date,
            kind=self.kind,
            amount=self.amount,
        )
