"""
Typed Exception Hierarchy for the Workshop Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from WorkshopKernelError:

    WorkshopKernelError (base)
    |
    +-- RangeError
    |   +-- InvalidRangeError
    |
    +-- PayrollError
    |   +-- UnknownEventKindError
    |   +-- InvalidAmountError
    |
    +-- PayPeriodError
        +-- PeriodLockedError
        +-- PayPeriodNotFoundError
        +-- NonCanonicalPeriodError
        +-- InvalidStatusTransitionError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Range           | INVALID_RANGE               | end < start, or malformed week window
----------------|-----------------------------|-----------------------------------------
Payroll         | UNKNOWN_EVENT_KIND          | Event kind outside the closed set
                | INVALID_AMOUNT              | Negative magnitude on a new event
----------------|-----------------------------|-----------------------------------------
Pay period      | PERIOD_LOCKED               | Recalculating / re-paying a PAID period
                | PAY_PERIOD_NOT_FOUND        | No stored period for (user, range)
                | NON_CANONICAL_PERIOD        | Range is not a resolver-produced period
                | INVALID_STATUS_TRANSITION   | Status would move backwards or skip

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CATCH SPECIFIC EXCEPTIONS:

    try:
        service.calculate_period(worker, today=today)
    except PeriodLockedError as e:
        notify_admin(f"Period {e.period_key} already paid")

2. USE STRUCTURED DATA (not message parsing):

    except InvalidAmountError as e:
        return {"error": e.code, "event_id": e.event_id, "amount": e.amount}

3. BATCH ISOLATION: one worker's failure is recorded on that worker's
   item result (``error_code = exc.code``) and never aborts the run.
"""


class WorkshopKernelError(Exception):
    """
    Base exception for all workshop kernel errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "WORKSHOP_KERNEL_ERROR"


# Range-related exceptions


class RangeError(WorkshopKernelError):
    """Base exception for date-range errors."""

    code: str = "RANGE_ERROR"


class InvalidRangeError(RangeError):
    """A range whose end precedes its start (or a malformed week window)."""

    code: str = "INVALID_RANGE"

    def __init__(self, start: str, end: str, reason: str | None = None):
        self.start = start
        self.end = end
        self.reason = reason or "end precedes start"
        super().__init__(f"Invalid range {start} to {end}: {self.reason}")


# Payroll-related exceptions


class PayrollError(WorkshopKernelError):
    """Base exception for payroll event errors."""

    code: str = "PAYROLL_ERROR"


class UnknownEventKindError(PayrollError):
    """Payroll event kind is not one of the classified kinds."""

    code: str = "UNKNOWN_EVENT_KIND"

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown payroll event kind: {kind!r}")


class InvalidAmountError(PayrollError):
    """A new payroll event carries a negative magnitude."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: str, event_id: str | None = None):
        self.amount = amount
        self.event_id = event_id
        super().__init__(
            f"Payroll event amount must be a non-negative magnitude, got {amount}"
            + (f" (event {event_id})" if event_id else "")
        )


# Pay-period exceptions


class PayPeriodError(WorkshopKernelError):
    """Base exception for pay-period lifecycle errors."""

    code: str = "PAY_PERIOD_ERROR"


class PeriodLockedError(PayPeriodError):
    """
    Attempted to change a PAID pay period.

    PAID is terminal: totals are frozen once payment is confirmed.
    """

    code: str = "PERIOD_LOCKED"

    def __init__(self, user_id: str, period_key: str, operation: str):
        self.user_id = user_id
        self.period_key = period_key
        self.operation = operation
        super().__init__(
            f"Cannot {operation} pay period {period_key} for user {user_id}: "
            "period is already paid"
        )


class PayPeriodNotFoundError(PayPeriodError):
    """No stored pay period for the given user and range."""

    code: str = "PAY_PERIOD_NOT_FOUND"

    def __init__(self, user_id: str, period_key: str):
        self.user_id = user_id
        self.period_key = period_key
        super().__init__(f"No pay period {period_key} for user {user_id}")


class NonCanonicalPeriodError(PayPeriodError):
    """The range is not a pay period the resolver would produce."""

    code: str = "NON_CANONICAL_PERIOD"

    def __init__(self, period_key: str, expected_key: str):
        self.period_key = period_key
        self.expected_key = expected_key
        super().__init__(
            f"Range {period_key} is not a canonical pay period "
            f"(expected {expected_key})"
        )


class InvalidStatusTransitionError(PayPeriodError):
    """Status would move backwards or skip a required step."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, period_key: str, from_status: str, to_status: str):
        self.period_key = period_key
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Pay period {period_key} cannot move from {from_status} to {to_status}"
        )
