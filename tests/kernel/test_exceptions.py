"""Tests for the typed exception hierarchy and its error codes."""

import pytest

from workshop_kernel.exceptions import (
    InvalidAmountError,
    InvalidRangeError,
    InvalidStatusTransitionError,
    NonCanonicalPeriodError,
    PayPeriodError,
    PayPeriodNotFoundError,
    PayrollError,
    PeriodLockedError,
    RangeError,
    UnknownEventKindError,
    WorkshopKernelError,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc, parent, code",
        [
            (InvalidRangeError("2024-03-02", "2024-03-01"), RangeError, "INVALID_RANGE"),
            (UnknownEventKindError("GIFT"), PayrollError, "UNKNOWN_EVENT_KIND"),
            (InvalidAmountError("-1"), PayrollError, "INVALID_AMOUNT"),
            (PeriodLockedError("u", "k", "recalculate"), PayPeriodError, "PERIOD_LOCKED"),
            (PayPeriodNotFoundError("u", "k"), PayPeriodError, "PAY_PERIOD_NOT_FOUND"),
            (NonCanonicalPeriodError("k", "e"), PayPeriodError, "NON_CANONICAL_PERIOD"),
            (
                InvalidStatusTransitionError("k", "open", "paid"),
                PayPeriodError,
                "INVALID_STATUS_TRANSITION",
            ),
        ],
    )
    def test_code_and_parent(self, exc, parent, code):
        assert isinstance(exc, parent)
        assert isinstance(exc, WorkshopKernelError)
        assert exc.code == code

    def test_structured_attributes(self):
        exc = InvalidAmountError("-5", event_id="evt-1")
        assert exc.amount == "-5"
        assert exc.event_id == "evt-1"
        assert "evt-1" in str(exc)

    def test_range_error_default_reason(self):
        exc = InvalidRangeError("2024-03-02", "2024-03-01")
        assert exc.reason == "end precedes start"
