"""
Module: workshop_kernel.db.types
Responsibility: Annotated type aliases and utility functions for money
    columns and amounts.  Centralizes precision and rounding so every model,
    engine and service uses identical definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/ and the engines.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats in money arithmetic.  ``to_decimal`` is the boundary where
      loosely typed inputs (JSON numbers, strings) become Decimal.
    - ``round_money`` is the ONLY sanctioned rounding function for payable
      amounts (half away from zero).

Failure modes:
    - ValueError on a non-numeric value passed to to_decimal().
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated

from sqlalchemy import Numeric
from sqlalchemy.orm import mapped_column

# Stored money: 38 digits, 9 after the point.  Payable amounts are rounded
# to MONEY_DECIMAL_PLACES before they are stored.
Money = Annotated[Decimal, mapped_column(Numeric(38, 9))]

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """
    Convert a loosely typed amount into a Decimal.

    Floats go through ``str()`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.

    Raises:
        ValueError: If value cannot be converted to Decimal.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to an amount")
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Cannot convert {value!r} to an amount") from exc


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    ROUND_HALF_UP rounds half away from zero for both signs, so
    ``-0.005`` becomes ``-0.01``.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized to ``decimal_places``.
    """
    exponent = Decimal(1).scaleb(-decimal_places)
    return value.quantize(exponent, rounding=rounding)
