"""Conversions between stored amount text and ``Decimal`` values."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Union

from .errors import DataIntegrityError

Number = Union[Decimal, int, float, str]

CENTS = Decimal('0.01')
ZERO = Decimal('0')


def parse_amount(value: Any, *, field: Optional[str] = None) -> Decimal:
    """Convert a stored amount into a ``Decimal``.

    Floats go through ``str`` first so ``0.1`` stays ``Decimal('0.1')``.
    Anything that is not a finite number raises :class:`DataIntegrityError`.
    """
    label = f" for '{field}'" if field else ''
    if isinstance(value, bool) or value is None:
        raise DataIntegrityError(f"Malformed amount{label}: {value!r}")
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise DataIntegrityError(f"Malformed amount{label}: {value!r}") from exc
    if not number.is_finite():
        raise DataIntegrityError(f"Malformed amount{label}: {value!r}")
    return number


def format_amount(value: Number) -> str:
    """Render an amount as text with two fractional digits."""
    return str(parse_amount(value).quantize(CENTS, rounding=ROUND_HALF_UP))


def total(values: Iterable[Any]) -> Decimal:
    return sum((parse_amount(v) for v in values), ZERO)


def format_exact(value: Number) -> str:
    """Render a value as text without losing precision.

    Values with at most two fractional digits are padded to two
    (``60`` -> ``"60.00"``); anything more precise is kept as is.
    """
    number = parse_amount(value)
    if number.as_tuple().exponent >= -2:
        number = number.quantize(CENTS)
    return str(number)
