"""Decimal amount utilities for multi-asset balances.

All amounts, fees, and balances use decimal.Decimal and map to NUMERIC(38, 18).
No float: binary floating point cannot represent token amounts exactly.
"""

from decimal import Context, Decimal, InvalidOperation

AMOUNT_SCALE = 18
_QUANTUM = Decimal(1).scaleb(-AMOUNT_SCALE)  # 1e-18
ZERO = Decimal(0)
# NUMERIC(38, 18): 20 integer digits + 18 fractional digits
_CONTEXT = Context(prec=38)


def to_amount(value: Decimal | int | str) -> Decimal:
    """Parse *value* into a Decimal quantized to 18 places.

    Raises ValueError for floats, non-numeric strings, NaN/Infinity, and values
    with more than 18 fractional digits.
    """
    if isinstance(value, float) or isinstance(value, bool):
        raise ValueError(f"Amounts must not be float/bool, got {value!r}")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Not a decimal amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    try:
        quantized = amount.quantize(_QUANTUM, context=_CONTEXT)
    except InvalidOperation:
        raise ValueError(f"Amount out of range: {value!r}") from None
    if quantized != amount:
        raise ValueError(f"Amount has more than {AMOUNT_SCALE} decimal places: {value!r}")
    return quantized


def amount_to_display(amount: Decimal, symbol: str | None = None) -> str:
    """Render without exponent or trailing zeros: Decimal('38.500') -> '38.5'."""
    text = format(amount.normalize(_CONTEXT), "f") if amount != ZERO else "0"
    return f"{text} {symbol}" if symbol else text


# Arithmetic on amounts must use the NUMERIC(38, 18) context; the default
# Decimal context keeps only 28 significant digits.


def add_amounts(a: Decimal, b: Decimal) -> Decimal:
    return _CONTEXT.add(a, b)


def sub_amounts(a: Decimal, b: Decimal) -> Decimal:
    return _CONTEXT.subtract(a, b)


def negate_amount(a: Decimal) -> Decimal:
    return _CONTEXT.minus(a)


def abs_amount(a: Decimal) -> Decimal:
    return _CONTEXT.abs(a)
