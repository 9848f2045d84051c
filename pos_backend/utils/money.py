"""Fixed-point money and quantity helpers."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

# Column limits: Numeric(10, 2) prices, Numeric(12, 2) totals, 32-bit Integer counts and ids
MAX_PRICE = Decimal('99999999.99')
MAX_TOTAL = Decimal('9999999999.99')
MAX_INT = 2**31 - 1


def to_money(value) -> Decimal:
    """
    Round a value to 2 decimals, half away from zero.

    Floats go through str() first so 0.1 becomes Decimal('0.1') and not its
    binary expansion.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        amount = Decimal(str(value))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def line_subtotal(unit_price, qty: int) -> Decimal:
    """round(unit_price * qty, 2)."""
    return to_money(to_money(unit_price) * qty)


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    """round(sum(amounts), 2)."""
    return to_money(sum(amounts, ZERO))


def parse_money(value) -> Decimal:
    """
    Parse a non-negative monetary input (int, float, str or Decimal).

    Raises:
        ValueError: if the value is empty, not numeric, negative or does
            not fit a price column.
    """
    if value is None or isinstance(value, bool):
        raise ValueError('Precio inválido')
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError('Precio inválido')
    if not amount.is_finite():
        raise ValueError('Precio inválido')
    if amount < 0:
        raise ValueError('El precio no puede ser negativo')
    if amount > MAX_PRICE:
        raise ValueError('El precio excede el máximo permitido')
    try:
        return to_money(amount)
    except InvalidOperation:
        raise ValueError('Precio inválido')


def parse_int(value) -> int:
    """
    Parse an integral input: int, integral float, or a numeric string.

    Raises:
        ValueError: if the value is missing, has a fractional part or is
            outside the 32-bit range of the integer columns.
    """
    if value is None or isinstance(value, bool):
        raise ValueError('Número inválido')
    if isinstance(value, int):
        return _check_int_range(value)
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError('Número inválido')
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError('Número inválido')
    if abs(number) > MAX_INT:
        raise ValueError('Número fuera de rango')
    return int(number)


def _check_int_range(number: int) -> int:
    if abs(number) > MAX_INT:
        raise ValueError('Número fuera de rango')
    return number


def parse_positive_int(value) -> int:
    """parse_int() that also rejects zero and negatives."""
    number = parse_int(value)
    if number <= 0:
        raise ValueError('El número debe ser mayor a 0')
    return number
