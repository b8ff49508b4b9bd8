"""
Fixed Point — денежная арифметика vault

Все денежные расчёты vault выполняются в двух представлениях:
- целые base units (Uint128): балансы, суммы переводов, share units
- знаковый fixed point с 18 знаками после запятой: промежуточные расчёты
  (масштабированные суммы, цены, стоимость, доли)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Каждое умножение и деление усекается к нулю до 18 знаков
2. Конверсия fixed point → base units усекает к нулю
3. Float никогда не используется
4. Деление на ноль и выход за Uint128 → MathError (не fallback)
"""

from decimal import (
    ROUND_DOWN,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
)
from typing import Final, Union

from src.core.errors import MathError

# =============================================================================
# ПАРАМЕТРЫ
# =============================================================================

# Точность fixed point (знаков после запятой)
FP_DECIMALS: Final[int] = 18

# Квант fixed point: 1e-18
FP_QUANTUM: Final[Decimal] = Decimal(1).scaleb(-FP_DECIMALS)

# Максимальное значение Uint128
UINT128_MAX: Final[int] = 2**128 - 1

# Контекст с запасом точности: u128 (39 цифр) x u128 + 18 дробных знаков
FP_CONTEXT: Final[Context] = Context(
    prec=120,
    rounding=ROUND_DOWN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

Number = Union[int, str, Decimal]


# =============================================================================
# КОНСТРУКТОРЫ
# =============================================================================


def fp(value: Number) -> Decimal:
    """
    Приведение значения к fixed point (усечение до 18 знаков).

    Args:
        value: int, десятичная строка или Decimal

    Returns:
        Decimal с экспонентой -18

    Raises:
        MathError: если значение не является конечным числом

    Examples:
        >>> fp(9)
        Decimal('9.000000000000000000')
        >>> fp("0.1234567890123456789")
        Decimal('0.123456789012345678')
    """
    if isinstance(value, float):
        raise MathError(f"float is not allowed in fixed point math: {value}")
    try:
        dec = value if isinstance(value, Decimal) else FP_CONTEXT.create_decimal(value)
        if not dec.is_finite():
            raise MathError(f"Non-finite fixed point value: {value}")
        return dec.quantize(FP_QUANTUM, rounding=ROUND_DOWN, context=FP_CONTEXT)
    except (InvalidOperation, ValueError) as e:
        raise MathError(f"Invalid fixed point value {value!r}: {e}") from e


def fp_from_str(value: str) -> Decimal:
    """Парсинг десятичной строки в fixed point (аналог FPDecimal::from_str)."""
    if not isinstance(value, str):
        raise MathError(f"Expected decimal string, got {type(value).__name__}")
    return fp(value.strip())


# =============================================================================
# АРИФМЕТИКА
# =============================================================================


def fp_mul(a: Decimal, b: Decimal) -> Decimal:
    """Умножение с усечением до 18 знаков."""
    return fp(FP_CONTEXT.multiply(a, b))


def fp_div(a: Decimal, b: Decimal) -> Decimal:
    """
    Деление с усечением до 18 знаков.

    Raises:
        MathError: при делении на ноль
    """
    if b.is_zero():
        raise MathError(f"Cannot divide {a} by zero")
    return fp(FP_CONTEXT.divide(a, b))


def fp_add(a: Decimal, b: Decimal) -> Decimal:
    return fp(FP_CONTEXT.add(a, b))


def scaled(value: Decimal, exponent: int) -> Decimal:
    """
    Масштабирование на 10^exponent (аналог Scaled::scaled).

    Examples:
        >>> scaled(fp(100_000000), -6)
        Decimal('100.000000000000000000')
        >>> scaled(fp(100), 12)
        Decimal('100000000000000.000000000000000000')
    """
    return fp(value.scaleb(exponent, context=FP_CONTEXT))


# =============================================================================
# КОНВЕРСИЯ В BASE UNITS
# =============================================================================


def to_uint(value: Decimal) -> int:
    """
    Конверсия fixed point → Uint128 (усечение к нулю).

    Raises:
        MathError: если значение отрицательное или не помещается в Uint128
    """
    if value < 0:
        raise MathError(f"Cannot convert negative value {value} to Uint128")
    result = int(value.to_integral_value(rounding=ROUND_DOWN, context=FP_CONTEXT))
    return check_uint128(result)


def check_uint128(value: int) -> int:
    """Проверка диапазона Uint128."""
    if value < 0:
        raise MathError(f"Uint128 underflow: {value}")
    if value > UINT128_MAX:
        raise MathError(f"Uint128 overflow: {value}")
    return value


def checked_sub(a: int, b: int) -> int:
    """
    Вычитание Uint128 с проверкой (аналог Uint128::sub).

    Raises:
        MathError: если b > a
    """
    if b > a:
        raise MathError(f"Cannot Sub with {a} and {b}")
    return a - b


def multiply_ratio(value: int, numerator: int, denominator: int) -> int:
    """
    value * numerator // denominator в целых числах.

    Raises:
        MathError: при denominator == 0
    """
    if denominator == 0:
        raise MathError(f"Cannot divide {value * numerator} by zero")
    return check_uint128(value * numerator // denominator)


def fp_display(value: Decimal) -> str:
    """
    Текстовое представление fixed point без хвостовых нулей.

    Examples:
        >>> fp_display(fp(8000))
        '8000'
        >>> fp_display(fp("4.50"))
        '4.5'
    """
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"
