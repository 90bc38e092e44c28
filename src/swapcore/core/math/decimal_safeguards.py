"""
Decimal Safeguards — безопасные fixed-point примитивы

Модуль обеспечивает численную устойчивость денежных вычислений:
- Конверсия входов в Decimal без прохода через binary float
- Безопасное деление с fallback вместо ZeroDivisionError
- Проверки finite/positive для Decimal (NaN, Infinity отсекаются)
- Квантование сумм для отображения и процентных пресетов

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление на ноль никогда не пропагирует исключение (возвращается fallback)
2. NaN/Infinity никогда не возвращаются из safe_divide
3. float никогда не конвертируется в Decimal напрямую (только через str)
4. Все операции детерминированы и воспроизводимы
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Final, Optional, Union

# =============================================================================
# ПАРАМЕТРЫ КВАНТОВАНИЯ
# =============================================================================

# Точность предпросмотра "to amount" (8 знаков, как в исходной форме)
AMOUNT_PREVIEW_QUANT: Final[Decimal] = Decimal("0.00000001")

# Точность процентного пресета (2 знака)
PERCENT_AMOUNT_QUANT: Final[Decimal] = Decimal("0.01")

# Точность "Min. received" (6 знаков)
MIN_RECEIVED_QUANT: Final[Decimal] = Decimal("0.000001")

ZERO: Final[Decimal] = Decimal(0)

DecimalLike = Union[Decimal, int, str, float]


# =============================================================================
# КОНВЕРСИЯ
# =============================================================================


def to_decimal(value: DecimalLike) -> Decimal:
    """
    Конверсия значения в Decimal.

    float конвертируется через repr (str), чтобы 0.1 превращался в
    Decimal("0.1"), а не в Decimal("0.1000000000000000055511151231257827").

    Args:
        value: Decimal, int, str или float

    Returns:
        Decimal значение (может быть NaN/Infinity — проверяйте is_finite)

    Raises:
        ValueError: Если строка не является числом или тип не поддерживается

    Examples:
        >>> to_decimal(0.1)
        Decimal('0.1')
        >>> to_decimal("60000")
        Decimal('60000')
    """
    if isinstance(value, bool):
        raise ValueError(f"bool is not a numeric amount: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"not a decimal number: {value!r}")
    raise ValueError(f"unsupported numeric type: {type(value).__name__}")


def parse_amount(text: Optional[str]) -> Optional[Decimal]:
    """
    Разбор введённой суммы.

    Returns:
        Decimal если текст — конечное число, иначе None
        (пустая строка, None, "." , "NaN", "Infinity" → None)
        Не-ASCII цифры ("٣") не принимаются.
    """
    if text is None:
        return None
    if not text.isascii():
        return None
    try:
        value = to_decimal(text)
    except ValueError:
        return None
    if not value.is_finite():
        return None
    return value


# =============================================================================
# ПРОВЕРКИ
# =============================================================================


def is_finite(value: Decimal) -> bool:
    """True если значение не NaN и не Infinity."""
    return value.is_finite()


def is_finite_positive(value: Optional[Decimal]) -> bool:
    """True если значение задано, конечно и строго больше нуля."""
    return value is not None and value.is_finite() and value > ZERO


# =============================================================================
# БЕЗОПАСНОЕ ДЕЛЕНИЕ
# =============================================================================


def safe_divide(
    numerator: Decimal,
    denominator: Decimal,
    fallback: Decimal = ZERO,
) -> Decimal:
    """
    Безопасное деление Decimal с защитой от деления на ноль и NaN/Infinity.

    Args:
        numerator: Числитель
        denominator: Знаменатель
        fallback: Значение при невозможности деления (default: 0)

    Returns:
        numerator / denominator или fallback

    Examples:
        >>> safe_divide(Decimal("60000"), Decimal("3000"))
        Decimal('20')
        >>> safe_divide(Decimal("1"), Decimal("0"))
        Decimal('0')
    """
    if not numerator.is_finite() or not denominator.is_finite():
        return fallback
    if denominator.is_zero():
        return fallback

    try:
        result = numerator / denominator
    except (ArithmeticError, InvalidOperation):
        return fallback

    if not result.is_finite():
        return fallback
    return result


# =============================================================================
# ТОЧНОЕ СЛОЖЕНИЕ
# =============================================================================


def exact_sum(*values: Decimal) -> Decimal:
    """
    Сумма конечных Decimal без округления до точности контекста.

    Балансы ledger складываются этой функцией: 28 цифр контекста по
    умолчанию не обрезают длинные суммы.

    Examples:
        >>> exact_sum(Decimal("123456789012345678901234567890"), Decimal("-0.01"))
        Decimal('123456789012345678901234567889.99')
    """
    if not values:
        return ZERO
    top = max(v.adjusted() for v in values)
    bottom = min(min(v.as_tuple().exponent, 0) for v in values)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, top - bottom + 2)
        return sum(values, ZERO)


# =============================================================================
# КВАНТОВАНИЕ
# =============================================================================


def quantize_amount(
    value: Decimal,
    quant: Decimal = AMOUNT_PREVIEW_QUANT,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """
    Квантование суммы до заданной точности.

    Точность контекста расширяется под целую часть value: квантование
    больших сумм (больше 28 значащих цифр вместе с дробной частью) не
    бросает InvalidOperation.

    Args:
        value: Исходное значение
        quant: Шаг квантования (например Decimal("0.01"))
        rounding: Режим округления decimal (default: ROUND_HALF_UP)

    Returns:
        Квантованное значение
    """
    if not value.is_finite():
        return value.quantize(quant, rounding=rounding)

    required = value.adjusted() - quant.as_tuple().exponent + 2
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, required)
        return value.quantize(quant, rounding=rounding)


def format_fixed(value: Decimal, places: int) -> str:
    """
    Форматирование Decimal с фиксированным числом знаков после точки.

    Examples:
        >>> format_fixed(Decimal("150"), 2)
        '150.00'
    """
    if places < 0:
        raise ValueError(f"places must be non-negative, got {places}")
    quant = Decimal(1).scaleb(-places)
    return f"{quantize_amount(value, quant):f}"
