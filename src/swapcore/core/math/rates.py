"""
Rate Calculator — расчёт курса обмена между токенами каталога

Единственный допустимый способ получить курс from → to.

Курс = from.price / to.price. Отсутствие курса представляется значением 0
(sentinel "rate unavailable"): вызывающий код ОБЯЗАН трактовать 0 как
"курс недоступен", а не как буквальный нулевой курс.

Все функции модуля чистые: без побочных эффектов, детерминированы,
безопасны для вызова на каждое нажатие клавиши.
"""

from decimal import Decimal
from typing import Final, Optional

from swapcore.core.domain.token import Token
from swapcore.core.math.decimal_safeguards import (
    AMOUNT_PREVIEW_QUANT,
    MIN_RECEIVED_QUANT,
    ZERO,
    format_fixed,
    quantize_amount,
    safe_divide,
)

# Проскальзывание по умолчанию для "Min. received" (0.5%)
DEFAULT_SLIPPAGE: Final[Decimal] = Decimal("0.005")

# Точность отображения курса
RATE_DISPLAY_PLACES: Final[int] = 8


def rate(from_token: Optional[Token], to_token: Optional[Token]) -> Decimal:
    """
    Курс обмена from → to.

    Args:
        from_token: Токен, который отдаём (или None)
        to_token: Токен, который получаем (или None)

    Returns:
        from.price / to.price если оба токена заданы и обе цены ненулевые,
        иначе Decimal(0). Никогда не бросает исключений.

    Examples:
        WBTC(60000) → ETH(3000): 20
        None → ETH: 0
    """
    if from_token is None or to_token is None:
        return ZERO
    if from_token.price.is_zero() or to_token.price.is_zero():
        return ZERO
    return safe_divide(from_token.price, to_token.price, fallback=ZERO)


def is_rate_available(value: Decimal) -> bool:
    """True если курс не является sentinel-значением 0."""
    return value.is_finite() and value > ZERO


def preview_to_amount(from_amount: Optional[Decimal], rate_value: Decimal) -> Decimal:
    """
    Предпросмотр "to amount": from_amount * rate, квантованный до 8 знаков.

    Отрицательный или нулевой результат (нет суммы, нет курса) → 0.
    """
    if from_amount is None or not from_amount.is_finite():
        return ZERO
    if not is_rate_available(rate_value):
        return ZERO

    calculated = from_amount * rate_value
    if calculated <= ZERO:
        return ZERO
    return quantize_amount(calculated, AMOUNT_PREVIEW_QUANT)


def minimum_received(to_amount: Decimal, slippage: Decimal = DEFAULT_SLIPPAGE) -> Decimal:
    """
    Минимальная сумма получения с учётом проскальзывания.

    minimum_received = to_amount * (1 - slippage), 6 знаков.
    """
    if not (ZERO <= slippage < Decimal(1)):
        raise ValueError(f"slippage must be in [0, 1), got {slippage}")
    if to_amount <= ZERO:
        return ZERO
    return quantize_amount(to_amount * (Decimal(1) - slippage), MIN_RECEIVED_QUANT)


def format_rate(from_currency: str, to_currency: str, rate_value: Decimal) -> str:
    """
    Текстовое представление курса: "1 WBTC = 20.00000000 ETH".

    Для недоступного курса возвращает пустую строку.
    """
    if not is_rate_available(rate_value):
        return ""
    return f"1 {from_currency} = {format_fixed(rate_value, RATE_DISPLAY_PLACES)} {to_currency}"
