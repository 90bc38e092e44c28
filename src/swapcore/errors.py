"""
Таксономия ошибок swapcore.

- FeedUnavailable: price feed недоступен (page-level, блокирующее состояние)
- InvalidAmount / InsufficientBalance / SameTokenSwap / RateUnavailable:
  результат Validation Engine (ошибки поля формы, исправляются редактированием)
- TransferFailed: отказ transfer collaborator (исправляется повторной отправкой)

Ни одна из ошибок не фатальна для процесса.
"""

from typing import Optional


class SwapError(Exception):
    """
    Базовая ошибка swapcore.

    reason — стабильный машинный код (используется в block_reason гейтов и
    transition_reason state machine), message — текст для пользователя.
    """

    reason: str = "swap_error"
    default_message: str = "Swap failed. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class FeedUnavailable(SwapError):
    """Price feed не получен или не прошёл контракт."""

    reason = "feed_unavailable"
    default_message = "Failed to fetch token prices"


class InvalidAmount(SwapError):
    reason = "invalid_amount"
    default_message = "Please enter a valid amount"


class InsufficientBalance(SwapError):
    reason = "insufficient_balance"
    default_message = "Insufficient balance"


class SameTokenSwap(SwapError):
    reason = "same_token_swap"
    default_message = "Cannot swap the same token"


class RateUnavailable(SwapError):
    reason = "rate_unavailable"
    default_message = "Invalid exchange rate"


class TransferFailed(SwapError):
    """Transfer collaborator отклонил операцию. Ledger не изменён."""

    reason = "transfer_failed"
    default_message = "Swap failed. Please try again."
