"""Gatekeeper — Validation Engine для допуска обмена к commit.

- 4 gates с фиксированным порядком (первый отказ побеждает)
- Чистое решение: ledger и форма не изменяются
"""

from .validation import SwapValidationResult, SwapValidator, validate_swap

__all__ = [
    "SwapValidator",
    "SwapValidationResult",
    "validate_swap",
]
