"""
Domain models and value objects.

Contains fundamental domain entities: PriceSample, Token, Catalog,
SwapIntent, SwapResult.
"""

from swapcore.core.domain.swap import SwapIntent, SwapResult
from swapcore.core.domain.token import (
    Catalog,
    PriceSample,
    Token,
    currency_sort_key,
)

__all__ = [
    # Token model
    "PriceSample",
    "Token",
    "Catalog",
    "currency_sort_key",
    # Swap model
    "SwapIntent",
    "SwapResult",
]
