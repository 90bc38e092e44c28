"""
Core math modules для swapcore

Fixed-point примитивы (Decimal) с гарантией отсутствия binary float drift.
Rate Calculator импортируется напрямую: swapcore.core.math.rates.
"""

from swapcore.core.math.decimal_safeguards import (
    # Quantization constants
    AMOUNT_PREVIEW_QUANT,
    MIN_RECEIVED_QUANT,
    PERCENT_AMOUNT_QUANT,
    ZERO,
    # Conversion
    DecimalLike,
    parse_amount,
    to_decimal,
    # Checks
    is_finite,
    is_finite_positive,
    # Safe division
    safe_divide,
    # Exact arithmetic
    exact_sum,
    # Quantization
    format_fixed,
    quantize_amount,
)

__all__ = [
    "AMOUNT_PREVIEW_QUANT",
    "MIN_RECEIVED_QUANT",
    "PERCENT_AMOUNT_QUANT",
    "ZERO",
    "DecimalLike",
    "parse_amount",
    "to_decimal",
    "is_finite",
    "is_finite_positive",
    "safe_divide",
    "exact_sum",
    "format_fixed",
    "quantize_amount",
]
