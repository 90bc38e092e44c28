"""GATE 0: Валидация введённой суммы

Первый gate в цепочке:
- from_amount должен разбираться как конечное положительное Decimal
- Пустая строка, ".", "0", "NaN", "Infinity" → блокировка InvalidAmount

Результат GATE 0 (разобранная сумма) используется GATE 1 и GATE 3.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from swapcore.core.math.decimal_safeguards import is_finite_positive, parse_amount
from swapcore.errors import InvalidAmount, SwapError


@dataclass(frozen=True)
class Gate00Result:
    """Результат GATE 0."""

    swap_allowed: bool
    block_reason: str
    error: Optional[SwapError]

    # Разобранная сумма (None если не разбирается)
    from_amount: Optional[Decimal]

    # Детали
    details: str


class Gate00AmountValidation:
    """GATE 0: валидация суммы (stateless)."""

    def evaluate(self, from_amount_text: str) -> Gate00Result:
        """Оценка GATE 0.

        Args:
            from_amount_text: введённая сумма (текст поля)

        Returns:
            Gate00Result с разобранной суммой
        """
        from_amount = parse_amount(from_amount_text)

        if not is_finite_positive(from_amount):
            error = InvalidAmount()
            return Gate00Result(
                swap_allowed=False,
                block_reason=error.reason,
                error=error,
                from_amount=from_amount,
                details=f"Amount {from_amount_text!r} is not a finite positive number",
            )

        return Gate00Result(
            swap_allowed=True,
            block_reason="",
            error=None,
            from_amount=from_amount,
            details=f"PASS: from_amount={from_amount}",
        )
