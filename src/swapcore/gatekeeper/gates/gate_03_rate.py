"""GATE 3: Доступность курса

Четвёртый (последний) gate в цепочке:
- rate(from, to) * from_amount должен давать положительный to_amount
- rate == 0 (sentinel "курс недоступен") → RateUnavailable
- to_amount, округлённый до точности предпросмотра (8 знаков), == 0
  → RateUnavailable

to_amount считается той же функцией, что и live-preview формы, поэтому
подтверждённая сумма совпадает с показанной пользователю.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from swapcore.core.domain.token import Token
from swapcore.core.math.decimal_safeguards import ZERO
from swapcore.core.math.rates import is_rate_available, preview_to_amount, rate
from swapcore.errors import RateUnavailable, SwapError
from swapcore.gatekeeper.gates.gate_00_amount import Gate00Result
from swapcore.gatekeeper.gates.gate_02_same_token import Gate02Result


@dataclass(frozen=True)
class Gate03Result:
    """Результат GATE 3."""

    swap_allowed: bool
    block_reason: str
    error: Optional[SwapError]

    # Метрики курса
    rate: Decimal
    to_amount: Decimal

    details: str


class Gate03RateAvailability:
    """GATE 3: rate * from_amount > 0."""

    def evaluate(
        self,
        gate00_result: Gate00Result,
        gate02_result: Gate02Result,
        from_token: Optional[Token],
        to_token: Optional[Token],
    ) -> Gate03Result:
        """Оценка GATE 3.

        Args:
            gate00_result: результат GATE 0 (разобранная сумма)
            gate02_result: результат GATE 2 (цепочка GATE 0-2)
            from_token: токен from из каталога (None если нет в каталоге)
            to_token: токен to из каталога (None если нет в каталоге)
        """
        if not gate02_result.swap_allowed:
            return Gate03Result(
                swap_allowed=False,
                block_reason=f"gate02_blocked: {gate02_result.block_reason}",
                error=gate02_result.error,
                rate=ZERO,
                to_amount=ZERO,
                details=f"GATE 2 blocked: {gate02_result.block_reason}",
            )

        rate_value = rate(from_token, to_token)
        to_amount = preview_to_amount(gate00_result.from_amount, rate_value)

        if not is_rate_available(rate_value) or to_amount <= ZERO:
            error = RateUnavailable()
            return Gate03Result(
                swap_allowed=False,
                block_reason=error.reason,
                error=error,
                rate=rate_value,
                to_amount=to_amount,
                details=(
                    f"No usable rate: rate={rate_value}, to_amount={to_amount}, "
                    f"from_token={'present' if from_token else 'absent'}, "
                    f"to_token={'present' if to_token else 'absent'}"
                ),
            )

        return Gate03Result(
            swap_allowed=True,
            block_reason="",
            error=None,
            rate=rate_value,
            to_amount=to_amount,
            details=f"PASS: rate={rate_value}, to_amount={to_amount}",
        )
