"""GATE 2: Запрет обмена токена на самого себя

Третий gate в цепочке (после GATE 0-1):
- from_currency != to_currency

Проверка не требует курса: same-token swap отклоняется до любого
расчёта rate.
"""

from dataclasses import dataclass
from typing import Optional

from swapcore.errors import SameTokenSwap, SwapError
from swapcore.gatekeeper.gates.gate_01_balance import Gate01Result


@dataclass(frozen=True)
class Gate02Result:
    """Результат GATE 2."""

    swap_allowed: bool
    block_reason: str
    error: Optional[SwapError]

    from_currency: str
    to_currency: str

    details: str


class Gate02SameToken:
    """GATE 2: from_currency != to_currency."""

    def evaluate(
        self,
        gate01_result: Gate01Result,
        from_currency: str,
        to_currency: str,
    ) -> Gate02Result:
        if not gate01_result.swap_allowed:
            return Gate02Result(
                swap_allowed=False,
                block_reason=f"gate01_blocked: {gate01_result.block_reason}",
                error=gate01_result.error,
                from_currency=from_currency,
                to_currency=to_currency,
                details=f"GATE 1 blocked: {gate01_result.block_reason}",
            )

        if from_currency == to_currency:
            error = SameTokenSwap()
            return Gate02Result(
                swap_allowed=False,
                block_reason=error.reason,
                error=error,
                from_currency=from_currency,
                to_currency=to_currency,
                details=f"Same token on both sides: {from_currency}",
            )

        return Gate02Result(
            swap_allowed=True,
            block_reason="",
            error=None,
            from_currency=from_currency,
            to_currency=to_currency,
            details=f"PASS: {from_currency} -> {to_currency}",
        )
