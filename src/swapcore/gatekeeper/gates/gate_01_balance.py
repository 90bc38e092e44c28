"""GATE 1: Проверка баланса

Второй gate в цепочке (после GATE 0):
- from_amount не должен превышать баланс from-валюты в ledger
- Неизвестная валюта имеет баланс 0

Интеграция:
- Использует разобранную сумму из GATE 0
- Только читает ledger (balance_of), никогда не изменяет его
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from swapcore.core.math.decimal_safeguards import ZERO
from swapcore.errors import InsufficientBalance, SwapError
from swapcore.gatekeeper.gates.gate_00_amount import Gate00Result
from swapcore.ledger.ledger import BalanceLedger


@dataclass(frozen=True)
class Gate01Result:
    """Результат GATE 1."""

    swap_allowed: bool
    block_reason: str
    error: Optional[SwapError]

    # Входные параметры для диагностики
    from_currency: str
    available_balance: Decimal

    # Детали
    details: str


class Gate01BalanceCheck:
    """GATE 1: from_amount <= balance(from_currency)."""

    def evaluate(
        self,
        gate00_result: Gate00Result,
        from_currency: str,
        ledger: BalanceLedger,
    ) -> Gate01Result:
        """Оценка GATE 1.

        Args:
            gate00_result: результат GATE 0 (разобранная сумма)
            from_currency: валюта, которую отдаём
            ledger: ledger сессии (только чтение)

        Returns:
            Gate01Result с решением о допуске
        """
        available = ledger.balance_of(from_currency)

        # 1. Проверка блокировки GATE 0
        if not gate00_result.swap_allowed:
            return Gate01Result(
                swap_allowed=False,
                block_reason=f"gate00_blocked: {gate00_result.block_reason}",
                error=gate00_result.error,
                from_currency=from_currency,
                available_balance=available,
                details=f"GATE 0 blocked: {gate00_result.block_reason}",
            )

        from_amount = gate00_result.from_amount or ZERO

        # 2. Баланс
        if from_amount > available:
            error = InsufficientBalance()
            return Gate01Result(
                swap_allowed=False,
                block_reason=error.reason,
                error=error,
                from_currency=from_currency,
                available_balance=available,
                details=f"Amount {from_amount} exceeds {from_currency} balance {available}",
            )

        return Gate01Result(
            swap_allowed=True,
            block_reason="",
            error=None,
            from_currency=from_currency,
            available_balance=available,
            details=f"PASS: {from_amount} <= {available} {from_currency}",
        )
