"""Validation Engine — фиксированная цепочка гейтов перед commit

Порядок гейтов фиксирован (первый отказ побеждает, порядок определяет
сообщение пользователю):
- GATE 0: сумма — конечное положительное число → иначе InvalidAmount
- GATE 1: сумма <= баланса from → иначе InsufficientBalance
- GATE 2: from != to → иначе SameTokenSwap
- GATE 3: rate * сумма > 0 → иначе RateUnavailable

Чистая функция решения: не изменяет ledger и состояние формы.
Вызывающий код применяет вердикт.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from swapcore.core.domain.swap import SwapIntent, SwapResult
from swapcore.core.domain.token import Catalog
from swapcore.errors import SwapError
from swapcore.gatekeeper.gates import (
    Gate00AmountValidation,
    Gate01BalanceCheck,
    Gate02SameToken,
    Gate03RateAvailability,
)
from swapcore.ledger.ledger import BalanceLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapValidationResult:
    """Вердикт Validation Engine."""

    passed: bool
    block_reason: str
    error: Optional[SwapError]

    # Кандидат SwapResult (только при passed=True)
    swap_result: Optional[SwapResult]

    # Номер гейта, заблокировавшего обмен (None при PASS)
    blocked_at_gate: Optional[int]

    details: str


class SwapValidator:
    """Последовательное исполнение GATE 0-3 со short-circuit на первом отказе."""

    def __init__(self):
        self.gate00 = Gate00AmountValidation()
        self.gate01 = Gate01BalanceCheck()
        self.gate02 = Gate02SameToken()
        self.gate03 = Gate03RateAvailability()

    def validate(
        self,
        intent: SwapIntent,
        catalog: Catalog,
        ledger: BalanceLedger,
    ) -> SwapValidationResult:
        """Оценка SwapIntent против каталога и ledger.

        Args:
            intent: запрос обмена (сумма — сырой текст)
            catalog: текущий каталог токенов
            ledger: ledger сессии (только чтение)

        Returns:
            SwapValidationResult; при PASS содержит SwapResult-кандидат
        """
        gate00 = self.gate00.evaluate(intent.from_amount)
        if not gate00.swap_allowed:
            return self._blocked(0, gate00.block_reason, gate00.error, gate00.details)

        gate01 = self.gate01.evaluate(gate00, intent.from_currency, ledger)
        if not gate01.swap_allowed:
            return self._blocked(1, gate01.block_reason, gate01.error, gate01.details)

        gate02 = self.gate02.evaluate(gate01, intent.from_currency, intent.to_currency)
        if not gate02.swap_allowed:
            return self._blocked(2, gate02.block_reason, gate02.error, gate02.details)

        gate03 = self.gate03.evaluate(
            gate00,
            gate02,
            catalog.find(intent.from_currency),
            catalog.find(intent.to_currency),
        )
        if not gate03.swap_allowed:
            return self._blocked(3, gate03.block_reason, gate03.error, gate03.details)

        swap_result = SwapResult(
            from_currency=intent.from_currency,
            to_currency=intent.to_currency,
            from_amount=gate00.from_amount,
            to_amount=gate03.to_amount,
            rate_used=gate03.rate,
        )
        return SwapValidationResult(
            passed=True,
            block_reason="",
            error=None,
            swap_result=swap_result,
            blocked_at_gate=None,
            details=f"PASS: {swap_result.from_amount} {swap_result.from_currency} -> "
            f"{swap_result.to_amount} {swap_result.to_currency} @ {swap_result.rate_used}",
        )

    def _blocked(
        self,
        gate: int,
        block_reason: str,
        error: Optional[SwapError],
        details: str,
    ) -> SwapValidationResult:
        logger.debug("Swap blocked at GATE %d: %s (%s)", gate, block_reason, details)
        return SwapValidationResult(
            passed=False,
            block_reason=block_reason,
            error=error,
            swap_result=None,
            blocked_at_gate=gate,
            details=details,
        )


def validate_swap(
    intent: SwapIntent,
    catalog: Catalog,
    ledger: BalanceLedger,
) -> SwapValidationResult:
    """Convenience-обёртка над SwapValidator().validate()."""
    return SwapValidator().validate(intent, catalog, ledger)

