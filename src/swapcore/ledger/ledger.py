"""
Balance Ledger — in-memory балансы пользователя по валютам

Единственный владелец LedgerState. Изменяется только через commit()
провалидированного SwapResult.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Все балансы >= 0
2. commit() атомарен: debit и credit применяются одним логическим шагом,
   промежуточное состояние (debit без credit) не наблюдаемо
3. Валюты, не участвующие в обмене, не изменяются
"""

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional

from swapcore.core.domain.swap import SwapResult
from swapcore.core.domain.token import Catalog, Token
from swapcore.core.math.decimal_safeguards import ZERO, DecimalLike, exact_sum, to_decimal

logger = logging.getLogger(__name__)


class BalanceLedger:
    """
    In-memory ledger: currency → balance.

    Ledger принадлежит одной сессии; сессии не разделяют состояние.
    """

    def __init__(self, initial: Optional[Mapping[str, DecimalLike]] = None):
        """
        Args:
            initial: Начальные балансы (значения конвертируются в Decimal)

        Raises:
            ValueError: Если какой-либо баланс отрицателен или не конечен
        """
        balances: dict[str, Decimal] = {}
        for currency, amount in (initial or {}).items():
            value = to_decimal(amount)
            if not value.is_finite() or value < ZERO:
                raise ValueError(f"balance for {currency} must be finite and >= 0, got {amount}")
            balances[currency] = value
        self._balances: Mapping[str, Decimal] = MappingProxyType(balances)

    def balance_of(self, currency: str) -> Decimal:
        """Баланс валюты (0 если валюта неизвестна)."""
        return self._balances.get(currency, ZERO)

    def snapshot(self) -> dict[str, Decimal]:
        """Копия текущего состояния ledger."""
        return dict(self._balances)

    def commit(self, result: SwapResult) -> None:
        """
        Атомарное применение обмена: debit from, credit to.

        Новое состояние строится целиком и подменяет старое одним
        присваиванием.

        Raises:
            ValueError: Если debit уводит баланс в минус (результат не прошёл
                        валидацию — ошибка программирования)
        """
        new_from = exact_sum(self.balance_of(result.from_currency), result.from_amount.copy_negate())
        if new_from < ZERO:
            raise ValueError(
                f"commit would overdraw {result.from_currency}: "
                f"balance={self.balance_of(result.from_currency)}, debit={result.from_amount}"
            )
        new_to = exact_sum(self.balance_of(result.to_currency), result.to_amount)

        updated = dict(self._balances)
        updated[result.from_currency] = new_from
        updated[result.to_currency] = new_to
        self._balances = MappingProxyType(updated)

        logger.info(
            "Ledger commit: -%s %s, +%s %s",
            result.from_amount,
            result.from_currency,
            result.to_amount,
            result.to_currency,
        )

    def apply_to_catalog(self, catalog: Catalog) -> Catalog:
        """
        Каталог с Token.balance, отражающими текущий ledger.

        Порядок и цены токенов не меняются.
        """
        return Catalog(
            tokens=tuple(
                Token(
                    currency=token.currency,
                    price=token.price,
                    balance=self.balance_of(token.currency),
                )
                for token in catalog.tokens
            )
        )

    def __contains__(self, currency: str) -> bool:
        return currency in self._balances

    def __repr__(self) -> str:
        return f"BalanceLedger({dict(self._balances)!r})"
