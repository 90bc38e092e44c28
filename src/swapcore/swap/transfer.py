"""Transfer execution — внешний исполнитель перевода.

Контракт: execute(from, to, from_amount, to_amount) завершается успешно или
бросает TransferFailed с сообщением для пользователя. Любой исполнитель
считается ненадёжным; SimulatedTransfer лишь имитирует задержку.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol

from swapcore.errors import TransferFailed

logger = logging.getLogger(__name__)


class TransferExecutor(Protocol):
    """Исполнитель перевода."""

    async def execute(
        self,
        from_currency: str,
        to_currency: str,
        from_amount: Decimal,
        to_amount: Decimal,
    ) -> None:
        ...


@dataclass(frozen=True)
class TransferConfig:
    """Конфигурация симулированного перевода."""

    delay_sec: float = 2.0
    # Сообщение отказа; None: перевод всегда успешен
    fail_reason: Optional[str] = None


class SimulatedTransfer:
    """Симулированный перевод с фиксированной искусственной задержкой."""

    def __init__(self, config: Optional[TransferConfig] = None):
        self.config = config or TransferConfig()

    async def execute(
        self,
        from_currency: str,
        to_currency: str,
        from_amount: Decimal,
        to_amount: Decimal,
    ) -> None:
        await asyncio.sleep(self.config.delay_sec)

        if self.config.fail_reason is not None:
            raise TransferFailed(self.config.fail_reason)

        logger.info(
            "Simulated transfer: %s %s -> %s %s",
            from_amount,
            from_currency,
            to_amount,
            to_currency,
        )
