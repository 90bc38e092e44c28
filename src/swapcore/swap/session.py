"""Swap Session — асинхронная оркестрация одной формы обмена.

Асинхронные операции сессии:
- refresh_catalog(): fetch price feed → normalize → load_catalog
- submit(): request_submit → transfer → complete_submit / fail_submit

Инварианты:
- submit() не выполняется параллельно с самим собой: повторный запрос во
  время SUBMITTING отклоняется state machine
- refresh_catalog() заменяет каталог целиком, ledger не сбрасывается
- После close() поздние завершения fetch/transfer — no-op
- Сессии не разделяют состояние: каталог, intent и ledger принадлежат сессии
"""

import asyncio
import logging
from typing import Optional, Protocol

from swapcore.core.domain.token import PriceSample
from swapcore.errors import FeedUnavailable, TransferFailed
from swapcore.feed.normalizer import normalize_feed
from swapcore.ledger.ledger import BalanceLedger
from swapcore.swap.state_machine import (
    SwapConfig,
    SwapState,
    SwapStateMachine,
    SwapTransitionResult,
)
from swapcore.swap.transfer import TransferExecutor

logger = logging.getLogger(__name__)


class PriceFeedSource(Protocol):
    """Источник котировок (PriceFeedClient или тестовый double)."""

    async def fetch_samples(self) -> list[PriceSample]:
        ...


class SwapSession:
    """Сессия формы обмена.

    Каждая асинхронная операция запоминает generation на старте; close()
    увеличивает generation, и завершения со старым generation отбрасываются.
    """

    def __init__(
        self,
        feed: PriceFeedSource,
        transfer: TransferExecutor,
        ledger: Optional[BalanceLedger] = None,
        config: Optional[SwapConfig] = None,
    ):
        self.feed = feed
        self.transfer = transfer
        self.ledger = ledger if ledger is not None else BalanceLedger()
        self.config = config or SwapConfig()
        self.machine = SwapStateMachine(self.ledger, self.config)

        self.feed_error: Optional[FeedUnavailable] = None
        self._generation = 0
        self._closed = False
        self._refresh_in_flight = False
        self._success_task: Optional[asyncio.Task] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    # =========================================================================
    # CATALOG
    # =========================================================================

    async def refresh_catalog(self) -> Optional[SwapTransitionResult]:
        """Загрузка/обновление каталога.

        Returns:
            SwapTransitionResult, или None если сессия закрыта либо
            обновление уже выполняется

        Raises:
            FeedUnavailable: feed недоступен (page-level ошибка, также
                             сохраняется в feed_error)
        """
        if self._closed:
            return None
        if self._refresh_in_flight:
            logger.debug("Catalog refresh already in flight, ignoring")
            return None

        generation = self._generation
        self._refresh_in_flight = True
        try:
            samples = await self.feed.fetch_samples()
        except FeedUnavailable as e:
            if self._is_stale(generation):
                logger.debug("Feed failure after session close ignored")
                return None
            self.feed_error = e
            raise
        finally:
            self._refresh_in_flight = False

        if self._is_stale(generation):
            logger.debug("Late catalog completion after session close ignored")
            return None

        self.feed_error = None
        catalog = normalize_feed(samples, self.ledger.snapshot())
        return self.machine.load_catalog(catalog)

    # =========================================================================
    # SUBMIT
    # =========================================================================

    async def submit(self) -> Optional[SwapTransitionResult]:
        """Отправка обмена.

        Returns:
            - результат request_submit, если обмен не прошёл валидацию или
              submit уже выполняется
            - результат complete_submit / fail_submit после transfer
            - None если сессия закрыта до завершения transfer
        """
        if self._closed:
            return None

        started = self.machine.request_submit()
        if started.new_state != SwapState.SUBMITTING or not started.transition_occurred:
            return started

        pending = started.swap_result
        generation = self._generation
        try:
            await self.transfer.execute(
                pending.from_currency,
                pending.to_currency,
                pending.from_amount,
                pending.to_amount,
            )
        except TransferFailed as e:
            if self._is_stale(generation):
                return None
            return self.machine.fail_submit(e)
        except Exception as e:
            # Форма не остаётся в SUBMITTING при непредусмотренном сбое исполнителя
            if not self._is_stale(generation):
                self.machine.fail_submit(TransferFailed(str(e) or None))
            raise

        if self._is_stale(generation):
            logger.debug("Late transfer completion after session close ignored")
            return None

        result = self.machine.complete_submit()
        self._schedule_success_revert(generation)
        return result

    def _schedule_success_revert(self, generation: int) -> None:
        if self._success_task is not None and not self._success_task.done():
            self._success_task.cancel()
        self._success_task = asyncio.create_task(self._revert_after_display(generation))

    async def _revert_after_display(self, generation: int) -> None:
        await asyncio.sleep(self.config.success_display_sec)
        if self._is_stale(generation):
            return
        self.machine.acknowledge_success()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def close(self) -> None:
        """Завершение сессии: незавершённые операции становятся no-op."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1

        if self._success_task is not None and not self._success_task.done():
            self._success_task.cancel()
            try:
                await self._success_task
            except asyncio.CancelledError:
                pass
        self._success_task = None

    async def __aenter__(self) -> "SwapSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
