"""Swap State Machine — управление состоянием формы обмена.

- IDLE → READY при загрузке непустого каталога (выбор пары по умолчанию)
- READY/EDITING/FAILED/SUCCESS → EDITING на любой ввод пользователя
- EDITING → SUBMITTING только при PASS Validation Engine
- SUBMITTING → SUCCESS (ledger commit) / FAILED (ledger не изменён)
- SUCCESS → READY после окна отображения (acknowledge_success)

Предпросмотр курса и "to amount" — чистые функции (swapcore.core.math.rates),
вызываемые явно; машина не держит наблюдателей.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal, localcontext
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

from swapcore.core.domain.swap import SwapIntent, SwapResult
from swapcore.core.domain.token import Catalog, Token
from swapcore.core.math.decimal_safeguards import (
    PERCENT_AMOUNT_QUANT,
    format_fixed,
    parse_amount,
    quantize_amount,
    to_decimal,
)
from swapcore.core.math.rates import (
    DEFAULT_SLIPPAGE,
    format_rate,
    minimum_received,
    preview_to_amount,
    rate,
)
from swapcore.errors import SwapError, TransferFailed
from swapcore.gatekeeper.validation import SwapValidator
from swapcore.ledger.ledger import BalanceLedger

logger = logging.getLogger(__name__)

# ASCII цифры с не более чем одной десятичной точкой ("", "12", "12.", ".5")
AMOUNT_INPUT_PATTERN = re.compile(r"[0-9]*\.?[0-9]*")


class SwapState(str, Enum):
    """Состояние формы обмена."""

    IDLE = "IDLE"
    READY = "READY"
    EDITING = "EDITING"
    SUBMITTING = "SUBMITTING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


# Состояния, в которых ввод пользователя принимается
INPUT_STATES = frozenset(
    {SwapState.READY, SwapState.EDITING, SwapState.SUCCESS, SwapState.FAILED}
)


@dataclass(frozen=True)
class DefaultPairPolicy:
    """Политика выбора пары по умолчанию после загрузки каталога.

    - Предпочтительная пара, если обе валюты есть в каталоге
    - Иначе первые два токена каталога
    - Каталог из одного токена: to = from
    """

    preferred_from: Optional[str] = "WBTC"
    preferred_to: Optional[str] = "ETH"

    def select(self, catalog: Catalog) -> tuple[str, str]:
        if catalog.is_empty():
            raise ValueError("cannot select default pair from an empty catalog")

        if (
            self.preferred_from
            and self.preferred_to
            and catalog.contains(self.preferred_from)
            and catalog.contains(self.preferred_to)
        ):
            return self.preferred_from, self.preferred_to

        currencies = catalog.currencies()
        from_currency = currencies[0]
        to_currency = currencies[1] if len(currencies) > 1 else from_currency
        return from_currency, to_currency


@dataclass(frozen=True)
class SwapConfig:
    """Конфигурация формы обмена."""

    default_pair: DefaultPairPolicy = field(default_factory=DefaultPairPolicy)
    percentage_presets: tuple[int, ...] = (15, 25, 50, 75, 100)
    success_display_sec: float = 3.0
    slippage: Decimal = DEFAULT_SLIPPAGE

    @classmethod
    def from_env(cls) -> "SwapConfig":
        """Конфигурация из окружения (.env поддерживается).

        SWAPCORE_DEFAULT_FROM, SWAPCORE_DEFAULT_TO, SWAPCORE_PERCENT_PRESETS
        ("15,25,50"), SWAPCORE_SUCCESS_DISPLAY_SEC, SWAPCORE_SLIPPAGE.
        """
        load_dotenv()
        defaults = cls()

        presets_raw = os.getenv("SWAPCORE_PERCENT_PRESETS")
        presets = (
            tuple(int(p.strip()) for p in presets_raw.split(",") if p.strip())
            if presets_raw
            else defaults.percentage_presets
        )

        return cls(
            default_pair=DefaultPairPolicy(
                preferred_from=os.getenv("SWAPCORE_DEFAULT_FROM", defaults.default_pair.preferred_from),
                preferred_to=os.getenv("SWAPCORE_DEFAULT_TO", defaults.default_pair.preferred_to),
            ),
            percentage_presets=presets,
            success_display_sec=float(
                os.getenv("SWAPCORE_SUCCESS_DISPLAY_SEC", defaults.success_display_sec)
            ),
            slippage=to_decimal(os.getenv("SWAPCORE_SLIPPAGE", str(defaults.slippage))),
        )


@dataclass(frozen=True)
class SwapTransitionResult:
    """Результат операции над формой."""

    new_state: SwapState
    previous_state: SwapState

    # Диагностика
    transition_occurred: bool
    transition_reason: str

    # Ошибка для поля формы (валидация / transfer)
    error: Optional[SwapError] = None

    # SwapResult (кандидат при SUBMITTING, закоммиченный при SUCCESS)
    swap_result: Optional[SwapResult] = None

    # Для отладки
    details: str = ""


@dataclass(frozen=True)
class SwapPreview:
    """Live-предпросмотр формы (вычисляется на каждый ввод)."""

    from_token: Optional[Token]
    to_token: Optional[Token]
    rate: Decimal
    to_amount: Decimal
    minimum_received: Decimal
    rate_text: str


class SwapStateMachine:
    """Swap State Machine формы обмена одной сессии.

    Машина владеет состоянием формы (выбранные токены, сумма, статус) и
    последовательно проводит действия пользователя до изменения ledger.

    States:
    - IDLE: каталог не загружен / пуст
    - READY: каталог загружен, пара выбрана, ввода ещё не было
    - EDITING: пользователь редактирует сумму/токены
    - SUBMITTING: transfer в процессе, повторный submit отклоняется
    - SUCCESS: обмен закоммичен, возврат в READY после окна отображения
    - FAILED: transfer отклонён, возврат в EDITING на следующий ввод
    """

    def __init__(
        self,
        ledger: BalanceLedger,
        config: Optional[SwapConfig] = None,
        validator: Optional[SwapValidator] = None,
    ):
        """
        Args:
            ledger: ledger сессии (машина — единственный, кто вызывает commit)
            config: конфигурация формы
            validator: Validation Engine
        """
        self.ledger = ledger
        self.config = config or SwapConfig()
        self.validator = validator or SwapValidator()

        self.state = SwapState.IDLE
        self.catalog = Catalog()
        self.from_currency = ""
        self.to_currency = ""
        self.from_amount = ""
        self.error: Optional[SwapError] = None
        self.success_message: Optional[str] = None
        self.pending: Optional[SwapResult] = None
        self.last_result: Optional[SwapResult] = None

    # =========================================================================
    # READ-ONLY VIEWS
    # =========================================================================

    @property
    def intent(self) -> SwapIntent:
        return SwapIntent(
            from_currency=self.from_currency,
            to_currency=self.to_currency,
            from_amount=self.from_amount,
        )

    @property
    def balance(self) -> Decimal:
        """Баланс выбранной from-валюты."""
        return self.ledger.balance_of(self.from_currency)

    def preview(self) -> SwapPreview:
        """Предпросмотр курса и суммы получения. Без побочных эффектов."""
        from_token = self.catalog.find(self.from_currency)
        to_token = self.catalog.find(self.to_currency)
        rate_value = rate(from_token, to_token)
        to_amount = preview_to_amount(parse_amount(self.from_amount), rate_value)
        return SwapPreview(
            from_token=from_token,
            to_token=to_token,
            rate=rate_value,
            to_amount=to_amount,
            minimum_received=minimum_received(to_amount, self.config.slippage),
            rate_text=format_rate(self.from_currency, self.to_currency, rate_value),
        )

    # =========================================================================
    # CATALOG
    # =========================================================================

    def load_catalog(self, catalog: Catalog) -> SwapTransitionResult:
        """Загрузка (или замена) каталога.

        - Пустой каталог: IDLE (выбор и сумма сбрасываются); во время
          SUBMITTING состояние сохраняется до завершения transfer
        - Первый непустой каталог: IDLE → READY, пара по DefaultPairPolicy
        - Повторная загрузка: каталог заменяется целиком, балансы из ledger
          сохраняются, выбранные валюты сохраняются если есть в новом каталоге
        """
        previous = self.state
        self.catalog = self.ledger.apply_to_catalog(catalog)

        if self.catalog.is_empty():
            if previous == SwapState.IDLE:
                return self._result(previous, "empty_catalog", "Catalog is empty, staying IDLE")
            if previous == SwapState.SUBMITTING:
                # pending swap завершается через complete_submit / fail_submit
                return self._result(previous, "catalog_replaced", "Catalog emptied while submitting")
            self.from_currency = ""
            self.to_currency = ""
            self.from_amount = ""
            self.error = None
            self.success_message = None
            self.state = SwapState.IDLE
            logger.warning("Catalog refresh returned no tokens, back to IDLE")
            return self._result(previous, "catalog_emptied", "Catalog is empty, back to IDLE")

        if previous == SwapState.IDLE:
            self.from_currency, self.to_currency = self.config.default_pair.select(self.catalog)
            self.state = SwapState.READY
            logger.info(
                "Catalog loaded: %d tokens, default pair %s -> %s",
                len(self.catalog),
                self.from_currency,
                self.to_currency,
            )
            return self._result(
                previous,
                "catalog_loaded",
                f"Default pair {self.from_currency} -> {self.to_currency}",
            )

        if not (self.catalog.contains(self.from_currency) and self.catalog.contains(self.to_currency)):
            self.from_currency, self.to_currency = self.config.default_pair.select(self.catalog)
            logger.info(
                "Selected pair missing after refresh, reset to %s -> %s",
                self.from_currency,
                self.to_currency,
            )
        return self._result(previous, "catalog_replaced", f"Catalog replaced: {len(self.catalog)} tokens")

    # =========================================================================
    # USER INPUT
    # =========================================================================

    def edit_amount(self, text: str) -> SwapTransitionResult:
        """Изменение суммы.

        Принимается только текст вида цифры-с-одной-точкой; иначе ввод
        игнорируется без ошибки.
        """
        blocked = self._check_input_allowed()
        if blocked is not None:
            return blocked

        if AMOUNT_INPUT_PATTERN.fullmatch(text) is None:
            logger.debug("Rejected amount keystroke: %r", text)
            return self._result(self.state, "rejected_input", f"Rejected amount text {text!r}")

        self.from_amount = text
        return self._enter_editing("amount_edited", f"from_amount={text!r}")

    def select_from(self, currency: str) -> SwapTransitionResult:
        """Выбор from-токена. Неизвестная валюта — ValueError."""
        blocked = self._check_input_allowed()
        if blocked is not None:
            return blocked
        self._require_currency(currency)
        self.from_currency = currency
        return self._enter_editing("from_selected", f"from={currency}")

    def select_to(self, currency: str) -> SwapTransitionResult:
        """Выбор to-токена. Неизвестная валюта — ValueError."""
        blocked = self._check_input_allowed()
        if blocked is not None:
            return blocked
        self._require_currency(currency)
        self.to_currency = currency
        return self._enter_editing("to_selected", f"to={currency}")

    def flip(self) -> SwapTransitionResult:
        """Смена направления: from ↔ to, обе суммы очищаются."""
        blocked = self._check_input_allowed()
        if blocked is not None:
            return blocked
        self.from_currency, self.to_currency = self.to_currency, self.from_currency
        self.from_amount = ""
        return self._enter_editing("direction_flipped", f"{self.from_currency} -> {self.to_currency}")

    def percentage_amount(self, percentage: int) -> str:
        """Сумма пресета: balance(from) * pct / 100, ровно два знака.

        Округление вниз: сумма пресета никогда не превышает баланс.
        """
        if percentage not in self.config.percentage_presets:
            raise ValueError(
                f"percentage {percentage} is not a preset {self.config.percentage_presets}"
            )
        balance = self.balance
        # Точное произведение: без округления до 28 цифр контекста
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(balance.as_tuple().digits) + 5)
            amount = balance * Decimal(percentage) / Decimal(100)
        return format_fixed(quantize_amount(amount, PERCENT_AMOUNT_QUANT, ROUND_DOWN), 2)

    def apply_percentage(self, percentage: int) -> SwapTransitionResult:
        """Процентный пресет; проходит через тот же переход, что edit_amount."""
        blocked = self._check_input_allowed()
        if blocked is not None:
            return blocked
        return self.edit_amount(self.percentage_amount(percentage))

    def reset(self) -> SwapTransitionResult:
        """Сброс intent: сумма и ошибка очищаются, пара сохраняется."""
        previous = self.state
        if previous == SwapState.SUBMITTING:
            return self._result(previous, "submit_in_flight", "Cannot reset while submitting")

        self.from_amount = ""
        self.error = None
        self.success_message = None
        self.state = SwapState.IDLE if self.catalog.is_empty() else SwapState.READY
        return self._result(previous, "intent_reset", "Intent cleared")

    # =========================================================================
    # SUBMIT
    # =========================================================================

    def request_submit(self) -> SwapTransitionResult:
        """Запрос commit.

        - SUBMITTING: повторный запрос отклоняется (не ставится в очередь)
        - Validation Engine FAIL: EDITING + ошибка поля
        - PASS: SUBMITTING, кандидат SwapResult сохраняется в pending
        """
        blocked = self._check_input_allowed()
        if blocked is not None:
            return blocked

        previous = self.state
        verdict = self.validator.validate(self.intent, self.catalog, self.ledger)

        if not verdict.passed:
            self.state = SwapState.EDITING
            self.error = verdict.error
            self.success_message = None
            logger.warning("Swap rejected: %s (%s)", verdict.block_reason, verdict.details)
            return self._result(previous, verdict.block_reason, verdict.details, error=verdict.error)

        self.state = SwapState.SUBMITTING
        self.error = None
        self.success_message = None
        self.pending = verdict.swap_result
        return self._result(
            previous, "submit_started", verdict.details, swap_result=verdict.swap_result
        )

    def complete_submit(self) -> SwapTransitionResult:
        """Transfer подтверждён: SUBMITTING → SUCCESS, commit в ledger."""
        previous = self.state
        if previous != SwapState.SUBMITTING or self.pending is None:
            return self._result(previous, "not_submitting", "No swap in flight")

        result = self.pending
        self.ledger.commit(result)
        self.catalog = self.ledger.apply_to_catalog(self.catalog)

        self.pending = None
        self.last_result = result
        self.from_amount = ""
        self.error = None
        self.success_message = result.summary()
        self.state = SwapState.SUCCESS
        return self._result(previous, "swap_committed", self.success_message, swap_result=result)

    def fail_submit(self, error: TransferFailed) -> SwapTransitionResult:
        """Transfer отклонён: SUBMITTING → FAILED, ledger не изменяется."""
        previous = self.state
        if previous != SwapState.SUBMITTING:
            return self._result(previous, "not_submitting", "No swap in flight")

        self.pending = None
        self.error = error
        self.state = SwapState.FAILED
        logger.warning("Transfer failed: %s", error.message)
        return self._result(previous, error.reason, error.message, error=error)

    def acknowledge_success(self) -> SwapTransitionResult:
        """Окно отображения успеха истекло: SUCCESS → READY."""
        previous = self.state
        if previous != SwapState.SUCCESS:
            return self._result(previous, "not_in_success", "Nothing to acknowledge")
        self.success_message = None
        self.state = SwapState.READY
        return self._result(previous, "success_acknowledged", "Back to READY")

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _check_input_allowed(self) -> Optional[SwapTransitionResult]:
        if self.state == SwapState.SUBMITTING:
            return self._result(self.state, "submit_in_flight", "Input ignored while submitting")
        if self.state not in INPUT_STATES:
            return self._result(self.state, "no_catalog", "Input ignored: catalog not loaded")
        return None

    def _require_currency(self, currency: str) -> None:
        if not self.catalog.contains(currency):
            raise ValueError(f"unknown currency: {currency!r}")

    def _enter_editing(self, reason: str, details: str) -> SwapTransitionResult:
        previous = self.state
        self.state = SwapState.EDITING
        self.error = None
        self.success_message = None
        return self._result(previous, reason, details, occurred=True)

    def _result(
        self,
        previous_state: SwapState,
        transition_reason: str,
        details: str,
        error: Optional[SwapError] = None,
        swap_result: Optional[SwapResult] = None,
        occurred: Optional[bool] = None,
    ) -> SwapTransitionResult:
        if occurred is None:
            occurred = self.state != previous_state
        return SwapTransitionResult(
            new_state=self.state,
            previous_state=previous_state,
            transition_occurred=occurred,
            transition_reason=transition_reason,
            error=error,
            swap_result=swap_result,
            details=details,
        )
