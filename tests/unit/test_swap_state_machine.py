"""Тесты для Swap State Machine.

Coverage:
- Загрузка каталога (IDLE → READY, пара по умолчанию, пустой каталог)
- Редактирование (фильтр ввода суммы, выбор токенов, flip)
- Процентные пресеты
- Submit: валидация, SUBMITTING, SUCCESS / FAILED, повторный submit
- Замена каталога с сохранением балансов
- Конфигурация из окружения
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from swapcore.core.domain import Catalog, PriceSample, Token
from swapcore.errors import InsufficientBalance, InvalidAmount, SameTokenSwap, TransferFailed
from swapcore.feed.normalizer import normalize_feed
from swapcore.ledger import BalanceLedger
from swapcore.swap.state_machine import (
    DefaultPairPolicy,
    SwapConfig,
    SwapState,
    SwapStateMachine,
)

T0 = datetime(2023, 8, 29, tzinfo=timezone.utc)


def make_catalog(**prices) -> Catalog:
    return normalize_feed(
        [PriceSample(currency=c, timestamp=T0, price=p) for c, p in prices.items()]
    )


@pytest.fixture
def catalog():
    return make_catalog(WBTC="60000", ETH="3000", ATOM="7.18", USDC="1")


@pytest.fixture
def ledger():
    return BalanceLedger({"WBTC": "1"})


@pytest.fixture
def sm(ledger, catalog):
    """Машина с загруженным каталогом (READY, WBTC → ETH)."""
    machine = SwapStateMachine(ledger)
    machine.load_catalog(catalog)
    return machine


# =============================================================================
# CATALOG LOADING
# =============================================================================


class TestCatalogLoading:
    """Загрузка каталога и пара по умолчанию."""

    def test_idle_to_ready_with_preferred_pair(self, ledger, catalog):
        sm = SwapStateMachine(ledger)
        assert sm.state == SwapState.IDLE

        result = sm.load_catalog(catalog)

        assert result.previous_state == SwapState.IDLE
        assert result.new_state == SwapState.READY
        assert result.transition_occurred
        assert result.transition_reason == "catalog_loaded"
        assert (sm.from_currency, sm.to_currency) == ("WBTC", "ETH")

    def test_empty_catalog_stays_idle(self, ledger):
        sm = SwapStateMachine(ledger)

        result = sm.load_catalog(normalize_feed([]))

        assert sm.state == SwapState.IDLE
        assert not result.transition_occurred
        assert result.transition_reason == "empty_catalog"
        assert sm.from_currency == ""
        assert sm.to_currency == ""

    def test_fallback_to_first_two_tokens(self, ledger):
        sm = SwapStateMachine(ledger)

        sm.load_catalog(make_catalog(USDC="1", ATOM="7.18", ETH="3000"))

        assert (sm.from_currency, sm.to_currency) == ("ATOM", "ETH")

    def test_single_token_catalog(self, ledger):
        sm = SwapStateMachine(ledger)

        sm.load_catalog(make_catalog(ETH="3000"))

        assert (sm.from_currency, sm.to_currency) == ("ETH", "ETH")

    def test_configurable_default_pair(self, ledger, catalog):
        config = SwapConfig(default_pair=DefaultPairPolicy(preferred_from="USDC", preferred_to="ATOM"))
        sm = SwapStateMachine(ledger, config)

        sm.load_catalog(catalog)

        assert (sm.from_currency, sm.to_currency) == ("USDC", "ATOM")

    def test_catalog_tokens_carry_ledger_balances(self, sm):
        assert sm.catalog.find("WBTC").balance == Decimal("1")
        assert sm.catalog.find("ETH").balance == Decimal(0)

    def test_refresh_keeps_selection_and_state(self, sm):
        sm.select_to("ATOM")
        sm.edit_amount("0.5")

        result = sm.load_catalog(make_catalog(WBTC="61000", ATOM="7", ETH="3100"))

        assert result.transition_reason == "catalog_replaced"
        assert sm.state == SwapState.EDITING
        assert (sm.from_currency, sm.to_currency) == ("WBTC", "ATOM")
        assert sm.from_amount == "0.5"
        assert sm.catalog.find("WBTC").price == Decimal("61000")

    def test_refresh_resets_missing_selection(self, sm):
        sm.select_to("USDC")

        sm.load_catalog(make_catalog(WBTC="61000", ETH="3100"))

        assert (sm.from_currency, sm.to_currency) == ("WBTC", "ETH")

    def test_refresh_preserves_ledger(self, sm, ledger):
        sm.edit_amount("0.5")
        sm.request_submit()
        sm.complete_submit()

        sm.load_catalog(make_catalog(WBTC="60000", ETH="3000"))

        assert ledger.snapshot() == {"WBTC": Decimal("0.5"), "ETH": Decimal("10")}
        assert sm.catalog.find("ETH").balance == Decimal("10")

    def test_empty_refresh_returns_to_idle(self, sm):
        sm.edit_amount("0.5")

        result = sm.load_catalog(normalize_feed([]))

        assert result.previous_state == SwapState.EDITING
        assert result.new_state == SwapState.IDLE
        assert result.transition_reason == "catalog_emptied"
        assert (sm.from_currency, sm.to_currency, sm.from_amount) == ("", "", "")
        assert sm.edit_amount("1").transition_reason == "no_catalog"

    def test_catalog_after_empty_refresh_selects_default_pair(self, sm, catalog):
        sm.select_to("ATOM")
        sm.load_catalog(normalize_feed([]))

        result = sm.load_catalog(catalog)

        assert result.transition_reason == "catalog_loaded"
        assert (sm.from_currency, sm.to_currency) == ("WBTC", "ETH")

    def test_empty_refresh_while_submitting_keeps_pending(self, sm, ledger):
        sm.edit_amount("0.5")
        sm.request_submit()

        sm.load_catalog(normalize_feed([]))
        assert sm.state == SwapState.SUBMITTING

        result = sm.complete_submit()

        assert result.new_state == SwapState.SUCCESS
        assert ledger.snapshot() == {"WBTC": Decimal("0.5"), "ETH": Decimal("10")}


# =============================================================================
# EDITING
# =============================================================================


class TestEditing:
    """Ввод пользователя."""

    @pytest.mark.parametrize("text", ["", "12", "12.", ".5", "0.00000001"])
    def test_accepted_amounts(self, sm, text):
        result = sm.edit_amount(text)

        assert result.new_state == SwapState.EDITING
        assert result.transition_occurred
        assert sm.from_amount == text

    @pytest.mark.parametrize("text", ["1.2.3", "abc", "-1", "1e5", " 1", "1,5", "\u0663", "\uff11.5"])
    def test_rejected_keystrokes_are_no_ops(self, sm, text):
        sm.edit_amount("7")

        result = sm.edit_amount(text)

        assert result.transition_reason == "rejected_input"
        assert not result.transition_occurred
        assert result.error is None
        assert sm.from_amount == "7"
        assert sm.error is None

    def test_input_ignored_while_idle(self, ledger):
        sm = SwapStateMachine(ledger)

        result = sm.edit_amount("1")

        assert result.transition_reason == "no_catalog"
        assert sm.state == SwapState.IDLE
        assert sm.from_amount == ""

    def test_preview_recomputed_on_every_edit(self, sm):
        sm.edit_amount("0.5")
        assert sm.preview().to_amount == Decimal("10")

        sm.edit_amount("0.25")
        preview = sm.preview()

        assert preview.rate == Decimal("20")
        assert preview.to_amount == Decimal("5")
        assert preview.minimum_received == Decimal("4.975")
        assert preview.rate_text == "1 WBTC = 20.00000000 ETH"

    def test_preview_long_amount(self, sm):
        """21 цифра: предпросмотр не бросает, submit возвращает ошибку поля."""
        sm.edit_amount("123456789012345678901")

        assert sm.preview().to_amount == Decimal("2469135780246913578020")
        assert isinstance(sm.request_submit().error, InsufficientBalance)

    def test_preview_is_pure(self, sm):
        sm.edit_amount("0.5")

        first = sm.preview()
        second = sm.preview()

        assert first == second
        assert sm.state == SwapState.EDITING

    def test_select_tokens(self, sm):
        sm.select_from("ATOM")
        result = sm.select_to("USDC")

        assert result.new_state == SwapState.EDITING
        assert (sm.from_currency, sm.to_currency) == ("ATOM", "USDC")
        assert sm.preview().rate == Decimal("7.18")

    def test_select_unknown_currency_raises(self, sm):
        with pytest.raises(ValueError, match="unknown currency"):
            sm.select_from("DOGE")

    def test_flip_swaps_and_clears_amount(self, sm):
        sm.edit_amount("0.5")

        result = sm.flip()

        assert result.transition_reason == "direction_flipped"
        assert (sm.from_currency, sm.to_currency) == ("ETH", "WBTC")
        assert sm.from_amount == ""
        assert sm.preview().to_amount == 0

    def test_reset_clears_intent(self, sm):
        sm.edit_amount("0.5")

        result = sm.reset()

        assert result.new_state == SwapState.READY
        assert sm.from_amount == ""
        assert (sm.from_currency, sm.to_currency) == ("WBTC", "ETH")


# =============================================================================
# PERCENTAGE SHORTCUTS
# =============================================================================


class TestPercentage:
    """Процентные пресеты."""

    @pytest.mark.parametrize(
        "pct,expected", [(15, "0.15"), (25, "0.25"), (50, "0.50"), (75, "0.75"), (100, "1.00")]
    )
    def test_presets(self, sm, pct, expected):
        result = sm.apply_percentage(pct)

        assert result.new_state == SwapState.EDITING
        assert sm.from_amount == expected

    def test_two_decimal_places_original_balance(self, catalog):
        sm = SwapStateMachine(BalanceLedger({"WBTC": "1000"}))
        sm.load_catalog(catalog)

        sm.apply_percentage(15)

        assert sm.from_amount == "150.00"

    def test_rounds_down_never_exceeding_balance(self, catalog):
        sm = SwapStateMachine(BalanceLedger({"WBTC": "0.129"}))
        sm.load_catalog(catalog)

        sm.apply_percentage(100)

        assert sm.from_amount == "0.12"
        assert sm.request_submit().new_state == SwapState.SUBMITTING

    def test_zero_balance(self, sm):
        sm.select_from("ETH")

        sm.apply_percentage(50)

        assert sm.from_amount == "0.00"

    def test_long_balance_exact(self, catalog):
        sm = SwapStateMachine(BalanceLedger({"WBTC": "123456789012345678901234567890"}))
        sm.load_catalog(catalog)

        sm.apply_percentage(50)

        assert sm.from_amount == "61728394506172839450617283945.00"
        assert sm.request_submit().new_state == SwapState.SUBMITTING

    def test_non_preset_rejected(self, sm):
        with pytest.raises(ValueError, match="not a preset"):
            sm.apply_percentage(33)


# =============================================================================
# SUBMIT
# =============================================================================


class TestSubmit:
    """Submit → SUCCESS / FAILED."""

    def test_scenario_full_cycle(self, sm, ledger):
        sm.edit_amount("0.5")

        started = sm.request_submit()
        assert started.new_state == SwapState.SUBMITTING
        assert started.swap_result.rate_used == Decimal("20")
        assert started.swap_result.to_amount == Decimal("10")
        assert ledger.snapshot() == {"WBTC": Decimal("1")}

        done = sm.complete_submit()
        assert done.new_state == SwapState.SUCCESS
        assert done.transition_reason == "swap_committed"
        assert ledger.snapshot() == {"WBTC": Decimal("0.5"), "ETH": Decimal("10")}
        assert sm.from_amount == ""
        assert sm.pending is None
        assert sm.success_message == "Successfully swapped 0.5 WBTC for 10.00000000 ETH"

        back = sm.acknowledge_success()
        assert back.new_state == SwapState.READY
        assert sm.success_message is None

    def test_validation_failure_stays_editing(self, sm, ledger):
        sm.edit_amount("2")

        result = sm.request_submit()

        assert result.new_state == SwapState.EDITING
        assert result.transition_reason == "insufficient_balance"
        assert isinstance(result.error, InsufficientBalance)
        assert isinstance(sm.error, InsufficientBalance)
        assert ledger.snapshot() == {"WBTC": Decimal("1")}

    def test_submit_from_ready_without_amount(self, sm):
        result = sm.request_submit()

        assert result.previous_state == SwapState.READY
        assert result.new_state == SwapState.EDITING
        assert isinstance(sm.error, InvalidAmount)

    def test_same_token_surfaces_error(self, sm):
        sm.select_to("WBTC")
        sm.edit_amount("1")

        result = sm.request_submit()

        assert isinstance(result.error, SameTokenSwap)
        assert result.error.message == "Cannot swap the same token"

    def test_error_cleared_by_next_edit(self, sm):
        sm.request_submit()
        assert sm.error is not None

        sm.edit_amount("0.1")

        assert sm.error is None

    def test_second_submit_rejected_while_submitting(self, sm):
        sm.edit_amount("0.5")
        sm.request_submit()
        pending = sm.pending

        second = sm.request_submit()

        assert second.transition_reason == "submit_in_flight"
        assert not second.transition_occurred
        assert sm.state == SwapState.SUBMITTING
        assert sm.pending is pending

    def test_input_ignored_while_submitting(self, sm):
        sm.edit_amount("0.5")
        sm.request_submit()

        assert sm.edit_amount("0.1").transition_reason == "submit_in_flight"
        assert sm.flip().transition_reason == "submit_in_flight"
        assert sm.reset().transition_reason == "submit_in_flight"
        assert sm.from_amount == "0.5"

    def test_transfer_failure_leaves_ledger_untouched(self, sm, ledger):
        sm.edit_amount("0.5")
        sm.request_submit()

        result = sm.fail_submit(TransferFailed("Network congested"))

        assert result.new_state == SwapState.FAILED
        assert result.transition_reason == "transfer_failed"
        assert sm.error.message == "Network congested"
        assert ledger.snapshot() == {"WBTC": Decimal("1")}
        assert sm.from_amount == "0.5"

    def test_failed_reverts_to_editing_on_input(self, sm):
        sm.edit_amount("0.5")
        sm.request_submit()
        sm.fail_submit(TransferFailed())

        result = sm.edit_amount("0.4")

        assert result.previous_state == SwapState.FAILED
        assert result.new_state == SwapState.EDITING
        assert sm.error is None

    def test_resubmit_after_failure(self, sm):
        sm.edit_amount("0.5")
        sm.request_submit()
        sm.fail_submit(TransferFailed())

        result = sm.request_submit()

        assert result.previous_state == SwapState.FAILED
        assert result.new_state == SwapState.SUBMITTING

    def test_complete_without_submit_is_no_op(self, sm, ledger):
        result = sm.complete_submit()

        assert result.transition_reason == "not_submitting"
        assert ledger.snapshot() == {"WBTC": Decimal("1")}

    def test_input_after_success_enters_editing(self, sm):
        sm.edit_amount("0.5")
        sm.request_submit()
        sm.complete_submit()

        result = sm.edit_amount("0.1")

        assert result.previous_state == SwapState.SUCCESS
        assert result.new_state == SwapState.EDITING
        assert sm.success_message is None
        assert sm.acknowledge_success().transition_reason == "not_in_success"


# =============================================================================
# CONFIG
# =============================================================================


class TestSwapConfig:
    def test_defaults(self):
        config = SwapConfig()

        assert config.percentage_presets == (15, 25, 50, 75, 100)
        assert config.success_display_sec == 3.0
        assert config.default_pair == DefaultPairPolicy("WBTC", "ETH")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SWAPCORE_DEFAULT_FROM", "ATOM")
        monkeypatch.setenv("SWAPCORE_DEFAULT_TO", "USDC")
        monkeypatch.setenv("SWAPCORE_PERCENT_PRESETS", "10, 20")
        monkeypatch.setenv("SWAPCORE_SUCCESS_DISPLAY_SEC", "1.5")
        monkeypatch.setenv("SWAPCORE_SLIPPAGE", "0.01")

        config = SwapConfig.from_env()

        assert config.default_pair == DefaultPairPolicy("ATOM", "USDC")
        assert config.percentage_presets == (10, 20)
        assert config.success_display_sec == 1.5
        assert config.slippage == Decimal("0.01")

    def test_default_pair_empty_catalog_raises(self):
        with pytest.raises(ValueError):
            DefaultPairPolicy().select(Catalog())

    def test_default_pair_ignores_half_present_preference(self):
        catalog = Catalog(
            tokens=(Token(currency="ATOM", price=7), Token(currency="WBTC", price=60000))
        )

        assert DefaultPairPolicy().select(catalog) == ("ATOM", "WBTC")
