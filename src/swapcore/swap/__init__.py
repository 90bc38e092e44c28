"""Swap — state machine формы обмена, сессия и внешние исполнители.

- SwapStateMachine: IDLE/READY/EDITING/SUBMITTING/SUCCESS/FAILED
- SwapSession: async fetch каталога и transfer с защитой от поздних завершений
- SimulatedTransfer: перевод с фиксированной задержкой
"""

from .session import PriceFeedSource, SwapSession
from .state_machine import (
    DefaultPairPolicy,
    SwapConfig,
    SwapPreview,
    SwapState,
    SwapStateMachine,
    SwapTransitionResult,
)
from .token_selector import filter_tokens, token_icon_url
from .transfer import SimulatedTransfer, TransferConfig, TransferExecutor

__all__ = [
    "SwapStateMachine",
    "SwapState",
    "SwapConfig",
    "SwapPreview",
    "SwapTransitionResult",
    "DefaultPairPolicy",
    "SwapSession",
    "PriceFeedSource",
    "SimulatedTransfer",
    "TransferConfig",
    "TransferExecutor",
    "filter_tokens",
    "token_icon_url",
]
