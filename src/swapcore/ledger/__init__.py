"""Ledger — in-memory балансы сессии обмена."""

from .ledger import BalanceLedger

__all__ = ["BalanceLedger"]
