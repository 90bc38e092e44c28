"""
swapcore — движок расчёта и валидации обмена токенов.

Нормализация price feed в каталог токенов, расчёт курсов, ordered gates
валидации, state machine формы обмена и in-memory balance ledger.
"""

__version__ = "0.1.0"
