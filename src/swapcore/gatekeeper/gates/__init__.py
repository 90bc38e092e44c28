"""Gates — индивидуальные гейты Validation Engine.

- GATE 0: Валидация суммы (InvalidAmount)
- GATE 1: Проверка баланса (InsufficientBalance)
- GATE 2: Запрет same-token swap (SameTokenSwap)
- GATE 3: Доступность курса (RateUnavailable)
"""

from .gate_00_amount import Gate00AmountValidation, Gate00Result
from .gate_01_balance import Gate01BalanceCheck, Gate01Result
from .gate_02_same_token import Gate02Result, Gate02SameToken
from .gate_03_rate import Gate03RateAvailability, Gate03Result

__all__ = [
    "Gate00AmountValidation",
    "Gate00Result",
    "Gate01BalanceCheck",
    "Gate01Result",
    "Gate02SameToken",
    "Gate02Result",
    "Gate03RateAvailability",
    "Gate03Result",
]
