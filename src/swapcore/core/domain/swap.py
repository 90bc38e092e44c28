"""
SwapIntent / SwapResult — модели операции обмена

SwapIntent — незакоммиченный запрос обмена: живёт только пока форма
редактируется, сумма хранится как введённый текст.
SwapResult — провалидированный обмен: вход для BalanceLedger.commit и
результат, возвращаемый вызывающему коду.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from swapcore.core.math.decimal_safeguards import to_decimal


class SwapIntent(BaseModel):
    """
    Запрос обмена в процессе редактирования.

    from_amount — сырой текст поля ввода (может быть пустым или "12.").
    Парсинг и проверка суммы — ответственность GATE 0.
    """

    from_currency: str = Field(default="", description="Валюта, которую отдаём")
    to_currency: str = Field(default="", description="Валюта, которую получаем")
    from_amount: str = Field(default="", description="Введённая сумма (текст)")

    model_config = {"frozen": True}


class SwapResult(BaseModel):
    """
    Результат успешной валидации обмена.

    Инварианты:
    - from_currency != to_currency
    - from_amount > 0, to_amount > 0, rate_used > 0
    """

    from_currency: str = Field(..., min_length=1)
    to_currency: str = Field(..., min_length=1)
    from_amount: Decimal = Field(..., gt=0)
    to_amount: Decimal = Field(..., gt=0)
    rate_used: Decimal = Field(..., gt=0)

    model_config = {"frozen": True}

    @field_validator("from_amount", "to_amount", "rate_used", mode="before")
    @classmethod
    def coerce_decimal(cls, v):
        if isinstance(v, (int, float, str)) and not isinstance(v, bool):
            return to_decimal(v)
        return v

    @model_validator(mode="after")
    def validate_distinct_currencies(self) -> "SwapResult":
        if self.from_currency == self.to_currency:
            raise ValueError(f"swap result with identical currencies: {self.from_currency}")
        return self

    def summary(self) -> str:
        """Сообщение об успешном обмене для пользователя."""
        return (
            f"Successfully swapped {self.from_amount} {self.from_currency} "
            f"for {self.to_amount} {self.to_currency}"
        )
