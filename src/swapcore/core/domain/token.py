"""
Token / PriceSample / Catalog — модели каталога токенов

PriceSample — сырая запись price feed (может дублироваться, может иметь
нулевую/отрицательную цену).
Token — одна запись на уникальную валюту, identity = currency.
Catalog — упорядоченный набор Token без дубликатов, все цены > 0.

Immutable Pydantic модели: каталог пересобирается целиком при каждом
обновлении feed, частичные правки запрещены.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterator, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from swapcore.core.math.decimal_safeguards import to_decimal


def currency_sort_key(currency: str) -> tuple[str, str]:
    """
    Ключ сортировки каталога.

    Регистронезависимое лексическое сравнение, ordinal tie-break
    ("eth" и "ETH" упорядочиваются детерминированно).
    """
    return (currency.casefold(), currency)


# =============================================================================
# PRICE SAMPLE
# =============================================================================


class PriceSample(BaseModel):
    """
    Сырая запись price feed.

    JSON feed использует поле "date" для времени — принимается как alias.
    Naive datetime трактуется как UTC, чтобы сравнения timestamp были
    корректны для смешанного feed.
    """

    currency: str = Field(..., min_length=1, description="Код валюты (например, 'ETH')")
    timestamp: datetime = Field(..., alias="date", description="Время котировки")
    price: Decimal = Field(..., description="Цена в USD (может быть <= 0 в сыром feed)")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v):
        """Цена конвертируется в Decimal без binary float drift."""
        if isinstance(v, (int, float, str, Decimal)) and not isinstance(v, bool):
            return to_decimal(v)
        return v

    @field_validator("timestamp")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def is_valid_price(self) -> bool:
        """True если цена конечна и строго положительна."""
        return self.price.is_finite() and self.price > 0


# =============================================================================
# TOKEN
# =============================================================================


class Token(BaseModel):
    """
    Токен каталога: актуальная цена и баланс пользователя.

    Инвариант: price > 0, balance >= 0.
    """

    currency: str = Field(..., min_length=1, description="Код валюты, identity токена")
    price: Decimal = Field(..., gt=0, description="Актуальная цена (USD)")
    balance: Decimal = Field(default=Decimal(0), ge=0, description="Доступный баланс")

    model_config = {"frozen": True}

    @field_validator("price", "balance", mode="before")
    @classmethod
    def coerce_decimal(cls, v):
        if isinstance(v, (int, float, str)) and not isinstance(v, bool):
            return to_decimal(v)
        return v

    @field_validator("price")
    @classmethod
    def validate_price_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError(f"price must be finite, got {v}")
        return v


# =============================================================================
# CATALOG
# =============================================================================


class Catalog(BaseModel):
    """
    Каталог торгуемых токенов.

    Инварианты:
    - Отсортирован по currency_sort_key
    - Нет дубликатов currency
    - Все Token.price > 0 (гарантировано моделью Token)
    """

    tokens: tuple[Token, ...] = Field(default=(), description="Токены в порядке сортировки")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_order_and_uniqueness(self) -> "Catalog":
        seen: set[str] = set()
        previous_key: Optional[tuple[str, str]] = None
        for token in self.tokens:
            if token.currency in seen:
                raise ValueError(f"duplicate currency in catalog: {token.currency}")
            seen.add(token.currency)

            key = currency_sort_key(token.currency)
            if previous_key is not None and key < previous_key:
                raise ValueError(
                    f"catalog is not sorted: {token.currency} after {previous_key[1]}"
                )
            previous_key = key
        return self

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self) -> Iterator[Token]:  # type: ignore[override]
        return iter(self.tokens)

    def is_empty(self) -> bool:
        return len(self.tokens) == 0

    def find(self, currency: Optional[str]) -> Optional[Token]:
        """Поиск токена по currency (точное совпадение). None если нет."""
        if not currency:
            return None
        for token in self.tokens:
            if token.currency == currency:
                return token
        return None

    def contains(self, currency: Optional[str]) -> bool:
        return self.find(currency) is not None

    def currencies(self) -> list[str]:
        return [token.currency for token in self.tokens]
