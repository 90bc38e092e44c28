"""
Price Feed Normalizer — сырой price feed → канонический каталог токенов

Алгоритм:
1. Отбросить записи с price <= 0 (и нечисловые/бесконечные цены)
2. Сгруппировать по currency, оставить запись с максимальным timestamp
   (при равенстве — последнюю встреченную во входной последовательности)
3. Выпустить один Token на валюту, отсортировать по currency

Граничные случаи:
- Пустой feed → пустой Catalog (не ошибка)
- Все записи невалидны → пустой Catalog

Normalizer никогда не падает на корректно сформированном входе. Ошибки
транспорта/контракта обрабатываются в swapcore.feed.client (FeedUnavailable).
"""

import logging
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from swapcore.core.contracts import PriceFeedValidator
from swapcore.core.domain.token import Catalog, PriceSample, Token, currency_sort_key
from swapcore.errors import FeedUnavailable

logger = logging.getLogger(__name__)


def normalize_feed(
    samples: Iterable[PriceSample],
    balances: Optional[Mapping[str, Decimal]] = None,
) -> Catalog:
    """
    Нормализация сырого feed в Catalog.

    Args:
        samples: Неупорядоченная последовательность PriceSample
        balances: Балансы по валюте для заполнения Token.balance
                  (отсутствующая валюта → 0)

    Returns:
        Catalog: по одному Token на валюту, отсортированный
    """
    latest: dict[str, PriceSample] = {}

    for sample in samples:
        if not sample.is_valid_price():
            continue

        existing = latest.get(sample.currency)
        # >= : при равных timestamp побеждает последняя запись
        if existing is None or sample.timestamp >= existing.timestamp:
            latest[sample.currency] = sample

    balance_lookup = balances or {}
    tokens = [
        Token(
            currency=sample.currency,
            price=sample.price,
            balance=balance_lookup.get(sample.currency, Decimal(0)),
        )
        for sample in latest.values()
    ]
    tokens.sort(key=lambda token: currency_sort_key(token.currency))

    return Catalog(tokens=tuple(tokens))


def parse_feed_payload(payload: Any) -> list[PriceSample]:
    """
    Разбор сырого JSON ответа price feed в список PriceSample.

    Payload проверяется по контракту price_feed. Записи, прошедшие контракт,
    но с неразбираемой ценой или датой, пропускаются (warning в лог).

    Raises:
        FeedUnavailable: Если payload не соответствует контракту
    """
    violations = PriceFeedValidator().describe_violations(payload)
    if violations:
        logger.warning("Price feed contract violations: %s", "; ".join(violations))
        raise FeedUnavailable(f"Malformed price feed: {violations[0]}")

    samples: list[PriceSample] = []
    skipped = 0
    for index, entry in enumerate(payload):
        try:
            samples.append(PriceSample.model_validate(entry))
        except ValidationError as e:
            skipped += 1
            logger.warning(
                "Skipping price feed entry #%d (%s): %s",
                index,
                entry.get("currency"),
                e.errors()[0].get("msg", "invalid"),
            )

    if skipped:
        logger.info("Parsed %d price samples, skipped %d", len(samples), skipped)
    return samples
