"""
Price Feed Client — получение котировок из публичного price feed

Единственная операция: fetch_samples() — чтение всех котировок.
Любой сбой (сеть, таймаут, не-2xx статус, не-JSON тело, нарушение
контракта) сообщается вызывающему коду как FeedUnavailable.
"""

import logging
from dataclasses import dataclass
from typing import Final, Optional

import httpx

from swapcore.core.domain.token import PriceSample
from swapcore.errors import FeedUnavailable
from swapcore.feed.normalizer import parse_feed_payload

logger = logging.getLogger(__name__)

PRICES_URL: Final[str] = "https://interview.switcheo.com/prices.json"


@dataclass(frozen=True)
class FeedClientConfig:
    """Конфигурация клиента price feed."""

    url: str = PRICES_URL
    timeout_sec: float = 15.0


class PriceFeedClient:
    """
    Async HTTP клиент price feed.

    Можно передать собственный httpx.AsyncClient (например, с MockTransport
    в тестах); в этом случае закрытие клиента — ответственность владельца.
    """

    def __init__(
        self,
        config: Optional[FeedClientConfig] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or FeedClientConfig()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "PriceFeedClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_sec)
        return self._client

    async def fetch_samples(self) -> list[PriceSample]:
        """
        Получение всех котировок.

        Returns:
            Список PriceSample (сырой, с дубликатами)

        Raises:
            FeedUnavailable: Если feed недоступен или ответ некорректен
        """
        client = self._get_client()
        try:
            resp = await client.get(self.config.url)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Price feed returned HTTP %d", e.response.status_code)
            raise FeedUnavailable(
                f"Failed to fetch token prices: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Price feed request failed: %s", e)
            raise FeedUnavailable(f"Failed to fetch token prices: {e}") from e
        except ValueError as e:
            # resp.json() на не-JSON теле
            logger.warning("Price feed returned non-JSON body")
            raise FeedUnavailable("Failed to fetch token prices: invalid JSON") from e

        samples = parse_feed_payload(payload)
        logger.info("Fetched %d price samples from %s", len(samples), self.config.url)
        return samples
