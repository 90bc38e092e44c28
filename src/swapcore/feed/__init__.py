"""Feed — получение и нормализация price feed."""

from .client import PRICES_URL, FeedClientConfig, PriceFeedClient
from .normalizer import normalize_feed, parse_feed_payload

__all__ = [
    "PRICES_URL",
    "FeedClientConfig",
    "PriceFeedClient",
    "normalize_feed",
    "parse_feed_payload",
]
