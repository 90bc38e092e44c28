"""JSON Schema контракты внешних источников (price feed)."""

from .validators import (
    SCHEMA_DIR,
    ContractValidator,
    PriceFeedValidator,
    SchemaLoader,
    validate_price_feed,
)

__all__ = [
    "SCHEMA_DIR",
    "SchemaLoader",
    "ContractValidator",
    "PriceFeedValidator",
    "validate_price_feed",
]
