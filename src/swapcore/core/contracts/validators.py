"""
Price feed contract (JSON Schema)

Сырой ответ price feed проверяется по schema/price_feed.json до того, как
записи попадают в pydantic модели. Контракт описывает только форму данных:
дубликаты валют и price <= 0 допустимы и отбрасываются normalizer.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

SCHEMA_DIR = Path(__file__).parent / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """Чтение и meta-validation схем из каталога (по умолчанию package data)."""

    def __init__(self, schema_dir: Optional[Path] = None):
        self.schema_dir = schema_dir or SCHEMA_DIR
        if not self.schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self.schema_dir}")
        self._cache: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, name: str) -> Dict[str, Any]:
        """
        Схема по имени файла без расширения ('price_feed').

        Raises:
            FileNotFoundError: Файла схемы нет в каталоге
            ValueError: Схема не является валидной Draft 2020-12 схемой
        """
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        path = self.schema_dir / f"{name}.json"
        if not path.is_file():
            raise FileNotFoundError(f"Schema not found: {path}")

        schema = json.loads(path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e

        self._cache[name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# VALIDATORS
# =============================================================================


def _format_path(error: ValidationError) -> str:
    """'$[3].price' для ошибки в четвёртой записи."""
    path = "$"
    for part in error.absolute_path:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path


class ContractValidator:
    """Проверка данных по одной схеме из SchemaLoader."""

    def __init__(self, schema_name: str, loader: Optional[SchemaLoader] = None):
        self.schema_name = schema_name
        self.schema = (loader or _SCHEMA_LOADER).load_schema(schema_name)
        self._validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Raises:
            ValidationError: Первое (наиболее релевантное) нарушение контракта
        """
        self._validator.validate(data)

    def is_valid(self, data: Any) -> bool:
        return self._validator.is_valid(data)

    def iter_errors(self, data: Any) -> Iterator[ValidationError]:
        return self._validator.iter_errors(data)

    def describe_violations(self, data: Any) -> List[str]:
        """Все нарушения в виде '$[0].price: None is not of type ...'."""
        errors = sorted(self.iter_errors(data), key=lambda e: list(e.absolute_path))
        return [f"{_format_path(e)}: {e.message}" for e in errors]


class PriceFeedValidator(ContractValidator):
    def __init__(self, loader: Optional[SchemaLoader] = None):
        super().__init__("price_feed", loader)


def validate_price_feed(data: Any) -> None:
    """
    Проверка сырого ответа price feed.

    Raises:
        ValidationError: Ответ не соответствует контракту price_feed
    """
    PriceFeedValidator().validate(data)


__all__ = [
    "SCHEMA_DIR",
    "SchemaLoader",
    "ContractValidator",
    "PriceFeedValidator",
    "ValidationError",
    "validate_price_feed",
]
