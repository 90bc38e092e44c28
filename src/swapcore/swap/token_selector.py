"""Token selector — поиск токена в каталоге и ссылка на иконку."""

from typing import Final

from swapcore.core.domain.token import Catalog, Token

TOKEN_ICONS_BASE_URL: Final[str] = (
    "https://raw.githubusercontent.com/Switcheo/token-icons/main/tokens"
)


def filter_tokens(catalog: Catalog, search_term: str) -> list[Token]:
    """Токены, currency которых содержит search_term (без учёта регистра).

    Порядок каталога сохраняется; пустой запрос возвращает весь каталог.
    """
    needle = search_term.strip().casefold()
    return [token for token in catalog.tokens if needle in token.currency.casefold()]


def token_icon_url(currency: str) -> str:
    return f"{TOKEN_ICONS_BASE_URL}/{currency}.svg"
