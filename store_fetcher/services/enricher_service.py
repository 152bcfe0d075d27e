"""Фильтрация по чёрному списку и обогащение товаров остатками.

filter_blacklisted убирает запрещённые товары, StockEnricher
запрашивает цену и остаток для каждого оставшегося товара и
присоединяет их по позиции запроса.
"""

from collections.abc import Collection, Sequence
from typing import Any, Protocol

from store_fetcher.config import get_logger
from store_fetcher.models import CanonicalProduct, StockQuote
from store_fetcher.utils import gather_bounded

logger = get_logger("enricher_service")

DEFAULT_STOCK_CONCURRENCY = 10


class StockSource(Protocol):
    async def get_stock(self, product_id: str) -> dict[str, Any]: ...


def filter_blacklisted(
    products: Sequence[CanonicalProduct],
    blacklist: Collection[Any],
) -> list[CanonicalProduct]:
    """Убирает товары, чей id входит в чёрный список.

    Порядок оставшихся товаров сохраняется. Пустой чёрный
    список ничего не меняет. Идентификаторы сравниваются как строки,
    так же как id товаров после конвертации.

    Args:
        products: Товары после конвертации.
        blacklist: Идентификаторы запрещённых товаров.

    Returns:
        Новый список без запрещённых товаров.
    """
    blocked = frozenset(str(product_id) for product_id in blacklist)
    kept = [product for product in products if product.id not in blocked]

    if len(kept) != len(products):
        logger.info(
            "blacklisted_products_removed",
            removed=len(products) - len(kept),
            kept=len(kept),
        )
    return kept


def merge_stock(
    products: Sequence[CanonicalProduct],
    quotes: Sequence[StockQuote],
) -> list[CanonicalProduct]:
    """Присоединяет i-ю котировку к i-му товару.

    Raises:
        ValueError: Если длины последовательностей различаются.
    """
    if len(products) != len(quotes):
        raise ValueError(
            f"Количество котировок ({len(quotes)}) не совпадает "
            f"с количеством товаров ({len(products)})"
        )
    return [
        product.with_stock(quote)
        for product, quote in zip(products, quotes)
    ]


class StockEnricher:
    """Обогащает товары ценой и остатком из сервиса остатков.

    На каждый товар выполняется один запрос, одновременно в полёте
    не больше concurrency запросов. Если хотя бы один запрос
    завершился ошибкой, не обогащается ни один товар, а запросы,
    ещё не получившие слот, не отправляются.

    Attributes:
        _source: Источник остатков (обычно UpstreamGateway).
        _concurrency: Потолок одновременных запросов.
    """

    def __init__(
        self,
        source: StockSource,
        concurrency: int = DEFAULT_STOCK_CONCURRENCY,
    ) -> None:
        if concurrency <= 0:
            raise ValueError(
                f"concurrency должен быть положительным, получено: {concurrency}"
            )
        self._source = source
        self._concurrency = concurrency

    async def _fetch_quote(self, product_id: str) -> StockQuote:
        payload = await self._source.get_stock(product_id)
        return StockQuote.from_payload(payload)

    async def enrich(
        self, products: Sequence[CanonicalProduct]
    ) -> list[CanonicalProduct]:
        """Запрашивает остатки для всех товаров и возвращает обогащённые копии.

        Args:
            products: Товары после фильтрации.

        Returns:
            Обогащённые товары в исходном порядке.

        Raises:
            TransportError, UpstreamError: Первая по времени ошибка
                запроса остатков.
        """
        if not products:
            return []

        logger.info(
            "stock_fetch_started",
            products=len(products),
            concurrency=self._concurrency,
        )

        quotes = await gather_bounded(
            [
                lambda product_id=product.id: self._fetch_quote(product_id)
                for product in products
            ],
            limit=self._concurrency,
        )
        return merge_stock(products, quotes)
