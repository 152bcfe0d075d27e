"""Оркестратор конвейера загрузки каталога.

Последовательно выполняет этапы одного запуска:
1. Конкурентная загрузка четырёх каталогов и чёрного списка.
2. Конвертация сырых записей в единый формат.
3. Фильтрация по чёрному списку.
4. Конкурентная загрузка остатков (не больше 10 запросов в полёте).
5. Присоединение цены и остатка.
6. Последовательное сохранение товаров.

Этап N+1 начинается только после полного завершения этапа N.
Первая ошибка любого этапа прерывает запуск; уже сохранённые
товары остаются в хранилище.
"""

from collections.abc import Callable
from typing import Any, Protocol

from store_fetcher.config import get_logger
from store_fetcher.models import CanonicalProduct, ProductType
from store_fetcher.repositories.base import BaseProductRepository
from store_fetcher.services.converter_service import (
    TitleNormalizer,
    convert_products,
)
from store_fetcher.services.enricher_service import (
    DEFAULT_STOCK_CONCURRENCY,
    StockEnricher,
    filter_blacklisted,
)
from store_fetcher.services.titles import get_titles
from store_fetcher.utils import gather_all

logger = get_logger("pipeline_service")

CompletionCallback = Callable[[Exception | None], None]


class CatalogSource(Protocol):
    async def get_books(self) -> list[dict[str, Any]]: ...

    async def get_dvds(self) -> list[dict[str, Any]]: ...

    async def get_bluerays(self) -> list[dict[str, Any]]: ...

    async def get_vinyls(self) -> list[dict[str, Any]]: ...

    async def get_blacklist(self) -> list[str]: ...

    async def get_stock(self, product_id: str) -> dict[str, Any]: ...


class PipelineService:
    """Конвейер: загрузка, конвертация, фильтрация, обогащение, сохранение.

    Экземпляр не хранит состояния между запусками: чёрный список
    и промежуточные списки товаров живут только внутри run().

    Attributes:
        _gateway: Источник каталогов, чёрного списка и остатков.
        _repository: Хранилище обогащённых товаров.
        _enricher: Обогатитель товаров остатками.
        _titles: Нормализатор названий.
    """

    def __init__(
        self,
        gateway: CatalogSource,
        repository: BaseProductRepository,
        stock_concurrency: int = DEFAULT_STOCK_CONCURRENCY,
        titles: TitleNormalizer = get_titles,
    ) -> None:
        self._gateway = gateway
        self._repository = repository
        self._enricher = StockEnricher(gateway, concurrency=stock_concurrency)
        self._titles = titles

    async def _fetch_metadata(
        self,
    ) -> tuple[dict[ProductType, list[dict[str, Any]]], list[str]]:
        """Этап 1: загружает каталоги всех типов и чёрный список.

        Returns:
            Сырые записи по типам и список запрещённых id.
        """
        books, dvds, bluerays, vinyls, blacklist = await gather_all(
            self._gateway.get_books(),
            self._gateway.get_dvds(),
            self._gateway.get_bluerays(),
            self._gateway.get_vinyls(),
            self._gateway.get_blacklist(),
        )
        raw_by_type = {
            ProductType.BOOK: books,
            ProductType.DVD: dvds,
            ProductType.BLU_RAY: bluerays,
            ProductType.VINYL: vinyls,
        }
        return raw_by_type, blacklist

    def _persist(self, products: list[CanonicalProduct]) -> None:
        """Этап 6: сохраняет товары по одному, в порядке списка."""
        for saved, product in enumerate(products):
            try:
                self._repository.save_product(product)
            except Exception:
                logger.error(
                    "product_persist_failed",
                    product_id=product.id,
                    saved_before_failure=saved,
                    total=len(products),
                )
                raise

    async def run(self) -> list[CanonicalProduct]:
        """Выполняет один полный запуск конвейера.

        Returns:
            Сохранённые товары в порядке сохранения.

        Raises:
            TransportError: Сетевой сбой при обращении к источнику.
            UpstreamError: Источник ответил ошибочным статусом.
            PersistenceError: Хранилище отказалось сохранить товар.
            ValueError: Запись каталога без id или некорректный ответ
                сервиса остатков.
        """
        log = logger.bind(stage="fetch_metadata")
        log.info("stage_started")
        raw_by_type, blacklist = await self._fetch_metadata()
        log.info(
            "stage_completed",
            records={t.value: len(raw_by_type[t]) for t in ProductType},
            blacklisted_ids=len(blacklist),
        )

        products = convert_products(raw_by_type, titles=self._titles)
        logger.bind(stage="convert").info("stage_completed", products=len(products))

        products = filter_blacklisted(products, blacklist)
        logger.bind(stage="filter").info("stage_completed", products=len(products))

        log = logger.bind(stage="enrich")
        log.info("stage_started", products=len(products))
        enriched = await self._enricher.enrich(products)
        log.info("stage_completed", products=len(enriched))

        log = logger.bind(stage="persist")
        log.info("stage_started", products=len(enriched))
        self._persist(enriched)
        log.info("stage_completed", saved=len(enriched))

        return enriched

    async def fetch(self, on_complete: CompletionCallback | None = None) -> None:
        """Запускает конвейер и сообщает о завершении.

        Без callback первая ошибка выбрасывается вызывающему.
        С callback ошибка передаётся в on_complete(error), успех
        в on_complete(None); callback вызывается ровно один раз.

        Args:
            on_complete: Необязательный обработчик завершения.
        """
        try:
            await self.run()
        except Exception as e:
            logger.error(
                "pipeline_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            if on_complete is None:
                raise
            on_complete(e)
            return

        if on_complete is not None:
            on_complete(None)
