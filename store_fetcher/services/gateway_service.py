"""Клиент upstream-сервисов метаданных и остатков.

Выполняет по одному HTTP-запросу на источник и классифицирует
результат: сетевой сбой, ошибочный статус или декодированное тело.
Повторных попыток нет, любая ошибка сразу передаётся вызывающему.
"""

import asyncio
from types import TracebackType
from typing import Any

import aiohttp

from store_fetcher.config import UpstreamSettings, get_logger
from store_fetcher.models import ProductType

logger = get_logger("gateway_service")

BLACKLIST_SOURCE = "blacklist"
STOCK_SOURCE = "stock"


class TransportError(Exception):
    """Сетевой сбой при обращении к источнику (соединение, таймаут).

    Attributes:
        source: Имя источника.
        cause: Исходное исключение транспорта.
    """

    def __init__(self, source: str, cause: BaseException) -> None:
        super().__init__(f"Transport Error ({source}): {cause}")
        self.source = source
        self.cause = cause


class UpstreamError(Exception):
    """Источник ответил статусом 400 и выше.

    Сообщение имеет вид "<label>: <status_code>".

    Attributes:
        status_code: HTTP-статус ответа.
        source: Имя источника.
        label: Префикс сообщения.
    """

    def __init__(self, status_code: int, source: str, label: str = "Error") -> None:
        super().__init__(f"{label}: {status_code}")
        self.status_code = status_code
        self.source = source
        self.label = label


class UpstreamGateway:
    """Шлюз к сервисам метаданных каталога и остатков.

    Использует одну aiohttp-сессию на все запросы запуска.
    Сессия создаётся при первом запросе и закрывается через close().

    Attributes:
        _settings: Адреса сервисов и таймаут запросов.
        _session: Общая aiohttp-сессия.
    """

    def __init__(self, settings: UpstreamSettings) -> None:
        self._settings = settings
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "UpstreamGateway":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=self._settings.request_timeout
                ),
            )
        return self._session

    async def _get_json(
        self,
        source: str,
        url: str,
        label: str = "Error",
    ) -> Any:
        """Выполняет GET-запрос и классифицирует ответ.

        Args:
            source: Имя источника для ошибок и логов.
            url: Полный адрес запроса.
            label: Префикс сообщения UpstreamError.

        Returns:
            Декодированное JSON-тело ответа без изменений.

        Raises:
            TransportError: При сетевом сбое или таймауте.
            UpstreamError: Если статус ответа 400 и выше.
        """
        session = await self._get_session()
        request_logger = logger.bind(source=source, url=url)

        try:
            async with session.get(url) as response:
                if response.status >= 400:
                    request_logger.error(
                        "upstream_request_failed",
                        status=response.status,
                    )
                    raise UpstreamError(response.status, source, label)

                body = await response.json(content_type=None)
                request_logger.debug(
                    "upstream_request_completed",
                    status=response.status,
                )
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            request_logger.error(
                "upstream_transport_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TransportError(source, e) from e

    def _metadata_url(self, path: str) -> str:
        return f"{self._settings.metadata_host}/{path}"

    async def get_catalog(self, product_type: ProductType) -> list[dict[str, Any]]:
        """Загружает список сырых записей указанного типа.

        Args:
            product_type: Тип товара; определяет источник.

        Returns:
            JSON-массив сырых записей.
        """
        source = product_type.source
        return await self._get_json(source, self._metadata_url(source))

    async def get_books(self) -> list[dict[str, Any]]:
        return await self.get_catalog(ProductType.BOOK)

    async def get_dvds(self) -> list[dict[str, Any]]:
        return await self.get_catalog(ProductType.DVD)

    async def get_bluerays(self) -> list[dict[str, Any]]:
        return await self.get_catalog(ProductType.BLU_RAY)

    async def get_vinyls(self) -> list[dict[str, Any]]:
        return await self.get_catalog(ProductType.VINYL)

    async def get_blacklist(self) -> list[str]:
        """Загружает список идентификаторов запрещённых товаров.

        Raises:
            UpstreamError: С префиксом "Blacklist Error" при ошибочном статусе.
        """
        return await self._get_json(
            BLACKLIST_SOURCE,
            self._metadata_url(BLACKLIST_SOURCE),
            label="Blacklist Error",
        )

    async def get_stock(self, product_id: str) -> dict[str, Any]:
        """Загружает цену и остаток одного товара.

        Args:
            product_id: Идентификатор товара.

        Returns:
            JSON-объект {id, price, quantity}.
        """
        url = f"{self._settings.stock_host}/item/{product_id}"
        return await self._get_json(STOCK_SOURCE, url)

    async def close(self) -> None:
        """Закрывает aiohttp-сессию и освобождает соединения."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None
            logger.info("gateway_session_closed")
