"""Общие фикстуры тестов store_fetcher.

Upstream-сервисы поднимаются как настоящее локальное aiohttp-приложение,
хранилище подменяется репозиторием в памяти, который записывает вызовы.
"""

import asyncio
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from store_fetcher.config import UpstreamSettings
from store_fetcher.models import CanonicalProduct
from store_fetcher.repositories import BaseProductRepository, PersistenceError
from store_fetcher.services import UpstreamGateway


def default_responses() -> dict[str, tuple[int, Any]]:
    """Ответы upstream-сервисов по умолчанию: путь -> (статус, тело)."""
    film = {"genre": "film", "director": "some director", "credits": []}
    return {
        "/books": (200, [
            {
                "id": "123",
                "title": "raw title",
                "genre": "fiction",
                "author": "someone",
                "isbn10": "1234567898",
                "isbn13": "123-1234567898",
                "releaseDate": "10-02-2007",
            },
        ]),
        "/dvds": (200, [
            {"id": "124", "title": "dvd title", "releaseDate": "10-02-2007", **film},
        ]),
        "/bluerays": (200, [
            {"id": "125", "title": "blue-ray title", "releaseDate": "10-02-2007", **film},
            {"id": "130", "title": "blue-ray title 2", "releaseDate": "10-02-2007", **film},
            {"id": "140", "title": "blue-ray title 3", "releaseDate": "10-02-2007", **film},
        ]),
        "/vinyls": (200, [
            {"id": "126", "albumName": "Master of puppets", "artistName": "metallica"},
            {"id": "127", "albumName": "Raining blood", "artistName": "Slayer"},
        ]),
        "/blacklist": (200, ["127"]),
        "/item/123": (200, {"id": "123", "price": 12.0, "quantity": 1}),
        "/item/124": (200, {"id": "124", "price": 10.0, "quantity": 3}),
        "/item/125": (200, {"id": "125", "price": 1.0, "quantity": 100}),
        "/item/126": (200, {"id": "126", "price": 10.0, "quantity": 1}),
        "/item/127": (200, {"id": "127", "price": 10.0, "quantity": 1}),
        "/item/130": (200, {"id": "130", "price": 10.0, "quantity": 1}),
        "/item/140": (200, {"id": "140", "price": 10.0, "quantity": 1}),
        "/item/150": (200, {"id": "150", "price": 15.0, "quantity": 10}),
    }


class FakeUpstream:
    """Локальная имитация сервисов метаданных и остатков.

    Attributes:
        responses: Ответы по путям; неизвестный путь отвечает 404.
        requests: Пути всех полученных запросов.
        stock_delay: Задержка ответа на /item/<id> в секундах.
        delays: Задержки ответов на отдельные пути в секундах.
        max_stock_in_flight: Максимум одновременных запросов остатков.
    """

    def __init__(self) -> None:
        self.responses = default_responses()
        self.requests: list[str] = []
        self.stock_delay = 0.0
        self.delays: dict[str, float] = {}
        self.max_stock_in_flight = 0
        self._stock_in_flight = 0
        self.settings = UpstreamSettings()

    def fail(self, path: str, status: int = 500) -> None:
        self.responses[path] = (status, None)

    async def _handle(self, request: web.Request) -> web.StreamResponse:
        path = request.path
        self.requests.append(path)

        if path.startswith("/item/"):
            self._stock_in_flight += 1
            self.max_stock_in_flight = max(
                self.max_stock_in_flight, self._stock_in_flight
            )
            try:
                await asyncio.sleep(self.stock_delay)
            finally:
                self._stock_in_flight -= 1

        if path in self.delays:
            await asyncio.sleep(self.delays[path])

        if path not in self.responses:
            return web.Response(status=404)

        status, body = self.responses[path]
        if body is None:
            return web.Response(status=status)
        return web.json_response(body, status=status)

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/{tail:.*}", self._handle)
        return app

    @property
    def stock_requests(self) -> list[str]:
        return [path for path in self.requests if path.startswith("/item/")]


class RecordingRepository(BaseProductRepository):
    """Репозиторий в памяти, записывающий каждый вызов save_product.

    Attributes:
        saved: Успешно сохранённые товары в порядке сохранения.
        save_calls: Общее число вызовов save_product.
        fail_on: Номер вызова (с 1), на котором сохранение падает.
    """

    def __init__(self, fail_on: int | None = None) -> None:
        self.saved: list[CanonicalProduct] = []
        self.save_calls = 0
        self.fail_on = fail_on
        self.closed = False

    def initialize(self) -> None:
        pass

    def save_product(self, product: CanonicalProduct) -> None:
        self.save_calls += 1
        if self.fail_on is not None and self.save_calls == self.fail_on:
            raise PersistenceError("DB Error!", product_id=product.id)
        self.saved.append(product)

    def get_all_products(self) -> list[CanonicalProduct]:
        return list(self.saved)

    def get_products_count(self) -> int:
        return len(self.saved)

    def close(self) -> None:
        self.closed = True


@pytest_asyncio.fixture
async def upstream():
    """Запущенный FakeUpstream; settings указывают на него оба хоста."""
    fake = FakeUpstream()
    server = TestServer(fake.make_app())
    await server.start_server()

    base_url = f"http://{server.host}:{server.port}"
    fake.settings = UpstreamSettings(
        metadata_host=base_url,
        stock_host=base_url,
        request_timeout=5.0,
    )

    yield fake

    await server.close()


@pytest_asyncio.fixture
async def gateway(upstream):
    """UpstreamGateway, направленный на FakeUpstream."""
    gw = UpstreamGateway(upstream.settings)
    yield gw
    await gw.close()


@pytest.fixture
def repository():
    return RecordingRepository()


@pytest.fixture
def failing_repository():
    """Фабрика репозиториев, падающих на вызове с номером fail_on."""
    return lambda fail_on: RecordingRepository(fail_on=fail_on)
