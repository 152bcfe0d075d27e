"""Доменные модели товаров.

Содержит модели для представления товаров на разных этапах конвейера:
    - RawBook, RawFilm, RawVinyl: сырые записи из сервиса метаданных
    - CanonicalProduct: товар в едином формате, до и после обогащения
    - StockQuote: цена и остаток одного товара из сервиса остатков
    - Titles: пара заголовок/подзаголовок от нормализатора названий
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class ProductType(str, Enum):
    """Закрытый набор типов товаров.

    Порядок объявления задаёт порядок типов в результате конвертации.
    """

    BOOK = "book"
    DVD = "dvd"
    BLU_RAY = "blu-ray"
    VINYL = "vinyl-record"

    @property
    def source(self) -> str:
        """Имя списка товаров этого типа в сервисе метаданных."""
        return _SOURCES[self]


_SOURCES: dict[ProductType, str] = {
    ProductType.BOOK: "books",
    ProductType.DVD: "dvds",
    ProductType.BLU_RAY: "bluerays",
    ProductType.VINYL: "vinyls",
}


def _text(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    return "" if value is None else str(value)


def _required_id(payload: dict[str, Any]) -> str:
    """Возвращает id записи строкой.

    Raises:
        ValueError: Если id отсутствует или пуст.
    """
    product_id = _text(payload, "id")
    if not product_id:
        raise ValueError(f"Запись каталога без id: {payload!r}")
    return product_id


def _number(payload: dict[str, Any], key: str) -> float:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(
            f"Некорректный ответ сервиса остатков ({key}): {payload!r}"
        )
    return value


@dataclass(frozen=True)
class RawBook:
    """Сырая запись книги.

    Attributes:
        id: Идентификатор товара.
        title: Название книги.
        genre: Жанр.
        author: Автор.
    """

    id: str
    title: str
    genre: str
    author: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RawBook":
        return cls(
            id=_required_id(payload),
            title=_text(payload, "title"),
            genre=_text(payload, "genre"),
            author=_text(payload, "author"),
        )


@dataclass(frozen=True)
class RawFilm:
    """Сырая запись фильма (DVD или Blu-ray).

    Attributes:
        id: Идентификатор товара.
        title: Название фильма.
        genre: Жанр.
        director: Режиссёр.
        release_date: Дата выхода в том виде, в котором её отдаёт сервис.
    """

    id: str
    title: str
    genre: str
    director: str
    release_date: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RawFilm":
        return cls(
            id=_required_id(payload),
            title=_text(payload, "title"),
            genre=_text(payload, "genre"),
            director=_text(payload, "director"),
            release_date=_text(payload, "releaseDate"),
        )


@dataclass(frozen=True)
class RawVinyl:
    """Сырая запись виниловой пластинки.

    Attributes:
        id: Идентификатор товара.
        album_name: Название альбома.
        artist_name: Исполнитель.
    """

    id: str
    album_name: str
    artist_name: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RawVinyl":
        return cls(
            id=_required_id(payload),
            album_name=_text(payload, "albumName"),
            artist_name=_text(payload, "artistName"),
        )


@dataclass(frozen=True)
class Titles:
    """Заголовок и подзаголовок товара от нормализатора названий."""

    title: str
    subtitle: str


@dataclass(frozen=True)
class StockQuote:
    """Цена и остаток одного товара.

    Значения сохраняются в том виде, в котором их вернул сервис:
    дробный остаток не округляется.

    Attributes:
        price: Цена.
        quantity: Количество на складе.
    """

    price: float
    quantity: float

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "StockQuote":
        """Создаёт StockQuote из ответа сервиса остатков.

        Args:
            payload: Декодированный JSON-объект {id, price, quantity}.

        Returns:
            Экземпляр StockQuote.

        Raises:
            ValueError: Если price или quantity отсутствуют
                или не являются JSON-числами.
        """
        return cls(
            price=_number(payload, "price"),
            quantity=_number(payload, "quantity"),
        )


@dataclass(frozen=True)
class CanonicalProduct:
    """Товар в едином формате для всех типов.

    Цена и количество появляются только после обогащения данными
    об остатках и дальше не меняются.

    Attributes:
        id: Идентификатор товара, переносится из сырой записи без изменений.
        type: Тип товара.
        title: Заголовок от нормализатора названий.
        subtitle: Подзаголовок (автор, режиссёр или исполнитель).
        kind: Жанр; отсутствует у виниловых пластинок.
        price: Цена, None до обогащения.
        quantity: Остаток, None до обогащения.
    """

    id: str
    type: ProductType
    title: str
    subtitle: str
    kind: str | None = None
    price: float | None = None
    quantity: float | None = None

    @property
    def is_enriched(self) -> bool:
        """True, если у товара уже есть цена и остаток."""
        return self.price is not None and self.quantity is not None

    def with_stock(self, quote: StockQuote) -> "CanonicalProduct":
        """Возвращает копию товара с ценой и остатком.

        Args:
            quote: Данные об остатке этого товара.

        Returns:
            Новый, обогащённый экземпляр CanonicalProduct.

        Raises:
            ValueError: Если товар уже обогащён.
        """
        if self.is_enriched:
            raise ValueError(f"Товар {self.id} уже содержит цену и остаток")
        return replace(self, price=quote.price, quantity=quote.quantity)

    def to_dict(self) -> dict[str, Any]:
        """Сериализует товар в словарь; kind опускается, если не задан."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "subtitle": self.subtitle,
        }
        if self.kind is not None:
            data["kind"] = self.kind
        if self.price is not None:
            data["price"] = self.price
        if self.quantity is not None:
            data["quantity"] = self.quantity
        return data
