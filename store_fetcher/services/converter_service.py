"""Конвертер сырых записей в единый формат товара.

Для каждого типа товара задана фиксированная проекция полей:
что передаётся в нормализатор названий и что становится kind.
Конвертация чистая и не обращается к сети.
"""

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from store_fetcher.config import get_logger
from store_fetcher.models import (
    CanonicalProduct,
    ProductType,
    RawBook,
    RawFilm,
    RawVinyl,
    Titles,
)
from store_fetcher.services.titles import get_titles

logger = get_logger("converter_service")

TitleNormalizer = Callable[..., Titles]

# Форматы дат выхода, которые встречаются в сервисе метаданных.
_RELEASE_DATE_FORMATS: tuple[str, ...] = (
    "%m-%d-%Y",
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%Y",
)


def parse_release_year(value: str) -> int | None:
    """Извлекает календарный год из даты выхода.

    Поддерживает форматы MM-DD-YYYY, MM/DD/YYYY, YYYY-MM-DD, YYYY
    и ISO 8601 с временем.

    Args:
        value: Дата выхода из сырой записи.

    Returns:
        Год или None, если дату не удалось разобрать.
    """
    text = value.strip()
    for date_format in _RELEASE_DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).year
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).year
    except ValueError:
        logger.warning("release_date_unparsed", release_date=value)
        return None


def _book_to_product(raw: RawBook, titles: TitleNormalizer) -> CanonicalProduct:
    pair = titles(
        ProductType.BOOK,
        book_title=raw.title,
        kind=raw.genre,
        author=raw.author,
    )
    return CanonicalProduct(
        id=raw.id,
        type=ProductType.BOOK,
        title=pair.title,
        subtitle=pair.subtitle,
        kind=raw.genre,
    )


def _film_to_product(
    product_type: ProductType,
    raw: RawFilm,
    titles: TitleNormalizer,
) -> CanonicalProduct:
    pair = titles(
        product_type,
        title=raw.title,
        kind=raw.genre,
        director=raw.director,
        year=parse_release_year(raw.release_date),
    )
    return CanonicalProduct(
        id=raw.id,
        type=product_type,
        title=pair.title,
        subtitle=pair.subtitle,
        kind=raw.genre,
    )


def _vinyl_to_product(raw: RawVinyl, titles: TitleNormalizer) -> CanonicalProduct:
    pair = titles(
        ProductType.VINYL,
        album_name=raw.album_name,
        artist_name=raw.artist_name,
    )
    return CanonicalProduct(
        id=raw.id,
        type=ProductType.VINYL,
        title=pair.title,
        subtitle=pair.subtitle,
    )


def to_product(
    product_type: ProductType,
    payload: dict[str, Any],
    titles: TitleNormalizer = get_titles,
) -> CanonicalProduct:
    """Преобразует одну сырую запись в CanonicalProduct.

    Args:
        product_type: Тип, под которым запись пришла из сервиса.
        payload: Декодированный JSON-объект записи.
        titles: Нормализатор названий.

    Returns:
        Необогащённый CanonicalProduct.

    Raises:
        ValueError: Если у записи нет id или тип неизвестен.
    """
    match product_type:
        case ProductType.BOOK:
            return _book_to_product(RawBook.from_payload(payload), titles)
        case ProductType.DVD | ProductType.BLU_RAY:
            return _film_to_product(
                product_type, RawFilm.from_payload(payload), titles
            )
        case ProductType.VINYL:
            return _vinyl_to_product(RawVinyl.from_payload(payload), titles)
    raise ValueError(f"Неизвестный тип товара: {product_type!r}")


def convert_products(
    raw_by_type: Mapping[ProductType, Sequence[dict[str, Any]]],
    titles: TitleNormalizer = get_titles,
) -> list[CanonicalProduct]:
    """Конвертирует сырые списки всех типов в плоский список товаров.

    Типы идут в порядке объявления ProductType, записи внутри
    типа сохраняют порядок, в котором их вернул сервис.

    Args:
        raw_by_type: Сырые записи, сгруппированные по типу товара.
        titles: Нормализатор названий.

    Returns:
        Список необогащённых товаров.
    """
    products: list[CanonicalProduct] = []
    for product_type in ProductType:
        for payload in raw_by_type.get(product_type, ()):
            products.append(to_product(product_type, payload, titles))

    logger.debug(
        "products_converted",
        total=len(products),
        by_type={
            product_type.value: len(raw_by_type.get(product_type, ()))
            for product_type in ProductType
        },
    )
    return products
