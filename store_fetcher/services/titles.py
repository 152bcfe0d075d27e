"""Нормализатор названий товаров.

Строит единую пару заголовок/подзаголовок из полей, специфичных
для типа товара. Чистая функция без сетевых вызовов.
"""

from typing import Any

from store_fetcher.models import ProductType, Titles


def _film_title(title: str, year: int | None) -> str:
    if year is None:
        return title
    return f"{title} ({year})"


def get_titles(product_type: ProductType, **fields: Any) -> Titles:
    """Возвращает заголовок и подзаголовок товара.

    Ожидаемые поля по типам:
        - book: book_title, author (kind допускается, не используется)
        - dvd, blu-ray: title, director, year (kind допускается)
        - vinyl-record: album_name, artist_name

    Args:
        product_type: Тип товара.
        **fields: Поля товара для данного типа.

    Returns:
        Пара Titles. Для фильмов год добавляется к названию в скобках.
    """
    match product_type:
        case ProductType.BOOK:
            return Titles(
                title=fields["book_title"],
                subtitle=fields["author"],
            )
        case ProductType.DVD | ProductType.BLU_RAY:
            return Titles(
                title=_film_title(fields["title"], fields.get("year")),
                subtitle=fields["director"],
            )
        case ProductType.VINYL:
            return Titles(
                title=fields["album_name"],
                subtitle=fields["artist_name"],
            )
    raise ValueError(f"Неизвестный тип товара: {product_type!r}")
