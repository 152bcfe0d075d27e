"""Пакет доменных моделей.

Предоставляет модели данных для всех этапов конвейера:
    from store_fetcher.models import CanonicalProduct, ProductType, StockQuote
"""

from store_fetcher.models.product import (
    CanonicalProduct,
    ProductType,
    RawBook,
    RawFilm,
    RawVinyl,
    StockQuote,
    Titles,
)

__all__ = [
    "CanonicalProduct",
    "ProductType",
    "RawBook",
    "RawFilm",
    "RawVinyl",
    "StockQuote",
    "Titles",
]
