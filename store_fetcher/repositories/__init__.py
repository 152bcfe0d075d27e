"""Пакет репозиториев для хранения данных.

Предоставляет абстракцию и реализацию хранилища товаров:
    from store_fetcher.repositories import BaseProductRepository, SQLiteProductRepository
"""

from store_fetcher.repositories.base import BaseProductRepository, PersistenceError
from store_fetcher.repositories.sqlite_repository import SQLiteProductRepository

__all__ = [
    "BaseProductRepository",
    "PersistenceError",
    "SQLiteProductRepository",
]
