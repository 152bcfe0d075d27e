"""Абстрактный базовый репозиторий товаров.

Определяет контракт хранилища, в которое конвейер сохраняет
обогащённые товары. Конвейер зависит только от этой абстракции.
"""

from abc import ABC, abstractmethod

from store_fetcher.models import CanonicalProduct


class PersistenceError(Exception):
    """Хранилище отказалось сохранить товар.

    Attributes:
        product_id: Идентификатор товара, который не удалось сохранить.
    """

    def __init__(self, message: str, product_id: str | None = None) -> None:
        super().__init__(message)
        self.product_id = product_id


class BaseProductRepository(ABC):
    """Абстрактный репозиторий для хранения обогащённых товаров."""

    @abstractmethod
    def initialize(self) -> None:
        """Готовит хранилище к работе (таблицы, индексы)."""

    @abstractmethod
    def save_product(self, product: CanonicalProduct) -> None:
        """Сохраняет один обогащённый товар.

        Если товар с таким id уже есть, запись обновляется.

        Args:
            product: Товар с ценой и остатком.

        Raises:
            PersistenceError: Если товар не обогащён или запись не удалась.
        """

    @abstractmethod
    def get_all_products(self) -> list[CanonicalProduct]:
        """Возвращает все сохранённые товары."""

    @abstractmethod
    def get_products_count(self) -> int:
        """Возвращает количество сохранённых товаров."""

    @abstractmethod
    def close(self) -> None:
        """Закрывает соединение с хранилищем и освобождает ресурсы."""
