"""Тесты SQLite-репозитория товаров."""

import pytest

from store_fetcher.models import CanonicalProduct, ProductType
from store_fetcher.repositories import PersistenceError, SQLiteProductRepository


@pytest.fixture
def sqlite_repository(tmp_path):
    repo = SQLiteProductRepository(str(tmp_path / "nested" / "products.db"))
    repo.initialize()
    yield repo
    repo.close()


def enriched(product_id: str, **overrides) -> CanonicalProduct:
    fields = {
        "id": product_id,
        "type": ProductType.BOOK,
        "title": "raw title",
        "subtitle": "someone",
        "kind": "fiction",
        "price": 12.0,
        "quantity": 1,
    }
    fields.update(overrides)
    return CanonicalProduct(**fields)


class TestSQLiteProductRepository:

    def test_save_and_read_back(self, sqlite_repository):
        product = enriched("123")

        sqlite_repository.save_product(product)

        assert sqlite_repository.get_all_products() == [product]
        assert sqlite_repository.get_products_count() == 1

    def test_vinyl_without_kind_round_trips(self, sqlite_repository):
        vinyl = enriched(
            "126",
            type=ProductType.VINYL,
            title="Master of puppets",
            subtitle="metallica",
            kind=None,
            price=10.0,
        )

        sqlite_repository.save_product(vinyl)

        assert sqlite_repository.get_all_products() == [vinyl]

    def test_upsert_by_id(self, sqlite_repository):
        sqlite_repository.save_product(enriched("123"))
        sqlite_repository.save_product(enriched("123", price=15.0, quantity=7))

        [stored] = sqlite_repository.get_all_products()
        assert (stored.price, stored.quantity) == (15.0, 7)

    def test_fractional_quantity_stored_as_given(self, sqlite_repository):
        sqlite_repository.save_product(enriched("123", quantity=2.5))

        [stored] = sqlite_repository.get_all_products()
        assert stored.quantity == 2.5

    def test_rejects_product_without_stock(self, sqlite_repository):
        product = enriched("123", price=None, quantity=None)

        with pytest.raises(PersistenceError) as exc_info:
            sqlite_repository.save_product(product)

        assert exc_info.value.product_id == "123"
        assert sqlite_repository.get_products_count() == 0

    def test_sqlite_error_becomes_persistence_error(self, tmp_path):
        repo = SQLiteProductRepository(str(tmp_path / "products.db"))
        # таблица не создана: initialize() не вызывался

        with pytest.raises(PersistenceError, match="123"):
            repo.save_product(enriched("123"))
        repo.close()

    def test_initialize_is_idempotent(self, sqlite_repository):
        sqlite_repository.save_product(enriched("1"))

        sqlite_repository.initialize()

        assert sqlite_repository.get_products_count() == 1

    def test_in_memory_database(self):
        repo = SQLiteProductRepository(":memory:")
        repo.initialize()
        repo.save_product(enriched("1"))

        assert repo.get_products_count() == 1
        repo.close()
        repo.close()
