"""SQLite-реализация репозитория товаров.

Хранит обогащённые товары в одной таблице с upsert по id.
Каждый товар сохраняется отдельной транзакцией, поэтому
уже записанные товары остаются в базе при сбое следующих.
"""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from store_fetcher.config import get_logger
from store_fetcher.models import CanonicalProduct, ProductType
from store_fetcher.repositories.base import BaseProductRepository, PersistenceError

logger = get_logger("sqlite_repository")


class SQLiteProductRepository(BaseProductRepository):
    """Репозиторий товаров на базе SQLite.

    Создаёт файл базы данных по указанному пути; ":memory:"
    держит базу в памяти.

    Attributes:
        _db_path: Путь к файлу базы данных.
        _connection: Активное соединение с SQLite.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._connection: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        """Возвращает активное соединение, создавая его при первом вызове.

        Raises:
            PersistenceError: Если не удалось установить соединение.
        """
        if self._connection is None:
            try:
                if self._db_path != ":memory:":
                    Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

                self._connection = sqlite3.connect(self._db_path)
                self._connection.row_factory = sqlite3.Row
                self._connection.execute("PRAGMA journal_mode=WAL")

                logger.info("database_connected", db_path=self._db_path)
            except sqlite3.Error as e:
                logger.error(
                    "database_connection_failed",
                    exc_info=True,
                    db_path=self._db_path,
                    error=str(e),
                )
                raise PersistenceError(
                    f"Не удалось подключиться к БД: {self._db_path}"
                ) from e
        return self._connection

    def initialize(self) -> None:
        """Создаёт таблицу и индекс, если они ещё не существуют."""
        conn = self._get_connection()

        create_products_table = """
        CREATE TABLE IF NOT EXISTS products (
            id        TEXT PRIMARY KEY,
            type      TEXT NOT NULL,
            title     TEXT NOT NULL,
            subtitle  TEXT NOT NULL,
            kind      TEXT,
            price     REAL NOT NULL,
            quantity  NUMERIC NOT NULL,
            saved_at  TEXT NOT NULL
        )
        """

        create_index_type = """
        CREATE INDEX IF NOT EXISTS idx_products_type
        ON products (type)
        """

        try:
            conn.execute(create_products_table)
            conn.execute(create_index_type)
            conn.commit()

            logger.info("database_initialized", db_path=self._db_path)
        except sqlite3.Error as e:
            logger.error("database_init_failed", exc_info=True, error=str(e))
            raise PersistenceError("Не удалось инициализировать таблицы БД") from e

    def _row_to_product(self, row: sqlite3.Row) -> CanonicalProduct:
        return CanonicalProduct(
            id=row["id"],
            type=ProductType(row["type"]),
            title=row["title"],
            subtitle=row["subtitle"],
            kind=row["kind"],
            price=row["price"],
            quantity=row["quantity"],
        )

    def save_product(self, product: CanonicalProduct) -> None:
        """Сохраняет один обогащённый товар (upsert по id).

        Args:
            product: Товар с ценой и остатком.

        Raises:
            PersistenceError: Если товар не обогащён или запись не удалась.
        """
        if not product.is_enriched:
            raise PersistenceError(
                f"Товар {product.id} не содержит цену и остаток",
                product_id=product.id,
            )

        conn = self._get_connection()

        sql = """
        INSERT INTO products
            (id, type, title, subtitle, kind, price, quantity, saved_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            type = excluded.type,
            title = excluded.title,
            subtitle = excluded.subtitle,
            kind = excluded.kind,
            price = excluded.price,
            quantity = excluded.quantity,
            saved_at = excluded.saved_at
        """

        try:
            conn.execute(sql, (
                product.id,
                product.type.value,
                product.title,
                product.subtitle,
                product.kind,
                product.price,
                product.quantity,
                datetime.now(timezone.utc).isoformat(),
            ))
            conn.commit()

            logger.debug(
                "product_saved",
                product_id=product.id,
                product_type=product.type.value,
            )
        except sqlite3.Error as e:
            logger.error(
                "product_save_failed",
                exc_info=True,
                product_id=product.id,
                error=str(e),
            )
            raise PersistenceError(
                f"Не удалось сохранить товар {product.id}: {e}",
                product_id=product.id,
            ) from e

    def get_all_products(self) -> list[CanonicalProduct]:
        """Возвращает все товары, отсортированные по типу и id."""
        conn = self._get_connection()

        try:
            cursor = conn.execute("SELECT * FROM products ORDER BY type, id")
            return [self._row_to_product(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            logger.error("products_fetch_failed", exc_info=True, error=str(e))
            raise PersistenceError("Не удалось прочитать товары") from e

    def get_products_count(self) -> int:
        conn = self._get_connection()

        try:
            cursor = conn.execute("SELECT COUNT(*) AS cnt FROM products")
            row = cursor.fetchone()
            return row["cnt"] if row else 0
        except sqlite3.Error as e:
            logger.error("products_count_failed", exc_info=True, error=str(e))
            raise PersistenceError("Не удалось посчитать товары") from e

    def close(self) -> None:
        """Закрывает соединение с базой данных."""
        if self._connection is not None:
            try:
                self._connection.close()
                self._connection = None
                logger.info("database_closed", db_path=self._db_path)
            except sqlite3.Error as e:
                logger.error("database_close_failed", exc_info=True, error=str(e))
