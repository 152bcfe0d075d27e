"""Точка входа загрузчика каталога.

Связывает компоненты системы и выполняет один запуск конвейера:
1. Загрузка конфигурации и инициализация логирования.
2. Загрузка каталогов, чёрного списка и остатков.
3. Сохранение обогащённых товаров в SQLite.

Запуск: python -m store_fetcher
"""

import asyncio
import sys

from store_fetcher.config import (
    ConfigValidationError,
    Settings,
    get_logger,
    load_settings,
    set_trace_id,
    setup_logging,
)
from store_fetcher.repositories import SQLiteProductRepository
from store_fetcher.services import PipelineService, UpstreamGateway

logger = get_logger("main")


def create_repository(settings: Settings) -> SQLiteProductRepository:
    """Создаёт и инициализирует репозиторий.

    Args:
        settings: Настройки приложения.

    Returns:
        SQLite-репозиторий с созданными таблицами.
    """
    repository = SQLiteProductRepository(db_path=settings.database.db_path)
    repository.initialize()
    return repository


def create_gateway(settings: Settings) -> UpstreamGateway:
    return UpstreamGateway(settings=settings.upstream)


def create_pipeline_service(
    gateway: UpstreamGateway,
    repository: SQLiteProductRepository,
    settings: Settings,
) -> PipelineService:
    return PipelineService(
        gateway=gateway,
        repository=repository,
        stock_concurrency=settings.upstream.stock_concurrency,
    )


async def run_pipeline(settings: Settings) -> None:
    """Выполняет один запуск конвейера.

    Гарантирует закрытие HTTP-сессии и соединения с БД
    через try/finally.

    Args:
        settings: Полностью валидированные настройки приложения.
    """
    repository = create_repository(settings)
    gateway = create_gateway(settings)

    try:
        pipeline = create_pipeline_service(gateway, repository, settings)
        await pipeline.fetch()

        logger.info(
            "products_in_storage",
            total=repository.get_products_count(),
        )
    finally:
        await gateway.close()
        repository.close()
        logger.info("all_resources_closed")


def main() -> None:
    """Главная функция приложения.

    Загружает конфигурацию, настраивает логирование, устанавливает
    trace_id и запускает конвейер. Любая ошибка запуска завершает
    процесс с кодом 1.
    """
    try:
        settings = load_settings()
    except ConfigValidationError as e:
        print(f"\n[ОШИБКА КОНФИГУРАЦИИ]\n{e}")
        print("\nПроверьте файл .env (см. .env.example для справки).")
        sys.exit(1)

    setup_logging(
        level=settings.log.level,
        log_file_path=settings.log.file_path,
    )

    trace_id = set_trace_id()

    logger.info(
        "application_started",
        metadata_host=settings.upstream.metadata_host,
        stock_host=settings.upstream.stock_host,
        stock_concurrency=settings.upstream.stock_concurrency,
        db_path=settings.database.db_path,
    )

    try:
        asyncio.run(run_pipeline(settings))
    except KeyboardInterrupt:
        logger.info("application_interrupted_by_user")
        print("\nПрограмма остановлена пользователем (Ctrl+C).")
        sys.exit(130)
    except Exception as e:
        logger.critical(
            "application_fatal_error",
            exc_info=True,
            error=str(e),
            error_type=type(e).__name__,
        )
        print(f"\nКритическая ошибка: {e}")
        sys.exit(1)

    logger.info("application_finished", trace_id=trace_id)


if __name__ == "__main__":
    main()
