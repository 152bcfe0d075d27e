"""Вспомогательные функции для конкурентных этапов конвейера.

Пример использования:
    books, blacklist = await gather_all(
        gateway.get_books(), gateway.get_blacklist()
    )

    results = await gather_bounded(
        [lambda: fetch(1), lambda: fetch(2)], limit=10
    )
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from store_fetcher.config import get_logger

logger = get_logger("concurrency")

T = TypeVar("T")


# Задачи, оставшиеся в полёте после досрочного выхода из группы.
# Ссылки держатся до их завершения, иначе цикл может их собрать.
_orphaned: set[asyncio.Task[Any]] = set()


def _release(task: asyncio.Task[Any]) -> None:
    _orphaned.discard(task)
    if not task.cancelled():
        task.exception()


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """Дожидается всех awaitable и возвращает результаты по позициям.

    Первое завершившееся исключение выбрасывается сразу, не дожидаясь
    остальных участников. Участники, ещё находящиеся в полёте, не
    отменяются: они завершаются сами, их результаты и ошибки
    отбрасываются.

    Args:
        *aws: Корутины или задачи.

    Returns:
        Список результатов в порядке аргументов.

    Raises:
        Исключение участника, завершившегося ошибкой первым.
    """
    if not aws:
        return []

    tasks = [asyncio.ensure_future(aw) for aw in aws]
    done, pending = await asyncio.wait(
        tasks, return_when=asyncio.FIRST_EXCEPTION
    )

    # Если в одной итерации цикла упало несколько задач, берётся
    # первая по позиции.
    failed = next(
        (
            task for task in tasks
            if task in done
            and not task.cancelled()
            and task.exception() is not None
        ),
        None,
    )
    if failed is None:
        return [task.result() for task in tasks]

    for task in tasks:
        if task in pending:
            _orphaned.add(task)
            task.add_done_callback(_release)
        elif task is not failed and not task.cancelled():
            task.exception()

    error = failed.exception()
    logger.debug(
        "concurrent_group_failed",
        total=len(tasks),
        still_running=len(pending),
        error_type=type(error).__name__,
    )
    raise error


async def gather_bounded(
    factories: Sequence[Callable[[], Awaitable[T]]],
    limit: int,
) -> list[T]:
    """Выполняет фабрики корутин, держа в полёте не больше limit штук.

    Остальные ждут освобождения слота. Результат i-й фабрики
    попадает в i-ю позицию независимо от порядка завершения.
    После первой ошибки фабрики, ещё ожидающие слота, не вызываются.

    Args:
        factories: Функции без аргументов, создающие корутины.
        limit: Потолок одновременно выполняемых корутин.

    Returns:
        Список результатов в порядке фабрик.

    Raises:
        ValueError: Если limit не положительный.
        Первое завершившееся исключение (см. gather_all).
    """
    if limit <= 0:
        raise ValueError(f"limit должен быть положительным, получено: {limit}")

    semaphore = asyncio.Semaphore(limit)
    failed = asyncio.Event()

    async def _admit(factory: Callable[[], Awaitable[T]]) -> T | None:
        async with semaphore:
            if failed.is_set():
                return None
            try:
                return await factory()
            except BaseException:
                failed.set()
                raise

    return await gather_all(*(_admit(factory) for factory in factories))
