"""Пакет утилит и вспомогательных инструментов.

Предоставляет переиспользуемые компоненты:
    from store_fetcher.utils import gather_all, gather_bounded
"""

from store_fetcher.utils.concurrency import gather_all, gather_bounded

__all__ = [
    "gather_all",
    "gather_bounded",
]
