"""Пакет конфигурации приложения.

Предоставляет централизованный доступ к настройкам и логированию:
    from store_fetcher.config import load_settings, get_logger, setup_logging
"""

from store_fetcher.config.logger import (
    ContextLogger,
    get_logger,
    get_trace_id,
    set_trace_id,
    setup_logging,
)
from store_fetcher.config.settings import (
    ConfigValidationError,
    DatabaseSettings,
    LogSettings,
    Settings,
    UpstreamSettings,
    load_settings,
)

__all__ = [
    "ConfigValidationError",
    "ContextLogger",
    "DatabaseSettings",
    "LogSettings",
    "Settings",
    "UpstreamSettings",
    "get_logger",
    "get_trace_id",
    "load_settings",
    "set_trace_id",
    "setup_logging",
]
