"""Модуль структурированного JSON-логирования.

Каждая запись выводится одной JSON-строкой и содержит trace_id
текущего запуска конвейера, что позволяет собрать все события
одного прогона, включая конкурентные запросы к upstream-сервисам.

Пример использования:
    logger = get_logger("gateway_service")
    logger.info("upstream_request_completed", source="books", status=200)
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# trace_id текущего запуска. asyncio копирует контекст в каждую задачу,
# поэтому конкурентные запросы наследуют trace_id конвейера.
_trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


def set_trace_id(trace_id: str | None = None) -> str:
    """Устанавливает trace_id для текущего контекста выполнения.

    Args:
        trace_id: Идентификатор трассировки. Если None — генерируется
            автоматически (первые 8 символов UUID4).

    Returns:
        Установленный trace_id.
    """
    if trace_id is None:
        trace_id = uuid.uuid4().hex[:8]
    _trace_id_var.set(trace_id)
    return trace_id


def get_trace_id() -> str:
    """Возвращает trace_id текущего контекста или пустую строку."""
    return _trace_id_var.get()


class JSONFormatter(logging.Formatter):
    """Форматирует лог-записи в JSON.

    Поля записи: timestamp (ISO 8601, UTC), level, message, trace_id,
    logger и необязательный context с полями, переданными в вызов.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "trace_id": get_trace_id(),
            "logger": record.name,
        }

        context: dict[str, Any] = dict(getattr(record, "context_data", {}))

        if record.exc_info and record.exc_info[1] is not None:
            context["exception_type"] = type(record.exc_info[1]).__name__
            context["exception_message"] = str(record.exc_info[1])

        if context:
            log_entry["context"] = context

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ContextLogger:
    """Обёртка над стандартным логгером с контекстными полями.

    Ключевые аргументы методов логирования попадают в поле context
    JSON-вывода. Метод bind возвращает логгер с постоянными полями,
    которые добавляются к каждой записи.

    Attributes:
        _logger: Стандартный логгер Python.
        _bound: Поля, добавляемые к каждой записи.
    """

    def __init__(
        self,
        logger: logging.Logger,
        bound: dict[str, Any] | None = None,
    ) -> None:
        self._logger = logger
        self._bound: dict[str, Any] = dict(bound or {})

    def bind(self, **kwargs: Any) -> "ContextLogger":
        """Возвращает логгер с дополнительными постоянными полями.

        Args:
            **kwargs: Поля, которые попадут в каждую запись.

        Returns:
            Новый ContextLogger поверх того же стандартного логгера.
        """
        return ContextLogger(self._logger, {**self._bound, **kwargs})

    def _log(
        self,
        level: int,
        message: str,
        exc_info: bool = False,
        **kwargs: Any,
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra: dict[str, Any] = {"context_data": {**self._bound, **kwargs}}
        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Лог уровня ERROR.

        Args:
            message: Имя события.
            exc_info: Включать ли информацию о текущем исключении.
            **kwargs: Контекстные поля.
        """
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def critical(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Лог уровня CRITICAL.

        Args:
            message: Имя события.
            exc_info: Включать ли информацию о текущем исключении.
            **kwargs: Контекстные поля.
        """
        self._log(logging.CRITICAL, message, exc_info=exc_info, **kwargs)


# Реестр созданных логгеров: один ContextLogger на имя.
_loggers: dict[str, ContextLogger] = {}


def setup_logging(level: str = "INFO", log_file_path: str = "") -> None:
    """Настраивает корневой логгер.

    Вызывается один раз при старте приложения. Повторный вызов
    заменяет ранее установленные хендлеры.

    Args:
        level: Уровень логирования (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file_path: Путь к файлу логов. Пустая строка — только консоль.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    json_formatter = JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(json_formatter)
    root_logger.addHandler(console_handler)

    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_path), encoding="utf-8")
        file_handler.setFormatter(json_formatter)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> ContextLogger:
    """Возвращает именованный логгер с JSON-форматом.

    Повторный вызов с тем же именем возвращает тот же экземпляр.

    Args:
        name: Имя логгера (например, 'pipeline_service').

    Returns:
        Экземпляр ContextLogger.
    """
    if name not in _loggers:
        _loggers[name] = ContextLogger(logging.getLogger(name))
    return _loggers[name]
