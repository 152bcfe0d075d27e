"""Модуль конфигурации приложения.

Загружает переменные окружения из .env файла, валидирует параметры
подключения к upstream-сервисам, хранилища и логирования и предоставляет
единый объект Settings для доступа ко всем настройкам.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_METADATA_HOST = "http://store.metadata.api.co.uk"
DEFAULT_STOCK_HOST = "http://stock.api.co.uk"
DEFAULT_STOCK_CONCURRENCY = 10
DEFAULT_REQUEST_TIMEOUT = 30.0


def _load_env() -> None:
    """Загружает переменные окружения из .env файла.

    Ищет .env файл в корне проекта (два уровня вверх от этого модуля).
    Уже заданные переменные окружения не перезаписываются.
    """
    project_root = Path(__file__).resolve().parent.parent.parent
    env_path = project_root / ".env"
    load_dotenv(dotenv_path=env_path)


class ConfigValidationError(Exception):
    """Ошибка валидации конфигурации.

    Выбрасывается при некорректных значениях параметров окружения.
    Сообщение содержит все найденные ошибки сразу.
    """


@dataclass(frozen=True)
class UpstreamSettings:
    """Настройки подключения к upstream-сервисам.

    Attributes:
        metadata_host: Базовый URL сервиса метаданных каталога.
        stock_host: Базовый URL сервиса остатков и цен.
        request_timeout: Общий таймаут одного запроса в секундах.
        stock_concurrency: Максимум одновременных запросов остатков.
    """

    metadata_host: str = DEFAULT_METADATA_HOST
    stock_host: str = DEFAULT_STOCK_HOST
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    stock_concurrency: int = DEFAULT_STOCK_CONCURRENCY


@dataclass(frozen=True)
class DatabaseSettings:
    """Настройки базы данных SQLite.

    Attributes:
        db_path: Путь к файлу базы данных.
    """

    db_path: str


@dataclass(frozen=True)
class LogSettings:
    """Настройки логирования.

    Attributes:
        level: Уровень логирования (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file_path: Путь к файлу логов (пустая строка — только консоль).
    """

    level: str
    file_path: str


@dataclass(frozen=True)
class Settings:
    """Корневой объект конфигурации приложения.

    Attributes:
        upstream: Настройки upstream-сервисов.
        database: Настройки базы данных.
        log: Настройки логирования.
    """

    upstream: UpstreamSettings
    database: DatabaseSettings
    log: LogSettings


def _parse_int(value: str, param_name: str) -> int:
    """Преобразует строковое значение в int с валидацией.

    Args:
        value: Строка для преобразования.
        param_name: Имя параметра для сообщения об ошибке.

    Returns:
        Целочисленное значение.

    Raises:
        ConfigValidationError: Если значение не является целым числом.
    """
    try:
        return int(value)
    except ValueError:
        raise ConfigValidationError(
            f"Параметр '{param_name}' должен быть целым числом, "
            f"получено: '{value}'"
        )


def _parse_float(value: str, param_name: str) -> float:
    """Преобразует строковое значение в float с валидацией.

    Args:
        value: Строка для преобразования.
        param_name: Имя параметра для сообщения об ошибке.

    Returns:
        Числовое значение с плавающей точкой.

    Raises:
        ConfigValidationError: Если значение не является числом.
    """
    try:
        return float(value)
    except ValueError:
        raise ConfigValidationError(
            f"Параметр '{param_name}' должен быть числом, "
            f"получено: '{value}'"
        )


def _validate_host(value: str, param_name: str) -> str:
    """Проверяет, что значение является http(s)-адресом.

    Завершающий слэш отбрасывается, чтобы пути можно было
    склеивать простой конкатенацией.

    Args:
        value: Строковое значение адреса.
        param_name: Имя переменной для сообщения об ошибке.

    Returns:
        Адрес без завершающего слэша.

    Raises:
        ConfigValidationError: Если адрес пуст или схема не http/https.
    """
    normalized = value.strip().rstrip("/")
    parsed = urlparse(normalized)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigValidationError(
            f"Параметр '{param_name}' должен быть http(s)-адресом, "
            f"получено: '{value}'"
        )
    return normalized


def _validate_log_level(value: str) -> str:
    """Проверяет корректность уровня логирования.

    Args:
        value: Строковое значение уровня.

    Returns:
        Валидный уровень логирования в верхнем регистре.

    Raises:
        ConfigValidationError: Если уровень не входит в допустимые.
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    normalized = value.strip().upper()
    if normalized not in valid_levels:
        raise ConfigValidationError(
            f"Уровень логирования '{value}' (LOG_LEVEL) недопустим. "
            f"Допустимые значения: {', '.join(valid_levels)}"
        )
    return normalized


def _validate_positive_int(value: int, param_name: str) -> int:
    """Проверяет, что число положительное.

    Args:
        value: Целочисленное значение.
        param_name: Имя параметра для сообщения об ошибке.

    Returns:
        Положительное целое число.

    Raises:
        ConfigValidationError: Если значение не положительное.
    """
    if value <= 0:
        raise ConfigValidationError(
            f"Параметр '{param_name}' должен быть положительным числом, "
            f"получено: {value}"
        )
    return value


def load_settings() -> Settings:
    """Загружает и валидирует все настройки приложения.

    Читает переменные окружения (и .env файл, если он есть),
    парсит типы и возвращает иммутабельный объект Settings.
    Все параметры имеют значения по умолчанию.

    Returns:
        Полностью валидированный объект Settings.

    Raises:
        ConfigValidationError: Если значения параметров некорректны.
    """
    _load_env()

    errors: list[str] = []

    # --- Upstream-сервисы ---
    try:
        metadata_host = _validate_host(
            os.getenv("METADATA_HOST", DEFAULT_METADATA_HOST),
            "METADATA_HOST",
        )
    except ConfigValidationError as e:
        errors.append(str(e))
        metadata_host = DEFAULT_METADATA_HOST

    try:
        stock_host = _validate_host(
            os.getenv("STOCK_HOST", DEFAULT_STOCK_HOST),
            "STOCK_HOST",
        )
    except ConfigValidationError as e:
        errors.append(str(e))
        stock_host = DEFAULT_STOCK_HOST

    timeout_raw = os.getenv("REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))
    try:
        request_timeout = _parse_float(timeout_raw, "REQUEST_TIMEOUT")
        if request_timeout <= 0:
            raise ConfigValidationError(
                "Параметр 'REQUEST_TIMEOUT' должен быть положительным"
            )
    except ConfigValidationError as e:
        errors.append(str(e))
        request_timeout = DEFAULT_REQUEST_TIMEOUT

    concurrency_raw = os.getenv(
        "STOCK_CONCURRENCY", str(DEFAULT_STOCK_CONCURRENCY)
    )
    try:
        stock_concurrency = _validate_positive_int(
            _parse_int(concurrency_raw, "STOCK_CONCURRENCY"),
            "STOCK_CONCURRENCY",
        )
    except ConfigValidationError as e:
        errors.append(str(e))
        stock_concurrency = DEFAULT_STOCK_CONCURRENCY

    # --- База данных ---
    db_path = os.getenv("DB_PATH", "data/store_products.db")

    # --- Логирование ---
    log_level_raw = os.getenv("LOG_LEVEL", "INFO")
    log_file_path = os.getenv("LOG_FILE_PATH", "")

    try:
        log_level = _validate_log_level(log_level_raw)
    except ConfigValidationError as e:
        errors.append(str(e))
        log_level = "INFO"

    if errors:
        error_message = "Ошибки конфигурации:\n" + "\n".join(
            f"  - {err}" for err in errors
        )
        raise ConfigValidationError(error_message)

    return Settings(
        upstream=UpstreamSettings(
            metadata_host=metadata_host,
            stock_host=stock_host,
            request_timeout=request_timeout,
            stock_concurrency=stock_concurrency,
        ),
        database=DatabaseSettings(
            db_path=db_path,
        ),
        log=LogSettings(
            level=log_level,
            file_path=log_file_path,
        ),
    )
