"""Тесты структурированного JSON-логирования."""

import io
import json
import logging

import pytest

from store_fetcher.config import get_logger, get_trace_id, set_trace_id, setup_logging
from store_fetcher.config.logger import JSONFormatter


@pytest.fixture
def captured():
    """Логгер с JSON-хендлером, пишущим в буфер."""
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())

    stdlib_logger = logging.getLogger("test_json_logging")
    stdlib_logger.addHandler(handler)
    stdlib_logger.setLevel(logging.DEBUG)
    stdlib_logger.propagate = False

    yield get_logger("test_json_logging"), stream

    stdlib_logger.removeHandler(handler)


def read_entries(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestJSONLogging:

    def test_entry_fields(self, captured):
        logger, stream = captured
        set_trace_id("abc12345")

        logger.info("stage_started", stage="fetch_metadata")

        [entry] = read_entries(stream)
        assert entry["level"] == "INFO"
        assert entry["message"] == "stage_started"
        assert entry["trace_id"] == "abc12345"
        assert entry["logger"] == "test_json_logging"
        assert entry["context"] == {"stage": "fetch_metadata"}

    def test_bind_adds_fields_to_every_entry(self, captured):
        logger, stream = captured
        bound = logger.bind(source="books")

        bound.warning("slow_response", elapsed=1.5)
        bound.debug("retrying")

        first, second = read_entries(stream)
        assert first["context"] == {"source": "books", "elapsed": 1.5}
        assert second["context"] == {"source": "books"}

    def test_exception_info(self, captured):
        logger, stream = captured

        try:
            raise RuntimeError("boom")
        except RuntimeError:
            logger.error("failed", exc_info=True)

        [entry] = read_entries(stream)
        assert entry["context"]["exception_type"] == "RuntimeError"
        assert entry["context"]["exception_message"] == "boom"

    def test_entry_without_context(self, captured):
        logger, stream = captured

        logger.critical("shutdown")

        [entry] = read_entries(stream)
        assert "context" not in entry

    def test_get_logger_returns_same_instance(self):
        assert get_logger("pipeline_service") is get_logger("pipeline_service")

    def test_generated_trace_id(self):
        trace_id = set_trace_id()

        assert len(trace_id) == 8
        assert get_trace_id() == trace_id

    def test_setup_logging_with_file(self, tmp_path):
        log_path = tmp_path / "logs" / "run.log"
        root = logging.getLogger()
        previous_handlers = list(root.handlers)
        previous_level = root.level

        try:
            setup_logging(level="WARNING", log_file_path=str(log_path))
            get_logger("test_setup").warning("written")
            for handler in root.handlers:
                handler.flush()

            [entry] = [json.loads(line) for line in log_path.read_text().splitlines()]
            assert entry["message"] == "written"
            assert root.level == logging.WARNING
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = previous_handlers
            root.setLevel(previous_level)
