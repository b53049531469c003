import logging
import json

from tablemodel.errors import ErrorCode, ErrorSeverity, TableError
from tablemodel.logger import JsonFormatter, configure_logging, get_logger
from tablemodel.model import log_error


class TestStructuredLogging:

    def test_json_logging_enabled(self):
        # Arrange
        configure_logging(json_format=True)

        # Verify Handler
        root = logging.getLogger()
        handler = root.handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)

        # Verify Output
        record = logging.LogRecord("test_json", logging.INFO, "path", 1, "test msg", {}, None)
        data = json.loads(handler.formatter.format(record))
        assert data["message"] == "test msg"
        assert data["level"] == "INFO"
        assert data["name"] == "test_json"

    def test_extra_fields_are_serialized(self):
        record = logging.LogRecord("test_extra", logging.WARNING, "path", 1, "failed", {}, None)
        record.table = "wp_posts"
        record.details = {"index": 2}

        data = json.loads(JsonFormatter().format(record))

        assert data["table"] == "wp_posts"
        assert data["details"] == {"index": 2}
        assert "args" not in data

    def test_plain_format_and_engine_level(self):
        configure_logging(level="DEBUG", json_format=False)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_get_logger_returns_named_logger(self):
        assert get_logger("tablemodel.test").name == "tablemodel.test"


def test_log_error_uses_error_severity(caplog):
    error = TableError(
        table="wp_posts",
        operation="insert_rows",
        message="duplicate primary key",
        severity=ErrorSeverity.WARNING,
        error_code=ErrorCode.DUPLICATE_PRIMARY_KEY,
        details={"index": 1},
    )

    with caplog.at_level(logging.INFO, logger="tablemodel.model"):
        log_error(error)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.error_code == "DUPLICATE_PRIMARY_KEY"
    assert record.table == "wp_posts"
    assert "[DUPLICATE_PRIMARY_KEY] wp_posts.insert_rows" in record.getMessage()
