"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from tenderdesk.shared.errors import ErrorCode, ErrorContext, TenderDeskError
from tenderdesk.shared.logging import (
    StructuredFormatter,
    log_api_call,
    log_operation_error,
    log_operation_success,
    setup_structured_logger,
)


@pytest.fixture
def logger():
    logger = logging.getLogger("tests.structured")
    logger.setLevel(logging.DEBUG)
    return logger


class TestSetupStructuredLogger:
    def test_rich_console_handler(self) -> None:
        logger = setup_structured_logger("tests.rich", "DEBUG")

        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_json_file_output(self, tmp_path: Path) -> None:
        log_file = tmp_path / "tenderdesk.log"
        logger = setup_structured_logger("tests.file", "INFO", str(log_file), use_rich_console=False)

        logger.info("hello", extra={"operation": "test"})
        for handler in logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
        assert entry["message"] == "hello"
        assert entry["operation"] == "test"
        assert entry["level"] == "INFO"
        for handler in logger.handlers:
            handler.close()

    def test_reconfiguring_replaces_handlers(self) -> None:
        setup_structured_logger("tests.twice")
        logger = setup_structured_logger("tests.twice")

        assert len(logger.handlers) == 1


class TestStructuredFormatter:
    def test_includes_extra_fields(self) -> None:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed %s", ("save",), None)
        record.error_code = "MUTATION_FAILED"

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "failed save"
        assert entry["error_code"] == "MUTATION_FAILED"


class TestOperationLogging:
    def test_error_record_carries_context(self, logger, caplog) -> None:
        error = TenderDeskError(
            ErrorCode.QUERY_FAILED,
            "permission denied",
            ErrorContext(operation="query", user_id="u1", additional_data={"table": "tenders"}),
        )

        with caplog.at_level(logging.ERROR, logger="tests.structured"):
            log_operation_error(logger, error, additional_context={"query_key": "['tenders']"})

        record = caplog.records[0]
        assert record.error_code == "QUERY_FAILED"
        assert record.operation == "query"
        assert record.context == {
            "operation": "query",
            "additional_data": {"table": "tenders"},
            "query_key": "['tenders']",
        }

    def test_success_is_debug(self, logger, caplog) -> None:
        with caplog.at_level(logging.DEBUG, logger="tests.structured"):
            log_operation_success(logger, "create_tender", 12.5, {"invalidated": 2})

        record = caplog.records[0]
        assert record.levelno == logging.DEBUG
        assert record.result_info == {"invalidated": 2}

    @pytest.mark.parametrize(
        ("status", "level", "suffix"),
        [
            (200, logging.DEBUG, "succeeded with status 200"),
            (402, logging.WARNING, "failed with status 402"),
        ],
    )
    def test_api_call_levels(self, logger, caplog, status, level, suffix) -> None:
        with caplog.at_level(logging.DEBUG, logger="tests.structured"):
            log_api_call(logger, "api/stripe/top-up", "POST", status, 30.0)

        record = caplog.records[0]
        assert record.levelno == level
        assert record.getMessage() == f"API call POST api/stripe/top-up {suffix}"
