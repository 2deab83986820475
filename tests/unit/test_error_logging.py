"""
Unit tests for structured error records and the error logger.
"""

import asyncio
import json

from src.core.error_logger import get_error_logger
from src.core.error_models import (
    ErrorComponent,
    ErrorRecord,
    ErrorSeverity,
    ErrorStage,
    ErrorType,
)
from src.scraper.errors import ListContainerNotFoundError, PageNotInitializedError


def read_records(error_logger):
    files = list(error_logger.fallback_dir.glob("errors_*.jsonl"))
    assert len(files) == 1
    return [json.loads(line) for line in files[0].read_text(encoding="utf-8").splitlines()]


class TestErrorClassification:
    """Tests for ErrorRecord.from_exception classification."""

    def _classify(self, exc):
        return ErrorRecord.from_exception(
            exc, component=ErrorComponent.SCRAPER, stage=ErrorStage.TRAVERSE, domain="maps.app.goo.gl",
        ).error_type

    def test_precondition_errors(self):
        """Test missing page and missing container are preconditions."""
        assert self._classify(PageNotInitializedError()) == ErrorType.PRECONDITION_FAILED.value
        assert self._classify(ListContainerNotFoundError("no sidebar")) == ErrorType.PRECONDITION_FAILED.value

    def test_cancelled(self):
        """Test cancellation is its own category."""
        assert self._classify(asyncio.CancelledError()) == ErrorType.CANCELLED.value

    def test_timeout(self):
        """Test timeouts by name or message."""
        assert self._classify(TimeoutError("x")) == ErrorType.TIMEOUT.value
        assert self._classify(RuntimeError("Timeout 30000ms exceeded")) == ErrorType.TIMEOUT.value

    def test_navigation(self):
        """Test Chromium network errors are navigation errors."""
        assert self._classify(RuntimeError("net::ERR_NAME_NOT_RESOLVED")) == ErrorType.NAVIGATION_ERROR.value

    def test_browser(self):
        """Test closed targets are browser errors."""
        assert self._classify(RuntimeError("Target closed")) == ErrorType.BROWSER_ERROR.value

    def test_unknown(self):
        """Test anything else is unknown."""
        assert self._classify(RuntimeError("something odd")) == ErrorType.UNKNOWN.value


class TestErrorRecord:
    """Tests for ErrorRecord fields."""

    def test_expected_errors_have_no_stack(self):
        """Test expected errors skip the stack trace."""
        record = ErrorRecord.from_exception(
            PageNotInitializedError(), component=ErrorComponent.SCRAPER,
            stage=ErrorStage.EXTRACT_DETAILS, domain="x",
        )
        assert record.stack_trace is None
        assert record.message == "Page not initialized"
        assert record.exception_type.endswith("PageNotInitializedError")

    def test_unexpected_errors_have_stack(self):
        """Test unexpected errors carry a stack trace."""
        try:
            raise KeyError("boom")
        except KeyError as e:
            record = ErrorRecord.from_exception(
                e, component=ErrorComponent.SCRAPER, stage=ErrorStage.TRAVERSE, domain="x",
            )
        assert record.stack_trace and "KeyError" in record.stack_trace

    def test_warning_has_no_stack(self):
        """Test warnings never carry stacks."""
        record = ErrorRecord.from_exception(
            KeyError("boom"), component=ErrorComponent.SCRAPER, stage=ErrorStage.TRAVERSE,
            domain="x", severity=ErrorSeverity.WARNING,
        )
        assert record.stack_trace is None

    def test_stage_normalized(self):
        """Test stages are lowercased with underscores."""
        record = ErrorRecord(
            component=ErrorComponent.API, stage="Run Job", error_type=ErrorType.UNKNOWN,
            domain="x", message="m",
        )
        assert record.stage == "run_job"

    def test_metadata_made_serializable(self):
        """Test non-JSON metadata values are stringified."""
        record = ErrorRecord(
            component=ErrorComponent.API, stage="run_job", error_type=ErrorType.UNKNOWN,
            domain="x", message="m", metadata={"obj": object(), "n": 1},
        )
        assert record.metadata["n"] == 1
        assert isinstance(record.metadata["obj"], str)


class TestErrorLogger:
    """Tests for the file fallback of ErrorLogger."""

    def test_singleton_is_isolated(self, error_logger):
        """Test the fixture replaced the global instance."""
        assert get_error_logger() is error_logger

    def test_log_error_writes_jsonl(self, error_logger):
        """Test records land in the dated JSONL file."""
        ok = error_logger.log_error(
            component=ErrorComponent.SCRAPER,
            stage=ErrorStage.WAIT_FOR_LIST,
            error_type=ErrorType.TIMEOUT,
            domain="www.google.com",
            message="List container did not appear",
            session_id="session_1_abc",
        )
        assert ok is True
        [record] = read_records(error_logger)
        assert record["component"] == "scraper"
        assert record["stage"] == "wait_for_list"
        assert record["session_id"] == "session_1_abc"

    def test_log_exception_appends(self, error_logger):
        """Test several exceptions append to the same file."""
        for i in range(2):
            error_logger.log_exception(
                RuntimeError(f"fail {i}"), component=ErrorComponent.SESSIONS,
                stage=ErrorStage.TRAVERSE, domain="maps.app.goo.gl",
            )
        records = read_records(error_logger)
        assert [r["message"] for r in records] == ["fail 0", "fail 1"]

    def test_database_failure_falls_back_to_file(self, error_logger):
        """Test a failing database write still records the error."""
        class BrokenClient:
            def table(self, name):
                raise ConnectionError("db down")

        error_logger._client = BrokenClient()
        error_logger._db_available = True
        assert error_logger.log_error(
            component=ErrorComponent.DATABASE, stage=ErrorStage.UPSERT_PLACES,
            error_type=ErrorType.DB_UPSERT_ERROR, domain="x", message="upsert failed",
        ) is True
        assert read_records(error_logger)[0]["error_type"] == "db_upsert_error"
