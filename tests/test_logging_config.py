"""
Unit tests for excavation_drawing.logging_config module.

Tests:
- JSON formatter output
- Console formatter output
- Logging setup
- Timing utilities
- Context fields on export records
"""

import json
import logging
import sys
from io import StringIO

import pytest

from excavation_drawing.logging_config import (
    ConsoleFormatter,
    JSONFormatter,
    LogContext,
    configure_default_logging,
    get_logger,
    log_timing,
    setup_logging,
    timed,
)


def _record(name="excavation_drawing.drawing.report", level=logging.INFO, msg="Message"):
    return logging.LogRecord(
        name=name, level=level, pathname="report.py", lineno=42,
        msg=msg, args=(), exc_info=None,
    )


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def package_logger():
    """Package logger configured without console output; handlers restored afterwards."""
    logger = setup_logging(level=logging.DEBUG, console=False)
    yield logger
    logger.handlers.clear()


class TestJSONFormatter:
    """Tests for JSONFormatter class."""

    def test_basic_format(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "excavation_drawing.drawing.report"
        assert data["message"] == "Message"
        assert "timestamp" in data

    def test_extra_fields(self):
        record = _record()
        record.path = "GeoViz_Scavo_2024-05-01.pdf"
        record.pages = 2

        data = json.loads(JSONFormatter().format(record))

        assert data["path"] == "GeoViz_Scavo_2024-05-01.pdf"
        assert data["pages"] == 2

    def test_extra_fields_disabled(self):
        record = _record()
        record.pages = 2
        data = json.loads(JSONFormatter(include_extra=False).format(record))
        assert "pages" not in data

    def test_non_serializable_extra(self):
        record = _record()
        record.target = object()
        data = json.loads(JSONFormatter().format(record))
        assert data["target"].startswith("<object")

    def test_location_for_warning(self):
        data = json.loads(JSONFormatter().format(_record(level=logging.WARNING)))
        assert data["location"]["line"] == 42

    def test_no_location_for_info(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert "location" not in data

    def test_exception_format(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = logging.LogRecord(
                name="test", level=logging.ERROR, pathname="test.py", lineno=1,
                msg="Export failed", args=(), exc_info=sys.exc_info(),
            )

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError" in data["exception"]

    def test_unicode_message(self):
        data = json.loads(JSONFormatter().format(_record(msg="Profondità 2.50 m, area 47.00 m²")))
        assert "Profondità" in data["message"]
        assert "m²" in data["message"]


class TestConsoleFormatter:
    """Tests for ConsoleFormatter class."""

    def test_basic_format(self):
        result = ConsoleFormatter(use_colors=False).format(_record(msg="Building pages"))

        assert "INFO" in result
        assert " drawing.report:" in result  # package prefix stripped
        assert "Building pages" in result

    def test_extra_fields_shown(self):
        record = _record()
        record.scale = 13.5
        result = ConsoleFormatter(use_colors=False, show_extra=True).format(record)
        assert "scale=13.5" in result

    def test_long_sequences_summarized(self):
        record = _record()
        record.points = [1, 2, 3, 4, 5]
        result = ConsoleFormatter(use_colors=False).format(record)
        assert "points=[...5 items]" in result

    def test_colors_disabled(self):
        result = ConsoleFormatter(use_colors=False).format(_record(level=logging.ERROR))
        assert "\033[" not in result

    def test_colors_enabled(self):
        result = ConsoleFormatter(use_colors=True).format(_record(level=logging.ERROR))
        assert "\033[31m" in result


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_returns_package_logger(self, package_logger):
        assert package_logger.name == "excavation_drawing"
        assert not package_logger.propagate

    def test_console_handler_added(self):
        logger = setup_logging(console=True)
        try:
            assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
        finally:
            logger.handlers.clear()

    def test_json_file_handler(self, tmp_path):
        json_path = tmp_path / "export.log.json"
        logger = setup_logging(json_file=json_path, console=False)
        try:
            logger.info("Report exported", extra={"path": "report.pdf"})
            for handler in logger.handlers:
                handler.flush()
                handler.close()

            data = json.loads(json_path.read_text(encoding="utf-8").strip())
            assert data["message"] == "Report exported"
            assert data["path"] == "report.pdf"
        finally:
            logger.handlers.clear()

    def test_level_setting(self, package_logger):
        logger = setup_logging(level=logging.WARNING, console=False)
        assert logger.level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger function."""

    def test_returns_named_logger(self):
        logger = get_logger("excavation_drawing.scene")
        assert logger.name == "excavation_drawing.scene"

    def test_same_logger_returned(self):
        assert get_logger("excavation_drawing.scene") is get_logger("excavation_drawing.scene")


class TestLogTiming:
    """Tests for log_timing context manager."""

    def test_logs_start_and_complete(self):
        logger = logging.getLogger("timing_test")
        logger.setLevel(logging.DEBUG)
        stream = StringIO()
        logger.addHandler(logging.StreamHandler(stream))

        with log_timing(logger, "Writing PDF"):
            pass

        output = stream.getvalue()
        assert "Starting: Writing PDF" in output
        assert "Completed: Writing PDF" in output

    def test_timing_info_updated(self):
        logger = logging.getLogger("timing_test2")
        logger.addHandler(logging.NullHandler())

        with log_timing(logger, "operation") as info:
            info['pages'] = 2

        assert info["elapsed_seconds"] >= 0
        assert info["pages"] == 2

    def test_extra_fields_on_records(self):
        logger = logging.getLogger("timing_test3")
        logger.setLevel(logging.DEBUG)
        capture = _Capture()
        logger.addHandler(capture)

        with log_timing(logger, "Building report pages", sfido=0.2):
            pass

        start, complete = capture.records
        assert start.event == "start"
        assert complete.event == "complete"
        assert complete.sfido == 0.2
        assert complete.elapsed_seconds >= 0

    def test_error_logged_and_reraised(self):
        logger = logging.getLogger("timing_test4")
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        logger.addHandler(handler)

        with pytest.raises(ValueError):
            with log_timing(logger, "failing export"):
                raise ValueError("disk full")

        output = stream.getvalue()
        assert "ERROR: Failed: failing export" in output
        assert "disk full" in output


class TestTimedDecorator:
    """Tests for timed decorator."""

    def test_function_executed(self):
        logger = logging.getLogger("timed_test")
        logger.addHandler(logging.NullHandler())

        @timed(logger=logger)
        def area(a, b):
            return a * b

        assert area(4, 3) == 12

    def test_preserves_function_name(self):
        @timed()
        def build_pages():
            pass

        assert build_pages.__name__ == "build_pages"


class TestLogContext:
    """Tests for LogContext class."""

    def test_fields_on_package_logger_records(self, package_logger):
        capture = _Capture()
        package_logger.addHandler(capture)

        with LogContext(report="GeoViz_Scavo_2024-05-01.pdf"):
            package_logger.info("Exporting")

        assert capture.records[0].report == "GeoViz_Scavo_2024-05-01.pdf"

    def test_fields_on_module_logger_records(self, package_logger):
        """Records from child module loggers carry the fields too."""
        capture = _Capture()
        package_logger.addHandler(capture)
        module_logger = logging.getLogger("excavation_drawing.drawing.report")

        with LogContext(report="r.pdf"):
            module_logger.info("Building pages")

        assert capture.records[0].report == "r.pdf"

    def test_filter_removed_on_exit(self, package_logger):
        capture = _Capture()
        package_logger.addHandler(capture)

        with LogContext(report="r.pdf"):
            pass
        package_logger.info("After")

        assert not hasattr(capture.records[0], 'report')

    def test_context_current(self):
        assert LogContext.current() is None

        ctx = LogContext(report="r.pdf")
        with ctx:
            assert LogContext.current() is ctx
            assert LogContext.current().fields["report"] == "r.pdf"

        assert LogContext.current() is None


class TestConfigureDefaultLogging:
    """Tests for configure_default_logging function."""

    def test_info_level_default(self):
        logger = configure_default_logging(verbose=False)
        try:
            assert logger.level == logging.INFO
        finally:
            logger.handlers.clear()

    def test_debug_level_verbose(self):
        logger = configure_default_logging(verbose=True)
        try:
            assert logger.level == logging.DEBUG
        finally:
            logger.handlers.clear()
