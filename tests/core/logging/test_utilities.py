"""Tests for logging utility functions."""

import logging

from core.errors.exceptions import FetchFailure, ResolutionFailure
from core.logging.utilities import log_exception, log_with_context


class TestLogWithContext:
    def test_extra_fields_are_attached(self, caplog):
        logger = logging.getLogger("test.utilities")

        with caplog.at_level(logging.INFO, logger="test.utilities"):
            log_with_context(logger, logging.INFO, "Resolved", entity="kind", candidates=3)

        record = caplog.records[-1]
        assert record.entity == "kind"
        assert record.candidates == 3

    def test_reserved_keys_are_dropped(self, caplog):
        logger = logging.getLogger("test.utilities")

        with caplog.at_level(logging.INFO, logger="test.utilities"):
            log_with_context(logger, logging.INFO, "msg", module="NotificationDefect", entity="x")

        record = caplog.records[-1]
        assert record.module != "NotificationDefect"
        assert record.entity == "x"


class TestLogException:
    def test_adds_category_and_stage(self, caplog):
        logger = logging.getLogger("test.utilities")
        error = FetchFailure("GET /api/masterdata/employee failed: 503", status_code=503)

        with caplog.at_level(logging.ERROR, logger="test.utilities"):
            log_exception(logger, error, "Run failed")

        record = caplog.records[-1]
        assert record.error_category == "transient"
        assert record.failed_stage == "fetch"
        assert record.exc_info is not None

    def test_without_traceback(self, caplog):
        logger = logging.getLogger("test.utilities")
        error = ResolutionFailure("No kind", entity="kind")

        with caplog.at_level(logging.ERROR, logger="test.utilities"):
            log_exception(logger, error, "Run failed", include_traceback=False)

        record = caplog.records[-1]
        assert record.exc_info is None
        assert record.failed_stage == "resolve"

    def test_long_message_is_truncated(self, caplog):
        logger = logging.getLogger("test.utilities")

        with caplog.at_level(logging.ERROR, logger="test.utilities"):
            log_exception(logger, ValueError("x" * 800), "Failed", include_traceback=False)

        assert len(caplog.records[-1].error_message) == 503
