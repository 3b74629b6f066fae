# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging configuration."""

import json
import logging

import pytest
import structlog

from edupulse.core.config.settings import Settings
from edupulse.utils.logging import (
    SERVICE_NAME,
    add_service_context,
    bind_context,
    clear_context,
    setup_logging,
)


@pytest.fixture
def restore_logging():
    """Restore root handlers and structlog defaults after the test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    clear_context()
    structlog.reset_defaults()


def make_record(message: str, *args) -> logging.LogRecord:
    """Build a standard library log record from a domain module."""
    return logging.LogRecord(
        "edupulse.domains.content.progress", logging.INFO, __file__, 1, message, args, None
    )


class TestServiceContext:
    """Tests for the service context processor."""

    def test_adds_service_and_environment(self):
        """Test that service and environment are stamped on the event."""
        processor = add_service_context("staging")

        event = processor(None, "info", {"event": "Progress tracked"})

        assert event["service"] == SERVICE_NAME
        assert event["environment"] == "staging"

    def test_keeps_existing_keys(self):
        """Test that keys set by the caller win."""
        processor = add_service_context("staging")

        event = processor(None, "info", {"event": "x", "service": "worker"})

        assert event["service"] == "worker"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_single_root_handler(self, restore_logging):
        """Test that the root logger gets exactly one stdout handler."""
        setup_logging(Settings(environment="staging", debug=False, log_level="INFO"))

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert root.level == logging.INFO

    def test_stdlib_record_carries_request_context(self, restore_logging):
        """Test that a %-style stdlib record is rendered with the bound request_id."""
        setup_logging(Settings(environment="staging", debug=False, log_level="INFO"))
        formatter = logging.getLogger().handlers[0].formatter

        bind_context(request_id="req-1")
        line = formatter.format(make_record("Progress tracked: user=%s", "u-1"))

        data = json.loads(line)
        assert data["event"] == "Progress tracked: user=u-1"
        assert data["request_id"] == "req-1"
        assert data["service"] == SERVICE_NAME
        assert data["environment"] == "staging"
        assert data["logger"] == "edupulse.domains.content.progress"
        assert data["level"] == "info"

    def test_context_cleared(self, restore_logging):
        """Test that cleared context no longer appears."""
        setup_logging(Settings(environment="staging", debug=False, log_level="INFO"))
        formatter = logging.getLogger().handlers[0].formatter

        bind_context(request_id="req-1")
        clear_context()
        data = json.loads(formatter.format(make_record("done")))

        assert "request_id" not in data
