"""Unit tests for structured logging configuration."""

import io
import json

import structlog

from feedrank.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def teardown_method(self) -> None:
        clear_request_context()
        structlog.reset_defaults()

    def test_json_output_with_request_context(self) -> None:
        """Events render as JSON and carry the bound request id."""
        output = io.StringIO()
        configure_logging(level="INFO", output=output, json_format=True)

        bind_request_context("req-42")
        get_logger().info("feed_ranked", feed="ranked", items_out=3)

        record = json.loads(output.getvalue().strip().splitlines()[-1])
        assert record["event"] == "feed_ranked"
        assert record["request_id"] == "req-42"
        assert record["level"] == "info"
        assert record["items_out"] == 3

    def test_level_filtering(self) -> None:
        """Events below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level="WARNING", output=output, json_format=True)

        get_logger().info("ignored")

        assert output.getvalue() == ""
