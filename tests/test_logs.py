"""Tests for logging setup."""
import io
import json
import logging

from attestrank.logs import LOGGER_NAME, setup_logging


class TestSetupLogging:
    def test_plain_format(self):
        stream = io.StringIO()
        logger = setup_logging("INFO", stream=stream)
        logging.getLogger("attestrank.pagerank").info("converged after %d iterations", 7)
        assert "converged after 7 iterations" in stream.getvalue()
        assert logger.name == LOGGER_NAME

    def test_json_format(self):
        stream = io.StringIO()
        setup_logging("DEBUG", json_format=True, stream=stream)
        logging.getLogger("attestrank.allocation").warning("pool %d", 10)
        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["message"] == "pool 10"
        assert record["level"] == "WARNING"
        assert record["name"] == "attestrank.allocation"
        assert "timestamp" in record

    def test_level_filters(self):
        stream = io.StringIO()
        setup_logging("WARNING", stream=stream)
        logging.getLogger("attestrank.engine").info("hidden")
        assert stream.getvalue() == ""

    def test_repeated_setup_replaces_handler(self):
        setup_logging("INFO", stream=io.StringIO())
        setup_logging("INFO", stream=io.StringIO())
        handlers = [h for h in logging.getLogger(LOGGER_NAME).handlers
                    if getattr(h, "_attestrank", False)]
        assert len(handlers) == 1

    def test_unknown_level_defaults_to_info(self):
        logger = setup_logging("chatty", stream=io.StringIO())
        assert logger.level == logging.INFO
