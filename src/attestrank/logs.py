"""attestrank logs: logging setup for the CLI and host applications."""

import logging

from pythonjsonlogger.json import JsonFormatter

LOGGER_NAME = "attestrank"


def setup_logging(level: str = "INFO", json_format: bool = False,
                  stream=None) -> logging.Logger:
    """Configure the ``attestrank`` logger. JSON output uses structured fields."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_attestrank", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler._attestrank = True
    if json_format:
        handler.setFormatter(JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        ))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    return logger
