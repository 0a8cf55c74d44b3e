"""Loguru logging configuration for the chat client.

``setup_logging()`` is called once by the API module and by the terminal
client. Besides the sink it installs:

- a patcher that masks anything shaped like a CPF in every record, so a
  message echoed by httpx or uvicorn never puts a full identifier in the logs
- an intercept handler routing stdlib ``logging`` records through loguru
"""

from __future__ import annotations

import logging
import re
import sys

from loguru import logger

# 000.000.000-00 with or without punctuation; ASCII digits only
_CPF_LIKE = re.compile(r"(?<![0-9])[0-9]{3}\.?[0-9]{3}\.?[0-9]{3}-?([0-9]{2})(?![0-9])")

_THIRD_PARTY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "fastapi",
    "httpx",
    "httpcore",
)

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)


def mask_national_ids(text: str) -> str:
    """Replace CPF-shaped numbers with ``*********NN`` (check digits kept)."""
    return _CPF_LIKE.sub(lambda match: "*" * 9 + match.group(1), text)


def _redact(record) -> None:
    record["message"] = mask_national_ids(record["message"])


class _StdlibToLoguru(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(*, level: str = "INFO", json: bool = False) -> None:
    """Make loguru the only logging backend.

    Args:
        level: Minimum log level for the stderr sink.
        json: Serialize records as JSON lines instead of the coloured format.
    """
    logger.remove()
    logger.configure(patcher=_redact)

    if json:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT, colorize=True)

    handler = _StdlibToLoguru()
    for name in _THIRD_PARTY_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [handler]
        stdlib_logger.propagate = False

    logging.root.handlers = [handler]
    logging.root.setLevel(logging.DEBUG)
