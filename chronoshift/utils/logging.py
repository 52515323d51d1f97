"""Logging setup with redaction of API keys."""
from __future__ import annotations

import logging
import re
from typing import Iterable

from chronoshift.utils.log_buffer import get_log_buffer_handler

_SECRET_PATTERNS: tuple[str, ...] = (
    r"AIza[0-9A-Za-z\-_]{35}",  # Google API keys
    r"(?<=key=)[^&\s]+",  # Gemini generateContent query string
    r'(?<=[\'"]key[\'"]: [\'"])[^\'"]+',  # requests params dict
    r"[A-Za-z0-9]{32,}",
)


class SecureFormatter(logging.Formatter):
    """Formatter that redacts strings looking like secrets.

    The Gemini key travels as a `key` query parameter, so it can surface in
    request URLs and in logged `params` dicts as well as in its raw form.
    """

    def __init__(self, *args, secret_patterns: Iterable[str] | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._patterns = [re.compile(pattern) for pattern in (secret_patterns or _SECRET_PATTERNS)]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for pattern in self._patterns:
            message = pattern.sub("[REDACTED]", message)
        return message


def setup_logging(name: str = "chronoshift", level: str | int = "INFO") -> logging.Logger:
    """Configure the ``chronoshift`` logger tree if it is not already configured."""

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    handler.setFormatter(SecureFormatter(fmt))
    logger.addHandler(handler)

    buffer_handler = get_log_buffer_handler()
    if buffer_handler not in logger.handlers:
        buffer_handler.setFormatter(SecureFormatter("%(message)s"))
        logger.addHandler(buffer_handler)
    logger.setLevel(level if isinstance(level, int) else getattr(logging, str(level).upper(), logging.INFO))

    logger.propagate = False
    return logger
