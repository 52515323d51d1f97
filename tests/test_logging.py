import logging

from chronoshift.utils.log_buffer import LogBufferHandler, get_log_buffer_handler
from chronoshift.utils.logging import SecureFormatter, setup_logging


def _record(message, level=logging.INFO):
    return logging.LogRecord("chronoshift.test", level, __file__, 1, message, None, None)


def test_secure_formatter_redacts_api_keys():
    formatter = SecureFormatter("%(message)s")
    key = "AIza" + "A" * 35

    assert key not in formatter.format(_record(f"calling with {key}"))
    assert formatter.format(_record("GET /models?key=secret123&alt=json")) == "GET /models?key=[REDACTED]&alt=json"


def test_secure_formatter_redacts_gemini_key_forms():
    formatter = SecureFormatter("%(message)s")
    url = "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"

    assert formatter.format(_record(f"POST {url}?key=abc123 failed")) == f"POST {url}?key=[REDACTED] failed"
    assert formatter.format(_record("params={'key': 'abc123'}")) == "params={'key': '[REDACTED]'}"
    assert formatter.format(_record('{"key": "abc123", "alt": "json"}')) == '{"key": "[REDACTED]", "alt": "json"}'


def test_buffered_fun_fact_logs_are_redacted():
    setup_logging()
    buffer = get_log_buffer_handler()
    buffer.clear()

    logging.getLogger("chronoshift.ai").error("Gemini request failed with params %s", {"key": "abc123"})

    message = buffer.get_entries(1)[-1]["message"]
    assert "abc123" not in message
    assert message == "Gemini request failed with params {'key': '[REDACTED]'}"


def test_setup_logging_feeds_the_buffer():
    logger = setup_logging()
    buffer = get_log_buffer_handler()
    buffer.clear()

    logging.getLogger("chronoshift.test").warning("zone lookup failed")

    entries = buffer.get_entries(10)
    assert entries[-1]["level"] == "WARNING"
    assert entries[-1]["logger"] == "chronoshift.test"
    assert entries[-1]["message"] == "zone lookup failed"
    assert setup_logging() is logger


def test_buffer_filters_by_minimum_level():
    handler = LogBufferHandler(capacity=3)
    for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR):
        handler.emit(_record(logging.getLevelName(level), level))

    assert handler.size() == 3
    assert [entry["level"] for entry in handler.get_entries(10)] == ["INFO", "WARNING", "ERROR"]
    assert [entry["level"] for entry in handler.get_entries(10, min_level="warning")] == ["WARNING", "ERROR"]
    assert [entry["level"] for entry in handler.get_entries(1)] == ["ERROR"]
