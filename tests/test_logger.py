import logging

from guildwarden.util import logger as logger_module
from guildwarden.util.logger import (
    LOG_COLORS,
    RESET_COLOR,
    ColorFormatter,
    PromptToolkitHandler,
    get_logger,
    should_use_color,
)


def make_record(level):
    return logging.LogRecord("test", level, __file__, 1, "hello", None, None)


def test_should_use_color_follows_isatty(monkeypatch):
    monkeypatch.setattr(logger_module.sys.stderr, "isatty", lambda: True, raising=False)
    assert should_use_color() is True

    monkeypatch.setattr(logger_module.sys.stderr, "isatty", lambda: False, raising=False)
    assert should_use_color() is False


def test_should_use_color_tolerates_errors(monkeypatch):
    def broken():
        raise OSError("closed")

    monkeypatch.setattr(logger_module.sys.stderr, "isatty", broken, raising=False)
    assert should_use_color() is False


def test_color_formatter_wraps_known_levels():
    formatter = ColorFormatter("%(message)s")

    assert formatter.format(make_record(logging.ERROR)) == f"{LOG_COLORS['ERROR']}hello{RESET_COLOR}"
    record = make_record(logging.INFO)
    record.levelname = "CUSTOM"
    assert formatter.format(record) == "hello"


def test_get_logger_configures_once():
    first = get_logger("guildwarden-test-logger")
    handler_count = len(first.handlers)
    second = get_logger("guildwarden-test-logger")

    assert first is second
    assert len(second.handlers) == handler_count == 2
    assert first.propagate is False
    assert any(isinstance(handler, PromptToolkitHandler) for handler in first.handlers)
