from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from statediff.logging_setup import LogFormatter, setup_logging
from statediff.services.settings import DiffSettings
from statediff.services.transforms import (
    RecursiveDiffTransform,
    log_state_change,
    sink_from_settings,
)


@dataclass(frozen=True)
class Counter:
    count: int
    label: str


@pytest.fixture
def settings():
    settings = DiffSettings(logger_name="statediff.tests")
    yield settings
    logger = logging.getLogger(settings.logger_name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_sink_output_reaches_the_log_file(settings, tmp_path):
    log_file = tmp_path / "logs" / "state.log"
    logger = setup_logging(settings, "debug", log_file)

    log_state_change(
        Counter(1, "a"), Counter(2, "b"),
        RecursiveDiffTransform("Counter", prefix_lines="🏛"),
        sink_from_settings(settings),
    )
    for handler in logger.handlers:
        handler.flush()

    first, second = log_file.read_text(encoding="utf-8").splitlines()
    assert first.endswith("| DEBUG    | statediff.tests | 🏛 Counter.count: 1 → 2")
    assert second.strip() == "🏛 Counter.label: a → b"
    assert second.index("🏛") == first.index("🏛")


def test_only_the_diff_logger_is_configured(settings):
    root = logging.getLogger()
    root_handlers = list(root.handlers)

    logger = setup_logging(settings)

    assert logger.name == "statediff.tests"
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert len(logger.handlers) == 1
    assert root.handlers == root_handlers


def test_setup_twice_replaces_handlers(settings, tmp_path):
    setup_logging(settings, "info", tmp_path / "one.log")
    logger = setup_logging(settings, "chatty")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_formatter_without_colors():
    record = logging.LogRecord("statediff", logging.WARNING, __file__, 1, "careful", None, None)

    formatted = LogFormatter(use_colors=False).format(record)

    assert formatted.endswith("| WARNING  | statediff | careful")
    assert "\033[" not in formatted
