from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from statediff.core.models import ADDED_MARKER, REMOVED_MARKER
from statediff.services.settings import DiffSettings, DiffStrategy, StructuralSettings
from statediff.services.stringify import dump_to_string
from statediff.services.transforms import (
    CallableSink,
    CustomTransform,
    LoggingSink,
    NewStateOnlyTransform,
    RecursiveDiffTransform,
    UnifiedDiffTransform,
    log_state_change,
    sink_from_settings,
    transform_from_settings,
)


@dataclass(frozen=True)
class Counter:
    count: int
    label: str


def test_unified_transform_reports_no_mutation():
    state = Counter(1, "a")

    assert UnifiedDiffTransform().transform(state, state) == "🏛  No state mutation"


def test_unified_transform_renders_changed_dump():
    before = [f"item {i}" for i in range(30)]
    after = list(before)
    after[10] = "changed"

    result = UnifiedDiffTransform(context_lines=1, prefix_lines=">").transform(before, after)

    lines = result.split("\n")
    assert all(line.startswith("> ") for line in lines)
    assert f"> {REMOVED_MARKER} 'item 10'," in lines
    assert f"> {ADDED_MARKER} 'changed'," in lines


def test_new_state_only_transform():
    state = Counter(2, "b")

    assert NewStateOnlyTransform().transform(None, state) == dump_to_string(state)


def test_recursive_transform():
    transform = RecursiveDiffTransform("Counter", prefix_lines="🏛")

    assert transform.transform(Counter(1, "a"), Counter(2, "a")) == "🏛 Counter.count: 1 → 2"
    assert transform.transform(Counter(1, "a"), Counter(1, "a")) is None


def test_recursive_transform_applies_filters():
    transform = RecursiveDiffTransform("Counter", prefix_lines="🏛", filters=["Counter.label"])

    result = transform.transform(Counter(1, "a"), Counter(2, "b"))

    assert result == "🏛 Counter.count: 1 → 2"


def test_custom_transform_receives_both_states():
    transform = CustomTransform(lambda old, new: f"{old.count}->{new.count}")

    assert transform.transform(Counter(1, "a"), Counter(3, "a")) == "1->3"


def test_log_state_change_forwards_message():
    received = []
    sink = CallableSink(received.append)

    message = log_state_change(
        Counter(1, "a"), Counter(2, "a"),
        RecursiveDiffTransform("Counter", prefix_lines="~"),
        sink,
    )

    assert message == "~ Counter.count: 1 → 2"
    assert received == [message]


def test_log_state_change_skips_empty_result():
    received = []

    message = log_state_change(
        Counter(1, "a"), Counter(1, "a"),
        RecursiveDiffTransform("Counter"),
        CallableSink(received.append),
    )

    assert message is None
    assert received == []


def test_logging_sink_writes_debug_records(caplog):
    sink = LoggingSink("statediff.test")

    with caplog.at_level(logging.DEBUG, logger="statediff.test"):
        sink.log("🏛 State.count: 1 → 2")

    assert [(r.name, r.levelno, r.getMessage()) for r in caplog.records] == [
        ("statediff.test", logging.DEBUG, "🏛 State.count: 1 → 2"),
    ]


class TestFromSettings:

    def test_default_is_unified(self):
        transform = transform_from_settings(DiffSettings())

        assert isinstance(transform, UnifiedDiffTransform)
        assert transform.context_lines == 2

    def test_new_state_only(self):
        settings = DiffSettings(strategy=DiffStrategy.NEW_STATE_ONLY)

        assert isinstance(transform_from_settings(settings), NewStateOnlyTransform)

    def test_recursive_uses_structural_settings(self):
        settings = DiffSettings(
            strategy=DiffStrategy.RECURSIVE,
            structural=StructuralSettings(prefix_lines="#", state_name="Counter", nil_marker="None"),
        )

        transform = transform_from_settings(settings)

        assert isinstance(transform, RecursiveDiffTransform)
        assert transform.transform(Counter(1, "a"), replace(Counter(1, "a"), count=5)) == "# Counter.count: 1 → 5"

    def test_sink_uses_configured_logger(self):
        sink = sink_from_settings(DiffSettings(logger_name="my.state"))

        assert sink.logger.name == "my.state"
