"""
State diff transforms and sinks.

A host that wants to log state changes picks one transform (how a
before/after pair becomes a message) and one sink (where the message goes):

    transform = UnifiedDiffTransform(context_lines=2)
    sink = LoggingSink("myapp.state")
    log_state_change(before, after, transform, sink)

Both are small strategy objects with a single method each.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, Sequence

from statediff.core.diff.structural import StructuralDiffOptions, recursive_diff
from statediff.core.diff.unified import diff_text
from statediff.services.settings import DiffSettings, DiffStrategy
from statediff.services.stringify import dump_to_string

DEFAULT_PREFIX = "🏛 "


# =============================================================================
# Transforms
# =============================================================================

class StateDiffTransform(Protocol):
    """Turns an old/new state pair into a message, or None for no message."""

    def transform(self, old_state: Any, new_state: Any) -> Optional[str]:
        ...


class UnifiedDiffTransform:
    """Unified diff of the two state dumps."""

    def __init__(self, context_lines: int = 2, prefix_lines: str = DEFAULT_PREFIX):
        self.context_lines = context_lines
        self.prefix_lines = prefix_lines

    def transform(self, old_state: Any, new_state: Any) -> Optional[str]:
        diff = diff_text(
            dump_to_string(old_state),
            dump_to_string(new_state),
            context=self.context_lines,
            prefix=self.prefix_lines,
        )
        if diff is None:
            return f"{self.prefix_lines} No state mutation"
        return diff


class NewStateOnlyTransform:
    """Dump of the new state, ignoring the old one."""

    def transform(self, old_state: Any, new_state: Any) -> Optional[str]:
        return dump_to_string(new_state)


class RecursiveDiffTransform:
    """One line per changed field, see ``recursive_diff``."""

    def __init__(
        self,
        state_name: str,
        prefix_lines: str = DEFAULT_PREFIX,
        filters: Optional[Sequence[str]] = None,
        options: Optional[StructuralDiffOptions] = None
    ):
        self.state_name = state_name
        self.prefix_lines = prefix_lines
        self.filters = list(filters or [])
        self.options = options

    def transform(self, old_state: Any, new_state: Any) -> Optional[str]:
        return recursive_diff(
            self.prefix_lines,
            self.state_name,
            old_state,
            new_state,
            filters=self.filters,
            options=self.options,
        )


class CustomTransform:
    """Wraps a caller-supplied function."""

    def __init__(self, func: Callable[[Any, Any], Optional[str]]):
        self.func = func

    def transform(self, old_state: Any, new_state: Any) -> Optional[str]:
        return self.func(old_state, new_state)


# =============================================================================
# Sinks
# =============================================================================

class StateSink(Protocol):
    """Destination for rendered messages."""

    def log(self, message: str) -> None:
        ...


class LoggingSink:
    """Writes messages to a ``logging`` logger at DEBUG level."""

    def __init__(self, logger_name: str = "statediff", level: int = logging.DEBUG):
        self.logger = logging.getLogger(logger_name)
        self.level = level

    def log(self, message: str) -> None:
        self.logger.log(self.level, message)


class CallableSink:
    """Hands messages to a caller-supplied function."""

    def __init__(self, func: Callable[[str], None]):
        self.func = func

    def log(self, message: str) -> None:
        self.func(message)


# =============================================================================
# Wiring
# =============================================================================

def log_state_change(
    before: Any,
    after: Any,
    transform: StateDiffTransform,
    sink: StateSink
) -> Optional[str]:
    """
    Apply ``transform`` to a state change and forward the result to ``sink``.

    Returns:
        The message that was logged, or None if the transform produced none
    """
    message = transform.transform(before, after)
    if message is not None:
        sink.log(message)
    return message


def transform_from_settings(settings: DiffSettings) -> StateDiffTransform:
    """Build the transform selected by ``settings.strategy``."""
    if settings.strategy == DiffStrategy.NEW_STATE_ONLY:
        return NewStateOnlyTransform()
    if settings.strategy == DiffStrategy.RECURSIVE:
        structural = settings.structural
        return RecursiveDiffTransform(
            state_name=structural.state_name,
            prefix_lines=structural.prefix_lines,
            filters=structural.filters,
            options=StructuralDiffOptions(
                nil_marker=structural.nil_marker,
                container_marker=structural.container_marker,
            ),
        )
    return UnifiedDiffTransform(
        context_lines=settings.line_diff.context_lines,
        prefix_lines=settings.line_diff.prefix_lines,
    )


def sink_from_settings(settings: DiffSettings) -> StateSink:
    """Build the default logging sink for ``settings``."""
    return LoggingSink(settings.logger_name)
