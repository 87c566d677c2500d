"""
Unified diff rendering.

Renders hunks as patch-mark headers followed by marked lines, optionally
prefixing every output line with a caller-supplied marker.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence, Union

from statediff.core.diff.hunks import DEFAULT_CONTEXT_LINES, HunkChunker
from statediff.core.diff.line_diff import LineDiffEngine, split_lines
from statediff.core.models import Hunk


class UnifiedRenderer:
    """Format hunks as a unified diff string."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix

    def iter_lines(self, hunks: Sequence[Hunk]) -> Iterator[str]:
        """
        Yield output lines: each hunk's header, then its lines.

        With a non-empty prefix every line reads ``"{prefix} {line}"``.
        """
        for hunk in hunks:
            yield self._prefixed(hunk.header)
            for line in hunk.lines:
                yield self._prefixed(line)

    def render(self, hunks: Sequence[Hunk]) -> Optional[str]:
        """
        Render hunks to a single string.

        Returns:
            The diff text, or None when there are no hunks
        """
        if not hunks:
            return None
        return "\n".join(self.iter_lines(hunks))

    def _prefixed(self, line: str) -> str:
        if not self.prefix:
            return line
        return f"{self.prefix} {line}"


def render(hunks: Sequence[Hunk], prefix: str = "") -> Optional[str]:
    """Render hunks as a unified diff, or None if there are none."""
    return UnifiedRenderer(prefix).render(hunks)


def diff_text(
    old: Union[str, bytes],
    new: Union[str, bytes],
    context: int = DEFAULT_CONTEXT_LINES,
    prefix: str = ""
) -> Optional[str]:
    """
    Produce a unified diff between two textual dumps.

    Args:
        old: Dump of the old/before value
        new: Dump of the new/after value
        context: Number of context lines around each change
        prefix: Marker prepended to every output line

    Returns:
        The rendered diff, or None when the dumps have no textual change
    """
    ops = LineDiffEngine().diff(split_lines(old), split_lines(new))
    hunks = HunkChunker(context).chunk(ops)
    return UnifiedRenderer(prefix).render(hunks)
