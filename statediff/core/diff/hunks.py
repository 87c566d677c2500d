"""
Hunk chunking for line edit scripts.

Groups an edit script into unified-diff hunks with bounded context:
- Common runs longer than twice the context split the output into hunks
- Leading context is never longer than the context size
- Hunks made only of context are dropped
"""

from __future__ import annotations

import logging
from typing import Sequence

from statediff.core.models import (
    ADDED_MARKER,
    CONTEXT_MARKER,
    REMOVED_MARKER,
    TRAILING_SPACE_MARKER,
    EditKind,
    EditOp,
    Hunk,
)

DEFAULT_CONTEXT_LINES = 4


def mark_line(marker: str, line: str) -> str:
    """Prefix a raw line with its diff marker, flagging trailing spaces."""
    suffix = TRAILING_SPACE_MARKER if line.endswith(" ") else ""
    return f"{marker}{line}{suffix}"


class HunkChunker:
    """
    Turns EditOp runs into Hunks.

    Hunk offsets accumulate additively: the running hunk is built by adding
    small Hunk fragments together, so each hunk ends up with its absolute
    position in both sequences.
    """

    def __init__(self, context_lines: int = DEFAULT_CONTEXT_LINES):
        if context_lines < 0:
            raise ValueError(f"context_lines must be >= 0, got {context_lines}")
        self.context_lines = context_lines

    def chunk(self, ops: Sequence[EditOp]) -> list[Hunk]:
        """
        Group edit ops into significant hunks.

        Args:
            ops: Edit script as produced by the line differ

        Returns:
            Hunks containing at least one added or removed line
        """
        ctx = self.context_lines
        current = Hunk()
        hunks: list[Hunk] = []

        for op in ops:
            length = len(op.lines)

            if op.kind == EditKind.IN_BOTH and length > ctx * 2:
                leading = op.lines[:ctx]
                closed = current + Hunk(
                    old_len=len(leading),
                    new_len=len(leading),
                    lines=self._mark_all(CONTEXT_MARKER, leading),
                )
                if closed.is_significant:
                    hunks.append(closed)

                trailing = op.lines[length - ctx:]
                current = Hunk(
                    old_start=current.old_start + current.old_len + length - ctx,
                    old_len=len(trailing),
                    new_start=current.new_start + current.new_len + length - ctx,
                    new_len=len(trailing),
                    lines=self._mark_all(CONTEXT_MARKER, trailing),
                )

            elif op.kind == EditKind.IN_BOTH and not current.lines:
                start = max(length - ctx, 0)
                trailing = op.lines[start:]
                current = current + Hunk(
                    old_start=start,
                    old_len=len(trailing),
                    new_start=start,
                    new_len=len(trailing),
                    lines=self._mark_all(CONTEXT_MARKER, trailing),
                )

            elif op.kind == EditKind.IN_BOTH:
                current = current + Hunk(
                    old_len=length,
                    new_len=length,
                    lines=self._mark_all(CONTEXT_MARKER, op.lines),
                )

            elif op.kind == EditKind.ONLY_IN_OLD:
                current = current + Hunk(
                    old_len=length,
                    lines=self._mark_all(REMOVED_MARKER, op.lines),
                )

            else:
                current = current + Hunk(
                    new_len=length,
                    lines=self._mark_all(ADDED_MARKER, op.lines),
                )

        if current.is_significant:
            hunks.append(current)

        logging.debug(f"HunkChunker - {len(ops)} ops -> {len(hunks)} hunks (context={ctx})")
        return hunks

    @staticmethod
    def _mark_all(marker: str, lines: Sequence[str]) -> list[str]:
        return [mark_line(marker, line) for line in lines]


def chunk(ops: Sequence[EditOp], context: int = DEFAULT_CONTEXT_LINES) -> list[Hunk]:
    """Group an edit script into hunks with ``context`` lines of context."""
    return HunkChunker(context).chunk(ops)
