"""
Line-based diff engine.

Computes an edit script between two sequences of lines by repeatedly
locating the longest common run of lines (via index bucketing rather than a
full dynamic-programming table) and recursing on what lies before and after
it. The output is always a correct edit script, though not necessarily a
minimal one when several runs of equal length compete; the first run found
wins, which keeps output stable for a given input.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

from statediff.core.models import EditKind, EditOp
from statediff.services.stringify import decode_text


def split_lines(text: Union[str, bytes]) -> list[str]:
    """
    Split a dump into lines on ``\\n`` boundaries.

    Empty pieces are kept, so ``"a\\n"`` gives ``["a", ""]`` and the
    empty string gives ``[""]``. Bytes are decoded first.
    """
    if isinstance(text, bytes):
        text = decode_text(text)
    return text.split("\n")


class LineDiffEngine:
    """
    Engine for computing edit scripts between two line sequences.

    The recursion described by the algorithm (prefix, common run, suffix) is
    driven by an explicit work stack, so very long dumps do not run into the
    interpreter's recursion limit.
    """

    def diff(self, old: Sequence[str], new: Sequence[str]) -> list[EditOp]:
        """
        Compute the edit script turning ``old`` into ``new``.

        Args:
            old: Lines of the old/before dump
            new: Lines of the new/after dump

        Returns:
            Ordered list of EditOp runs
        """
        old = list(old)
        new = list(new)
        ops: list[EditOp] = []

        # Each entry is either a range pair still to diff, or a finished op.
        stack: list[Union[tuple[int, int, int, int], EditOp]] = [
            (0, len(old), 0, len(new))
        ]

        while stack:
            task = stack.pop()
            if isinstance(task, EditOp):
                ops.append(task)
                continue

            old_lo, old_hi, new_lo, new_hi = task
            old_start, new_start, length = self._longest_common_run(
                old, new, old_lo, old_hi, new_lo, new_hi
            )

            if length == 0:
                if old_hi > old_lo:
                    ops.append(EditOp(EditKind.ONLY_IN_OLD, tuple(old[old_lo:old_hi])))
                if new_hi > new_lo:
                    ops.append(EditOp(EditKind.ONLY_IN_NEW, tuple(new[new_lo:new_hi])))
                continue

            # Pushed in reverse so the prefix is handled first.
            stack.append((old_start + length, old_hi, new_start + length, new_hi))
            stack.append(EditOp(EditKind.IN_BOTH, tuple(old[old_start:old_start + length])))
            stack.append((old_lo, old_start, new_lo, new_start))

        logging.debug(
            f"LineDiffEngine - {len(old)} old / {len(new)} new lines -> {len(ops)} ops"
        )
        return ops

    def _longest_common_run(
        self,
        old: list[str],
        new: list[str],
        old_lo: int,
        old_hi: int,
        new_lo: int,
        new_hi: int
    ) -> tuple[int, int, int]:
        """
        Find the longest contiguous run shared by old[old_lo:old_hi] and
        new[new_lo:new_hi].

        Returns:
            Tuple of (old_start, new_start, length); length is 0 if the
            windows share no line.
        """
        positions: dict[str, list[int]] = {}
        for i in range(old_lo, old_hi):
            positions.setdefault(old[i], []).append(i)

        overlap: dict[int, int] = {}
        best_old, best_new, best_len = old_lo, new_lo, 0

        for j in range(new_lo, new_hi):
            next_overlap: dict[int, int] = {}
            for i in positions.get(new[j], ()):
                length = overlap.get(i - 1, 0) + 1
                next_overlap[i] = length
                # Strictly longer only: the first run found wins ties.
                if length > best_len:
                    best_old = i - length + 1
                    best_new = j - length + 1
                    best_len = length
            overlap = next_overlap

        return best_old, best_new, best_len


def diff_lines(old: Sequence[str], new: Sequence[str]) -> list[EditOp]:
    """Compute the edit script between two line sequences."""
    return LineDiffEngine().diff(old, new)
