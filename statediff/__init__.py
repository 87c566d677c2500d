"""
Diff engine for debug-time state logging.

Two independent entry points:
- ``diff_lines`` / ``diff_text``: line based unified diffs of textual dumps
- ``diff_structural``: one line per changed field of two values
"""

from statediff.core.diff import (
    diff_lines,
    diff_structural,
    diff_text,
)

__version__ = "0.1.0"

__all__ = [
    'diff_lines',
    'diff_structural',
    'diff_text',
]
