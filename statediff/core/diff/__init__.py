"""
Diff module for state snapshot comparison.

Provides engines for:
- Line edit scripts (longest common run, recursive)
- Hunk chunking with bounded context
- Unified diff rendering
- Recursive field-level (structural) diffs
"""

from statediff.core.diff.line_diff import (
    LineDiffEngine,
    diff_lines,
    split_lines,
)
from statediff.core.diff.hunks import (
    HunkChunker,
    chunk,
)
from statediff.core.diff.unified import (
    UnifiedRenderer,
    diff_text,
    render,
)
from statediff.core.diff.structural import (
    StructuralDiffEngine,
    StructuralDiffOptions,
    diff_structural,
    recursive_diff,
    to_diff_node,
)

__all__ = [
    # Line diff
    'LineDiffEngine',
    'diff_lines',
    'split_lines',
    # Hunks
    'HunkChunker',
    'chunk',
    # Unified output
    'UnifiedRenderer',
    'diff_text',
    'render',
    # Structural diff
    'StructuralDiffEngine',
    'StructuralDiffOptions',
    'diff_structural',
    'recursive_diff',
    'to_diff_node',
]
