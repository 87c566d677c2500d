"""
Recursive structural diff engine.

Compares two values field by field and produces one line per changed leaf:

    🏛 State.todos.#: buy milk → buy oat milk
    🏛 State.tags: 📦 <a, b> → <b, c>

Values are first converted into DiffNode trees (see ``to_diff_node``).
Mappings and sets are never recursed into: they are canonicalized (sorted by
their rendered keys/elements) and compared as whole blocks, since their
iteration order says nothing about equality.
"""

from __future__ import annotations

import dataclasses
import logging
import sys
from collections.abc import Mapping, Set
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from statediff.core.models import (
    Diffable,
    DiffNode,
    NodeKind,
)
from statediff.services.stringify import StateDumper

_SCALAR_TYPES = (str, bytes, bytearray, int, float, complex, bool, Enum)


# =============================================================================
# Value conversion
# =============================================================================

def to_diff_node(value: Any) -> Optional[DiffNode]:
    """
    Convert a Python value into a DiffNode tree.

    Returns None for absent values (``None`` or an empty OPTIONAL node).
    """
    if value is None:
        return None

    if isinstance(value, DiffNode):
        node = value
    elif isinstance(value, type) or isinstance(value, _SCALAR_TYPES):
        node = DiffNode.scalar(value)
    elif isinstance(value, Diffable):
        node = value.to_diff_node()
    elif isinstance(value, Mapping):
        node = DiffNode(NodeKind.MAPPING, value)
    elif isinstance(value, Set):
        node = DiffNode(NodeKind.SET, value)
    elif dataclasses.is_dataclass(value):
        node = DiffNode.record(value, [
            (f.name, to_diff_node(getattr(value, f.name)))
            for f in dataclasses.fields(value)
        ])
    elif isinstance(value, tuple) and hasattr(value, "_fields"):
        node = DiffNode.record(value, [
            (name, to_diff_node(getattr(value, name)))
            for name in value._fields
        ])
    elif isinstance(value, (list, tuple)):
        node = DiffNode.sequence(value, [to_diff_node(item) for item in value])
    elif hasattr(value, "__dict__") and not callable(value):
        node = DiffNode.record(value, [
            (name, to_diff_node(attr))
            for name, attr in vars(value).items()
            if not name.startswith("_")
        ])
    else:
        node = DiffNode.scalar(value)

    return _unwrap(node)


def _unwrap(node: Optional[DiffNode]) -> Optional[DiffNode]:
    """Strip OPTIONAL wrappers; an empty one is an absent value."""
    while node is not None and node.kind == NodeKind.OPTIONAL:
        node = node.children[0][1] if node.children else None
    return node


# =============================================================================
# Options
# =============================================================================

@dataclass
class StructuralDiffOptions:
    """Markers used when rendering structural diff lines."""
    nil_marker: str = "nil"
    container_marker: str = "📦"
    arrow: str = "→"
    set_brackets: tuple[str, str] = ("<", ">")
    mapping_brackets: tuple[str, str] = ("[", "]")


# =============================================================================
# Engine
# =============================================================================

class StructuralDiffEngine:
    """
    Engine for field-level diffs of arbitrarily shaped values.

    Rules, checked in order at each step:
    1. One side absent: report ``nil`` on that side
    2. Both mappings: compare canonical renderings
    3. Both sets: compare canonical renderings
    4. No children: compare renderings directly
    5. Children: recurse per label; every element of a sequence is
       labelled ``#`` and meets the first ``#`` on the other side
    6. Drop any produced line containing a filter substring
    """

    def __init__(self, options: Optional[StructuralDiffOptions] = None):
        self.options = options or StructuralDiffOptions()
        # One line per value; no width limit.
        self._dumper = StateDumper(width=sys.maxsize)

    def diff(
        self,
        path: str,
        name: str,
        old: Any,
        new: Any,
        filters: Optional[Sequence[str]] = None
    ) -> Optional[str]:
        """
        Diff two values.

        Args:
            path: Prefix for every produced line (e.g. a log marker)
            name: Name of the root value (e.g. the state type's name)
            old: Value before the change
            new: Value after the change
            filters: Substrings; lines containing any of them are dropped

        Returns:
            Newline-joined change lines, or None when nothing changed
        """
        filters = list(filters or [])
        result = self._diff(path, name, 0, filters, to_diff_node(old), to_diff_node(new))
        if result is None:
            return None
        # A root leaf never passes through the per-level filtering.
        result = "\n".join(
            line for line in result.split("\n") if not self._is_filtered(line, filters)
        ).strip()
        if not result:
            return None
        logging.debug(f"StructuralDiffEngine - {name}: {len(result.splitlines())} changed lines")
        return result

    def _diff(
        self,
        path: str,
        name: str,
        level: int,
        filters: list[str],
        lhs: Optional[DiffNode],
        rhs: Optional[DiffNode]
    ) -> Optional[str]:
        opts = self.options
        lhs = _unwrap(lhs)
        rhs = _unwrap(rhs)

        if lhs is None or rhs is None:
            if rhs is not None:
                return f"{path}.{name}: {opts.nil_marker} {opts.arrow} {self.render_node(rhs)}"
            if lhs is not None:
                return f"{path}.{name}: {self.render_node(lhs)} {opts.arrow} {opts.nil_marker}"
            return None

        if lhs.kind == NodeKind.MAPPING and rhs.kind == NodeKind.MAPPING:
            return self._compare_blocks(
                path, name,
                self.canonical_mapping(lhs.value),
                self.canonical_mapping(rhs.value),
                opts.mapping_brackets,
            )

        if lhs.kind == NodeKind.SET and rhs.kind == NodeKind.SET:
            return self._compare_blocks(
                path, name,
                self.canonical_set(lhs.value),
                self.canonical_set(rhs.value),
                opts.set_brackets,
            )

        if not lhs.has_children:
            left = self.render_node(lhs)
            right = self.render_node(rhs)
            if left == right:
                return None
            return f"{path}.{name}: {left} {opts.arrow} {right}"

        separator = "." if level > 0 else " "
        child_path = f"{path}{separator}{name}"

        lines: list[str] = []
        for label, left_child, right_child in self._pair_children(lhs, rhs):
            child_result = self._diff(
                child_path, label, level + 1, filters, left_child, right_child
            )
            if child_result is not None:
                lines.extend(child_result.split("\n"))

        lines = [line for line in lines if not self._is_filtered(line, filters)]
        if lines:
            return "\n".join(lines)
        return None

    def _pair_children(
        self,
        lhs: DiffNode,
        rhs: DiffNode
    ) -> Iterable[tuple[str, Optional[DiffNode], Optional[DiffNode]]]:
        """
        Match children across both sides by label.

        Each left child meets the first right child carrying its label, so
        sequence elements (all labelled ``#``) are compared against the
        first element on the right. Labels found only on the right pair
        with None.
        """
        left_labels = {label for label, _ in lhs.children}
        for label, left_child in lhs.children:
            _, right_child = rhs.child(label)
            yield label, left_child, right_child

        seen: set[str] = set()
        for label, right_child in rhs.children:
            if label not in left_labels and label not in seen:
                seen.add(label)
                yield label, None, right_child

    def _compare_blocks(
        self,
        path: str,
        name: str,
        left: str,
        right: str,
        brackets: tuple[str, str]
    ) -> Optional[str]:
        if left == right:
            return None
        opts = self.options
        open_, close = brackets
        return (f"{path}.{name}: {opts.container_marker} "
                f"{open_}{left}{close} {opts.arrow} {open_}{right}{close}")

    @staticmethod
    def _is_filtered(line: str, filters: list[str]) -> bool:
        return any(f in line for f in filters)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render_value(self, value: Any) -> str:
        """
        Render a value for display.

        Mappings and sets are canonicalized. Lists, tuples and dataclasses
        go through ``StateDumper`` so sets and dicts nested inside them are
        sorted at every depth.
        """
        if value is None:
            return self.options.nil_marker
        if isinstance(value, str):
            return value
        if isinstance(value, Mapping):
            open_, close = self.options.mapping_brackets
            return f"{open_}{self.canonical_mapping(value)}{close}"
        if isinstance(value, Set):
            open_, close = self.options.set_brackets
            return f"{open_}{self.canonical_set(value)}{close}"
        if isinstance(value, (list, tuple)) or (
                dataclasses.is_dataclass(value) and not isinstance(value, type)):
            return self._dumper.pformat(value)
        return str(value)

    def render_node(self, node: DiffNode) -> str:
        return self.render_value(node.value)

    def canonical_mapping(self, mapping: Mapping) -> str:
        """
        ``"k: v, ..."`` sorted by the string form of the key, then by the
        rendered value for keys that print alike (``1`` and ``"1"``).
        """
        entries = sorted(
            (str(key), self.render_value(value), self.render_value(key))
            for key, value in mapping.items()
        )
        return ", ".join(f"{key}: {value}" for _, value, key in entries)

    def canonical_set(self, elements: Set) -> str:
        """Rendered elements, sorted lexicographically and comma-joined."""
        return ", ".join(sorted(self.render_value(element) for element in elements))


def diff_structural(
    path: str,
    name: str,
    old: Any,
    new: Any,
    filters: Optional[Sequence[str]] = None
) -> Optional[str]:
    """Field-level diff of two values; None when they do not differ."""
    return StructuralDiffEngine().diff(path, name, old, new, filters)


def recursive_diff(
    prefix_lines: str,
    state_name: str,
    before: Any,
    after: Any,
    filters: Optional[Sequence[str]] = None,
    options: Optional[StructuralDiffOptions] = None
) -> Optional[str]:
    """
    Diff a state snapshot against its successor.

    Lines read ``"{prefix_lines} {state_name}.field.sub: old → new"``.
    """
    return StructuralDiffEngine(options).diff(
        prefix_lines, state_name, before, after, filters
    )
