"""
Core data models for the state diff engine.

This module defines all data structures shared by the differs:
- Line diff models (edit operations and hunks)
- Structural diff models (the tagged value tree)

All models are designed to be:
- Independent of any store/action abstraction
- Cheap to build (the differs allocate them per call)
- Type-hinted for IDE support
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Iterator, Optional, Protocol, runtime_checkable


# =============================================================================
# Markers
# =============================================================================

REMOVED_MARKER = "−"       # MINUS SIGN
ADDED_MARKER = "+"
CONTEXT_MARKER = " "       # FIGURE SPACE, same width as a digit
TRAILING_SPACE_MARKER = "¬"  # NOT SIGN, makes trailing blanks visible

COLLECTION_ELEMENT_LABEL = "#"


# =============================================================================
# Enumerations
# =============================================================================

class EditKind(Enum):
    """Which side(s) of a diff a run of lines belongs to."""
    ONLY_IN_OLD = auto()  # Lines removed from the old sequence
    ONLY_IN_NEW = auto()  # Lines added in the new sequence
    IN_BOTH = auto()      # Common run shared by both sequences


class NodeKind(Enum):
    """Shape of a value as seen by the structural differ."""
    SCALAR = auto()
    OPTIONAL = auto()
    SEQUENCE = auto()
    SET = auto()
    MAPPING = auto()
    RECORD = auto()


# =============================================================================
# Line Diff Models
# =============================================================================

@dataclass(frozen=True)
class EditOp:
    """
    A run of lines from an edit script.

    Concatenating the lines of ONLY_IN_OLD and IN_BOTH ops (in order)
    gives back the old sequence; ONLY_IN_NEW and IN_BOTH give back the new one.
    """
    kind: EditKind
    lines: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def in_old(self) -> bool:
        """True if these lines are part of the old sequence."""
        return self.kind in (EditKind.ONLY_IN_OLD, EditKind.IN_BOTH)

    @property
    def in_new(self) -> bool:
        """True if these lines are part of the new sequence."""
        return self.kind in (EditKind.ONLY_IN_NEW, EditKind.IN_BOTH)


@dataclass
class Hunk:
    """
    A contiguous window over both sequences (a "hunk" in unified diff terms).

    Starts are 0-based; the header shows them 1-based. Lengths count the
    lines taken from each side, so context lines count towards both.
    """
    old_start: int = 0
    old_len: int = 0
    new_start: int = 0
    new_len: int = 0
    lines: list[str] = field(default_factory=list)

    def __add__(self, other: Hunk) -> Hunk:
        return Hunk(
            old_start=self.old_start + other.old_start,
            old_len=self.old_len + other.old_len,
            new_start=self.new_start + other.new_start,
            new_len=self.new_len + other.new_len,
            lines=self.lines + other.lines,
        )

    @property
    def header(self) -> str:
        """Generate unified diff hunk header (patch mark)."""
        return (f"@@ {REMOVED_MARKER}{self.old_start + 1},{self.old_len} "
                f"+{self.new_start + 1},{self.new_len} @@")

    @property
    def is_significant(self) -> bool:
        """True if at least one line was added or removed."""
        return any(
            line.startswith(REMOVED_MARKER) or line.startswith(ADDED_MARKER)
            for line in self.lines
        )

    @property
    def change_count(self) -> int:
        """Count of added and removed lines."""
        return sum(1 for _ in self.iter_changes())

    def iter_changes(self) -> Iterator[str]:
        """Iterate over only the added and removed lines."""
        for line in self.lines:
            if line.startswith(REMOVED_MARKER) or line.startswith(ADDED_MARKER):
                yield line


# =============================================================================
# Structural Diff Models
# =============================================================================

@dataclass
class DiffNode:
    """
    A value converted into the shape the structural differ understands.

    ``value`` keeps the converted Python object (used for rendering);
    ``children`` holds labelled child nodes for OPTIONAL, SEQUENCE and
    RECORD nodes. A child of ``None`` is an absent value.
    """
    kind: NodeKind
    value: Any = None
    children: list[tuple[str, Optional[DiffNode]]] = field(default_factory=list)

    @property
    def has_children(self) -> bool:
        return len(self.children) > 0

    def child(self, label: str) -> tuple[bool, Optional[DiffNode]]:
        """Look up a child by label. Returns (found, node)."""
        for child_label, node in self.children:
            if child_label == label:
                return True, node
        return False, None

    @classmethod
    def scalar(cls, value: Any) -> DiffNode:
        return cls(NodeKind.SCALAR, value)

    @classmethod
    def record(cls, value: Any, fields: list[tuple[str, Optional[DiffNode]]]) -> DiffNode:
        return cls(NodeKind.RECORD, value, list(fields))

    @classmethod
    def optional(cls, inner: Optional[DiffNode]) -> DiffNode:
        """Wrap a possibly absent value; the differ unwraps it before comparing."""
        if inner is None:
            return cls(NodeKind.OPTIONAL)
        return cls(NodeKind.OPTIONAL, inner.value, [("some", inner)])

    @classmethod
    def sequence(cls, value: Any, items: list[Optional[DiffNode]]) -> DiffNode:
        return cls(
            NodeKind.SEQUENCE,
            value,
            [(COLLECTION_ELEMENT_LABEL, item) for item in items],
        )


@runtime_checkable
class Diffable(Protocol):
    """
    Capability for types that describe their own diffable shape.

    Implement ``to_diff_node`` to take over how an object is compared,
    e.g. to hide bookkeeping fields or to present a custom container as a SET.
    """

    def to_diff_node(self) -> DiffNode:
        ...
