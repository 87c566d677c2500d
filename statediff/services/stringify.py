"""
Deterministic value dumps.

The line differ only sees text, so the same logical value must always dump
to the same text. ``pprint`` sorts dictionary keys and set elements, which
takes care of the containers whose iteration order is not stable.
"""

from __future__ import annotations

import dataclasses
import logging
import pprint
from typing import Any

import chardet

DEFAULT_ENCODING = "utf-8"
DEFAULT_WIDTH = 80


class StateDumper(pprint.PrettyPrinter):
    """
    PrettyPrinter whose one-line output is as deterministic as its
    multi-line output.

    pprint sorts sets and lays out dataclasses field by field only when an
    object is too wide for one line; short ones fall back to ``repr``, which
    keeps set iteration order. Both cases are rendered here instead.
    """

    def __init__(self, width: int = DEFAULT_WIDTH):
        super().__init__(width=width, sort_dicts=True)

    def format(self, object, context, maxlevels, level):
        if isinstance(object, (set, frozenset)) and object:
            return self._format_set(object, context, maxlevels, level)
        if _has_generated_repr(object):
            return self._format_dataclass(object, context, maxlevels, level)
        return super().format(object, context, maxlevels, level)

    def _format_set(self, object, context, maxlevels, level):
        parts = sorted(
            self.format(item, context, maxlevels, level + 1)[0] for item in object
        )
        body = "{" + ", ".join(parts) + "}"
        if isinstance(object, frozenset):
            return f"frozenset({body})", True, False
        return body, True, False

    def _format_dataclass(self, object, context, maxlevels, level):
        objid = id(object)
        if objid in context:
            return pprint._recursion(object), False, True
        context[objid] = 1
        parts = [
            f"{f.name}={self.format(getattr(object, f.name), context, maxlevels, level + 1)[0]}"
            for f in dataclasses.fields(object) if f.repr
        ]
        del context[objid]
        return f"{object.__class__.__qualname__}({', '.join(parts)})", True, False


def _has_generated_repr(object: Any) -> bool:
    return (dataclasses.is_dataclass(object) and
            not isinstance(object, type) and
            object.__dataclass_params__.repr)


def dump_to_string(value: Any, width: int = DEFAULT_WIDTH) -> str:
    """
    Dump a value as indented multi-line text.

    Args:
        value: Any value; dataclasses, mappings and sets are laid out one
            entry per line once they no longer fit on one line
        width: Maximum line width before lines are broken

    Returns:
        Deterministic textual dump
    """
    return StateDumper(width=width).pformat(value)


def detect_encoding(data: bytes, default: str = DEFAULT_ENCODING) -> str:
    """Guess the encoding of a byte dump."""
    if not data:
        return default

    result = chardet.detect(data)

    if result['confidence'] > 0.7 and result['encoding']:
        encoding = result['encoding'].lower()
        if encoding == 'ascii':
            return 'utf-8'  # ASCII is subset of UTF-8
        return encoding

    return default


def decode_text(data: bytes, default: str = DEFAULT_ENCODING) -> str:
    """Decode a byte dump, replacing bytes that cannot be decoded."""
    encoding = detect_encoding(data, default)
    try:
        return data.decode(encoding, errors='replace')
    except LookupError:
        logging.warning(f"Stringify - Unknown encoding {encoding!r}, using {default}")
        return data.decode(default, errors='replace')
