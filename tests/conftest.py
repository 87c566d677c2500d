from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pytest


@dataclass
class Substate:
    x: set[str]
    y1: dict[str, int]
    y2: dict[str, Optional[int]]
    z: bool


@dataclass
class AppState:
    a: Substate
    b: list[int]
    c: str
    d: Optional[str]
    e: Optional[str]


@pytest.fixture
def before_state() -> AppState:
    return AppState(
        a=Substate(
            x={"SetB", "SetA"},
            y1={"one": 1, "eleven": 11},
            y2={"one": 1, "eleven": 11, "zapp": 42},
            z=True,
        ),
        b=[0, 1],
        c="Foo",
        d="✨",
        e=None,
    )


@pytest.fixture
def after_state() -> AppState:
    return AppState(
        a=Substate(
            x={"SetB", "SetC"},
            y1={"one": 1, "twelve": 12},
            y2={"one": 1, "twelve": 12, "zapp": None},
            z=False,
        ),
        b=[0],
        c="Bar",
        d=None,
        e="🥚",
    )


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate settings lookups from the developer's environment."""
    for var in ("STATEDIFF_SETTINGS", "STATEDIFF_CONTEXT_LINES", "STATEDIFF_PREFIX"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    return monkeypatch
