"""
Diff settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

SETTINGS_ENV_VAR = 'STATEDIFF_SETTINGS'
CONTEXT_LINES_ENV_VAR = 'STATEDIFF_CONTEXT_LINES'
PREFIX_ENV_VAR = 'STATEDIFF_PREFIX'


class DiffStrategy(Enum):
    """How a before/after pair is turned into a log message."""
    UNIFIED = "unified"
    NEW_STATE_ONLY = "new_state_only"
    RECURSIVE = "recursive"

    @classmethod
    def from_string(cls, value: str) -> 'DiffStrategy':
        """Create from string value."""
        try:
            # Try to match by value
            for strategy in cls:
                if strategy.value == value.lower():
                    return strategy
            # Try to match by name
            return cls[value.upper()]
        except (KeyError, AttributeError):
            return cls.UNIFIED


@dataclass
class LineDiffSettings:
    """Settings for the unified (line based) diff."""
    context_lines: int = 2
    prefix_lines: str = "🏛 "


@dataclass
class StructuralSettings:
    """Settings for the recursive (field based) diff."""
    prefix_lines: str = "🏛 "
    state_name: str = "State"
    filters: list[str] = field(default_factory=list)
    nil_marker: str = "nil"
    container_marker: str = "📦"


@dataclass
class DiffSettings:
    """Main settings container."""
    strategy: DiffStrategy = DiffStrategy.UNIFIED
    line_diff: LineDiffSettings = field(default_factory=LineDiffSettings)
    structural: StructuralSettings = field(default_factory=StructuralSettings)
    logger_name: str = "statediff"


class SettingsManager:
    """Manager for loading diff settings from JSON and the environment."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path or self._get_default_path()
        self._settings: Optional[DiffSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        explicit = os.environ.get(SETTINGS_ENV_VAR)
        if explicit:
            return Path(explicit)
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'statediff' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'statediff' / 'settings.json'

    @property
    def settings(self) -> DiffSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> DiffSettings:
        """Load settings from disk, then apply environment overrides."""
        settings = DiffSettings()

        if self.settings_path.exists():
            try:
                with open(self.settings_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                settings = self._from_dict(data)
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logging.warning(f"SettingsManager - Failed to load {self.settings_path}: {e}")

        return self._apply_env_overrides(settings)

    def _apply_env_overrides(self, settings: DiffSettings) -> DiffSettings:
        context = os.environ.get(CONTEXT_LINES_ENV_VAR)
        if context is not None:
            try:
                settings.line_diff.context_lines = max(int(context), 0)
            except ValueError:
                logging.warning(f"SettingsManager - Ignoring invalid {CONTEXT_LINES_ENV_VAR}={context!r}")

        prefix = os.environ.get(PREFIX_ENV_VAR)
        if prefix is not None:
            settings.line_diff.prefix_lines = prefix
            settings.structural.prefix_lines = prefix

        return settings

    def _from_dict(self, data: dict[str, Any]) -> DiffSettings:
        """Convert dictionary back to settings objects."""
        line_data = data.get('line_diff', {})
        line_diff = LineDiffSettings(
            context_lines=max(int(line_data.get('context_lines', LineDiffSettings.context_lines)), 0),
            prefix_lines=line_data.get('prefix_lines', LineDiffSettings.prefix_lines),
        )

        structural_data = data.get('structural', {})
        structural = StructuralSettings(
            prefix_lines=structural_data.get('prefix_lines', StructuralSettings.prefix_lines),
            state_name=structural_data.get('state_name', StructuralSettings.state_name),
            filters=list(structural_data.get('filters', [])),
            nil_marker=structural_data.get('nil_marker', StructuralSettings.nil_marker),
            container_marker=structural_data.get('container_marker', StructuralSettings.container_marker),
        )

        return DiffSettings(
            strategy=DiffStrategy.from_string(data.get('strategy', 'unified')),
            line_diff=line_diff,
            structural=structural,
            logger_name=data.get('logger_name', 'statediff'),
        )
