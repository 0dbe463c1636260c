"""
Editor settings.

Persistent settings kept between sessions through QSettings. The core
never reads them directly: the editor builds a NudgeConfig and passes it
down.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from PyQt6.QtCore import QSettings

from shadernudge import log
from shadernudge.core.placeholder import PLACEHOLDER_NAME, StagingMode
from shadernudge.live.channel import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT_S

VARIANT_NUDGEBOX = "nudgebox"
VARIANT_SLIDER = "slider"


@dataclass
class NudgeConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    start_timeout: float = DEFAULT_TIMEOUT_S
    stop_timeout: float = DEFAULT_TIMEOUT_S
    placeholder: str = PLACEHOLDER_NAME
    staging_mode: StagingMode = StagingMode.REPLACE
    variant: str = VARIANT_NUDGEBOX
    formatter: Optional[List[str]] = None


class EditorSettings:
    """
    Editor settings manager.

    Stored under organization "Ernst", application "ShaderNudge":
    - Windows: HKEY_CURRENT_USER\\Software\\Ernst\\ShaderNudge
    - Linux: ~/.config/Ernst/ShaderNudge.conf
    - macOS: ~/Library/Preferences/com.ernst.ShaderNudge.plist
    """

    _instance: "EditorSettings | None" = None

    KEY_HOST = "Channel/host"
    KEY_PORT = "Channel/port"
    KEY_START_TIMEOUT = "Channel/startTimeout"
    KEY_STOP_TIMEOUT = "Channel/stopTimeout"
    KEY_PLACEHOLDER = "Nudge/placeholder"
    KEY_STAGING_MODE = "Nudge/stagingMode"
    KEY_VARIANT = "Nudge/variant"
    KEY_FORMATTER = "Editor/formatter"
    KEY_LAST_FILE_PATH = "Editor/lastFilePath"
    KEY_WINDOW_GEOMETRY = "Editor/windowGeometry"

    def __init__(self, settings: QSettings | None = None):
        self._settings = settings if settings is not None else QSettings("Ernst", "ShaderNudge")

    @classmethod
    def instance(cls) -> "EditorSettings":
        """Shared instance for the running application."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.value(key, default)

    def set(self, key: str, value: Any) -> None:
        self._settings.setValue(key, value)

    def sync(self) -> None:
        """Flush settings to disk."""
        self._settings.sync()

    # --- Nudge configuration ---

    def nudge_config(self) -> NudgeConfig:
        """
        Build the nudge configuration from stored values.

        Missing or unreadable values fall back to the defaults.
        """
        defaults = NudgeConfig()
        return NudgeConfig(
            host=str(self.get(self.KEY_HOST, defaults.host)),
            port=self._get_int(self.KEY_PORT, defaults.port),
            start_timeout=self._get_float(self.KEY_START_TIMEOUT, defaults.start_timeout),
            stop_timeout=self._get_float(self.KEY_STOP_TIMEOUT, defaults.stop_timeout),
            placeholder=str(self.get(self.KEY_PLACEHOLDER, defaults.placeholder)),
            staging_mode=self._get_staging_mode(defaults.staging_mode),
            variant=self._get_variant(defaults.variant),
            formatter=self.get_formatter(),
        )

    def set_nudge_config(self, config: NudgeConfig) -> None:
        self.set(self.KEY_HOST, config.host)
        self.set(self.KEY_PORT, config.port)
        self.set(self.KEY_START_TIMEOUT, config.start_timeout)
        self.set(self.KEY_STOP_TIMEOUT, config.stop_timeout)
        self.set(self.KEY_PLACEHOLDER, config.placeholder)
        self.set(self.KEY_STAGING_MODE, config.staging_mode.value)
        self.set(self.KEY_VARIANT, config.variant)
        self.set_formatter(config.formatter)

    def get_formatter(self) -> List[str] | None:
        """Formatter command line, e.g. ``["clang-format", "-style=file"]``."""
        value = self.get(self.KEY_FORMATTER)
        if not value:
            return None
        return shlex.split(str(value))

    def set_formatter(self, command: List[str] | None) -> None:
        if command:
            self.set(self.KEY_FORMATTER, shlex.join(command))
        else:
            self._settings.remove(self.KEY_FORMATTER)

    def get_last_file_path(self) -> Path | None:
        """Last opened shader file, if it still exists."""
        path_str = self.get(self.KEY_LAST_FILE_PATH)
        if path_str:
            path = Path(path_str)
            if path.is_file():
                return path
        return None

    def set_last_file_path(self, path: Path | str) -> None:
        self.set(self.KEY_LAST_FILE_PATH, str(path))

    def get_window_geometry(self) -> bytes | None:
        return self.get(self.KEY_WINDOW_GEOMETRY)

    def set_window_geometry(self, geometry: bytes) -> None:
        self.set(self.KEY_WINDOW_GEOMETRY, geometry)

    # --- Helpers ---

    def _get_int(self, key: str, default: int) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            log.warn(f"[EditorSettings] {key}={value!r} is not an integer, using {default}")
            return default

    def _get_float(self, key: str, default: float) -> float:
        value = self.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            log.warn(f"[EditorSettings] {key}={value!r} is not a number, using {default}")
            return default

    def _get_staging_mode(self, default: StagingMode) -> StagingMode:
        value = self.get(self.KEY_STAGING_MODE, default.value)
        try:
            return StagingMode(value)
        except ValueError:
            log.warn(f"[EditorSettings] Unknown staging mode {value!r}, using {default.value}")
            return default

    def _get_variant(self, default: str) -> str:
        value = str(self.get(self.KEY_VARIANT, default))
        if value not in (VARIANT_NUDGEBOX, VARIANT_SLIDER):
            log.warn(f"[EditorSettings] Unknown nudge variant {value!r}, using {default}")
            return default
        return value
