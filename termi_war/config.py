"""Shell configuration.

Defaults reproduce the stock terminal look. Overrides come from a JSON file
named by ``TERMIWAR_CONFIG_PATH`` and from individual environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from .frames import RGB, FrameLayout, Palette

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "TERMIWAR_CONFIG_PATH"
FONT_PATH_ENV = "TERMIWAR_FONT_PATH"
DEBUG_ENV = "TERMIWAR_DEBUG"

DEFAULT_FONT_FILE = "VT323-Regular.ttf"


@dataclass(frozen=True, slots=True)
class ShellConfig:
    title: str = "Termi-War"
    canvas_width: int = 1920
    canvas_height: int = 1080
    font_path: str | None = None
    font_size: int = 30
    target_fps: int = 60

    foreground: RGB = (51, 255, 51)
    dim: RGB = (0, 100, 0)
    background: RGB = (0, 5, 0)
    line_height: int = 30
    cursor_blink_ms: int = 500

    boot_hold_s: float = 2.0
    debounce_s: float = 1.0

    def __post_init__(self) -> None:
        if not isinstance(self.title, str):
            raise ValueError("title must be a string")
        if self.font_path is not None and not isinstance(self.font_path, str):
            raise ValueError("font_path must be a string or null")
        for name in ("canvas_width", "canvas_height", "font_size", "target_fps", "line_height", "cursor_blink_ms"):
            if not _is_int(getattr(self, name)):
                raise ValueError(f"{name} must be an integer")
        for name in ("boot_hold_s", "debounce_s"):
            value = getattr(self, name)
            if not (_is_int(value) or isinstance(value, float)) or value != value:
                raise ValueError(f"{name} must be a number")

        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError("canvas size must be > 0")
        if self.font_size <= 0:
            raise ValueError("font_size must be > 0")
        if self.target_fps <= 0:
            raise ValueError("target_fps must be > 0")
        if self.line_height <= 0:
            raise ValueError("line_height must be > 0")
        if self.cursor_blink_ms <= 0:
            raise ValueError("cursor_blink_ms must be > 0")
        if self.boot_hold_s < 0.0:
            raise ValueError("boot_hold_s must be >= 0")
        if self.debounce_s < 0.0:
            raise ValueError("debounce_s must be >= 0")
        for name in ("foreground", "dim", "background"):
            _check_rgb(name, getattr(self, name))

    @property
    def canvas_size(self) -> tuple[int, int]:
        return (self.canvas_width, self.canvas_height)

    def palette(self) -> Palette:
        return Palette(foreground=self.foreground, dim=self.dim, background=self.background)

    def layout(self) -> FrameLayout:
        return FrameLayout(line_height=self.line_height, cursor_blink_ms=self.cursor_blink_ms)

    def resolve_font_path(self) -> Path | None:
        """Configured font, else the bundled VT323 face if present, else None (pygame default)."""
        if self.font_path:
            return Path(self.font_path).expanduser()
        local = Path.cwd() / DEFAULT_FONT_FILE
        if local.exists():
            return local
        return None

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None) -> "ShellConfig":
        env = os.environ if environ is None else environ
        config = cls()

        explicit = env.get(CONFIG_PATH_ENV)
        if explicit:
            config = config.with_overrides(_read_json(Path(explicit).expanduser()))

        font = env.get(FONT_PATH_ENV, "").strip()
        if font:
            config = replace(config, font_path=font)
        return config

    def with_overrides(self, data: dict[str, Any]) -> "ShellConfig":
        """Apply recognised keys one at a time; bad values are logged and skipped."""
        config = self
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key %r", key)
                continue
            if key in ("foreground", "dim", "background") and isinstance(value, list):
                value = tuple(value)
            try:
                config = replace(config, **{key: value})
            except (TypeError, ValueError) as exc:
                logger.warning("Ignoring config %s=%r: %s", key, value, exc)
        return config


def debug_enabled(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get(DEBUG_ENV, "0").strip().lower() in ("1", "true", "yes")


def _is_int(value: object) -> bool:
    # bool is an int subclass; JSON true/false must not pass as a size.
    return isinstance(value, int) and not isinstance(value, bool)


def _check_rgb(name: str, value: object) -> None:
    if not isinstance(value, tuple) or len(value) != 3:
        raise ValueError(f"{name} must be an (r, g, b) triple")
    for channel in value:
        if not _is_int(channel) or not (0 <= channel <= 255):
            raise ValueError(f"{name} channels must be ints in [0, 255]")


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.warning("Config file %s not found; using defaults", path)
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read config file %s: %s", path, exc)
        return {}
    if not isinstance(payload, dict):
        logger.warning("Config file %s must hold a JSON object", path)
        return {}
    return payload
