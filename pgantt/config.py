# pgantt/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from .constants import (
    DEFAULT_CELL_WIDTH,
    DEFAULT_GESTURE_TIMEOUT_S,
    DEFAULT_MAX_IDLE_DAYS,
    WEEK_CELL_FACTOR,
)
from .util.console import warn

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class GanttConfig:
    """Runtime knobs for geometry and gesture handling.

    Defaults mirror the plugin constants; every field can be overridden by a
    PGANTT_* environment variable (see from_env).
    """

    cell_width: int = DEFAULT_CELL_WIDTH
    week_cell_factor: int = WEEK_CELL_FACTOR
    max_idle_days: int = DEFAULT_MAX_IDLE_DAYS
    gesture_timeout_s: float = DEFAULT_GESTURE_TIMEOUT_S
    tz: str = "local"
    verbose: bool = False

    def cell_width_for(self, time_scale: str) -> int:
        if time_scale == "week":
            return int(self.cell_width) * int(self.week_cell_factor)
        return int(self.cell_width)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GanttConfig":
        env = os.environ if environ is None else environ
        base = cls()
        values = {}
        for f in fields(cls):
            key = f"PGANTT_{f.name.upper()}"
            raw = env.get(key)
            default = getattr(base, f.name)
            if raw is None or not str(raw).strip():
                values[f.name] = default
                continue
            values[f.name] = _coerce(key, str(raw).strip(), default)
        return cls(**values)


def _coerce(key: str, raw: str, default):
    if isinstance(default, bool):
        low = raw.lower()
        if low in _TRUE:
            return True
        if low in _FALSE:
            return False
        warn("config", f"ignoring {key}={raw!r} (expected a boolean)")
        return default
    if isinstance(default, int):
        try:
            v = int(raw)
        except ValueError:
            warn("config", f"ignoring {key}={raw!r} (expected an integer)")
            return default
        if v <= 0:
            warn("config", f"ignoring {key}={raw!r} (must be positive)")
            return default
        return v
    if isinstance(default, float):
        try:
            v = float(raw)
        except ValueError:
            warn("config", f"ignoring {key}={raw!r} (expected a number)")
            return default
        if v <= 0:
            warn("config", f"ignoring {key}={raw!r} (must be positive)")
            return default
        return v
    return raw


DEFAULT_CONFIG = GanttConfig()
