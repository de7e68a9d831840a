# pgantt/macro.py
"""Host block macro: `{{renderer project-gantt, <payload>}}`."""
from __future__ import annotations

import dataclasses
import datetime as dt
import re
from dataclasses import dataclass
from typing import Optional

from .codec import encode
from .constants import RENDERER_TAG
from .model import default_model

_MACRO_RE = re.compile(
    r"\{\{renderer\s+(?P<type>[^,\s]+)\s*,\s*(?P<payload>[^}]+)\}\}",
    flags=re.IGNORECASE,
)


@dataclass(frozen=True)
class MacroMatch:
    renderer_type: str
    payload: str
    start: int
    end: int

    @property
    def is_gantt(self) -> bool:
        return self.renderer_type == RENDERER_TAG


def extract_macro(text: Optional[str]) -> Optional[MacroMatch]:
    """First renderer macro in `text`, whatever its type, or None."""
    m = _MACRO_RE.search(text or "")
    if not m:
        return None
    return MacroMatch(
        renderer_type=m.group("type"),
        payload=m.group("payload").strip(),
        start=m.start(),
        end=m.end(),
    )


def wrap_macro(payload: str, renderer_type: str = RENDERER_TAG) -> str:
    return f"{{{{renderer {renderer_type}, {payload}}}}}"


def new_block_text(time_scale: str = "day", *, today: Optional[dt.date] = None, tz: str = "local") -> str:
    """Macro text for a fresh default chart in day or week mode."""
    model = dataclasses.replace(default_model(today, tz=tz), time_scale=time_scale)
    return wrap_macro(encode(model))


__all__ = ["MacroMatch", "extract_macro", "new_block_text", "wrap_macro"]
