# pgantt/util/console.py
from __future__ import annotations

import sys
from typing import Any


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def warn(component: str, msg: str) -> None:
    """Emit a `[pgantt.<component>] WARN: ...` line on stderr."""
    eprint(f"[pgantt.{component}] WARN: {msg}")


def info(component: str, msg: str, *, enabled: bool = True) -> None:
    if enabled:
        eprint(f"[pgantt.{component}] INFO: {msg}")
