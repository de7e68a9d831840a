# pgantt/codec.py
"""Transport string <-> TimelineModel.

Current form:  base64(UTF-8 bytes of compact JSON)
Legacy form:   base64(percent-encoded JSON); the first decode step yields
               ASCII text starting with '%', which is percent-decoded until
               it no longer does.

decode() never raises: empty or unreadable input yields a default model.
"""
from __future__ import annotations

import base64
import binascii
import datetime as dt
import json
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import unquote

from .model import TimelineModel, default_model
from .schema import DecodeError, model_from_wire, model_to_wire
from .util.console import warn
from .validate import validate

# Legacy payloads may be percent-encoded more than once.
_MAX_PERCENT_PASSES = 3


def to_json(model: TimelineModel) -> str:
    return json.dumps(model_to_wire(model), ensure_ascii=False, separators=(",", ":"))


def encode(model: TimelineModel) -> str:
    return base64.b64encode(to_json(model).encode("utf-8")).decode("ascii")


def _b64(text: str) -> bytes:
    s = "".join(text.split())
    s += "=" * (-len(s) % 4)
    try:
        return base64.b64decode(s, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"not base64: {e}") from e


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"invalid JSON: {e.msg} at {e.pos}") from e
    except RecursionError as e:
        raise DecodeError("JSON nested too deeply") from e


def _decode_utf8(raw: bytes) -> Any:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"not UTF-8: {e}") from e
    if text.startswith("%"):
        raise DecodeError("percent-encoded payload")
    return _loads(text)


def _decode_percent(raw: bytes) -> Any:
    try:
        text = raw.decode("ascii")
    except UnicodeDecodeError as e:
        raise DecodeError(f"not ASCII: {e}") from e
    if not text.startswith("%"):
        raise DecodeError("not a percent-encoded payload")
    for _ in range(_MAX_PERCENT_PASSES):
        if not text.startswith("%"):
            break
        text = unquote(text, encoding="utf-8", errors="strict")
    return _loads(text)


# Ordered; first structurally valid result wins.
DECODERS: List[Tuple[str, Callable[[bytes], Any]]] = [
    ("utf8", _decode_utf8),
    ("percent", _decode_percent),
]


def decode_payload(encoded: str) -> Tuple[str, Dict[str, Any]]:
    """Return (variant name, wire dict). Raises DecodeError."""
    raw = _b64(encoded)
    problems: List[str] = []
    for name, fn in DECODERS:
        try:
            payload = fn(raw)
        except (DecodeError, UnicodeDecodeError) as e:
            problems.append(f"{name}: {e}")
            continue
        if validate(payload):
            return name, payload
        problems.append(f"{name}: missing startDate/endDate or projects/sprints lists")
    raise DecodeError("; ".join(problems) or "no decoder accepted the payload")


def decode(
    encoded: Optional[str],
    *,
    today: Optional[dt.date] = None,
    tz: str = "local",
) -> TimelineModel:
    if encoded is None or not encoded.strip():
        return default_model(today, tz=tz)
    try:
        _variant, payload = decode_payload(encoded)
        return model_from_wire(payload)
    except (ValueError, OverflowError, RecursionError) as e:
        warn("codec", f"decoding failed, using default chart: {e}")
        return default_model(today, tz=tz)


__all__ = ["DECODERS", "decode", "decode_payload", "encode", "to_json"]
