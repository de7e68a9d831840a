# pgantt/storage.py
"""Persistence of a chart inside a host document block.

The host owns the blocks; this module only needs two calls from it
(see BlockStorage). Host failures are raised to the caller and never
retried here.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Mapping, Optional, Protocol

from .codec import decode, encode
from .config import DEFAULT_CONFIG, GanttConfig
from .macro import extract_macro, wrap_macro
from .model import TimelineModel, default_model
from .util.console import info
from .validate import sanitize


class BlockNotFoundError(LookupError):
    """The host has no block with the given id."""


class StorageError(RuntimeError):
    """The host failed to read or write a block."""


class BlockStorage(Protocol):
    def get_block(self, block_id: str) -> Optional[Mapping[str, Any]]:
        """Block record with a `content` string, or None when missing."""
        ...

    def update_block(self, block_id: str, content: str) -> None:
        ...


class InMemoryBlockStorage:
    """Dict-backed BlockStorage for tools and tests."""

    def __init__(self, blocks: Optional[Mapping[str, str]] = None) -> None:
        self.blocks: Dict[str, str] = dict(blocks or {})
        self.writes = 0

    def get_block(self, block_id: str) -> Optional[Mapping[str, Any]]:
        if block_id not in self.blocks:
            return None
        return {"uuid": block_id, "content": self.blocks[block_id]}

    def update_block(self, block_id: str, content: str) -> None:
        if block_id not in self.blocks:
            raise KeyError(block_id)
        self.blocks[block_id] = content
        self.writes += 1


class GanttRepository:
    def __init__(self, storage: BlockStorage, *, config: GanttConfig = DEFAULT_CONFIG) -> None:
        self.storage = storage
        self.config = config

    def _content(self, block_id: str) -> str:
        try:
            block = self.storage.get_block(block_id)
        except Exception as e:
            raise StorageError(f"reading block {block_id!r} failed: {e}") from e
        if block is None:
            raise BlockNotFoundError(f"block {block_id!r} not found")
        content = block.get("content") if isinstance(block, Mapping) else getattr(block, "content", None)
        return content or ""

    def _write(self, block_id: str, content: str) -> None:
        try:
            self.storage.update_block(block_id, content)
        except Exception as e:
            raise StorageError(f"writing block {block_id!r} failed: {e}") from e

    def load(self, block_id: str, *, today: Optional[dt.date] = None) -> TimelineModel:
        """Decode the chart in a block; a missing or foreign macro gives a default chart."""
        content = self._content(block_id)
        m = extract_macro(content)
        if m is None or not m.is_gantt:
            info("storage", f"block {block_id}: no chart macro; using default chart", enabled=self.config.verbose)
            return default_model(today, tz=self.config.tz)
        return sanitize(decode(m.payload, today=today, tz=self.config.tz))

    def save(self, block_id: str, model: TimelineModel) -> str:
        """Write the model into the block, replacing an existing chart macro in place."""
        content = self._content(block_id)
        macro = wrap_macro(encode(model))
        m = extract_macro(content)
        if m is not None and m.is_gantt:
            new_content = content[: m.start] + macro + content[m.end :]
        else:
            new_content = macro
        self._write(block_id, new_content)
        info("storage", f"block {block_id}: saved {len(macro)} chars", enabled=self.config.verbose)
        return new_content

    def delete(self, block_id: str) -> None:
        """Blank the block."""
        self._content(block_id)
        self._write(block_id, "")


__all__ = [
    "BlockNotFoundError",
    "BlockStorage",
    "GanttRepository",
    "InMemoryBlockStorage",
    "StorageError",
]
