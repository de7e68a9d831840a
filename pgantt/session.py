# pgantt/session.py
"""Host binding: render slots, event payloads and live editing sessions.

A SlotRegistry is created once per plugin lifetime and torn down on unload.
It maps the host's ephemeral render-slot ids to the persistent block id, the
last decoded model and (once editing starts) a GanttSession.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from .codec import decode
from .config import DEFAULT_CONFIG, GanttConfig
from .constants import RENDERER_TAG
from .gesture import GestureEngine, GestureOutcome, GesturePreview
from .model import TimelineModel
from .storage import GanttRepository
from .store import TimelineStore
from .util.console import info, warn
from .validate import sanitize


def _lookup(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def normalize_slot_event(event: Any) -> Optional[str]:
    """Pull the slot id out of whatever shape the host delivered.

    Accepted, in order: a bare string, `slot`, `dataset.slotId`, `slotId`,
    `data-slot-id`. Mappings and attribute objects are both understood.
    """
    if event is None:
        return None
    if isinstance(event, str):
        return event.strip() or None
    dataset = _lookup(event, "dataset")
    for v in (
        _lookup(event, "slot"),
        _lookup(dataset, "slotId") if dataset is not None else None,
        _lookup(event, "slotId"),
        _lookup(event, "data-slot-id"),
    ):
        if v is not None and str(v).strip():
            return str(v).strip()
    return None


class GanttSession:
    """One chart being edited: store + gesture engine + persistence."""

    def __init__(
        self,
        repository: GanttRepository,
        block_id: str,
        model: TimelineModel,
        *,
        config: GanttConfig = DEFAULT_CONFIG,
    ) -> None:
        self.repository = repository
        self.block_id = block_id
        self.config = config
        self.store = TimelineStore(sanitize(model))
        self.engine = GestureEngine(self.store.model, config=config)

    @property
    def model(self) -> TimelineModel:
        return self.store.model

    def _sync(self) -> None:
        # set_data / update_time_range replace the model object.
        self.engine.model = self.store.model

    def begin_drag(self, entity: str, entity_id: str, pointer_x: float, **kw: Any) -> GesturePreview:
        self._sync()
        return self.engine.begin_drag(entity, entity_id, pointer_x, **kw)

    def begin_resize(self, stage_id: str) -> GesturePreview:
        self._sync()
        return self.engine.begin_resize(stage_id)

    def move(self, pointer_x: float) -> GesturePreview:
        return self.engine.move(pointer_x)

    def end_gesture(self) -> GestureOutcome:
        """Commit the gesture, then persist when something changed.

        Storage failures propagate; the in-memory change stays applied.
        """
        outcome = self.engine.end()
        if outcome.applied:
            self.save()
        else:
            info("session", f"{outcome.entity} {outcome.entity_id} gone; nothing saved", enabled=self.config.verbose)
        return outcome

    def cancel(self) -> Optional[GestureOutcome]:
        return self.engine.cancel()

    def expire_stale(self, now: Optional[float] = None) -> Optional[GestureOutcome]:
        out = self.engine.expire_stale(now)
        if out is not None:
            warn("session", f"cancelled stale {out.mode} gesture on {out.entity} {out.entity_id}")
        return out

    def save(self) -> str:
        return self.repository.save(self.block_id, self.store.model)

    def reload(self) -> TimelineModel:
        self.engine.cancel()
        self.store.set_data(self.repository.load(self.block_id))
        self._sync()
        return self.store.model


@dataclass
class SlotEntry:
    slot_id: str
    block_id: str
    model: TimelineModel
    session: Optional[GanttSession] = None


class SlotRegistry:
    def __init__(self, repository: GanttRepository, *, config: GanttConfig = DEFAULT_CONFIG) -> None:
        self.repository = repository
        self.config = config
        self._slots: Dict[str, SlotEntry] = {}

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, slot_id: object) -> bool:
        return slot_id in self._slots

    def __iter__(self) -> Iterator[SlotEntry]:
        return iter(list(self._slots.values()))

    def attach(self, slot_id: str, block_id: str, model: TimelineModel) -> SlotEntry:
        """Remember what a slot shows; re-rendering a slot replaces its entry."""
        old = self._slots.get(slot_id)
        if old is not None and old.session is not None:
            old.session.cancel()
        entry = SlotEntry(slot_id=slot_id, block_id=str(block_id), model=model)
        self._slots[slot_id] = entry
        return entry

    def on_macro_slotted(
        self,
        slot_id: str,
        block_id: str,
        arguments: Sequence[str],
        *,
        today: Optional[dt.date] = None,
    ) -> Optional[SlotEntry]:
        """Host rendered a `{{renderer ...}}` macro into a slot.

        Returns None for macros that belong to another renderer.
        """
        args = list(arguments or [])
        if not args or args[0] != RENDERER_TAG:
            return None
        payload = args[1] if len(args) > 1 else ""
        model = decode(payload, today=today, tz=self.config.tz)
        return self.attach(slot_id, block_id, model)

    def get(self, slot_id: str) -> Optional[SlotEntry]:
        return self._slots.get(slot_id)

    def resolve(self, event: Any) -> Optional[SlotEntry]:
        slot_id = normalize_slot_event(event)
        if slot_id is None:
            warn("session", "no slot id found in event")
            return None
        entry = self._slots.get(slot_id)
        if entry is None or not entry.block_id:
            warn("session", f"no block for slot {slot_id!r}")
            return None
        return entry

    def open_session(self, event: Any) -> Optional[GanttSession]:
        """Start (or reuse) editing for the slot named by a host event."""
        entry = self.resolve(event)
        if entry is None:
            return None
        if entry.session is None:
            entry.session = GanttSession(self.repository, entry.block_id, entry.model, config=self.config)
        return entry.session

    def blocks(self) -> List[str]:
        return sorted({e.block_id for e in self._slots.values()})

    def detach(self, slot_id: str) -> Optional[SlotEntry]:
        entry = self._slots.pop(slot_id, None)
        if entry is not None and entry.session is not None:
            entry.session.cancel()
        return entry

    def teardown(self) -> int:
        """Cancel live gestures and forget every slot. Returns how many were dropped."""
        n = len(self._slots)
        for slot_id in list(self._slots):
            self.detach(slot_id)
        return n


__all__ = ["GanttSession", "SlotEntry", "SlotRegistry", "normalize_slot_event"]
