# pgantt/gesture.py
"""Drag / resize engine.

One gesture at a time: Idle -> Dragging -> Idle, or Idle -> Resizing -> Idle.
Pointer moves only update the visual preview; the model is written once,
when the gesture ends. All math runs on values captured at gesture start, so
a cancelled gesture leaves the model untouched.

Pointer coordinates are x offsets in pixels relative to the timeline's left
edge (the same space as TimelineAxis positions).
"""
from __future__ import annotations

import datetime as dt
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .config import DEFAULT_CONFIG, GanttConfig
from .constants import MIN_RESIZE_CELLS
from .geometry import (
    TimelineAxis,
    constrain_position,
    duration_from_width,
    width_from_duration,
)
from .model import Milestone, Stage, TimelineModel
from .util.dates import add_days, clamp_date

IDLE = "idle"
DRAGGING = "dragging"
RESIZING = "resizing"

STAGE = "stage"
MILESTONE = "milestone"


class GestureError(RuntimeError):
    """Gesture call made in the wrong state."""


@dataclass(frozen=True)
class GesturePreview:
    """Visual-only state during a gesture."""

    left: float
    width: float
    at_boundary: bool = False


@dataclass(frozen=True)
class GestureOutcome:
    mode: str            # DRAGGING | RESIZING
    entity: str          # STAGE | MILESTONE
    entity_id: str
    applied: bool        # False when the entity vanished or the gesture was cancelled
    start: Optional[dt.date] = None   # stage start / milestone date after commit
    duration: Optional[int] = None    # stage duration after commit
    left: Optional[float] = None      # final snapped visual position
    width: Optional[float] = None
    cancelled: bool = False


@dataclass
class _Active:
    mode: str
    entity: str
    entity_id: str
    initial_start: dt.date
    initial_duration: Optional[int]
    grab_offset: float
    left: float
    width: float
    at_boundary: bool
    touched_at: float


def find_stage(model: TimelineModel, stage_id: str) -> Optional[Stage]:
    for _p, s in model.iter_stages():
        if s.id == stage_id:
            return s
    return None


def find_milestone(model: TimelineModel, milestone_id: str) -> Optional[Milestone]:
    for _p, m in model.iter_milestones():
        if m.id == milestone_id:
            return m
    return None


class GestureEngine:
    def __init__(
        self,
        model: TimelineModel,
        *,
        cell_width: Optional[float] = None,
        config: GanttConfig = DEFAULT_CONFIG,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.model = model
        self.cell_width = cell_width
        self.config = config
        self._clock = clock
        self._active: Optional[_Active] = None

    # -------------------- state --------------------
    @property
    def state(self) -> str:
        return self._active.mode if self._active else IDLE

    @property
    def axis(self) -> TimelineAxis:
        # Rebuilt on demand: settings may change between gestures.
        return TimelineAxis.from_model(self.model, self.cell_width, self.config)

    def preview(self) -> Optional[GesturePreview]:
        a = self._active
        if a is None:
            return None
        return GesturePreview(left=a.left, width=a.width, at_boundary=a.at_boundary)

    def _require_idle(self) -> None:
        if self._active is not None:
            raise GestureError(f"a {self._active.mode} gesture is already active")

    # -------------------- start --------------------
    def begin_drag(
        self,
        entity: str,
        entity_id: str,
        pointer_x: float,
        *,
        element_left: Optional[float] = None,
        element_width: Optional[float] = None,
    ) -> GesturePreview:
        """Pointer-down on a stage or milestone body."""
        self._require_idle()
        axis = self.axis
        if entity == STAGE:
            stage = find_stage(self.model, entity_id)
            if stage is None:
                raise LookupError(f"stage {entity_id!r} not found")
            initial_start, initial_duration = stage.start, stage.duration
            left0, width0 = axis.stage_geometry(stage)
        elif entity == MILESTONE:
            ms = find_milestone(self.model, entity_id)
            if ms is None:
                raise LookupError(f"milestone {entity_id!r} not found")
            initial_start, initial_duration = ms.date, None
            left0, width0 = axis.milestone_position(ms), 0.0
        else:
            raise ValueError(f"entity must be {STAGE!r} or {MILESTONE!r}; got {entity!r}")

        left = left0 if element_left is None else float(element_left)
        width = width0 if element_width is None else float(element_width)
        self._active = _Active(
            mode=DRAGGING,
            entity=entity,
            entity_id=entity_id,
            initial_start=initial_start,
            initial_duration=initial_duration,
            grab_offset=float(pointer_x) - left,
            left=left,
            width=width,
            at_boundary=False,
            touched_at=self._clock(),
        )
        return self.preview()  # type: ignore[return-value]

    def begin_resize(self, stage_id: str) -> GesturePreview:
        """Pointer-down on a stage's right-edge handle (the only resize handle)."""
        self._require_idle()
        stage = find_stage(self.model, stage_id)
        if stage is None:
            raise LookupError(f"stage {stage_id!r} not found")
        left, width = self.axis.stage_geometry(stage)
        self._active = _Active(
            mode=RESIZING,
            entity=STAGE,
            entity_id=stage_id,
            initial_start=stage.start,
            initial_duration=stage.duration,
            grab_offset=0.0,
            left=left,
            width=width,
            at_boundary=False,
            touched_at=self._clock(),
        )
        return self.preview()  # type: ignore[return-value]

    # -------------------- move --------------------
    def move(self, pointer_x: float) -> GesturePreview:
        a = self._active
        if a is None:
            raise GestureError("move() without an active gesture")
        axis = self.axis
        a.touched_at = self._clock()

        if a.mode == RESIZING:
            # Left edge stays put; never narrower than half a cell.
            min_width = axis.cell_width * MIN_RESIZE_CELLS
            a.width = max(float(pointer_x) - a.left, min_width)
            return self.preview()  # type: ignore[return-value]

        snapped = axis.snap(float(pointer_x) - a.grab_offset)
        lim = axis.limits()
        constrained = constrain_position(snapped, a.width, lim.min_position, lim.max_position)
        a.left = constrained
        a.at_boundary = constrained != snapped
        return self.preview()  # type: ignore[return-value]

    # -------------------- end --------------------
    def end(self) -> GestureOutcome:
        """Pointer-up: commit the gesture to the model."""
        a = self._active
        if a is None:
            raise GestureError("end() without an active gesture")
        self._active = None
        axis = self.axis

        if a.mode == RESIZING:
            return self._commit_resize(a, axis)
        if a.entity == STAGE:
            return self._commit_stage_drag(a, axis)
        return self._commit_milestone_drag(a, axis)

    def _commit_resize(self, a: _Active, axis: TimelineAxis) -> GestureOutcome:
        stage = find_stage(self.model, a.entity_id)
        if stage is None:
            return GestureOutcome(mode=a.mode, entity=a.entity, entity_id=a.entity_id, applied=False)
        new_duration = duration_from_width(a.width, axis.cell_width)
        stage.duration = new_duration
        left = axis.position_of(stage.start)
        return GestureOutcome(
            mode=a.mode,
            entity=a.entity,
            entity_id=a.entity_id,
            applied=True,
            start=stage.start,
            duration=new_duration,
            left=left,
            width=width_from_duration(new_duration, axis.cell_width),
        )

    def _commit_stage_drag(self, a: _Active, axis: TimelineAxis) -> GestureOutcome:
        stage = find_stage(self.model, a.entity_id)
        if stage is None:
            return GestureOutcome(mode=a.mode, entity=a.entity, entity_id=a.entity_id, applied=False)

        duration = int(a.initial_duration or stage.duration)
        new_start = axis.date_at(a.left)

        # Start boundary first. The end boundary then shifts the stage left,
        # but never past the start boundary (a stage longer than the window
        # stays pinned to the timeline start).
        if new_start < axis.start:
            new_start = axis.start
        if add_days(new_start, duration) > axis.end:
            new_start = add_days(axis.end, -duration)
            if new_start < axis.start:
                new_start = axis.start

        stage.start = new_start
        stage.duration = duration
        left, width = axis.stage_geometry(stage)
        return GestureOutcome(
            mode=a.mode,
            entity=a.entity,
            entity_id=a.entity_id,
            applied=True,
            start=new_start,
            duration=duration,
            left=left,
            width=width,
        )

    def _commit_milestone_drag(self, a: _Active, axis: TimelineAxis) -> GestureOutcome:
        ms = find_milestone(self.model, a.entity_id)
        if ms is None:
            return GestureOutcome(mode=a.mode, entity=a.entity, entity_id=a.entity_id, applied=False)
        ms.date = clamp_date(axis.date_at(a.left), axis.start, axis.end)
        return GestureOutcome(
            mode=a.mode,
            entity=a.entity,
            entity_id=a.entity_id,
            applied=True,
            start=ms.date,
            left=axis.milestone_position(ms),
            width=0.0,
        )

    # -------------------- cancellation --------------------
    def cancel(self) -> Optional[GestureOutcome]:
        """Drop the active gesture (focus loss, Escape). The model is not touched."""
        a = self._active
        if a is None:
            return None
        self._active = None
        return GestureOutcome(
            mode=a.mode,
            entity=a.entity,
            entity_id=a.entity_id,
            applied=False,
            start=a.initial_start,
            duration=a.initial_duration,
            cancelled=True,
        )

    def expire_stale(self, now: Optional[float] = None) -> Optional[GestureOutcome]:
        """Cancel a gesture that saw no pointer event for gesture_timeout_s."""
        a = self._active
        if a is None:
            return None
        t = self._clock() if now is None else float(now)
        if t - a.touched_at < self.config.gesture_timeout_s:
            return None
        return self.cancel()


__all__ = [
    "DRAGGING",
    "IDLE",
    "MILESTONE",
    "RESIZING",
    "STAGE",
    "GestureEngine",
    "GestureError",
    "GestureOutcome",
    "GesturePreview",
    "find_milestone",
    "find_stage",
]
