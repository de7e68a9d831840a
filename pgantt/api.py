"""pgantt.api

Stable *library* entrypoint for pgantt.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from pgantt.codec import decode, encode
from pgantt.config import DEFAULT_CONFIG, GanttConfig
from pgantt.constants import RENDERER_TAG, next_milestone_color, next_stage_color
from pgantt.geometry import (
    PositionLimits,
    TimelineAxis,
    constrain_position,
    date_to_position,
    duration_from_width,
    get_position_limits,
    is_at_boundary,
    position_to_date,
    snap_to_grid,
    width_from_duration,
)
from pgantt.gesture import GestureEngine, GestureError, GestureOutcome, GesturePreview
from pgantt.macro import extract_macro, new_block_text, wrap_macro
from pgantt.model import (
    Assignee,
    CalendarConfig,
    Milestone,
    Project,
    Sprint,
    Stage,
    TimelineModel,
    default_model,
    generate_id,
    stage_end,
)
from pgantt.session import GanttSession, SlotRegistry, normalize_slot_event
from pgantt.storage import (
    BlockNotFoundError,
    BlockStorage,
    GanttRepository,
    InMemoryBlockStorage,
    StorageError,
)
from pgantt.store import TimelineStore
from pgantt.validate import payload_errors, sanitize, validate
from pgantt.workdays import (
    CalendarExhaustedError,
    add_working_units,
    count_working_units_between,
    generate_working_units_scale,
    is_working_unit,
)


def load_chart(text: str) -> TimelineModel:
    """Model from block text holding a chart macro, or from a bare transport string."""
    m = extract_macro(text)
    if m is None:
        return sanitize(decode(text))
    if not m.is_gantt:
        return default_model()
    return sanitize(decode(m.payload))


def dump_chart(model: TimelineModel) -> str:
    """Block text (macro) for a model."""
    return wrap_macro(encode(model))


__all__ = [
    "Assignee",
    "BlockNotFoundError",
    "BlockStorage",
    "CalendarConfig",
    "CalendarExhaustedError",
    "DEFAULT_CONFIG",
    "GanttConfig",
    "GanttRepository",
    "GanttSession",
    "GestureEngine",
    "GestureError",
    "GestureOutcome",
    "GesturePreview",
    "InMemoryBlockStorage",
    "Milestone",
    "PositionLimits",
    "Project",
    "RENDERER_TAG",
    "SlotRegistry",
    "Sprint",
    "Stage",
    "StorageError",
    "TimelineAxis",
    "TimelineModel",
    "TimelineStore",
    "add_working_units",
    "constrain_position",
    "count_working_units_between",
    "date_to_position",
    "decode",
    "default_model",
    "dump_chart",
    "duration_from_width",
    "encode",
    "extract_macro",
    "generate_id",
    "generate_working_units_scale",
    "get_position_limits",
    "is_at_boundary",
    "is_working_unit",
    "load_chart",
    "new_block_text",
    "next_milestone_color",
    "next_stage_color",
    "normalize_slot_event",
    "payload_errors",
    "position_to_date",
    "sanitize",
    "snap_to_grid",
    "stage_end",
    "validate",
    "width_from_duration",
    "wrap_macro",
]
