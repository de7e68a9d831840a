# pgantt/constants.py
from __future__ import annotations

from typing import Tuple

RENDERER_TAG = "project-gantt"

DEFAULT_CELL_WIDTH = 30   # px per day
WEEK_CELL_FACTOR = 2      # week cells are drawn twice as wide as day cells

# Weekday numbers follow the wire convention: 0=Sunday .. 6=Saturday.
DEFAULT_EXCLUDE_WEEKDAYS: Tuple[int, ...] = (0, 6)

TIME_SCALES: Tuple[str, ...] = ("day", "week")
LAYOUTS: Tuple[str, ...] = ("inline", "multiline")
DEFAULT_TIME_SCALE = "day"
DEFAULT_LAYOUT = "inline"
DEFAULT_WEEK_STARTS_ON = 1

MIN_STAGE_DURATION = 1
MIN_RESIZE_CELLS = 0.5

# Longest run of consecutive non-working days an open-ended calendar walk
# accepts before giving up.
DEFAULT_MAX_IDLE_DAYS = 731

DEFAULT_GESTURE_TIMEOUT_S = 30.0

DEFAULT_STAGE_COLORS: Tuple[str, ...] = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FFEAA7",
    "#DFE6E9",
    "#A29BFE",
    "#FD79A8",
    "#FDCB6E",
    "#6C5CE7",
)

DEFAULT_MILESTONE_COLORS: Tuple[str, ...] = (
    "#FFD93D",
    "#6C5CE7",
    "#E17055",
    "#00B894",
    "#0984E3",
)


def next_stage_color(used: int) -> str:
    """Palette color for the (used+1)-th stage, cycling through the palette."""
    return DEFAULT_STAGE_COLORS[int(used) % len(DEFAULT_STAGE_COLORS)]


def next_milestone_color(used: int) -> str:
    return DEFAULT_MILESTONE_COLORS[int(used) % len(DEFAULT_MILESTONE_COLORS)]
