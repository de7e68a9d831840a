# pgantt/geometry.py
"""Date <-> pixel mapping along the timeline axis.

Day mode: one cell per working day; the timeline start is the first working
unit and maps to 0. Week mode: one cell per calendar week (weeks begin on
`week_starts_on`, 0=Sunday/1=Monday); the calendar policy is not consulted.

All rounding is round-half-up, matching how pointer positions were always
snapped on the grid.
"""
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import DEFAULT_CONFIG, GanttConfig
from .constants import DEFAULT_MAX_IDLE_DAYS, DEFAULT_WEEK_STARTS_ON, MIN_STAGE_DURATION
from .model import CalendarConfig, Milestone, Sprint, Stage, TimelineModel
from .util.dates import DateLike, add_days, as_date, week_start
from .workdays import (
    add_working_units,
    count_working_units_between,
    first_working_unit_on_or_after,
    generate_working_units_scale,
    is_working_unit,
)


def round_half_up(x: float) -> int:
    return int(math.floor(float(x) + 0.5))


def _weeks_between(a: dt.date, b: dt.date, week_starts_on: int) -> int:
    days = (week_start(b, week_starts_on) - week_start(a, week_starts_on)).days
    return days // 7


def date_to_position(
    timeline_start: DateLike,
    d: DateLike,
    cell_width: float,
    config: CalendarConfig,
    time_scale: str = "day",
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> float:
    start = as_date(timeline_start)
    target = as_date(d)
    if time_scale == "week":
        return max(0, _weeks_between(start, target, week_starts_on)) * cell_width
    units = count_working_units_between(start, target, config)
    # The start date itself is unit #1 and sits at 0.
    return max(0, units - 1) * cell_width


def position_to_date(
    timeline_start: DateLike,
    pixels: float,
    cell_width: float,
    config: CalendarConfig,
    time_scale: str = "day",
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
    *,
    max_idle_days: int = DEFAULT_MAX_IDLE_DAYS,
) -> dt.date:
    start = as_date(timeline_start)
    index = round_half_up(pixels / cell_width)
    if time_scale == "week":
        return add_days(week_start(start, week_starts_on), index * 7)

    first = first_working_unit_on_or_after(start, config, max_idle_days=max_idle_days)
    if index <= 0:
        return first
    return add_working_units(first, index, config, max_idle_days=max_idle_days)


@dataclass(frozen=True)
class PositionLimits:
    min_position: float
    max_position: float


def get_position_limits(
    start: DateLike,
    end: DateLike,
    cell_width: float,
    config: CalendarConfig,
    time_scale: str = "day",
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
) -> PositionLimits:
    # Includes the last unit's full width.
    max_pos = date_to_position(start, end, cell_width, config, time_scale, week_starts_on) + cell_width
    return PositionLimits(min_position=0, max_position=max_pos)


def snap_to_grid(pixels: float, cell_width: float) -> float:
    return round_half_up(pixels / cell_width) * cell_width


def constrain_position(position: float, element_width: float, min_position: float, max_position: float) -> float:
    left = max(min_position, position)
    right = min(max_position - element_width, left)
    return max(min_position, right)


def is_at_boundary(position: float, element_width: float, min_position: float, max_position: float) -> bool:
    return position <= min_position or (position + element_width) >= max_position


def duration_from_width(width: float, cell_width: float) -> int:
    return max(MIN_STAGE_DURATION, round_half_up(width / cell_width))


def width_from_duration(duration: int, cell_width: float) -> float:
    return duration * cell_width


@dataclass(frozen=True)
class TimelineAxis:
    """One timeline's mapping parameters bundled together.

    Renderers and the gesture engine read positions through this object so
    they never disagree about cell width, time scale or calendar.
    """

    start: dt.date
    end: dt.date
    cell_width: float
    calendar: CalendarConfig
    time_scale: str = "day"
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON
    max_idle_days: int = DEFAULT_MAX_IDLE_DAYS

    @classmethod
    def from_model(
        cls,
        model: TimelineModel,
        cell_width: Optional[float] = None,
        config: GanttConfig = DEFAULT_CONFIG,
    ) -> "TimelineAxis":
        cw = cell_width if cell_width is not None else config.cell_width_for(model.time_scale)
        if cw <= 0:
            raise ValueError(f"cell_width must be positive; got {cw!r}")
        return cls(
            start=model.start_date,
            end=model.end_date,
            cell_width=cw,
            calendar=model.calendar,
            time_scale=model.time_scale,
            week_starts_on=model.week_starts_on,
            max_idle_days=config.max_idle_days,
        )

    def position_of(self, d: DateLike) -> float:
        return date_to_position(self.start, d, self.cell_width, self.calendar, self.time_scale, self.week_starts_on)

    def date_at(self, pixels: float) -> dt.date:
        return position_to_date(
            self.start,
            pixels,
            self.cell_width,
            self.calendar,
            self.time_scale,
            self.week_starts_on,
            max_idle_days=self.max_idle_days,
        )

    def limits(self) -> PositionLimits:
        return get_position_limits(
            self.start, self.end, self.cell_width, self.calendar, self.time_scale, self.week_starts_on
        )

    def snap(self, pixels: float) -> float:
        return snap_to_grid(pixels, self.cell_width)

    def stage_geometry(self, stage: Stage) -> Tuple[float, float]:
        """(left, width); width counts cells straight from the duration."""
        return self.position_of(stage.start), width_from_duration(stage.duration, self.cell_width)

    def milestone_position(self, milestone: Milestone) -> float:
        return self.position_of(milestone.date)

    def sprint_span(self, sprint: Sprint) -> Tuple[float, float]:
        left = self.position_of(sprint.start)
        if self.time_scale == "week":
            cells = _weeks_between(sprint.start, sprint.end, self.week_starts_on) + 1
        else:
            cells = count_working_units_between(sprint.start, sprint.end, self.calendar)
        return left, cells * self.cell_width

    def header_units(self) -> List[dt.date]:
        """Working days (day mode) or week starts (week mode) covering the axis."""
        if self.time_scale == "week":
            out: List[dt.date] = []
            cur = week_start(self.start, self.week_starts_on)
            while cur <= self.end:
                out.append(cur)
                cur = add_days(cur, 7)
            return out
        return generate_working_units_scale(self.start, self.end, self.calendar)

    def today_position(self, today: dt.date) -> Optional[float]:
        """Center of today's cell, or None when today is not drawn (day mode only)."""
        if self.time_scale != "day":
            return None
        if today < self.start or today > self.end or not is_working_unit(today, self.calendar):
            return None
        return self.position_of(today) + self.cell_width / 2


__all__ = [
    "PositionLimits",
    "TimelineAxis",
    "constrain_position",
    "date_to_position",
    "duration_from_width",
    "get_position_limits",
    "is_at_boundary",
    "position_to_date",
    "round_half_up",
    "snap_to_grid",
    "width_from_duration",
]
