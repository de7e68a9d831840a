# pgantt/model.py
from __future__ import annotations

import datetime as dt
import secrets
import string
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional

from .constants import (
    DEFAULT_EXCLUDE_WEEKDAYS,
    DEFAULT_LAYOUT,
    DEFAULT_STAGE_COLORS,
    DEFAULT_TIME_SCALE,
    DEFAULT_WEEK_STARTS_ON,
    LAYOUTS,
    MIN_STAGE_DURATION,
    TIME_SCALES,
)
from .util.dates import add_days, add_months, as_date, format_iso_date, today_local

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """Nine random base-36 characters; ids are assigned once and never reused."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


def _date_set(values: Iterable) -> FrozenSet[str]:
    return frozenset(format_iso_date(as_date(v)) for v in values)


@dataclass(frozen=True)
class CalendarConfig:
    """Working-day policy.

    exclude_weekdays uses 0=Sunday .. 6=Saturday. Dates are kept as
    normalized `YYYY-MM-DD` strings. A date listed in both include_dates and
    exclude_dates is not a working day.
    """

    exclude_weekdays: FrozenSet[int] = frozenset()
    include_dates: FrozenSet[str] = frozenset()
    exclude_dates: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        wd = frozenset(int(w) for w in self.exclude_weekdays)
        bad = sorted(w for w in wd if not 0 <= w <= 6)
        if bad:
            raise ValueError(f"exclude_weekdays must be within 0..6; got {bad}")
        object.__setattr__(self, "exclude_weekdays", wd)
        object.__setattr__(self, "include_dates", _date_set(self.include_dates))
        object.__setattr__(self, "exclude_dates", _date_set(self.exclude_dates))

    @classmethod
    def weekends_off(cls) -> "CalendarConfig":
        return cls(exclude_weekdays=frozenset(DEFAULT_EXCLUDE_WEEKDAYS))

    @property
    def has_date_exceptions(self) -> bool:
        return bool(self.include_dates or self.exclude_dates)


@dataclass
class Assignee:
    name: str
    color: Optional[str] = None


@dataclass
class Stage:
    id: str
    name: str
    start: dt.date
    duration: int = MIN_STAGE_DURATION  # calendar days
    color: str = DEFAULT_STAGE_COLORS[0]
    assignee: Optional[Assignee] = None
    type: str = ""

    def __post_init__(self) -> None:
        self.start = as_date(self.start)
        if isinstance(self.duration, bool) or int(self.duration) < MIN_STAGE_DURATION:
            raise ValueError(f"stage {self.id!r}: duration must be >= {MIN_STAGE_DURATION}; got {self.duration!r}")
        self.duration = int(self.duration)
        if not self.type:
            self.type = self.name

    @property
    def end(self) -> dt.date:
        return stage_end(self)


@dataclass
class Milestone:
    id: str
    name: str
    date: dt.date
    assignee: Optional[Assignee] = None
    color: Optional[str] = None
    type: str = ""

    def __post_init__(self) -> None:
        self.date = as_date(self.date)
        if not self.type:
            self.type = self.name


@dataclass
class Project:
    id: str
    name: str
    stages: List[Stage] = field(default_factory=list)
    milestones: List[Milestone] = field(default_factory=list)
    assignee: Optional[Assignee] = None
    layout: str = DEFAULT_LAYOUT  # "inline" | "multiline"

    def __post_init__(self) -> None:
        if self.layout not in LAYOUTS:
            raise ValueError(f"project {self.id!r}: layout must be one of {LAYOUTS}; got {self.layout!r}")


@dataclass
class Sprint:
    id: str
    name: str
    start: dt.date
    end: dt.date

    def __post_init__(self) -> None:
        self.start = as_date(self.start)
        self.end = as_date(self.end)
        if self.start > self.end:
            raise ValueError(f"sprint {self.id!r}: start {self.start} is after end {self.end}")


@dataclass
class TimelineModel:
    start_date: dt.date
    end_date: dt.date
    projects: List[Project] = field(default_factory=list)
    sprints: List[Sprint] = field(default_factory=list)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    time_scale: str = DEFAULT_TIME_SCALE  # "day" | "week"
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON  # 0=Sunday, 1=Monday
    show_today_line: bool = True

    def __post_init__(self) -> None:
        self.start_date = as_date(self.start_date)
        self.end_date = as_date(self.end_date)
        if self.start_date > self.end_date:
            raise ValueError(f"timeline start {self.start_date} is after end {self.end_date}")
        if self.time_scale not in TIME_SCALES:
            raise ValueError(f"time_scale must be one of {TIME_SCALES}; got {self.time_scale!r}")
        if self.week_starts_on not in (0, 1):
            raise ValueError(f"week_starts_on must be 0 or 1; got {self.week_starts_on!r}")

    def iter_stages(self):
        for p in self.projects:
            for s in p.stages:
                yield p, s

    def iter_milestones(self):
        for p in self.projects:
            for m in p.milestones:
                yield p, m


def stage_end(stage: Stage) -> dt.date:
    """Exclusive end: start + duration calendar days (never working days)."""
    return add_days(stage.start, stage.duration)


def default_model(today: Optional[dt.date] = None, *, tz: str = "local") -> TimelineModel:
    """One-month window starting today, weekends excluded."""
    start = today if today is not None else today_local(tz)
    return TimelineModel(
        start_date=start,
        end_date=add_months(start, 1),
        calendar=CalendarConfig.weekends_off(),
    )


__all__ = [
    "Assignee",
    "CalendarConfig",
    "Milestone",
    "Project",
    "Sprint",
    "Stage",
    "TimelineModel",
    "default_model",
    "generate_id",
    "stage_end",
]
