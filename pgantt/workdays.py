# pgantt/workdays.py
"""Working-day policy.

Rule precedence for a single date, highest first:
  1) listed in exclude_dates   -> not working (beats include_dates)
  2) listed in include_dates   -> working
  3) weekday in exclude_weekdays -> not working
  4) otherwise                 -> working

Range operations are inclusive on both ends. Open-ended walks (adding
working units, finding the first working day) give up with
CalendarExhaustedError after `max_idle_days` consecutive non-working days,
so a calendar that excludes every day cannot hang the caller.
"""
from __future__ import annotations

import datetime as dt
from typing import List

from .constants import DEFAULT_MAX_IDLE_DAYS
from .model import CalendarConfig
from .util.dates import DateLike, as_date, format_iso_date, js_weekday

_ONE_DAY = dt.timedelta(days=1)


class CalendarExhaustedError(RuntimeError):
    """No working day found within the allowed number of consecutive days."""


def is_working_unit(d: DateLike, config: CalendarConfig) -> bool:
    day = as_date(d)
    key = format_iso_date(day)
    if key in config.exclude_dates:
        return False
    if key in config.include_dates:
        return True
    if js_weekday(day) in config.exclude_weekdays:
        return False
    return True


def count_working_units_between(start: DateLike, end: DateLike, config: CalendarConfig) -> int:
    s = as_date(start)
    e = as_date(end)
    if e < s:
        return 0

    if not config.has_date_exceptions:
        # Any 7 consecutive days hit every weekday exactly once.
        total = (e - s).days + 1
        weeks, rem = divmod(total, 7)
        count = weeks * (7 - len(config.exclude_weekdays))
        tail = s + dt.timedelta(days=weeks * 7)
        for i in range(rem):
            if js_weekday(tail + dt.timedelta(days=i)) not in config.exclude_weekdays:
                count += 1
        return count

    count = 0
    cur = s
    while cur <= e:
        if is_working_unit(cur, config):
            count += 1
        cur += _ONE_DAY
    return count


def generate_working_units_scale(start: DateLike, end: DateLike, config: CalendarConfig) -> List[dt.date]:
    s = as_date(start)
    e = as_date(end)
    out: List[dt.date] = []
    cur = s
    while cur <= e:
        if is_working_unit(cur, config):
            out.append(cur)
        cur += _ONE_DAY
    return out


def add_working_units(
    start: DateLike,
    n: int,
    config: CalendarConfig,
    *,
    max_idle_days: int = DEFAULT_MAX_IDLE_DAYS,
) -> dt.date:
    """Date of the n-th working unit after `start` (scanning begins at start+1).

    n <= 0 returns `start` unchanged.
    """
    cur = as_date(start)
    added = 0
    idle = 0
    while added < int(n):
        cur += _ONE_DAY
        if is_working_unit(cur, config):
            added += 1
            idle = 0
            continue
        idle += 1
        if idle > max_idle_days:
            raise CalendarExhaustedError(
                f"no working day within {max_idle_days} days after {format_iso_date(cur - dt.timedelta(days=idle))}"
            )
    return cur


def first_working_unit_on_or_after(
    d: DateLike,
    config: CalendarConfig,
    *,
    max_idle_days: int = DEFAULT_MAX_IDLE_DAYS,
) -> dt.date:
    cur = as_date(d)
    idle = 0
    while not is_working_unit(cur, config):
        idle += 1
        if idle > max_idle_days:
            raise CalendarExhaustedError(
                f"no working day within {max_idle_days} days from {format_iso_date(as_date(d))}"
            )
        cur += _ONE_DAY
    return cur


__all__ = [
    "CalendarExhaustedError",
    "add_working_units",
    "count_working_units_between",
    "first_working_unit_on_or_after",
    "generate_working_units_scale",
    "is_working_unit",
]
