# pgantt/util/dates.py
from __future__ import annotations

import calendar as _cal
import datetime as dt
import re
from typing import Optional, Union

try:
    from zoneinfo import ZoneInfo  # py3.9+
except Exception:  # pragma: no cover
    ZoneInfo = None  # type: ignore

_ISO_DAY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")

DateLike = Union[dt.date, str]


def parse_iso_date(s: str) -> dt.date:
    """Parse `YYYY-MM-DD` (a trailing time part, e.g. `T00:00:00Z`, is ignored).

    Only the calendar day is kept; no timezone conversion happens, so a
    payload written near midnight never shifts by a day.
    """
    m = _ISO_DAY_RE.match(str(s).strip())
    if not m:
        raise ValueError(f"Invalid ISO date: {s!r}")
    return dt.date(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def format_iso_date(d: dt.date) -> str:
    if isinstance(d, dt.datetime):
        d = d.date()
    return d.isoformat()


def as_date(v: DateLike) -> dt.date:
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, dt.date):
        return v
    return parse_iso_date(v)


def js_weekday(d: dt.date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday (the wire convention)."""
    return (d.weekday() + 1) % 7


def week_start(d: dt.date, week_starts_on: int = 1) -> dt.date:
    """First day of the week containing `d`; week_starts_on uses 0=Sunday, 1=Monday."""
    back = (js_weekday(d) - int(week_starts_on)) % 7
    return d - dt.timedelta(days=back)


def add_days(d: dt.date, n: int) -> dt.date:
    return d + dt.timedelta(days=int(n))


def add_months(d: dt.date, n: int) -> dt.date:
    """Same day n months later; the day is clamped to the target month length."""
    idx = d.month - 1 + int(n)
    year = d.year + idx // 12
    month = idx % 12 + 1
    day = min(d.day, _cal.monthrange(year, month)[1])
    return dt.date(year, month, day)


def clamp_date(d: dt.date, lo: dt.date, hi: dt.date) -> dt.date:
    if d < lo:
        return lo
    if d > hi:
        return hi
    return d


def today_local(tz_name: Optional[str] = "local") -> dt.date:
    """Today's date for a timezone name ("local", "UTC" or an IANA zone)."""
    name = (tz_name or "local").strip()
    low = name.lower()
    if low in {"", "local", "system"}:
        return dt.date.today()
    if low in {"utc", "z", "gmt"}:
        return dt.datetime.now(tz=dt.timezone.utc).date()
    if ZoneInfo is None:
        raise ValueError(f"Invalid timezone identifier: {name!r} (zoneinfo unavailable)")
    try:
        tz = ZoneInfo(name)
    except Exception as ex:
        raise ValueError(f"Invalid timezone identifier: {name!r}") from ex
    return dt.datetime.now(tz=tz).date()
