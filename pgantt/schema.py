# pgantt/schema.py
"""Wire shape of a TimelineModel (the JSON object inside the transport string).

Keys are camelCase. Fields at their default value are omitted on the way out
and reinstated on the way in:

  excludeWeekdays / includeDates / excludeDates   []
  timeScale                                       "day"
  weekStartsOn                                    1
  showTodayLine                                   true
  project.layout                                  "inline"
  stage.type / milestone.type                     same as name

Unordered collections are written sorted so encoding is deterministic.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from .constants import (
    DEFAULT_LAYOUT,
    DEFAULT_STAGE_COLORS,
    DEFAULT_TIME_SCALE,
    DEFAULT_WEEK_STARTS_ON,
    LAYOUTS,
    MIN_STAGE_DURATION,
    TIME_SCALES,
)
from .model import (
    Assignee,
    CalendarConfig,
    Milestone,
    Project,
    Sprint,
    Stage,
    TimelineModel,
)
from .util.console import warn
from .util.dates import format_iso_date, parse_iso_date


class DecodeError(ValueError):
    """A payload could not be turned into a TimelineModel."""


# --- model -> wire ------------------------------------------------------------

def _assignee_to_wire(a: Optional[Assignee]) -> Optional[Dict[str, Any]]:
    if a is None:
        return None
    out: Dict[str, Any] = {"name": a.name}
    if a.color:
        out["color"] = a.color
    return out


def stage_to_wire(s: Stage) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": s.id,
        "name": s.name,
        "start": format_iso_date(s.start),
        "duration": int(s.duration),
        "color": s.color,
    }
    a = _assignee_to_wire(s.assignee)
    if a is not None:
        out["assignee"] = a
    if s.type and s.type != s.name:
        out["type"] = s.type
    return out


def milestone_to_wire(m: Milestone) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": m.id, "name": m.name, "date": format_iso_date(m.date)}
    a = _assignee_to_wire(m.assignee)
    if a is not None:
        out["assignee"] = a
    if m.color:
        out["color"] = m.color
    if m.type and m.type != m.name:
        out["type"] = m.type
    return out


def project_to_wire(p: Project) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": p.id,
        "name": p.name,
        "stages": [stage_to_wire(s) for s in p.stages],
        "milestones": [milestone_to_wire(m) for m in p.milestones],
    }
    a = _assignee_to_wire(p.assignee)
    if a is not None:
        out["assignee"] = a
    if p.layout != DEFAULT_LAYOUT:
        out["layout"] = p.layout
    return out


def sprint_to_wire(sp: Sprint) -> Dict[str, Any]:
    return {
        "id": sp.id,
        "name": sp.name,
        "start": format_iso_date(sp.start),
        "end": format_iso_date(sp.end),
    }


def model_to_wire(model: TimelineModel) -> Dict[str, Any]:
    cal = model.calendar
    out: Dict[str, Any] = {
        "projects": [project_to_wire(p) for p in model.projects],
        "sprints": [sprint_to_wire(sp) for sp in model.sprints],
        "startDate": format_iso_date(model.start_date),
        "endDate": format_iso_date(model.end_date),
    }
    if cal.exclude_weekdays:
        out["excludeWeekdays"] = sorted(cal.exclude_weekdays)
    if cal.include_dates:
        out["includeDates"] = sorted(cal.include_dates)
    if cal.exclude_dates:
        out["excludeDates"] = sorted(cal.exclude_dates)
    if model.time_scale != DEFAULT_TIME_SCALE:
        out["timeScale"] = model.time_scale
    if model.week_starts_on != DEFAULT_WEEK_STARTS_ON:
        out["weekStartsOn"] = model.week_starts_on
    if not model.show_today_line:
        out["showTodayLine"] = False
    return out


# --- wire -> model ------------------------------------------------------------

def _date(v: Any, what: str) -> dt.date:
    if not isinstance(v, str):
        raise DecodeError(f"{what} must be a YYYY-MM-DD string; got {type(v).__name__}")
    try:
        return parse_iso_date(v)
    except ValueError as e:
        raise DecodeError(f"{what}: {e}") from e


def _str(v: Any, default: str = "") -> str:
    if v is None:
        return default
    return str(v)


def _assignee_from_wire(v: Any) -> Optional[Assignee]:
    if not isinstance(v, dict):
        return None
    name = v.get("name")
    if not isinstance(name, str) or not name:
        return None
    color = v.get("color")
    return Assignee(name=name, color=color if isinstance(color, str) and color else None)


def _duration(v: Any) -> int:
    # Hand-edited payloads sometimes carry "3" or 2.0; anything unusable is one day.
    if isinstance(v, bool):
        return MIN_STAGE_DURATION
    try:
        n = int(float(v))
    except (TypeError, ValueError, OverflowError):
        return MIN_STAGE_DURATION
    return max(MIN_STAGE_DURATION, n)


def stage_from_wire(v: Dict[str, Any]) -> Stage:
    name = _str(v.get("name"))
    color = v.get("color")
    return Stage(
        id=_str(v.get("id")),
        name=name,
        start=_date(v.get("start"), "stage.start"),
        duration=_duration(v.get("duration")),
        color=color if isinstance(color, str) and color else DEFAULT_STAGE_COLORS[0],
        assignee=_assignee_from_wire(v.get("assignee")),
        type=_str(v.get("type")) or name,
    )


def milestone_from_wire(v: Dict[str, Any]) -> Milestone:
    name = _str(v.get("name"))
    color = v.get("color")
    return Milestone(
        id=_str(v.get("id")),
        name=name,
        date=_date(v.get("date"), "milestone.date"),
        assignee=_assignee_from_wire(v.get("assignee")),
        color=color if isinstance(color, str) and color else None,
        type=_str(v.get("type")) or name,
    )


def _entities(raw: Any, build, what: str) -> List[Any]:
    out: List[Any] = []
    if not isinstance(raw, list):
        return out
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            warn("schema", f"skipping {what}[{i}]: not an object")
            continue
        try:
            out.append(build(item))
        except ValueError as e:
            warn("schema", f"skipping {what}[{i}]: {e}")
    return out


def project_from_wire(v: Dict[str, Any]) -> Project:
    layout = v.get("layout")
    if layout not in LAYOUTS:
        layout = DEFAULT_LAYOUT
    pid = _str(v.get("id"))
    return Project(
        id=pid,
        name=_str(v.get("name")),
        stages=_entities(v.get("stages"), stage_from_wire, f"project {pid}: stages"),
        milestones=_entities(v.get("milestones"), milestone_from_wire, f"project {pid}: milestones"),
        assignee=_assignee_from_wire(v.get("assignee")),
        layout=layout,
    )


def sprint_from_wire(v: Dict[str, Any]) -> Sprint:
    return Sprint(
        id=_str(v.get("id")),
        name=_str(v.get("name")),
        start=_date(v.get("start"), "sprint.start"),
        end=_date(v.get("end"), "sprint.end"),
    )


def _str_list(v: Any) -> List[str]:
    if not isinstance(v, list):
        return []
    out: List[str] = []
    for x in v:
        if isinstance(x, str):
            try:
                out.append(format_iso_date(parse_iso_date(x)))
            except ValueError:
                warn("schema", f"ignoring calendar date {x!r}")
    return out


def _weekday_list(v: Any) -> List[int]:
    if not isinstance(v, list):
        return []
    return [x for x in v if isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= 6]


def model_from_wire(payload: Dict[str, Any]) -> TimelineModel:
    """Build a model from a wire dict. Raises DecodeError on a broken root."""
    if not isinstance(payload, dict):
        raise DecodeError(f"payload must be an object; got {type(payload).__name__}")

    start = _date(payload.get("startDate"), "startDate")
    end = _date(payload.get("endDate"), "endDate")
    if start > end:
        raise DecodeError(f"startDate {start} is after endDate {end}")

    time_scale = payload.get("timeScale", DEFAULT_TIME_SCALE)
    if time_scale not in TIME_SCALES:
        warn("schema", f"unknown timeScale {time_scale!r}; using {DEFAULT_TIME_SCALE!r}")
        time_scale = DEFAULT_TIME_SCALE
    week_starts_on = payload.get("weekStartsOn", DEFAULT_WEEK_STARTS_ON)
    if week_starts_on not in (0, 1) or isinstance(week_starts_on, bool):
        week_starts_on = DEFAULT_WEEK_STARTS_ON
    show_today = payload.get("showTodayLine", True)

    calendar = CalendarConfig(
        exclude_weekdays=frozenset(_weekday_list(payload.get("excludeWeekdays"))),
        include_dates=frozenset(_str_list(payload.get("includeDates"))),
        exclude_dates=frozenset(_str_list(payload.get("excludeDates"))),
    )
    return TimelineModel(
        start_date=start,
        end_date=end,
        projects=_entities(payload.get("projects"), project_from_wire, "projects"),
        sprints=_entities(payload.get("sprints"), sprint_from_wire, "sprints"),
        calendar=calendar,
        time_scale=time_scale,
        week_starts_on=int(week_starts_on),
        show_today_line=show_today if isinstance(show_today, bool) else True,
    )


__all__ = [
    "DecodeError",
    "milestone_from_wire",
    "milestone_to_wire",
    "model_from_wire",
    "model_to_wire",
    "project_from_wire",
    "project_to_wire",
    "sprint_from_wire",
    "sprint_to_wire",
    "stage_from_wire",
    "stage_to_wire",
]
