# pgantt/validate.py
"""Payload checks and model sanitation."""

from __future__ import annotations

import copy
from typing import Any, List

from .model import TimelineModel
from .util.dates import parse_iso_date


def validate(candidate: Any) -> bool:
    """Shallow structural check of a decoded wire object.

    Requires non-empty startDate / endDate and list-typed projects / sprints.
    Entity shapes are not inspected (see payload_errors for that).
    """
    if isinstance(candidate, TimelineModel):
        return True
    if not isinstance(candidate, dict):
        return False
    if not candidate.get("startDate") or not candidate.get("endDate"):
        return False
    if not isinstance(candidate.get("projects"), list):
        return False
    if not isinstance(candidate.get("sprints"), list):
        return False
    return True


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _is_date(v: Any) -> bool:
    if not isinstance(v, str):
        return False
    try:
        parse_iso_date(v)
    except ValueError:
        return False
    return True


def _check_entity(e: Any, label: str, date_keys: List[str], errs: List[str]) -> None:
    if not isinstance(e, dict):
        errs.append(f"{label} must be object")
        return
    _require(isinstance(e.get("id"), str) and bool(e.get("id")), f"{label}.id must be non-empty string", errs)
    _require(isinstance(e.get("name"), str), f"{label}.name must be string", errs)
    for k in date_keys:
        _require(_is_date(e.get(k)), f"{label}.{k} must be YYYY-MM-DD", errs)
    if "assignee" in e:
        a = e.get("assignee")
        _require(isinstance(a, dict) and isinstance(a.get("name"), str), f"{label}.assignee.name must be string", errs)


def payload_errors(payload: Any) -> List[str]:
    """Deep check of a wire object; returns human readable problems (empty = ok)."""
    errs: List[str] = []
    if not isinstance(payload, dict):
        return [f"payload must be object; got {type(payload).__name__}"]

    for k in ("startDate", "endDate"):
        _require(_is_date(payload.get(k)), f"{k} must be YYYY-MM-DD", errs)
    if not errs and parse_iso_date(payload["startDate"]) > parse_iso_date(payload["endDate"]):
        errs.append("startDate must not be after endDate")

    if "timeScale" in payload:
        _require(payload["timeScale"] in ("day", "week"), "timeScale must be 'day' or 'week'", errs)
    if "weekStartsOn" in payload:
        _require(payload["weekStartsOn"] in (0, 1), "weekStartsOn must be 0 or 1", errs)
    if "showTodayLine" in payload:
        _require(isinstance(payload["showTodayLine"], bool), "showTodayLine must be boolean", errs)

    wd = payload.get("excludeWeekdays", [])
    _require(
        isinstance(wd, list) and all(isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= 6 for x in wd),
        "excludeWeekdays must be list of ints 0..6",
        errs,
    )
    for k in ("includeDates", "excludeDates"):
        v = payload.get(k, [])
        _require(isinstance(v, list) and all(_is_date(x) for x in v), f"{k} must be list of YYYY-MM-DD", errs)

    projects = payload.get("projects")
    _require(isinstance(projects, list), "projects must be list", errs)
    if isinstance(projects, list):
        for i, p in enumerate(projects):
            label = f"projects[{i}]"
            _check_entity(p, label, [], errs)
            if not isinstance(p, dict):
                continue
            if "layout" in p:
                _require(p["layout"] in ("inline", "multiline"), f"{label}.layout must be 'inline' or 'multiline'", errs)
            stages = p.get("stages")
            _require(isinstance(stages, list), f"{label}.stages must be list", errs)
            for j, s in enumerate(stages if isinstance(stages, list) else []):
                _check_entity(s, f"{label}.stages[{j}]", ["start"], errs)
                if isinstance(s, dict):
                    d = s.get("duration")
                    _require(
                        isinstance(d, int) and not isinstance(d, bool) and d >= 1,
                        f"{label}.stages[{j}].duration must be int >= 1",
                        errs,
                    )
            milestones = p.get("milestones")
            _require(isinstance(milestones, list), f"{label}.milestones must be list", errs)
            for j, m in enumerate(milestones if isinstance(milestones, list) else []):
                _check_entity(m, f"{label}.milestones[{j}]", ["date"], errs)

    sprints = payload.get("sprints")
    _require(isinstance(sprints, list), "sprints must be list", errs)
    if isinstance(sprints, list):
        for i, sp in enumerate(sprints):
            label = f"sprints[{i}]"
            _check_entity(sp, label, ["start", "end"], errs)
            if isinstance(sp, dict) and _is_date(sp.get("start")) and _is_date(sp.get("end")):
                _require(
                    parse_iso_date(sp["start"]) <= parse_iso_date(sp["end"]),
                    f"{label}.start must not be after end",
                    errs,
                )
    return errs


def sanitize(model: TimelineModel) -> TimelineModel:
    """Copy of `model` without entities that fall outside the timeline window.

    Drops stages whose start, milestones whose date, and sprints whose span
    are not within [start_date, end_date]. Stages may still extend past
    end_date; only their start is checked. The input is not modified.
    """
    lo, hi = model.start_date, model.end_date
    out = copy.deepcopy(model)
    for p in out.projects:
        p.stages = [s for s in p.stages if lo <= s.start <= hi]
        p.milestones = [m for m in p.milestones if lo <= m.date <= hi]
    out.sprints = [sp for sp in out.sprints if sp.start >= lo and sp.end <= hi]
    return out


__all__ = ["payload_errors", "sanitize", "validate"]
