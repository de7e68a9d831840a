# pgantt/store.py
"""In-memory CRUD over one TimelineModel.

Lookups are linear scans by id. Mutations edit the stored objects in place;
only set_data() and update_time_range() replace the model (both sanitize).
Operations on ids that do not exist are no-ops that report it through the
return value.
"""
from __future__ import annotations

import dataclasses
from typing import Any, Iterable, List, Optional, Tuple

from .constants import LAYOUTS, MIN_STAGE_DURATION, TIME_SCALES, next_milestone_color, next_stage_color
from .model import (
    Assignee,
    CalendarConfig,
    Milestone,
    Project,
    Sprint,
    Stage,
    TimelineModel,
    default_model,
    generate_id,
)
from .util.dates import DateLike, as_date
from .validate import sanitize


def _check_fields(obj: Any, updates: dict) -> None:
    names = {f.name for f in dataclasses.fields(obj)}
    unknown = sorted(k for k in updates if k not in names)
    if unknown:
        raise ValueError(f"{type(obj).__name__} has no field(s): {', '.join(unknown)}")
    if "id" in updates and updates["id"] != obj.id:
        raise ValueError(f"{type(obj).__name__} id cannot be changed")


def _move(items: list, from_index: int, to_index: int) -> bool:
    n = len(items)
    if not (0 <= from_index < n and 0 <= to_index < n):
        return False
    items.insert(to_index, items.pop(from_index))
    return True


class TimelineStore:
    def __init__(self, model: Optional[TimelineModel] = None) -> None:
        self._model = model if model is not None else default_model()

    # ---------------- whole model ----------------
    @property
    def model(self) -> TimelineModel:
        """The live model; gestures and CRUD calls mutate this object."""
        return self._model

    def get_data(self) -> TimelineModel:
        return self._model

    def set_data(self, model: TimelineModel) -> None:
        self._model = sanitize(model)

    def clear(self) -> None:
        self._model.projects = []
        self._model.sprints = []

    def update_time_range(self, start: DateLike, end: DateLike) -> None:
        s, e = as_date(start), as_date(end)
        if s > e:
            raise ValueError(f"timeline start {s} is after end {e}")
        # The previous model object is not modified.
        self._model = sanitize(dataclasses.replace(self._model, start_date=s, end_date=e))

    def update_working_days(
        self,
        *,
        exclude_weekdays: Optional[Iterable[int]] = None,
        include_dates: Optional[Iterable[DateLike]] = None,
        exclude_dates: Optional[Iterable[DateLike]] = None,
    ) -> CalendarConfig:
        cur = self._model.calendar
        self._model.calendar = CalendarConfig(
            exclude_weekdays=cur.exclude_weekdays if exclude_weekdays is None else frozenset(exclude_weekdays),
            include_dates=cur.include_dates if include_dates is None else frozenset(include_dates),
            exclude_dates=cur.exclude_dates if exclude_dates is None else frozenset(exclude_dates),
        )
        return self._model.calendar

    def set_time_scale(self, time_scale: str, *, week_starts_on: Optional[int] = None) -> None:
        if time_scale not in TIME_SCALES:
            raise ValueError(f"time_scale must be one of {TIME_SCALES}; got {time_scale!r}")
        if week_starts_on is not None and week_starts_on not in (0, 1):
            raise ValueError(f"week_starts_on must be 0 or 1; got {week_starts_on!r}")
        self._model.time_scale = time_scale
        if week_starts_on is not None:
            self._model.week_starts_on = week_starts_on

    def set_show_today_line(self, show: bool) -> None:
        self._model.show_today_line = bool(show)

    # ---------------- projects ----------------
    def add_project(self, project: Project) -> Project:
        self._model.projects.append(project)
        return project

    def new_project(self, name: str, *, assignee: Optional[Assignee] = None, layout: str = "inline") -> Project:
        return self.add_project(Project(id=generate_id(), name=name, assignee=assignee, layout=layout))

    def get_project(self, project_id: str) -> Optional[Project]:
        for p in self._model.projects:
            if p.id == project_id:
                return p
        return None

    def update_project(self, project_id: str, **updates: Any) -> Optional[Project]:
        p = self.get_project(project_id)
        if p is None:
            return None
        _check_fields(p, updates)
        if "layout" in updates and updates["layout"] not in LAYOUTS:
            raise ValueError(f"layout must be one of {LAYOUTS}; got {updates['layout']!r}")
        for k, v in updates.items():
            setattr(p, k, v)
        return p

    def delete_project(self, project_id: str) -> bool:
        before = len(self._model.projects)
        self._model.projects = [p for p in self._model.projects if p.id != project_id]
        return len(self._model.projects) != before

    def move_project(self, from_index: int, to_index: int) -> bool:
        return _move(self._model.projects, from_index, to_index)

    # ---------------- stages ----------------
    def add_stage(self, project_id: str, stage: Stage) -> Optional[Stage]:
        p = self.get_project(project_id)
        if p is None:
            return None
        p.stages.append(stage)
        return stage

    def new_stage(
        self,
        project_id: str,
        name: str,
        start: DateLike,
        duration: int = MIN_STAGE_DURATION,
        *,
        color: Optional[str] = None,
        assignee: Optional[Assignee] = None,
    ) -> Optional[Stage]:
        """Create a stage; without a color it takes the next palette entry."""
        p = self.get_project(project_id)
        if p is None:
            return None
        stage = Stage(
            id=generate_id(),
            name=name,
            start=as_date(start),
            duration=duration,
            color=color or next_stage_color(len(p.stages)),
            assignee=assignee,
        )
        p.stages.append(stage)
        return stage

    def update_stage(self, project_id: str, stage_id: str, **updates: Any) -> Optional[Stage]:
        p = self.get_project(project_id)
        if p is None:
            return None
        stage = next((s for s in p.stages if s.id == stage_id), None)
        if stage is None:
            return None
        _check_fields(stage, updates)
        if "start" in updates:
            updates["start"] = as_date(updates["start"])
        if "duration" in updates:
            d = updates["duration"]
            if isinstance(d, bool) or int(d) < MIN_STAGE_DURATION:
                raise ValueError(f"duration must be >= {MIN_STAGE_DURATION}; got {d!r}")
            updates["duration"] = int(d)
        # A type that only echoed the name follows a rename.
        if "name" in updates and "type" not in updates and stage.type == stage.name:
            updates["type"] = updates["name"]
        for k, v in updates.items():
            setattr(stage, k, v)
        return stage

    def delete_stage(self, project_id: str, stage_id: str) -> bool:
        p = self.get_project(project_id)
        if p is None:
            return False
        before = len(p.stages)
        p.stages = [s for s in p.stages if s.id != stage_id]
        return len(p.stages) != before

    def move_stage(self, project_id: str, from_index: int, to_index: int) -> bool:
        p = self.get_project(project_id)
        if p is None:
            return False
        return _move(p.stages, from_index, to_index)

    def find_stage(self, stage_id: str) -> Optional[Tuple[Project, Stage]]:
        for p, s in self._model.iter_stages():
            if s.id == stage_id:
                return p, s
        return None

    # ---------------- milestones ----------------
    def add_milestone(self, project_id: str, milestone: Milestone) -> Optional[Milestone]:
        p = self.get_project(project_id)
        if p is None:
            return None
        p.milestones.append(milestone)
        return milestone

    def new_milestone(
        self,
        project_id: str,
        name: str,
        date: DateLike,
        *,
        color: Optional[str] = None,
        assignee: Optional[Assignee] = None,
    ) -> Optional[Milestone]:
        p = self.get_project(project_id)
        if p is None:
            return None
        ms = Milestone(
            id=generate_id(),
            name=name,
            date=as_date(date),
            assignee=assignee,
            color=color or next_milestone_color(len(p.milestones)),
        )
        p.milestones.append(ms)
        return ms

    def update_milestone(self, project_id: str, milestone_id: str, **updates: Any) -> Optional[Milestone]:
        p = self.get_project(project_id)
        if p is None:
            return None
        ms = next((m for m in p.milestones if m.id == milestone_id), None)
        if ms is None:
            return None
        _check_fields(ms, updates)
        if "date" in updates:
            updates["date"] = as_date(updates["date"])
        if "name" in updates and "type" not in updates and ms.type == ms.name:
            updates["type"] = updates["name"]
        for k, v in updates.items():
            setattr(ms, k, v)
        return ms

    def delete_milestone(self, project_id: str, milestone_id: str) -> bool:
        p = self.get_project(project_id)
        if p is None:
            return False
        before = len(p.milestones)
        p.milestones = [m for m in p.milestones if m.id != milestone_id]
        return len(p.milestones) != before

    def find_milestone(self, milestone_id: str) -> Optional[Tuple[Project, Milestone]]:
        for p, m in self._model.iter_milestones():
            if m.id == milestone_id:
                return p, m
        return None

    # ---------------- sprints ----------------
    def add_sprint(self, sprint: Sprint) -> Sprint:
        self._model.sprints.append(sprint)
        return sprint

    def new_sprint(self, name: str, start: DateLike, end: DateLike) -> Sprint:
        return self.add_sprint(Sprint(id=generate_id(), name=name, start=as_date(start), end=as_date(end)))

    def get_sprint(self, sprint_id: str) -> Optional[Sprint]:
        for sp in self._model.sprints:
            if sp.id == sprint_id:
                return sp
        return None

    def update_sprint(self, sprint_id: str, **updates: Any) -> Optional[Sprint]:
        sp = self.get_sprint(sprint_id)
        if sp is None:
            return None
        _check_fields(sp, updates)
        start = as_date(updates.get("start", sp.start))
        end = as_date(updates.get("end", sp.end))
        if start > end:
            raise ValueError(f"sprint {sprint_id!r}: start {start} is after end {end}")
        for k, v in updates.items():
            setattr(sp, k, v)
        sp.start, sp.end = start, end
        return sp

    def delete_sprint(self, sprint_id: str) -> bool:
        before = len(self._model.sprints)
        self._model.sprints = [sp for sp in self._model.sprints if sp.id != sprint_id]
        return len(self._model.sprints) != before

    def all_sprints(self) -> List[Sprint]:
        return list(self._model.sprints)


__all__ = ["TimelineStore"]
