import datetime as dt
import random
import unittest

from pgantt.config import GanttConfig
from pgantt.gesture import DRAGGING, IDLE, MILESTONE, RESIZING, STAGE, GestureEngine, GestureError
from pgantt.model import CalendarConfig, Milestone, Project, Stage, TimelineModel

WEEKENDS = CalendarConfig(exclude_weekdays={0, 6})


def _model(calendar: CalendarConfig = WEEKENDS, duration: int = 5) -> TimelineModel:
    stage = Stage(id="s1", name="Build", start=dt.date(2024, 1, 3), duration=duration)
    ms = Milestone(id="m1", name="Release", date=dt.date(2024, 1, 8))
    return TimelineModel(
        start_date=dt.date(2024, 1, 1),
        end_date=dt.date(2024, 1, 31),
        projects=[Project(id="p1", name="Core", stages=[stage], milestones=[ms])],
        calendar=calendar,
    )


def _stage(m: TimelineModel) -> Stage:
    return m.projects[0].stages[0]


class TestGestureDragContract(unittest.TestCase):
    def test_drag_two_cells_moves_two_working_days(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        pv = eng.begin_drag(STAGE, "s1", 85)
        self.assertEqual((pv.left, pv.width), (80, 200))
        self.assertEqual(eng.state, DRAGGING)

        pv = eng.move(165)
        self.assertEqual(pv.left, 160)
        self.assertFalse(pv.at_boundary)
        # Nothing is written before pointer-up.
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 3))

        out = eng.end()
        self.assertTrue(out.applied)
        self.assertEqual(eng.state, IDLE)
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 5))
        self.assertEqual(_stage(m).duration, 5)
        self.assertEqual((out.left, out.width), (160, 200))

    def test_drag_across_weekend(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        eng.begin_drag(STAGE, "s1", 80)
        eng.move(200)
        eng.end()
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 8))

    def test_grab_offset_is_kept(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        eng.begin_drag(STAGE, "s1", 180)  # grabbed 100px into the bar
        self.assertEqual(eng.move(220).left, 120)

    def test_drag_past_start_clamps_and_flags_boundary(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        eng.begin_drag(STAGE, "s1", 85)
        pv = eng.move(-300)
        self.assertEqual(pv.left, 0)
        self.assertTrue(pv.at_boundary)
        eng.end()
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 1))
        self.assertEqual(_stage(m).duration, 5)

    def test_drag_past_end_stays_inside_track(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        eng.begin_drag(STAGE, "s1", 80)
        pv = eng.move(5000)
        self.assertEqual(pv.left, 920 - 200)
        self.assertTrue(pv.at_boundary)
        eng.end()
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 25))
        self.assertEqual(_stage(m).duration, 5)

    def test_end_boundary_shifts_start_back(self) -> None:
        m = _model(calendar=CalendarConfig())
        eng = GestureEngine(m, cell_width=40)
        # Renderer reports a narrower bar than the duration implies.
        eng.begin_drag(STAGE, "s1", 80, element_width=40)
        self.assertEqual(eng.move(5000).left, 1200)
        out = eng.end()
        # Jan 31 + 5 days would end after the window; the end is pinned to Jan 31.
        self.assertEqual(out.start, dt.date(2024, 1, 26))
        self.assertEqual(_stage(m).duration, 5)

    def test_end_clamp_keeps_stage_inside_window(self) -> None:
        m = _model(calendar=CalendarConfig())
        _stage(m).start = dt.date(2024, 1, 2)
        eng = GestureEngine(m, cell_width=40)
        eng.begin_drag(STAGE, "s1", 40)
        eng.move(1040)
        out = eng.end()
        self.assertEqual(out.start, dt.date(2024, 1, 26))
        self.assertEqual(_stage(m).end, dt.date(2024, 1, 31))
        self.assertEqual(_stage(m).duration, 5)

    def test_stage_longer_than_window_pins_to_start(self) -> None:
        m = _model(calendar=CalendarConfig(), duration=40)
        eng = GestureEngine(m, cell_width=40)
        eng.begin_drag(STAGE, "s1", 90)
        eng.move(700)
        eng.end()
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 1))
        self.assertEqual(_stage(m).duration, 40)

    def test_milestone_drag_clamps_to_window(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        pv = eng.begin_drag(MILESTONE, "m1", 200)
        self.assertEqual((pv.left, pv.width), (200, 0))
        self.assertEqual(eng.move(5000).left, 920)
        out = eng.end()
        self.assertEqual(m.projects[0].milestones[0].date, dt.date(2024, 1, 31))
        self.assertEqual(out.width, 0)

    def test_milestone_drag_moves_date(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        eng.begin_drag(MILESTONE, "m1", 200)
        eng.move(120)
        eng.end()
        self.assertEqual(m.projects[0].milestones[0].date, dt.date(2024, 1, 4))

    def test_duration_preserved_over_many_drags(self) -> None:
        m = _model(duration=3)
        eng = GestureEngine(m, cell_width=40)
        rng = random.Random(42)
        for _ in range(50):
            left = eng.axis.position_of(_stage(m).start)
            eng.begin_drag(STAGE, "s1", left + 10)
            eng.move(rng.randint(100, 500))
            eng.end()
            self.assertEqual(_stage(m).duration, 3)


class TestGestureResizeContract(unittest.TestCase):
    def test_resize_rounds_width_to_duration(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        pv = eng.begin_resize("s1")
        self.assertEqual(eng.state, RESIZING)
        self.assertEqual((pv.left, pv.width), (80, 200))

        self.assertEqual(eng.move(80 + 136).width, 136)  # 3.4 cells
        self.assertEqual(_stage(m).duration, 5)
        out = eng.end()
        self.assertEqual(_stage(m).duration, 3)
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 3))
        self.assertEqual((out.left, out.width), (80, 120))

    def test_resize_half_cell_rounds_up(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        eng.begin_resize("s1")
        eng.move(80 + 140)  # 3.5 cells
        eng.end()
        self.assertEqual(_stage(m).duration, 4)

    def test_resize_never_below_half_cell(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        eng.begin_resize("s1")
        self.assertEqual(eng.move(0).width, 20)
        eng.end()
        self.assertEqual(_stage(m).duration, 1)

    def test_resize_of_milestone_is_not_possible(self) -> None:
        eng = GestureEngine(_model(), cell_width=40)
        with self.assertRaises(LookupError):
            eng.begin_resize("m1")


class TestGestureWeekScaleContract(unittest.TestCase):
    def _week_model(self) -> TimelineModel:
        stage = Stage(id="s1", name="Build", start=dt.date(2024, 1, 3), duration=10)
        return TimelineModel(
            start_date=dt.date(2024, 1, 1),
            end_date=dt.date(2024, 3, 31),
            projects=[Project(id="p1", name="Core", stages=[stage])],
            calendar=WEEKENDS,
            time_scale="week",
        )

    def test_drag_moves_by_whole_weeks(self) -> None:
        m = self._week_model()
        eng = GestureEngine(m, config=GanttConfig())
        self.assertEqual(eng.axis.cell_width, 60)
        pv = eng.begin_drag(STAGE, "s1", 30)
        self.assertEqual((pv.left, pv.width), (0, 600))
        self.assertEqual(eng.move(30 + 110).left, 120)
        out = eng.end()
        # Two week cells from the week of Jan 1 (Monday start).
        self.assertEqual(out.start, dt.date(2024, 1, 15))
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 15))
        self.assertEqual(_stage(m).duration, 10)
        self.assertEqual(out.left, 120)

    def test_drag_start_lands_on_week_start(self) -> None:
        m = self._week_model()
        m.week_starts_on = 0
        eng = GestureEngine(m, config=GanttConfig())
        eng.begin_drag(STAGE, "s1", 0)
        eng.move(60)
        eng.end()
        # Sunday weeks: Dec 31 + 7 days.
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 7))

    def test_resize_uses_week_cell_width(self) -> None:
        m = self._week_model()
        eng = GestureEngine(m, config=GanttConfig())
        self.assertEqual(eng.begin_resize("s1").width, 600)
        eng.move(150)  # 2.5 cells of 60px
        out = eng.end()
        self.assertEqual(_stage(m).duration, 3)
        self.assertEqual((out.left, out.width), (0, 180))
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 3))

    def test_resize_floor_is_half_a_week_cell(self) -> None:
        m = self._week_model()
        eng = GestureEngine(m, config=GanttConfig())
        eng.begin_resize("s1")
        self.assertEqual(eng.move(10).width, 30)
        eng.end()
        self.assertEqual(_stage(m).duration, 1)


class TestGestureLifecycleContract(unittest.TestCase):
    def test_deleted_entity_is_silently_skipped(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        eng.begin_drag(STAGE, "s1", 85)
        eng.move(165)
        m.projects[0].stages = []
        out = eng.end()
        self.assertFalse(out.applied)
        self.assertEqual(eng.state, IDLE)

        eng.begin_drag(MILESTONE, "m1", 200)
        m.projects = []
        self.assertFalse(eng.end().applied)

    def test_wrong_state_calls(self) -> None:
        eng = GestureEngine(_model(), cell_width=40)
        with self.assertRaises(GestureError):
            eng.move(10)
        with self.assertRaises(GestureError):
            eng.end()
        eng.begin_drag(STAGE, "s1", 85)
        with self.assertRaises(GestureError):
            eng.begin_resize("s1")

    def test_unknown_entity(self) -> None:
        eng = GestureEngine(_model(), cell_width=40)
        with self.assertRaises(LookupError):
            eng.begin_drag(STAGE, "nope", 0)
        with self.assertRaises(ValueError):
            eng.begin_drag("sprint", "s1", 0)
        self.assertEqual(eng.state, IDLE)

    def test_cancel_leaves_model_untouched(self) -> None:
        m = _model()
        eng = GestureEngine(m, cell_width=40)
        eng.begin_drag(STAGE, "s1", 85)
        eng.move(400)
        out = eng.cancel()
        self.assertTrue(out.cancelled)
        self.assertFalse(out.applied)
        self.assertEqual(eng.state, IDLE)
        self.assertEqual(_stage(m).start, dt.date(2024, 1, 3))
        self.assertIsNone(eng.cancel())

    def test_stale_gesture_expires(self) -> None:
        now = [100.0]
        m = _model()
        eng = GestureEngine(m, cell_width=40, config=GanttConfig(gesture_timeout_s=5.0), clock=lambda: now[0])
        eng.begin_resize("s1")
        self.assertIsNone(eng.expire_stale(103.0))
        now[0] = 104.0
        eng.move(400)
        self.assertIsNone(eng.expire_stale(108.0))
        out = eng.expire_stale(109.5)
        self.assertIsNotNone(out)
        self.assertTrue(out.cancelled)
        self.assertEqual(eng.state, IDLE)
        self.assertEqual(_stage(m).duration, 5)
        self.assertIsNone(eng.expire_stale(200.0))


if __name__ == "__main__":
    unittest.main(verbosity=2)
