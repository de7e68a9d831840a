import datetime as dt
import json
import unittest

from pgantt.codec import to_json
from pgantt.model import Milestone, Project, Sprint, Stage, TimelineModel
from pgantt.validate import payload_errors, sanitize, validate


def _model() -> TimelineModel:
    return TimelineModel(
        start_date=dt.date(2024, 1, 1),
        end_date=dt.date(2024, 1, 31),
        projects=[
            Project(
                id="p1",
                name="P",
                stages=[
                    Stage(id="in", name="In", start="2024-01-15", duration=5),
                    Stage(id="late", name="Late", start="2024-02-15", duration=5),
                    Stage(id="early", name="Early", start="2023-12-20", duration=30),
                    Stage(id="edge", name="Edge", start="2024-01-31", duration=10),
                ],
                milestones=[
                    Milestone(id="m_in", name="In", date="2024-01-01"),
                    Milestone(id="m_out", name="Out", date="2024-02-01"),
                ],
            )
        ],
        sprints=[
            Sprint(id="sp_in", name="In", start="2024-01-01", end="2024-01-31"),
            Sprint(id="sp_cross", name="Cross", start="2024-01-20", end="2024-02-03"),
        ],
    )


class TestValidateContract(unittest.TestCase):
    def test_shallow_validate(self) -> None:
        ok = {"startDate": "2024-01-01", "endDate": "2024-01-31", "projects": [], "sprints": []}
        self.assertTrue(validate(ok))
        self.assertTrue(validate(dict(ok, projects=[{"anything": 1}])))
        self.assertFalse(validate(dict(ok, startDate="")))
        self.assertFalse(validate({k: v for k, v in ok.items() if k != "endDate"}))
        self.assertFalse(validate(dict(ok, projects={})))
        self.assertFalse(validate(dict(ok, sprints=None)))
        self.assertFalse(validate([]))
        self.assertFalse(validate(None))

    def test_payload_errors_clean_model(self) -> None:
        self.assertEqual(payload_errors(json.loads(to_json(_model()))), [])

    def test_payload_errors_reports_paths(self) -> None:
        payload = {
            "startDate": "2024-02-01",
            "endDate": "2024-01-01",
            "timeScale": "month",
            "excludeWeekdays": [7],
            "projects": [{"id": "", "name": "P", "stages": [{"id": "s", "name": "S", "start": "x", "duration": 0}], "milestones": []}],
            "sprints": "none",
        }
        errs = payload_errors(payload)
        for needle in (
            "startDate must not be after endDate",
            "timeScale must be 'day' or 'week'",
            "excludeWeekdays must be list of ints 0..6",
            "projects[0].id must be non-empty string",
            "projects[0].stages[0].start must be YYYY-MM-DD",
            "projects[0].stages[0].duration must be int >= 1",
            "sprints must be list",
        ):
            self.assertIn(needle, errs)
        self.assertEqual(payload_errors("x"), ["payload must be object; got str"])


class TestSanitizeContract(unittest.TestCase):
    def test_out_of_range_entities_are_dropped(self) -> None:
        m = _model()
        out = sanitize(m)
        p = out.projects[0]
        self.assertEqual([s.id for s in p.stages], ["in", "edge"])
        self.assertEqual([x.id for x in p.milestones], ["m_in"])
        self.assertEqual([sp.id for sp in out.sprints], ["sp_in"])

    def test_input_is_not_modified(self) -> None:
        m = _model()
        out = sanitize(m)
        self.assertEqual(len(m.projects[0].stages), 4)
        out.projects[0].stages[0].duration = 2
        self.assertEqual(m.projects[0].stages[0].duration, 5)

    def test_idempotent(self) -> None:
        once = sanitize(_model())
        self.assertEqual(sanitize(once), once)


if __name__ == "__main__":
    unittest.main(verbosity=2)
