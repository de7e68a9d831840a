import contextlib
import datetime as dt
import io
import unittest

from pgantt.codec import decode, encode
from pgantt.constants import RENDERER_TAG
from pgantt.macro import extract_macro, new_block_text, wrap_macro
from pgantt.model import Project, Stage, TimelineModel, default_model
from pgantt.storage import BlockNotFoundError, GanttRepository, InMemoryBlockStorage, StorageError

TODAY = dt.date(2024, 5, 6)


def _model() -> TimelineModel:
    return TimelineModel(
        start_date=dt.date(2024, 1, 1),
        end_date=dt.date(2024, 1, 31),
        projects=[Project(id="p1", name="P", stages=[Stage(id="s1", name="S", start="2024-01-05", duration=2)])],
    )


class _BrokenStorage(InMemoryBlockStorage):
    def update_block(self, block_id: str, content: str) -> None:
        raise OSError("disk full")


class TestMacroContract(unittest.TestCase):
    def test_extract_is_lenient_about_spacing_and_case(self) -> None:
        for text in (
            "{{renderer project-gantt,abc=}}",
            "{{RENDERER project-gantt ,   abc=  }}",
            "intro {{renderer   project-gantt, abc=}} outro",
        ):
            m = extract_macro(text)
            self.assertIsNotNone(m, text)
            self.assertEqual(m.payload, "abc=")
            self.assertTrue(m.is_gantt)

    def test_foreign_or_missing_macro(self) -> None:
        self.assertFalse(extract_macro("{{renderer other-thing, abc}}").is_gantt)
        self.assertIsNone(extract_macro("plain text"))
        self.assertIsNone(extract_macro(None))

    def test_wrap_and_extract(self) -> None:
        text = wrap_macro("QUJD")
        self.assertEqual(text, "{{renderer project-gantt, QUJD}}")
        self.assertEqual(extract_macro(text).payload, "QUJD")

    def test_new_block_text(self) -> None:
        day = extract_macro(new_block_text("day", today=TODAY))
        week = extract_macro(new_block_text("week", today=TODAY))
        self.assertEqual(day.renderer_type, RENDERER_TAG)
        self.assertEqual(decode(day.payload), default_model(TODAY))
        self.assertEqual(decode(week.payload).time_scale, "week")
        with self.assertRaises(ValueError):
            new_block_text("month", today=TODAY)


class TestRepositoryContract(unittest.TestCase):
    def test_save_then_load(self) -> None:
        storage = InMemoryBlockStorage({"b1": ""})
        repo = GanttRepository(storage)
        content = repo.save("b1", _model())
        self.assertTrue(content.startswith("{{renderer project-gantt, "))
        self.assertEqual(storage.writes, 1)
        self.assertEqual(repo.load("b1"), _model())

    def test_save_replaces_macro_in_place(self) -> None:
        old = wrap_macro(encode(default_model(TODAY)))
        storage = InMemoryBlockStorage({"b1": f"before {old} after"})
        GanttRepository(storage).save("b1", _model())
        text = storage.blocks["b1"]
        self.assertTrue(text.startswith("before {{renderer project-gantt, "))
        self.assertTrue(text.endswith("}} after"))
        self.assertEqual(decode(extract_macro(text).payload), _model())

    def test_load_sanitizes(self) -> None:
        m = _model()
        m.projects[0].stages.append(Stage(id="s2", name="Late", start="2024-03-01"))
        storage = InMemoryBlockStorage({"b1": wrap_macro(encode(m))})
        loaded = GanttRepository(storage).load("b1")
        self.assertEqual([s.id for s in loaded.projects[0].stages], ["s1"])

    def test_load_without_chart_gives_default(self) -> None:
        storage = InMemoryBlockStorage({"b1": "just notes", "b2": "{{renderer other, x}}", "b3": wrap_macro("%%%")})
        repo = GanttRepository(storage)
        self.assertEqual(repo.load("b1", today=TODAY), default_model(TODAY))
        self.assertEqual(repo.load("b2", today=TODAY), default_model(TODAY))
        with contextlib.redirect_stderr(io.StringIO()):
            self.assertEqual(repo.load("b3", today=TODAY), default_model(TODAY))

    def test_missing_block_raises(self) -> None:
        repo = GanttRepository(InMemoryBlockStorage())
        with self.assertRaises(BlockNotFoundError):
            repo.load("nope")
        with self.assertRaises(BlockNotFoundError):
            repo.save("nope", _model())
        with self.assertRaises(BlockNotFoundError):
            repo.delete("nope")

    def test_write_failure_raises_storage_error(self) -> None:
        repo = GanttRepository(_BrokenStorage({"b1": ""}))
        with self.assertRaises(StorageError) as cm:
            repo.save("b1", _model())
        self.assertIsInstance(cm.exception.__cause__, OSError)

    def test_delete_blanks_block(self) -> None:
        storage = InMemoryBlockStorage({"b1": wrap_macro(encode(_model()))})
        GanttRepository(storage).delete("b1")
        self.assertEqual(storage.blocks["b1"], "")


if __name__ == "__main__":
    unittest.main(verbosity=2)
