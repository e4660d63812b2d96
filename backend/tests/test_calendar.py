"""Calendar event derivation tests."""

from datetime import date, datetime, timezone

import pytest

from farmlog.schemas.crop import Crop
from farmlog.schemas.task import Task
from farmlog.services.calendar import events_for_date, events_for_month

STAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)


def crop(planted: str, expected: str, status: str = "growing", harvested: str | None = None,
         name: str = "Tomato") -> Crop:
    return Crop(
        id=f"crop-{name}", name=name, planting_date=planted, expected_harvest_date=expected,
        actual_harvest_date=harvested, status=status, created_at=STAMP, updated_at=STAMP,
    )


def task(due: str, completed: bool = False, title: str = "Water") -> Task:
    return Task(id=f"task-{title}", crop_id="crop-Tomato", title=title, due_date=due,
                completed=completed, created_at=STAMP)


@pytest.mark.unit
class TestEventsForDate:
    def test_same_day_planting_and_harvest_yield_two_events(self):
        events = events_for_date("2024-03-01", [crop("2024-03-01", "2024-03-01")], [])

        assert [e.type for e in events] == ["planting", "harvest"]
        assert events[0].label == "Planting: Tomato"
        assert events[1].label == "Expected harvest: Tomato"

    def test_timestamps_match_on_day(self):
        events = events_for_date(
            date(2024, 3, 1), [crop("2024-03-01T15:00:00.000Z", "2024-06-01")], []
        )
        assert len(events) == 1

    def test_expected_harvest_only_while_growing(self):
        removed = crop("2024-01-01", "2024-03-01", status="removed")
        assert events_for_date("2024-03-01", [removed], []) == []

    def test_actual_harvest_event(self):
        harvested = crop("2024-01-01", "2024-03-10", status="harvested", harvested="2024-03-05")

        events = events_for_date("2024-03-05", [harvested], [])

        assert [e.label for e in events] == ["Harvest: Tomato"]
        assert events_for_date("2024-03-10", [harvested], []) == []

    def test_only_incomplete_tasks(self):
        tasks = [task("2024-03-01", title="Water"), task("2024-03-01", completed=True, title="Prune")]

        events = events_for_date("2024-03-01", [], tasks)

        assert [(e.type, e.label) for e in events] == [("task", "Water")]
        assert events[0].crop_id == "crop-Tomato"

    def test_crops_before_tasks(self):
        events = events_for_date(
            "2024-03-01", [crop("2024-03-01", "2024-05-01")], [task("2024-03-01")]
        )
        assert [e.type for e in events] == ["planting", "task"]


@pytest.mark.unit
class TestEventsForMonth:
    def test_one_entry_per_day(self):
        month = events_for_month(2024, 2, [], [])
        assert len(month.days) == 29
        assert month.days[0].day == date(2024, 2, 1)

    def test_hidden_count(self):
        crops = [crop("2024-03-01", "2024-05-01", name=n) for n in ("A", "B", "C", "D")]

        month = events_for_month(2024, 3, crops, [], visible=3)

        first = month.days[0]
        assert len(first.events) == 4
        assert first.hidden_count == 1
        assert month.days[1].hidden_count == 0
