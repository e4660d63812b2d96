"""Project crops and tasks onto calendar days.

Matching is done on ``YYYY-MM-DD`` keys, never on full timestamps.  Events
come out in insertion order: for each crop its planting, expected-harvest
and actual-harvest events, then the tasks.  Nothing is deduplicated, so a
crop planted and due for harvest on the same day yields two events.
"""

from typing import Iterable

from farmlog.schemas.crop import Crop
from farmlog.schemas.dashboard import CalendarDay, CalendarEvent, CalendarMonth
from farmlog.schemas.task import Task
from farmlog.utils.dates import DateLike, day_key, month_days


def events_for_date(
    day: DateLike,
    crops: Iterable[Crop],
    tasks: Iterable[Task],
) -> list[CalendarEvent]:
    key = day_key(day)
    events: list[CalendarEvent] = []

    for crop in crops:
        if day_key(crop.planting_date) == key:
            events.append(CalendarEvent(
                type="planting", label=f"Planting: {crop.name}",
                entity_id=crop.id, crop_id=crop.id,
            ))
        if crop.status == "growing" and day_key(crop.expected_harvest_date) == key:
            events.append(CalendarEvent(
                type="harvest", label=f"Expected harvest: {crop.name}",
                entity_id=crop.id, crop_id=crop.id,
            ))
        if crop.actual_harvest_date and day_key(crop.actual_harvest_date) == key:
            events.append(CalendarEvent(
                type="harvest", label=f"Harvest: {crop.name}",
                entity_id=crop.id, crop_id=crop.id,
            ))

    for task in tasks:
        if not task.completed and day_key(task.due_date) == key:
            events.append(CalendarEvent(
                type="task", label=task.title,
                entity_id=task.id, crop_id=task.crop_id,
            ))

    return events


def events_for_month(
    year: int,
    month: int,
    crops: Iterable[Crop],
    tasks: Iterable[Task],
    visible: int | None = None,
) -> CalendarMonth:
    """One ``CalendarDay`` per day of the month.

    ``visible`` only fills in ``hidden_count`` (the "+N more" hint); the
    event lists are always complete.
    """
    crops = list(crops)
    tasks = list(tasks)
    days = []
    for day in month_days(year, month):
        events = events_for_date(day, crops, tasks)
        hidden = max(0, len(events) - visible) if visible is not None else 0
        days.append(CalendarDay(day=day, events=events, hidden_count=hidden))
    return CalendarMonth(year=year, month=month, days=days)
