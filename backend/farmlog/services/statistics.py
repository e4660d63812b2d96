"""Dashboard statistics derived from the crop and task collections.

All functions are pure and evaluate "today" at call time unless a date is
passed in, so results must be recomputed whenever the collections change
or the day rolls over.
"""

import math
from datetime import date
from typing import Iterable

from farmlog.schemas.crop import Crop
from farmlog.schemas.dashboard import Statistics, UpcomingHarvest, UrgentTask
from farmlog.schemas.task import Task
from farmlog.utils.dates import days_between, today as current_day

HARVEST_WINDOW_DAYS = 7


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_statistics(
    crops: Iterable[Crop],
    tasks: Iterable[Task],
    today: date | None = None,
) -> Statistics:
    today = today or current_day()
    crops = list(crops)
    tasks = list(tasks)

    growing = [c for c in crops if c.status == "growing"]
    harvested = [c for c in crops if c.status == "harvested"]
    removed = [c for c in crops if c.status == "removed"]

    growth_days = [
        days_between(c.actual_harvest_date, c.planting_date)
        for c in harvested
        if c.actual_harvest_date and c.planting_date
    ]
    average_growth_days = (
        round_half_up(sum(growth_days) / len(growth_days)) if growth_days else 0
    )

    upcoming = sum(
        1 for c in growing
        if 0 <= days_between(c.expected_harvest_date, today) <= HARVEST_WINDOW_DAYS
    )

    pending = [t for t in tasks if not t.completed]
    # Overdue means strictly past due; a task due today is not overdue
    overdue = sum(1 for t in pending if days_between(today, t.due_date) > 0)

    return Statistics(
        total_crops=len(crops),
        growing_crops=len(growing),
        harvested_crops=len(harvested),
        removed_crops=len(removed),
        average_growth_days=average_growth_days,
        upcoming_harvests=upcoming,
        overdue_tasks=overdue,
        completed_tasks=len(tasks) - len(pending),
        pending_tasks=len(pending),
    )


def upcoming_harvests(
    crops: Iterable[Crop],
    today: date | None = None,
    window: int = HARVEST_WINDOW_DAYS,
    limit: int | None = 5,
) -> list[UpcomingHarvest]:
    """Growing crops due for harvest within *window* days, soonest first."""
    today = today or current_day()
    items = [
        UpcomingHarvest(crop=c, days_until=days_between(c.expected_harvest_date, today))
        for c in crops
        if c.status == "growing"
    ]
    items = [i for i in items if 0 <= i.days_until <= window]
    items.sort(key=lambda i: i.days_until)
    return items[:limit] if limit is not None else items


def urgent_tasks(
    tasks: Iterable[Task],
    today: date | None = None,
    limit: int | None = 5,
) -> list[UrgentTask]:
    """Incomplete tasks ordered by how soon they are due (overdue first)."""
    today = today or current_day()
    items = []
    for task in tasks:
        if task.completed:
            continue
        days_until = days_between(task.due_date, today)
        items.append(UrgentTask(task=task, days_until=days_until, overdue=days_until < 0))
    items.sort(key=lambda i: i.days_until)
    return items[:limit] if limit is not None else items
