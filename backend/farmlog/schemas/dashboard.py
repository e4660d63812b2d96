"""Schemas for the read-side projections: statistics, dashboard, calendar."""

from datetime import date
from typing import Literal

from farmlog.schemas.common import CamelModel
from farmlog.schemas.crop import Crop
from farmlog.schemas.task import Task

EventType = Literal["planting", "harvest", "task"]


class Statistics(CamelModel):
    total_crops: int = 0
    growing_crops: int = 0
    harvested_crops: int = 0
    removed_crops: int = 0
    average_growth_days: int = 0
    upcoming_harvests: int = 0
    overdue_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0


class UpcomingHarvest(CamelModel):
    crop: Crop
    days_until: int


class UrgentTask(CamelModel):
    task: Task
    days_until: int
    overdue: bool


class Dashboard(CamelModel):
    today: date
    statistics: Statistics
    upcoming_harvests: list[UpcomingHarvest]
    urgent_tasks: list[UrgentTask]


class CalendarEvent(CamelModel):
    type: EventType
    label: str
    entity_id: str
    crop_id: str


class CalendarDay(CamelModel):
    day: date
    events: list[CalendarEvent]
    hidden_count: int = 0


class CalendarMonth(CamelModel):
    year: int
    month: int
    days: list[CalendarDay]
