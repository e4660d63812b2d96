"""Calendar routes: a month grid and the events of a single day."""

from datetime import date

from fastapi import APIRouter, Depends, Path

from farmlog.config import settings
from farmlog.deps import get_store
from farmlog.schemas.dashboard import CalendarDay, CalendarMonth
from farmlog.services.calendar import events_for_date, events_for_month
from farmlog.store.service import FarmStore

router = APIRouter()


@router.get("/day/{day}", response_model=CalendarDay)
async def get_day(day: date, store: FarmStore = Depends(get_store)):
    events = events_for_date(day, store.crops, store.tasks)
    return CalendarDay(day=day, events=events)


@router.get("/{year}/{month}", response_model=CalendarMonth)
async def get_month(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
    store: FarmStore = Depends(get_store),
):
    return events_for_month(
        year, month, store.crops, store.tasks, visible=settings.max_calendar_events
    )
