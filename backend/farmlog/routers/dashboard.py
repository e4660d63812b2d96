"""Dashboard: statistics plus the upcoming-harvest and urgent-task lists."""

from fastapi import APIRouter, Depends

from farmlog.deps import get_store
from farmlog.schemas.dashboard import Dashboard, Statistics
from farmlog.services.statistics import compute_statistics, upcoming_harvests, urgent_tasks
from farmlog.store.service import FarmStore
from farmlog.utils.dates import today

router = APIRouter()


@router.get("/", response_model=Dashboard)
async def get_dashboard(store: FarmStore = Depends(get_store)):
    # One "today" for every figure on the page
    day = today()
    crops = store.crops
    tasks = store.tasks
    return Dashboard(
        today=day,
        statistics=compute_statistics(crops, tasks, day),
        upcoming_harvests=upcoming_harvests(crops, day),
        urgent_tasks=urgent_tasks(tasks, day),
    )


@router.get("/statistics", response_model=Statistics)
async def get_statistics(store: FarmStore = Depends(get_store)):
    return compute_statistics(store.crops, store.tasks)
