"""Task routes: list by crop/state, CRUD, complete shortcut."""

from fastapi import APIRouter, Depends, Query, status

from farmlog.deps import get_store
from farmlog.middleware.exceptions import ResourceNotFoundError
from farmlog.schemas.common import DeleteResult
from farmlog.schemas.task import Task, TaskCreate, TaskState, TaskUpdate
from farmlog.store.kinds import EntityKind
from farmlog.store.service import FarmStore

router = APIRouter()


@router.get("/", response_model=list[Task])
async def list_tasks(
    crop_id: str | None = Query(None, alias="cropId"),
    state: TaskState = Query("all"),
    store: FarmStore = Depends(get_store),
):
    """Tasks soonest due first."""
    completed = {"all": None, "pending": False, "completed": True}[state]
    return store.query(EntityKind.TASK, crop_id=crop_id, completed=completed)


@router.post("/", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate, store: FarmStore = Depends(get_store)):
    return await store.create(EntityKind.TASK, body)


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: str, store: FarmStore = Depends(get_store)):
    task = store.get(EntityKind.TASK, task_id)
    if task is None:
        raise ResourceNotFoundError("Task", task_id)
    return task


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    store: FarmStore = Depends(get_store),
):
    task = await store.update(EntityKind.TASK, task_id, body)
    if task is None:
        raise ResourceNotFoundError("Task", task_id)
    return task


@router.post("/{task_id}/complete", response_model=Task)
async def complete_task(task_id: str, store: FarmStore = Depends(get_store)):
    task = await store.complete_task(task_id)
    if task is None:
        raise ResourceNotFoundError("Task", task_id)
    return task


@router.delete("/{task_id}", response_model=DeleteResult)
async def delete_task(task_id: str, store: FarmStore = Depends(get_store)):
    existed, _ = await store.delete(EntityKind.TASK, task_id)
    return DeleteResult(deleted=existed)
