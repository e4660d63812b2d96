from typing import Literal

from pydantic import Field

from farmlog.schemas.common import CalendarDate, CamelModel, UtcDatetime

TaskType = Literal["watering", "fertilizing", "pruning", "harvesting", "other"]
TaskState = Literal["all", "pending", "completed"]


class TaskCreate(CamelModel):
    crop_id: str = Field(..., min_length=1)
    type: TaskType = "other"
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    due_date: CalendarDate
    completed: bool = False
    completed_date: UtcDatetime | None = None


class TaskUpdate(CamelModel):
    crop_id: str | None = Field(None, min_length=1)
    type: TaskType | None = None
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    due_date: CalendarDate | None = None
    completed: bool | None = None
    completed_date: UtcDatetime | None = None


class Task(TaskCreate):
    id: str
    created_at: UtcDatetime
