"""Pydantic schemas for crops."""

from datetime import date
from typing import Literal

from pydantic import Field

from farmlog.schemas.common import CalendarDate, CamelModel, UtcDatetime

CropStatus = Literal["growing", "harvested", "removed"]

STATUS_LABELS: dict[str, str] = {
    "growing": "Growing",
    "harvested": "Harvested",
    "removed": "Removed",
}


class CropCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    variety: str = ""
    location: str = ""
    planting_date: CalendarDate
    expected_harvest_date: CalendarDate
    actual_harvest_date: CalendarDate | None = None
    status: CropStatus = "growing"
    notes: str = ""
    image_url: str | None = None


class CropUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    variety: str | None = None
    location: str | None = None
    planting_date: CalendarDate | None = None
    expected_harvest_date: CalendarDate | None = None
    actual_harvest_date: CalendarDate | None = None
    status: CropStatus | None = None
    notes: str | None = None
    image_url: str | None = None


class Crop(CropCreate):
    id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class HarvestRequest(CamelModel):
    """Body for POST /api/crops/{id}/harvest; defaults to today."""
    harvest_date: CalendarDate | None = None


class CropSearch(CamelModel):
    text: str | None = None
    status: CropStatus | None = None
    location: str | None = None
    planted_from: date | None = None
    planted_to: date | None = None
