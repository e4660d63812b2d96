from pydantic import Field

from farmlog.schemas.common import CalendarDate, CamelModel, UtcDatetime


class GrowthRecordCreate(CamelModel):
    crop_id: str = Field(..., min_length=1)
    date: CalendarDate
    notes: str = ""
    image_url: str | None = None
    height: float | None = Field(None, ge=0)  # cm
    width: float | None = Field(None, ge=0)  # cm


class GrowthRecord(GrowthRecordCreate):
    id: str
    created_at: UtcDatetime
