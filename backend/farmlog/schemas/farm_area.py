from pydantic import Field

from farmlog.schemas.common import CamelModel, UtcDatetime


class FarmAreaCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    area: float = Field(0, ge=0)  # m²


class FarmAreaUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    area: float | None = Field(None, ge=0)


class FarmArea(FarmAreaCreate):
    id: str
    created_at: UtcDatetime
