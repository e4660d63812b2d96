"""Schemas for the full-data snapshot used by export and import."""

from pydantic import Field

from farmlog.schemas.common import CamelModel
from farmlog.schemas.crop import Crop
from farmlog.schemas.farm_area import FarmArea
from farmlog.schemas.growth_record import GrowthRecord
from farmlog.schemas.task import Task


class Snapshot(CamelModel):
    """The four entity collections at one point in time."""
    crops: list[Crop] = Field(default_factory=list)
    growth_records: list[GrowthRecord] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    farm_areas: list[FarmArea] = Field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "crops": len(self.crops),
            "growthRecords": len(self.growth_records),
            "tasks": len(self.tasks),
            "farmAreas": len(self.farm_areas),
        }


class ImportSummary(CamelModel):
    crops: int = 0
    growth_records: int = 0
    tasks: int = 0
    farm_areas: int = 0
    replaced: bool = False
