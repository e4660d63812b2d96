"""Entity kinds known to the store and the per-kind rules that go with them."""

import enum
from dataclasses import dataclass

from farmlog.schemas.chat import ChatMessage, ChatMessageCreate
from farmlog.schemas.common import CamelModel
from farmlog.schemas.crop import Crop, CropCreate, CropUpdate
from farmlog.schemas.farm_area import FarmArea, FarmAreaCreate, FarmAreaUpdate
from farmlog.schemas.growth_record import GrowthRecord, GrowthRecordCreate
from farmlog.schemas.task import Task, TaskCreate, TaskUpdate


class EntityKind(str, enum.Enum):
    CROP = "crops"
    GROWTH_RECORD = "growthRecords"
    TASK = "tasks"
    FARM_AREA = "farmAreas"
    CHAT_MESSAGE = "chatMessages"


@dataclass(frozen=True)
class KindRules:
    label: str
    model: type[CamelModel]
    create_model: type[CamelModel]
    update_model: type[CamelModel] | None  # None → records are never edited
    sort_field: str
    descending: bool
    created_field: str = "created_at"
    tracks_updates: bool = False


KINDS: dict[EntityKind, KindRules] = {
    EntityKind.CROP: KindRules(
        "Crop", Crop, CropCreate, CropUpdate,
        sort_field="created_at", descending=True, tracks_updates=True,
    ),
    EntityKind.GROWTH_RECORD: KindRules(
        "Growth record", GrowthRecord, GrowthRecordCreate, None,
        sort_field="date", descending=True,
    ),
    EntityKind.TASK: KindRules(
        "Task", Task, TaskCreate, TaskUpdate,
        sort_field="due_date", descending=False,
    ),
    EntityKind.FARM_AREA: KindRules(
        "Farm area", FarmArea, FarmAreaCreate, FarmAreaUpdate,
        sort_field="created_at", descending=True,
    ),
    EntityKind.CHAT_MESSAGE: KindRules(
        "Chat message", ChatMessage, ChatMessageCreate, None,
        sort_field="timestamp", descending=False, created_field="timestamp",
    ),
}

# Kinds that make up an export snapshot, in import order (crops first so
# dependants can be re-pointed at the new crop ids).
SNAPSHOT_KINDS = (
    EntityKind.CROP,
    EntityKind.GROWTH_RECORD,
    EntityKind.TASK,
    EntityKind.FARM_AREA,
)

# Kinds that reference a crop through ``crop_id`` and follow it on delete.
CROP_DEPENDANTS = (EntityKind.GROWTH_RECORD, EntityKind.TASK)
