"""Growth record routes. Records are append-only: create, list, delete."""

from fastapi import APIRouter, Depends, Query, status

from farmlog.deps import get_store
from farmlog.middleware.exceptions import ResourceNotFoundError
from farmlog.schemas.common import DeleteResult
from farmlog.schemas.growth_record import GrowthRecord, GrowthRecordCreate
from farmlog.store.kinds import EntityKind
from farmlog.store.service import FarmStore

router = APIRouter()


@router.get("/", response_model=list[GrowthRecord])
async def list_growth_records(
    crop_id: str | None = Query(None, alias="cropId"),
    store: FarmStore = Depends(get_store),
):
    """Newest first; pass ``cropId`` for the records of one crop."""
    return store.query(EntityKind.GROWTH_RECORD, crop_id=crop_id)


@router.post("/", response_model=GrowthRecord, status_code=status.HTTP_201_CREATED)
async def create_growth_record(
    body: GrowthRecordCreate,
    store: FarmStore = Depends(get_store),
):
    return await store.create(EntityKind.GROWTH_RECORD, body)


@router.get("/{record_id}", response_model=GrowthRecord)
async def get_growth_record(record_id: str, store: FarmStore = Depends(get_store)):
    record = store.get(EntityKind.GROWTH_RECORD, record_id)
    if record is None:
        raise ResourceNotFoundError("Growth record", record_id)
    return record


@router.delete("/{record_id}", response_model=DeleteResult)
async def delete_growth_record(record_id: str, store: FarmStore = Depends(get_store)):
    existed, _ = await store.delete(EntityKind.GROWTH_RECORD, record_id)
    return DeleteResult(deleted=existed)
