"""Crop routes: list/search, CRUD, harvest shortcut, location list."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from farmlog.deps import get_store
from farmlog.middleware.exceptions import ResourceNotFoundError
from farmlog.schemas.common import DeleteResult
from farmlog.schemas.crop import (
    Crop,
    CropCreate,
    CropSearch,
    CropStatus,
    CropUpdate,
    HarvestRequest,
)
from farmlog.services.search import distinct_locations, search_crops
from farmlog.store.kinds import EntityKind
from farmlog.store.service import FarmStore

router = APIRouter()


@router.get("/", response_model=list[Crop])
async def list_crops(
    q: str | None = Query(None, description="Matches name, variety, location or notes"),
    crop_status: CropStatus | None = Query(None, alias="status"),
    location: str | None = Query(None),
    planted_from: date | None = Query(None, alias="plantedFrom"),
    planted_to: date | None = Query(None, alias="plantedTo"),
    store: FarmStore = Depends(get_store),
):
    """Crops newest first, optionally filtered."""
    criteria = CropSearch(
        text=q,
        status=crop_status,
        location=location,
        planted_from=planted_from,
        planted_to=planted_to,
    )
    return search_crops(store.query(EntityKind.CROP), criteria)


@router.get("/locations", response_model=list[str])
async def list_locations(store: FarmStore = Depends(get_store)):
    return distinct_locations(store.crops)


@router.post("/", response_model=Crop, status_code=status.HTTP_201_CREATED)
async def create_crop(body: CropCreate, store: FarmStore = Depends(get_store)):
    return await store.create(EntityKind.CROP, body)


@router.get("/{crop_id}", response_model=Crop)
async def get_crop(crop_id: str, store: FarmStore = Depends(get_store)):
    crop = store.get(EntityKind.CROP, crop_id)
    if crop is None:
        raise ResourceNotFoundError("Crop", crop_id)
    return crop


@router.patch("/{crop_id}", response_model=Crop)
async def update_crop(
    crop_id: str,
    body: CropUpdate,
    store: FarmStore = Depends(get_store),
):
    crop = await store.update(EntityKind.CROP, crop_id, body)
    if crop is None:
        raise ResourceNotFoundError("Crop", crop_id)
    return crop


@router.post("/{crop_id}/harvest", response_model=Crop)
async def harvest_crop(
    crop_id: str,
    body: HarvestRequest | None = None,
    store: FarmStore = Depends(get_store),
):
    """Mark a crop harvested (on the given date, default today)."""
    crop = await store.harvest_crop(crop_id, body.harvest_date if body else None)
    if crop is None:
        raise ResourceNotFoundError("Crop", crop_id)
    return crop


@router.delete("/{crop_id}", response_model=DeleteResult)
async def delete_crop(crop_id: str, store: FarmStore = Depends(get_store)):
    """Delete a crop together with its growth records and tasks."""
    existed, cascaded = await store.delete(EntityKind.CROP, crop_id)
    return DeleteResult(deleted=existed, cascaded=cascaded)
