from fastapi import APIRouter, Depends, status

from farmlog.deps import get_store
from farmlog.middleware.exceptions import ResourceNotFoundError
from farmlog.schemas.common import DeleteResult
from farmlog.schemas.farm_area import FarmArea, FarmAreaCreate, FarmAreaUpdate
from farmlog.store.kinds import EntityKind
from farmlog.store.service import FarmStore

router = APIRouter()


@router.get("/", response_model=list[FarmArea])
async def list_farm_areas(store: FarmStore = Depends(get_store)):
    return store.query(EntityKind.FARM_AREA)


@router.post("/", response_model=FarmArea, status_code=status.HTTP_201_CREATED)
async def create_farm_area(body: FarmAreaCreate, store: FarmStore = Depends(get_store)):
    return await store.create(EntityKind.FARM_AREA, body)


@router.get("/{area_id}", response_model=FarmArea)
async def get_farm_area(area_id: str, store: FarmStore = Depends(get_store)):
    area = store.get(EntityKind.FARM_AREA, area_id)
    if area is None:
        raise ResourceNotFoundError("Farm area", area_id)
    return area


@router.patch("/{area_id}", response_model=FarmArea)
async def update_farm_area(
    area_id: str,
    body: FarmAreaUpdate,
    store: FarmStore = Depends(get_store),
):
    area = await store.update(EntityKind.FARM_AREA, area_id, body)
    if area is None:
        raise ResourceNotFoundError("Farm area", area_id)
    return area


@router.delete("/{area_id}", response_model=DeleteResult)
async def delete_farm_area(area_id: str, store: FarmStore = Depends(get_store)):
    existed, _ = await store.delete(EntityKind.FARM_AREA, area_id)
    return DeleteResult(deleted=existed)
