"""Data management: export, import and clear-all.

Endpoints:
    GET    /api/data/export.json     Snapshot download (farm-data-YYYY-MM-DD.json)
    GET    /api/data/export.csv      Crop table download (farm-crops-YYYY-MM-DD.csv)
    POST   /api/data/import          Import a snapshot sent as the JSON body
    POST   /api/data/import/upload   Import a snapshot file (multipart)
    DELETE /api/data                 Delete every crop, record, task and area
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile
from fastapi.responses import Response, StreamingResponse

from farmlog.deps import get_store
from farmlog.schemas.common import DeleteResult
from farmlog.schemas.snapshot import ImportSummary
from farmlog.services.transfer import (
    dump_snapshot,
    export_filename,
    export_tabular,
    import_snapshot,
)
from farmlog.store.kinds import EntityKind
from farmlog.store.service import FarmStore

router = APIRouter()


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get("/export.json")
async def export_json(store: FarmStore = Depends(get_store)):
    return Response(
        content=dump_snapshot(store.snapshot()),
        media_type="application/json",
        headers=_attachment(export_filename("farm-data", "json")),
    )


@router.get("/export.csv")
async def export_csv(store: FarmStore = Depends(get_store)):
    csv_text = export_tabular(store.query(EntityKind.CROP))
    return StreamingResponse(
        iter([csv_text]),
        media_type="text/csv; charset=utf-8",
        headers=_attachment(export_filename("farm-crops", "csv")),
    )


@router.post("/import", response_model=ImportSummary)
async def import_json(
    document: dict[str, Any] = Body(...),
    replace: bool = Query(False, description="Delete existing data first"),
    store: FarmStore = Depends(get_store),
):
    return await store.import_data(import_snapshot(document), replace=replace)


@router.post("/import/upload", response_model=ImportSummary)
async def import_upload(
    file: UploadFile = File(...),
    replace: bool = Query(False, description="Delete existing data first"),
    store: FarmStore = Depends(get_store),
):
    content = await file.read()
    return await store.import_data(import_snapshot(content), replace=replace)


@router.delete("", response_model=DeleteResult)
async def clear_data(store: FarmStore = Depends(get_store)):
    removed = await store.clear_all()
    return DeleteResult(deleted=removed > 0, cascaded=removed)
