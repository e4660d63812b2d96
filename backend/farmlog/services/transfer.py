"""Snapshot export/import and the crop spreadsheet export.

Snapshot document (JSON)::

    {"crops": [...], "growthRecords": [...], "tasks": [...], "farmAreas": [...]}

Records are written verbatim with camelCase keys.  On import the four
top-level fields must exist and be arrays; each record is then parsed as
its entity type, and the first bad record rejects the whole document.

Crop table (CSV): UTF-8 with a leading BOM so spreadsheet tools pick the
right encoding, a header row, then one row per crop with every field
quoted.
"""

import csv
import io
import json
from datetime import date
from typing import Any, Iterable

from pydantic import ValidationError

from farmlog.config import settings
from farmlog.middleware.exceptions import ValidationFailedError
from farmlog.schemas.crop import STATUS_LABELS, Crop
from farmlog.schemas.snapshot import Snapshot
from farmlog.utils.dates import format_date, today

SNAPSHOT_FIELDS = ("crops", "growthRecords", "tasks", "farmAreas")

BOM = "\ufeff"

CROP_COLUMNS = [
    "ID",
    "Crop",
    "Variety",
    "Location",
    "Planting date",
    "Expected harvest date",
    "Actual harvest date",
    "Status",
    "Notes",
    "Created",
    "Updated",
]


# ── Snapshot (JSON) ─────────────────────────────────────────

def export_snapshot(snapshot: Snapshot) -> dict[str, Any]:
    """Serialise the four collections into a JSON-ready document."""
    return snapshot.model_dump(mode="json", by_alias=True)


def dump_snapshot(snapshot: Snapshot) -> str:
    return json.dumps(export_snapshot(snapshot), indent=2, ensure_ascii=False)


def import_snapshot(document: str | bytes | dict[str, Any]) -> Snapshot:
    """Parse and shape-check a snapshot document.

    Raises ``ValidationFailedError`` if the text is not JSON, a top-level
    field is missing or not an array, or a record cannot be read as its
    entity type.
    """
    if isinstance(document, (bytes, bytearray)):
        document = document.decode("utf-8-sig")  # tolerate a BOM
    if isinstance(document, str):
        try:
            document = json.loads(document)
        except json.JSONDecodeError as e:
            raise ValidationFailedError(f"Snapshot is not valid JSON: {e.msg}") from e

    if not isinstance(document, dict):
        raise ValidationFailedError("Snapshot must be a JSON object")

    bad_fields = [f for f in SNAPSHOT_FIELDS if not isinstance(document.get(f), list)]
    if bad_fields:
        raise ValidationFailedError(
            "Invalid data format: expected arrays for " + ", ".join(bad_fields),
            details={"fields": bad_fields},
        )

    try:
        return Snapshot.model_validate({f: document[f] for f in SNAPSHOT_FIELDS})
    except ValidationError as e:
        errors = [
            {
                "location": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in e.errors(include_url=False)
        ]
        raise ValidationFailedError(
            "Snapshot contains invalid records", details={"errors": errors}
        ) from e


# ── Crops (CSV) ─────────────────────────────────────────────

def _crop_row(crop: Crop, date_format: str) -> list[str]:
    return [
        crop.id,
        crop.name,
        crop.variety,
        crop.location,
        format_date(crop.planting_date, date_format),
        format_date(crop.expected_harvest_date, date_format),
        format_date(crop.actual_harvest_date, date_format) if crop.actual_harvest_date else "",
        STATUS_LABELS.get(crop.status, crop.status),
        (crop.notes or "").replace("\r\n", " ").replace("\n", " "),
        format_date(crop.created_at, date_format),
        format_date(crop.updated_at, date_format),
    ]


def export_tabular(crops: Iterable[Crop], date_format: str | None = None) -> str:
    """Flatten crops into CSV text (BOM + header + one quoted row per crop)."""
    date_format = date_format or settings.export_date_format
    output = io.StringIO()
    output.write(BOM)
    output.write(",".join(CROP_COLUMNS) + "\n")
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for crop in crops:
        writer.writerow(_crop_row(crop, date_format))
    return output.getvalue()


def export_filename(prefix: str, extension: str, day: date | None = None) -> str:
    """e.g. ``farm-data-2024-03-01.json``"""
    return f"{prefix}-{(day or today()).isoformat()}.{extension}"
