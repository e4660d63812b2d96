"""Crop list filtering (text search, status, location, planting window)."""

from typing import Iterable

from farmlog.schemas.crop import Crop, CropSearch


def search_crops(crops: Iterable[Crop], criteria: CropSearch) -> list[Crop]:
    results = list(crops)

    if criteria.text:
        term = criteria.text.lower()
        results = [
            c for c in results
            if term in c.name.lower()
            or term in c.variety.lower()
            or term in c.location.lower()
            or term in (c.notes or "").lower()
        ]
    if criteria.status:
        results = [c for c in results if c.status == criteria.status]
    if criteria.location:
        results = [c for c in results if c.location == criteria.location]
    if criteria.planted_from:
        results = [c for c in results if c.planting_date >= criteria.planted_from]
    if criteria.planted_to:
        results = [c for c in results if c.planting_date <= criteria.planted_to]

    return results


def distinct_locations(crops: Iterable[Crop]) -> list[str]:
    return sorted({c.location for c in crops if c.location})
