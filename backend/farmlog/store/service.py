"""Entity store: the in-memory collections of one user, kept in step with a
persistence backend.

Every mutation goes to the backend first and only touches memory once the
backend call has settled, so memory is never ahead of storage.  Failures are
recorded as text in ``store.error`` and re-raised as ``PersistenceError``;
there are no retries.  Updating an id the backend no longer holds is the one
quiet case: the error slot is set and ``None`` is returned.
"""

import logging
from datetime import date
from types import NoneType
from typing import Any, get_args

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from farmlog.middleware.exceptions import (
    PersistenceError,
    ResourceNotFoundError,
    ValidationFailedError,
)
from farmlog.schemas.chat import ChatMessage
from farmlog.schemas.common import CamelModel
from farmlog.schemas.crop import Crop
from farmlog.schemas.snapshot import ImportSummary, Snapshot
from farmlog.schemas.task import Task
from farmlog.store.backend import PersistenceBackend
from farmlog.store.kinds import CROP_DEPENDANTS, KINDS, SNAPSHOT_KINDS, EntityKind
from farmlog.store.repository import FarmRepository
from farmlog.utils.dates import today, utcnow

logger = logging.getLogger(__name__)

# Reads that keep racing local writes give up and leave memory as it is.
LOAD_ATTEMPTS = 3


def _nullable(model: type[BaseModel]) -> set[str]:
    return {
        name for name, info in model.model_fields.items()
        if info.annotation is NoneType or NoneType in get_args(info.annotation)
    }


def reconcile_harvest_fields(
    current: Crop | None, fields: dict[str, Any], on: date
) -> dict[str, Any]:
    """Keep ``actual_harvest_date`` present exactly when status is harvested.

    Status may move freely between the three values; moving to harvested
    without a date stamps *on*, moving away clears the date.
    """
    fields = dict(fields)
    status = fields.get("status") or (current.status if current else "growing")
    if status == "harvested":
        actual = fields.get("actual_harvest_date")
        if actual is None and "actual_harvest_date" not in fields and current:
            actual = current.actual_harvest_date
        fields["actual_harvest_date"] = actual or on
    elif "status" in fields or "actual_harvest_date" in fields or (
        current is not None and current.actual_harvest_date is not None
    ):
        fields["actual_harvest_date"] = None
    return fields


class FarmStore:
    """CRUD and queries over the entities of a single user context."""

    def __init__(self, backend: PersistenceBackend, user_id: str):
        self.backend = backend
        self.user_id = user_id
        self.repository = FarmRepository()
        self.error: str | None = None
        self.loading = False
        self.loaded = False
        # Bumped on every in-memory change; loads started before a bump are stale
        self.generation = 0

    # ── Lifecycle ────────────────────────────────────────────

    async def initialize(self) -> None:
        await self.load_all()

    async def dispose(self) -> None:
        self.repository.clear()
        self.loaded = False
        self.error = None

    # ── Helpers ──────────────────────────────────────────────

    def _failure(self, action: str, exc: Exception) -> PersistenceError:
        self.error = f"{action}: {exc}"
        logger.warning("Store error for user %s: %s", self.user_id, self.error)
        if isinstance(exc, PersistenceError):
            return exc
        return PersistenceError(self.error)

    @staticmethod
    def _as_fields(data: BaseModel | dict, schema: type[CamelModel], *, partial: bool) -> dict[str, Any]:
        if isinstance(data, BaseModel):
            return data.model_dump(exclude_unset=partial)
        try:
            parsed = schema.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationFailedError(
                f"Invalid {schema.__name__} payload",
                details={
                    "errors": e.errors(
                        include_url=False, include_context=False, include_input=False
                    )
                },
            ) from e
        return parsed.model_dump(exclude_unset=partial)

    def _build(self, kind: EntityKind, record: dict[str, Any]) -> CamelModel:
        return KINDS[kind].model.model_validate(record)

    async def _persist_new(self, kind: EntityKind, record: dict[str, Any]) -> CamelModel:
        record = {k: v for k, v in record.items() if k != "id"}
        entity_id = await self.backend.create(self.user_id, kind, record)
        entity = self._build(kind, {**record, "id": entity_id})
        self.repository.add(kind, entity)
        self.generation += 1
        return entity

    async def _load_kind(self, kind: EntityKind) -> list[CamelModel]:
        rows = await self.backend.list(self.user_id, kind)
        try:
            return [self._build(kind, row) for row in rows]
        except PydanticValidationError as e:
            raise PersistenceError(
                f"Stored {KINDS[kind].label.lower()} data is invalid: {e.error_count()} errors"
            ) from e

    async def _refetch(self, kind: EntityKind, entity_id: str) -> CamelModel | None:
        generation = self.generation
        try:
            entities = await self._load_kind(kind)
        except PersistenceError as e:
            raise self._failure(f"Failed to reload {kind.value}", e) from e
        if generation == self.generation:
            self.repository.replace_all(kind, entities)
            return self.repository.get(kind, entity_id)
        return next((e for e in entities if e.id == entity_id), None)

    # ── Generic CRUD ─────────────────────────────────────────

    async def create(self, kind: EntityKind, data: BaseModel | dict) -> CamelModel:
        """Assign id and timestamps, persist, then insert into memory."""
        rules = KINDS[kind]
        record = self._as_fields(data, rules.create_model, partial=False)
        now = utcnow()
        record[rules.created_field] = now
        if rules.tracks_updates:
            record["updated_at"] = now
        if kind is EntityKind.CROP:
            record = reconcile_harvest_fields(None, record, today())
        try:
            entity = await self._persist_new(kind, record)
        except PersistenceError as e:
            raise self._failure(f"Failed to add {rules.label.lower()}", e) from e
        self.error = None
        logger.debug("Created %s %s for %s", kind.value, entity.id, self.user_id)
        return entity

    async def update(
        self, kind: EntityKind, entity_id: str, data: BaseModel | dict
    ) -> CamelModel | None:
        """Merge fields into an entity.  Returns ``None`` for unknown ids."""
        rules = KINDS[kind]
        if rules.update_model is None:
            raise ValidationFailedError(f"{rules.label} entries cannot be edited")
        fields = self._as_fields(data, rules.update_model, partial=True)
        nullable = _nullable(rules.model)
        # An explicit null only clears fields that may hold one
        fields = {
            k: v for k, v in fields.items()
            if k != "id" and k != rules.created_field and (v is not None or k in nullable)
        }

        current = self.repository.get(kind, entity_id)
        if current is None:
            # May have been created by another session since the last load
            current = await self._refetch(kind, entity_id)
        if current is None:
            self.error = f"Failed to update {rules.label.lower()}: {entity_id} not found"
            logger.info("Update of unknown %s %s ignored", kind.value, entity_id)
            return None

        if kind is EntityKind.CROP:
            fields = reconcile_harvest_fields(current, fields, today())
        if rules.tracks_updates:
            fields["updated_at"] = utcnow()

        try:
            updated = self._build(kind, {**current.model_dump(), **fields})
        except PydanticValidationError as e:
            raise ValidationFailedError(
                f"Invalid {rules.label.lower()} update",
                details={
                    "errors": e.errors(
                        include_url=False, include_context=False, include_input=False
                    )
                },
            ) from e

        try:
            await self.backend.update(self.user_id, kind, entity_id, fields)
        except ResourceNotFoundError as e:
            self.error = f"Failed to update {rules.label.lower()}: {e.message}"
            logger.info("Update of missing %s %s ignored", kind.value, entity_id)
            return None
        except PersistenceError as e:
            raise self._failure(f"Failed to update {rules.label.lower()}", e) from e

        self.repository.add(kind, updated)
        self.generation += 1
        self.error = None
        return updated

    async def delete(self, kind: EntityKind, entity_id: str) -> tuple[bool, int]:
        """Delete one entity; a crop takes its growth records and tasks along.

        Returns ``(existed_in_memory, cascaded_count)``.  Dependants are
        deleted before the crop itself so an interrupted cascade leaves the
        crop in place to retry against.
        """
        rules = KINDS[kind]
        cascaded = 0
        try:
            if kind is EntityKind.CROP:
                for dependant in CROP_DEPENDANTS:
                    rows = await self.backend.list(self.user_id, dependant, crop_id=entity_id)
                    for row in rows:
                        await self.backend.delete(self.user_id, dependant, row["id"])
                    cascaded += len(rows)
            await self.backend.delete(self.user_id, kind, entity_id)
        except PersistenceError as e:
            raise self._failure(f"Failed to delete {rules.label.lower()}", e) from e

        existed = self.repository.remove(kind, entity_id) is not None
        if kind is EntityKind.CROP:
            for dependant in CROP_DEPENDANTS:
                self.repository.remove_where(dependant, lambda e: e.crop_id == entity_id)
        self.generation += 1
        self.error = None
        if cascaded:
            logger.info("Deleted crop %s with %d dependants", entity_id, cascaded)
        return existed, cascaded

    def get(self, kind: EntityKind, entity_id: str) -> CamelModel | None:
        return self.repository.get(kind, entity_id)

    def query(self, kind: EntityKind, **filters) -> list[CamelModel]:
        return self.repository.query(kind, **filters)

    # ── Bulk ─────────────────────────────────────────────────

    async def load_all(self) -> None:
        """Replace memory with everything the backend holds for this user.

        A read that overlaps a local write is discarded and taken again, so
        a create or delete finishing mid-load is never undone by it.
        """
        self.loading = True
        try:
            for _ in range(LOAD_ATTEMPTS):
                generation = self.generation
                loaded = {kind: await self._load_kind(kind) for kind in EntityKind}
                if generation == self.generation:
                    break
            else:
                logger.info("Load for %s kept racing local writes; skipped", self.user_id)
                return
        except PersistenceError as e:
            raise self._failure("Failed to load data", e) from e
        finally:
            self.loading = False
        for kind, entities in loaded.items():
            self.repository.replace_all(kind, entities)
        self.loaded = True
        self.error = None

    async def refresh(self) -> None:
        """Re-read storage to pick up changes made by other sessions."""
        await self.load_all()

    async def clear_all(self, kinds=SNAPSHOT_KINDS) -> int:
        """Delete every entity of the given kinds.  Not transactional."""
        removed = 0
        try:
            for kind in kinds:
                for row in await self.backend.list(self.user_id, kind):
                    await self.backend.delete(self.user_id, kind, row["id"])
                    removed += 1
        except PersistenceError as e:
            await self._reload_quietly()
            raise self._failure("Failed to clear data", e) from e
        self.repository.clear(kinds)
        self.generation += 1
        logger.info("Cleared %d entities for %s", removed, self.user_id)
        return removed

    async def import_data(self, snapshot: Snapshot, replace: bool = False) -> ImportSummary:
        """Create every entity in *snapshot*, then reload from storage.

        New ids are assigned.  ``crop_id`` references inside growth records
        and tasks are re-pointed at the new crop ids; references to crops
        that are not in the snapshot are kept as they are.  Timestamps from
        the snapshot are preserved.  A failure part way leaves whatever was
        already created in place.
        """
        if replace:
            await self.clear_all()

        summary = ImportSummary(replaced=replace)
        id_map: dict[str, str] = {}
        try:
            for crop in snapshot.crops:
                data = reconcile_harvest_fields(None, crop.model_dump(), today())
                created = await self._persist_new(EntityKind.CROP, data)
                id_map[crop.id] = created.id
                summary.crops += 1
            for record in snapshot.growth_records:
                data = record.model_dump()
                data["crop_id"] = id_map.get(record.crop_id, record.crop_id)
                await self._persist_new(EntityKind.GROWTH_RECORD, data)
                summary.growth_records += 1
            for task in snapshot.tasks:
                data = task.model_dump()
                data["crop_id"] = id_map.get(task.crop_id, task.crop_id)
                await self._persist_new(EntityKind.TASK, data)
                summary.tasks += 1
            for area in snapshot.farm_areas:
                await self._persist_new(EntityKind.FARM_AREA, area.model_dump())
                summary.farm_areas += 1
        except PersistenceError as e:
            await self._reload_quietly()
            raise self._failure("Failed to import data", e) from e

        await self.load_all()
        logger.info(
            "Imported %d crops, %d growth records, %d tasks, %d farm areas for %s",
            summary.crops, summary.growth_records, summary.tasks,
            summary.farm_areas, self.user_id,
        )
        return summary

    async def _reload_quietly(self) -> None:
        try:
            await self.load_all()
        except PersistenceError:
            logger.warning("Reload after failed bulk operation also failed")

    def snapshot(self) -> Snapshot:
        return self.repository.snapshot()

    # ── Domain actions ───────────────────────────────────────

    async def harvest_crop(self, crop_id: str, on: date | None = None) -> Crop | None:
        return await self.update(
            EntityKind.CROP,
            crop_id,
            {"status": "harvested", "actual_harvest_date": on or today()},
        )

    async def complete_task(self, task_id: str) -> Task | None:
        return await self.update(
            EntityKind.TASK, task_id, {"completed": True, "completed_date": utcnow()}
        )

    async def add_message(
        self, text: str, sender: str = "user", crop_id: str | None = None
    ) -> ChatMessage:
        return await self.create(
            EntityKind.CHAT_MESSAGE, {"text": text, "sender": sender, "crop_id": crop_id}
        )

    async def clear_messages(self) -> int:
        return await self.clear_all(kinds=(EntityKind.CHAT_MESSAGE,))

    # ── Convenience accessors ────────────────────────────────

    @property
    def crops(self) -> list[Crop]:
        return self.repository.items(EntityKind.CROP)

    @property
    def tasks(self) -> list[Task]:
        return self.repository.items(EntityKind.TASK)
