"""Entity store tests: CRUD, cascade delete, failure handling, import."""

import asyncio
from datetime import date

import pytest

from conftest import crop_payload, record_payload, task_payload
from farmlog.middleware.exceptions import PersistenceError, ValidationFailedError
from farmlog.services.statistics import compute_statistics
from farmlog.services.transfer import import_snapshot
from farmlog.store.backend import MemoryBackend
from farmlog.store.kinds import EntityKind
from farmlog.store.service import FarmStore, reconcile_harvest_fields
from farmlog.utils.dates import today


class FlakyBackend(MemoryBackend):
    """Memory backend that fails the operations listed in ``failing``."""

    def __init__(self):
        super().__init__()
        self.failing: set[tuple[str, EntityKind]] = set()

    def _check(self, op: str, kind: EntityKind) -> None:
        if (op, kind) in self.failing:
            raise PersistenceError(f"{op} {kind.value} rejected")

    async def create(self, user_id, kind, record):
        self._check("create", kind)
        return await super().create(user_id, kind, record)

    async def update(self, user_id, kind, entity_id, fields):
        self._check("update", kind)
        return await super().update(user_id, kind, entity_id, fields)

    async def delete(self, user_id, kind, entity_id):
        self._check("delete", kind)
        return await super().delete(user_id, kind, entity_id)

    async def list(self, user_id, kind, *, crop_id=None):
        self._check("list", kind)
        return await super().list(user_id, kind, crop_id=crop_id)


def snapshot_document(crops: int = 3, records: int = 5, tasks: int = 2, areas: int = 1) -> dict:
    stamp = "2024-01-01T00:00:00.000Z"
    crop_docs = [
        {
            "id": f"old-crop-{i}",
            **crop_payload(name=f"Crop {i}"),
            "status": "growing",
            "notes": "",
            "createdAt": stamp,
            "updatedAt": stamp,
        }
        for i in range(crops)
    ]
    return {
        "crops": crop_docs,
        "growthRecords": [
            {
                "id": f"old-record-{i}",
                **record_payload(f"old-crop-{i % crops}", date(2024, 1, 10 + i)),
                "createdAt": stamp,
            }
            for i in range(records)
        ],
        "tasks": [
            {
                "id": f"old-task-{i}",
                **task_payload(f"old-crop-{i % crops}", date(2024, 2, 1 + i)),
                "description": "",
                "completed": False,
                "createdAt": stamp,
            }
            for i in range(tasks)
        ],
        "farmAreas": [
            {"id": f"old-area-{i}", "name": f"Field {i}", "description": "", "area": 100,
             "createdAt": stamp}
            for i in range(areas)
        ],
    }


@pytest.mark.unit
class TestReconcileHarvestFields:
    def test_harvested_without_date_stamps_day(self):
        fields = reconcile_harvest_fields(None, {"status": "harvested"}, date(2024, 3, 1))
        assert fields["actual_harvest_date"] == date(2024, 3, 1)

    def test_growing_clears_date(self):
        fields = reconcile_harvest_fields(
            None, {"status": "growing", "actual_harvest_date": date(2024, 3, 1)}, date(2024, 3, 2)
        )
        assert fields["actual_harvest_date"] is None

    def test_explicit_harvest_date_kept(self):
        fields = reconcile_harvest_fields(
            None,
            {"status": "harvested", "actual_harvest_date": date(2024, 2, 20)},
            date(2024, 3, 1),
        )
        assert fields["actual_harvest_date"] == date(2024, 2, 20)


@pytest.mark.unit
@pytest.mark.asyncio
class TestCrud:
    async def test_create_assigns_id_and_timestamps(self, store: FarmStore):
        crop = await store.create(EntityKind.CROP, crop_payload())

        assert crop.id
        assert crop.created_at == crop.updated_at
        assert crop.status == "growing"
        assert crop.actual_harvest_date is None
        assert store.get(EntityKind.CROP, crop.id) == crop
        assert len(await store.backend.list("alice", EntityKind.CROP)) == 1

    async def test_create_rejects_invalid_payload(self, store: FarmStore):
        with pytest.raises(ValidationFailedError):
            await store.create(EntityKind.CROP, {"name": "", "plantingDate": "2024-01-01"})
        assert store.crops == []

    async def test_update_merges_and_bumps_updated_at(self, store: FarmStore):
        crop = await store.create(EntityKind.CROP, crop_payload())

        updated = await store.update(EntityKind.CROP, crop.id, {"notes": "staked"})

        assert updated.notes == "staked"
        assert updated.name == crop.name
        assert updated.created_at == crop.created_at
        assert updated.updated_at >= crop.updated_at
        assert store.get(EntityKind.CROP, crop.id).notes == "staked"

    async def test_update_ignores_id_and_created_at(self, store: FarmStore):
        crop = await store.create(EntityKind.CROP, crop_payload())

        updated = await store.update(
            EntityKind.CROP, crop.id,
            {"id": "other", "createdAt": "2000-01-01T00:00:00Z", "name": "Basil"},
        )

        assert updated.id == crop.id
        assert updated.created_at == crop.created_at
        assert updated.name == "Basil"

    async def test_update_null_only_clears_nullable_fields(
        self, store: FarmStore, memory_backend: MemoryBackend
    ):
        crop = await store.create(EntityKind.CROP, crop_payload(notes="staked", imageUrl="a.png"))

        updated = await store.update(
            EntityKind.CROP, crop.id, {"status": None, "notes": None, "imageUrl": None}
        )

        assert updated.status == "growing"
        assert updated.notes == "staked"
        assert updated.image_url is None

        reopened = FarmStore(memory_backend, "alice")
        await reopened.initialize()
        assert reopened.get(EntityKind.CROP, crop.id).notes == "staked"

    async def test_invalid_stored_row_is_a_persistence_error(
        self, store: FarmStore, memory_backend: MemoryBackend
    ):
        crop = await store.create(EntityKind.CROP, crop_payload())
        await memory_backend.update("alice", EntityKind.CROP, crop.id, {"status": None})

        with pytest.raises(PersistenceError):
            await store.refresh()

    async def test_update_unknown_id_returns_none_and_records_error(self, store: FarmStore):
        result = await store.update(EntityKind.CROP, "missing", {"notes": "x"})

        assert result is None
        assert store.error is not None
        assert "missing" in store.error

    async def test_growth_records_cannot_be_edited(self, store: FarmStore):
        crop = await store.create(EntityKind.CROP, crop_payload())
        record = await store.create(EntityKind.GROWTH_RECORD, record_payload(crop.id, date(2024, 1, 5)))

        with pytest.raises(ValidationFailedError):
            await store.update(EntityKind.GROWTH_RECORD, record.id, {"notes": "x"})

    async def test_harvest_stamps_today_and_revert_clears(self, store: FarmStore):
        crop = await store.create(EntityKind.CROP, crop_payload())

        harvested = await store.harvest_crop(crop.id)
        assert harvested.status == "harvested"
        assert harvested.actual_harvest_date == today()

        reverted = await store.update(EntityKind.CROP, crop.id, {"status": "growing"})
        assert reverted.actual_harvest_date is None

    async def test_complete_task(self, store: FarmStore):
        crop = await store.create(EntityKind.CROP, crop_payload())
        task = await store.create(EntityKind.TASK, task_payload(crop.id, date(2024, 1, 5)))

        done = await store.complete_task(task.id)

        assert done.completed is True
        assert done.completed_date is not None

    async def test_query_sorts_tasks_by_due_date(self, store: FarmStore):
        crop = await store.create(EntityKind.CROP, crop_payload())
        for day in (20, 5, 12):
            await store.create(EntityKind.TASK, task_payload(crop.id, date(2024, 1, day)))

        due = [t.due_date.day for t in store.query(EntityKind.TASK)]
        assert due == [5, 12, 20]

    async def test_query_sorts_growth_records_newest_first(self, store: FarmStore):
        crop = await store.create(EntityKind.CROP, crop_payload())
        for day in (3, 9, 6):
            await store.create(EntityKind.GROWTH_RECORD, record_payload(crop.id, date(2024, 1, day)))

        days = [r.date.day for r in store.query(EntityKind.GROWTH_RECORD, crop_id=crop.id)]
        assert days == [9, 6, 3]

    async def test_users_are_isolated(self, store: FarmStore, memory_backend: MemoryBackend):
        await store.create(EntityKind.CROP, crop_payload())

        other = FarmStore(memory_backend, "bob")
        await other.initialize()

        assert other.crops == []

    async def test_refresh_picks_up_other_sessions(self, store: FarmStore, memory_backend: MemoryBackend):
        second_session = FarmStore(memory_backend, "alice")
        await second_session.initialize()
        await second_session.create(EntityKind.CROP, crop_payload(name="Basil"))

        assert store.crops == []
        await store.refresh()
        assert [c.name for c in store.crops] == ["Basil"]


@pytest.mark.unit
@pytest.mark.asyncio
class TestCascadeDelete:
    async def test_delete_crop_removes_only_its_dependants(self, store: FarmStore):
        a = await store.create(EntityKind.CROP, crop_payload(name="A"))
        b = await store.create(EntityKind.CROP, crop_payload(name="B"))
        for day in (1, 2):
            await store.create(EntityKind.GROWTH_RECORD, record_payload(a.id, date(2024, 1, day)))
        await store.create(EntityKind.TASK, task_payload(a.id, date(2024, 1, 3)))
        kept_record = await store.create(EntityKind.GROWTH_RECORD, record_payload(b.id, date(2024, 1, 4)))
        kept_task = await store.create(EntityKind.TASK, task_payload(b.id, date(2024, 1, 5)))

        existed, cascaded = await store.delete(EntityKind.CROP, a.id)

        assert existed is True
        assert cascaded == 3
        assert [c.id for c in store.crops] == [b.id]
        assert [r.id for r in store.query(EntityKind.GROWTH_RECORD)] == [kept_record.id]
        assert [t.id for t in store.tasks] == [kept_task.id]
        assert await store.backend.list("alice", EntityKind.GROWTH_RECORD, crop_id=a.id) == []
        assert await store.backend.list("alice", EntityKind.TASK, crop_id=a.id) == []

    async def test_delete_unknown_is_quiet(self, store: FarmStore):
        assert await store.delete(EntityKind.TASK, "missing") == (False, 0)
        assert store.error is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestFailures:
    async def test_create_failure_leaves_memory_untouched(self):
        backend = FlakyBackend()
        store = FarmStore(backend, "alice")
        await store.initialize()
        backend.failing.add(("create", EntityKind.CROP))

        with pytest.raises(PersistenceError):
            await store.create(EntityKind.CROP, crop_payload())

        assert store.crops == []
        assert store.error is not None

    async def test_failed_crop_delete_keeps_crop_in_memory(self):
        backend = FlakyBackend()
        store = FarmStore(backend, "alice")
        await store.initialize()
        crop = await store.create(EntityKind.CROP, crop_payload())
        backend.failing.add(("delete", EntityKind.CROP))

        with pytest.raises(PersistenceError):
            await store.delete(EntityKind.CROP, crop.id)

        assert store.get(EntityKind.CROP, crop.id) is not None
        assert store.error is not None

    async def test_success_clears_previous_error(self):
        backend = FlakyBackend()
        store = FarmStore(backend, "alice")
        await store.initialize()
        backend.failing.add(("create", EntityKind.FARM_AREA))
        with pytest.raises(PersistenceError):
            await store.create(EntityKind.FARM_AREA, {"name": "North"})

        backend.failing.clear()
        await store.create(EntityKind.FARM_AREA, {"name": "North"})

        assert store.error is None

    async def test_load_failure_raises(self):
        backend = FlakyBackend()
        backend.failing.add(("list", EntityKind.TASK))
        store = FarmStore(backend, "alice")

        with pytest.raises(PersistenceError):
            await store.initialize()
        assert store.loaded is False
        assert store.loading is False

    async def test_import_failure_keeps_partial_data(self):
        backend = FlakyBackend()
        store = FarmStore(backend, "alice")
        await store.initialize()
        backend.failing.add(("create", EntityKind.TASK))

        with pytest.raises(PersistenceError):
            await store.import_data(import_snapshot(snapshot_document()))

        assert len(store.crops) == 3
        assert len(store.query(EntityKind.GROWTH_RECORD)) == 5
        assert store.tasks == []


@pytest.mark.unit
@pytest.mark.asyncio
class TestImport:
    async def test_import_counts(self, store: FarmStore):
        summary = await store.import_data(import_snapshot(snapshot_document()))

        assert (summary.crops, summary.growth_records, summary.tasks, summary.farm_areas) == (3, 5, 2, 1)
        assert len(store.crops) == 3
        assert len(store.query(EntityKind.GROWTH_RECORD)) == 5
        assert len(store.tasks) == 2
        assert len(store.query(EntityKind.FARM_AREA)) == 1
        assert compute_statistics(store.crops, store.tasks).total_crops == 3

    async def test_import_assigns_new_ids_and_repoints_crop_refs(self, store: FarmStore):
        await store.import_data(import_snapshot(snapshot_document()))

        crop_ids = {c.id for c in store.crops}
        assert not any(i.startswith("old-") for i in crop_ids)
        assert all(r.crop_id in crop_ids for r in store.query(EntityKind.GROWTH_RECORD))
        assert all(t.crop_id in crop_ids for t in store.tasks)

    async def test_import_preserves_timestamps(self, store: FarmStore):
        await store.import_data(import_snapshot(snapshot_document(crops=1, records=0, tasks=0, areas=0)))

        assert store.crops[0].created_at.year == 2024

    async def test_import_appends_unless_replace(self, store: FarmStore):
        await store.create(EntityKind.CROP, crop_payload(name="Existing"))

        await store.import_data(import_snapshot(snapshot_document()))
        assert len(store.crops) == 4

        summary = await store.import_data(import_snapshot(snapshot_document()), replace=True)
        assert summary.replaced is True
        assert len(store.crops) == 3
        assert "Existing" not in {c.name for c in store.crops}

    async def test_clear_all_keeps_chat(self, store: FarmStore):
        await store.import_data(import_snapshot(snapshot_document()))
        await store.add_message("hello")

        removed = await store.clear_all()

        assert removed == 11
        assert store.crops == []
        assert len(store.query(EntityKind.CHAT_MESSAGE)) == 1

    async def test_harvested_crop_without_date_gets_one(self, store: FarmStore):
        doc = snapshot_document(crops=1, records=0, tasks=0, areas=0)
        doc["crops"][0]["status"] = "harvested"

        await store.import_data(import_snapshot(doc))

        assert store.crops[0].actual_harvest_date == today()


@pytest.mark.unit
@pytest.mark.asyncio
class TestChatMessages:
    async def test_messages_oldest_first(self, store: FarmStore):
        await store.add_message("first")
        await store.add_message("second", "system")

        texts = [m.text for m in store.query(EntityKind.CHAT_MESSAGE)]
        assert texts == ["first", "second"]

    async def test_clear_messages(self, store: FarmStore):
        await store.add_message("first")
        assert await store.clear_messages() == 1
        assert store.query(EntityKind.CHAT_MESSAGE) == []



class SlowListBackend(MemoryBackend):
    """Memory backend whose reads yield to the event loop for a while."""

    async def list(self, user_id, kind, *, crop_id=None):
        await asyncio.sleep(0.01)
        return await super().list(user_id, kind, crop_id=crop_id)


@pytest.mark.unit
@pytest.mark.asyncio
class TestRefreshDuringWrites:
    async def test_create_during_refresh_is_kept(self):
        store = FarmStore(SlowListBackend(), "alice")
        await store.initialize()

        refresh = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        crop = await store.create(EntityKind.CROP, crop_payload())
        await refresh

        assert store.get(EntityKind.CROP, crop.id) is not None

    async def test_delete_during_refresh_stays_deleted(self):
        store = FarmStore(SlowListBackend(), "alice")
        await store.initialize()
        crop = await store.create(EntityKind.CROP, crop_payload())

        refresh = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        await store.delete(EntityKind.CROP, crop.id)
        await refresh

        assert store.get(EntityKind.CROP, crop.id) is None
        assert store.crops == []
