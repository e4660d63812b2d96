"""In-memory collections for one user context.

Pure data structure: nothing here talks to a backend, so the statistics and
calendar projections can be fed straight from a repository in tests.
"""

from typing import Any, Callable, Iterable

from farmlog.schemas.common import CamelModel
from farmlog.schemas.snapshot import Snapshot
from farmlog.store.kinds import KINDS, EntityKind


class FarmRepository:
    def __init__(self) -> None:
        # dicts keep insertion order, which is the unsorted view order
        self._items: dict[EntityKind, dict[str, CamelModel]] = {
            kind: {} for kind in EntityKind
        }

    def add(self, kind: EntityKind, entity: CamelModel) -> None:
        self._items[kind][entity.id] = entity

    def get(self, kind: EntityKind, entity_id: str) -> CamelModel | None:
        return self._items[kind].get(entity_id)

    def remove(self, kind: EntityKind, entity_id: str) -> CamelModel | None:
        return self._items[kind].pop(entity_id, None)

    def remove_where(
        self, kind: EntityKind, predicate: Callable[[Any], bool]
    ) -> list[CamelModel]:
        doomed = [e for e in self._items[kind].values() if predicate(e)]
        for entity in doomed:
            del self._items[kind][entity.id]
        return doomed

    def items(self, kind: EntityKind) -> list[CamelModel]:
        return list(self._items[kind].values())

    def replace_all(self, kind: EntityKind, entities: Iterable[CamelModel]) -> None:
        self._items[kind] = {e.id: e for e in entities}

    def clear(self, kinds: Iterable[EntityKind] | None = None) -> None:
        for kind in kinds or EntityKind:
            self._items[kind] = {}

    def count(self, kind: EntityKind) -> int:
        return len(self._items[kind])

    def query(
        self,
        kind: EntityKind,
        *,
        crop_id: str | None = None,
        status: str | None = None,
        completed: bool | None = None,
        sort: bool = True,
    ) -> list[CamelModel]:
        """Filtered view of one collection.

        Sorted by the kind's declared key: growth records by date (newest
        first), tasks by due date (soonest first), crops and farm areas by
        creation time (newest first). Ties keep insertion order.
        """
        entities = self.items(kind)
        if crop_id is not None:
            entities = [e for e in entities if getattr(e, "crop_id", None) == crop_id]
        if status is not None:
            entities = [e for e in entities if getattr(e, "status", None) == status]
        if completed is not None:
            entities = [e for e in entities if getattr(e, "completed", None) is completed]
        if sort:
            rules = KINDS[kind]
            entities.sort(
                key=lambda e: getattr(e, rules.sort_field), reverse=rules.descending
            )
        return entities

    def snapshot(self) -> Snapshot:
        return Snapshot(
            crops=self.items(EntityKind.CROP),
            growth_records=self.items(EntityKind.GROWTH_RECORD),
            tasks=self.items(EntityKind.TASK),
            farm_areas=self.items(EntityKind.FARM_AREA),
        )
