"""Persistence boundary consumed by the entity store.

A backend stores plain record dicts (snake_case keys, Python values) per
user and per entity kind.  It owns id generation, the way a hosted
document store does.  Infrastructure failures surface as
``PersistenceError``; updating an id the backend does not hold raises
``ResourceNotFoundError``; deleting one is a no-op.
"""

import copy
import uuid
from abc import ABC, abstractmethod
from typing import Any

from farmlog.middleware.exceptions import ResourceNotFoundError
from farmlog.store.kinds import KINDS, EntityKind


class PersistenceBackend(ABC):
    @abstractmethod
    async def create(self, user_id: str, kind: EntityKind, record: dict[str, Any]) -> str:
        """Persist a new record and return its id."""

    @abstractmethod
    async def update(
        self, user_id: str, kind: EntityKind, entity_id: str, fields: dict[str, Any]
    ) -> None:
        ...

    @abstractmethod
    async def delete(self, user_id: str, kind: EntityKind, entity_id: str) -> None:
        ...

    @abstractmethod
    async def list(
        self, user_id: str, kind: EntityKind, *, crop_id: str | None = None
    ) -> list[dict[str, Any]]:
        ...

    async def close(self) -> None:
        pass


class MemoryBackend(PersistenceBackend):
    """Process-local storage, the single-user "local storage" mode.

    Records are deep-copied on the way in and out so callers can never
    mutate stored state by accident.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[str, EntityKind], dict[str, dict[str, Any]]] = {}

    def _bucket(self, user_id: str, kind: EntityKind) -> dict[str, dict[str, Any]]:
        return self._records.setdefault((user_id, kind), {})

    async def create(self, user_id, kind, record):
        entity_id = str(uuid.uuid4())
        stored = copy.deepcopy(record)
        stored["id"] = entity_id
        self._bucket(user_id, kind)[entity_id] = stored
        return entity_id

    async def update(self, user_id, kind, entity_id, fields):
        bucket = self._bucket(user_id, kind)
        if entity_id not in bucket:
            raise ResourceNotFoundError(KINDS[kind].label, entity_id)
        bucket[entity_id].update(copy.deepcopy(fields))

    async def delete(self, user_id, kind, entity_id):
        self._bucket(user_id, kind).pop(entity_id, None)

    async def list(self, user_id, kind, *, crop_id=None):
        records = self._bucket(user_id, kind).values()
        if crop_id is not None:
            records = [r for r in records if r.get("crop_id") == crop_id]
        return [copy.deepcopy(r) for r in records]
