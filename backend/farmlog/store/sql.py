"""SQLAlchemy implementation of the persistence boundary (hosted store mode)."""

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from farmlog.database import Base
from farmlog.middleware.exceptions import PersistenceError, ResourceNotFoundError
from farmlog.models import ChatMessageRow, CropRow, FarmAreaRow, GrowthRecordRow, TaskRow
from farmlog.store.backend import PersistenceBackend
from farmlog.store.kinds import KINDS, EntityKind

logger = logging.getLogger(__name__)

ROW_MODELS: dict[EntityKind, type[Base]] = {
    EntityKind.CROP: CropRow,
    EntityKind.GROWTH_RECORD: GrowthRecordRow,
    EntityKind.TASK: TaskRow,
    EntityKind.FARM_AREA: FarmAreaRow,
    EntityKind.CHAT_MESSAGE: ChatMessageRow,
}


def row_to_record(row: Base) -> dict[str, Any]:
    """Column values of a row, without the owning user id."""
    return {
        attr.key: getattr(row, attr.key)
        for attr in row.__mapper__.column_attrs
        if attr.key != "user_id"
    }


class SqlBackend(PersistenceBackend):
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self._sessionmaker = sessionmaker

    @staticmethod
    def _columns(model: type[Base], record: dict[str, Any]) -> dict[str, Any]:
        # Ignore keys with no column (e.g. aliases left in by old exports)
        keys = {attr.key for attr in model.__mapper__.column_attrs}
        return {k: v for k, v in record.items() if k in keys and k not in ("id", "user_id")}

    async def create(self, user_id, kind, record):
        model = ROW_MODELS[kind]
        try:
            async with self._sessionmaker() as session:
                row = model(user_id=user_id, **self._columns(model, record))
                session.add(row)
                await session.commit()
                return row.id
        except SQLAlchemyError as e:
            logger.error("Failed to create %s: %s", kind.value, e)
            raise PersistenceError(f"Could not save {KINDS[kind].label.lower()}") from e

    async def update(self, user_id, kind, entity_id, fields):
        model = ROW_MODELS[kind]
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(
                    select(model).where(model.id == entity_id, model.user_id == user_id)
                )
                row = result.scalar_one_or_none()
                if row is None:
                    raise ResourceNotFoundError(KINDS[kind].label, entity_id)
                for key, value in self._columns(model, fields).items():
                    setattr(row, key, value)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to update %s %s: %s", kind.value, entity_id, e)
            raise PersistenceError(f"Could not update {KINDS[kind].label.lower()}") from e

    async def delete(self, user_id, kind, entity_id):
        model = ROW_MODELS[kind]
        try:
            async with self._sessionmaker() as session:
                await session.execute(
                    delete(model).where(model.id == entity_id, model.user_id == user_id)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to delete %s %s: %s", kind.value, entity_id, e)
            raise PersistenceError(f"Could not delete {KINDS[kind].label.lower()}") from e

    async def list(self, user_id, kind, *, crop_id=None):
        model = ROW_MODELS[kind]
        stmt = select(model).where(model.user_id == user_id)
        if crop_id is not None:
            stmt = stmt.where(model.crop_id == crop_id)
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(stmt)
                return [row_to_record(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Failed to list %s: %s", kind.value, e)
            raise PersistenceError(f"Could not load {kind.value}") from e

    async def close(self) -> None:
        bind = self._sessionmaker.kw.get("bind")
        if bind is not None:
            await bind.dispose()
