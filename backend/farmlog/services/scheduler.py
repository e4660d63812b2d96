"""Application lifespan and the background refresh loop.

On startup the persistence backend is built (and, for the database backend,
missing tables are created), and a ``StoreRegistry`` is placed on
``app.state.stores``.  A simple asyncio sleep loop then re-reads every open
store every ``poll_interval_seconds`` so changes written by other sessions
show up; last write wins.  No external scheduler is involved.

Usage:
    from farmlog.services.scheduler import lifespan
    app = FastAPI(lifespan=lifespan, ...)

Configuration:
    STORAGE_BACKEND=database|memory
    POLL_INTERVAL_SECONDS=5   (0 disables the loop)
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from farmlog.config import settings
from farmlog.store.backend import MemoryBackend, PersistenceBackend
from farmlog.store.registry import StoreRegistry
from farmlog.utils.cache import close_redis

logger = logging.getLogger("farmlog.poller")


async def build_backend() -> PersistenceBackend:
    """Backend selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        logger.info("Using in-memory storage backend")
        return MemoryBackend()

    from farmlog.database import async_session, init_models
    from farmlog.store.sql import SqlBackend

    await init_models()
    logger.info("Using database storage backend")
    return SqlBackend(async_session)


async def _poll_loop(registry: StoreRegistry, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            refreshed = await registry.refresh_all()
            logger.debug("Refreshed %d/%d stores", refreshed, len(registry))
        except Exception:
            logger.exception("Unhandled error in store refresh")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan: open the stores and start polling; tear down on exit."""
    registry = StoreRegistry(await build_backend())
    app.state.stores = registry

    task = None
    if settings.poll_interval_seconds > 0:
        task = asyncio.create_task(_poll_loop(registry, settings.poll_interval_seconds))
        logger.info("Store refresh loop started (every %.0fs)", settings.poll_interval_seconds)
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.info("Store refresh loop stopped")
        await registry.dispose()
        await close_redis()
