"""Per-user store instances for the lifetime of the application.

Created in the app lifespan and reached through ``app.state.stores``; a
user's store is initialised (loaded from the backend) on first use and
disposed when the application shuts down.
"""

import logging

from farmlog.middleware.exceptions import PersistenceError
from farmlog.store.backend import PersistenceBackend
from farmlog.store.service import FarmStore

logger = logging.getLogger(__name__)


class StoreRegistry:
    def __init__(self, backend: PersistenceBackend):
        self.backend = backend
        self._stores: dict[str, FarmStore] = {}

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._stores

    async def get(self, user_id: str) -> FarmStore:
        store = self._stores.get(user_id)
        if store is None:
            store = FarmStore(self.backend, user_id)
            await store.initialize()  # raises PersistenceError; nothing cached
            self._stores[user_id] = store
            logger.info("Opened store for user %s", user_id)
        return store

    async def refresh_all(self) -> int:
        """Re-read every open store.  Returns how many refreshed cleanly."""
        refreshed = 0
        for user_id, store in list(self._stores.items()):
            try:
                await store.refresh()
                refreshed += 1
            except PersistenceError as e:
                logger.warning("Refresh failed for user %s: %s", user_id, e.message)
        return refreshed

    async def dispose(self) -> None:
        for store in self._stores.values():
            await store.dispose()
        self._stores.clear()
        await self.backend.close()
