"""FastAPI dependencies.

Dependencies:
  current_user_id  → user id set by UserContextMiddleware
  get_store        → the loaded FarmStore for that user
"""

from fastapi import Depends, Request

from farmlog.store.registry import StoreRegistry
from farmlog.store.service import FarmStore
from farmlog.usercontext import get_current_user_id


def current_user_id() -> str:
    return get_current_user_id()


def get_registry(request: Request) -> StoreRegistry:
    return request.app.state.stores


async def get_store(
    registry: StoreRegistry = Depends(get_registry),
    user_id: str = Depends(current_user_id),
) -> FarmStore:
    """Open (and on first use, load) the store of the requesting user."""
    return await registry.get(user_id)
