"""Request-scoped user context.

Entities belong to exactly one user; the id travels in a request header
(``settings.user_header``) and is held in a ContextVar for the duration of
the request.  Requests without the header run as ``settings.default_user_id``
(single-user local mode).
"""

import re
from contextvars import ContextVar

from farmlog.config import settings
from farmlog.middleware.exceptions import UserContextError

_user_ctx: ContextVar[str | None] = ContextVar("_user_ctx", default=None)

_USER_ID_RE = re.compile(r"^[A-Za-z0-9_.@-]{1,128}$")


def validate_user_id(user_id: str) -> str:
    if not _USER_ID_RE.match(user_id):
        raise ValueError(f"Invalid user id: {user_id!r}")
    return user_id


def set_current_user_id(user_id: str) -> None:
    _user_ctx.set(user_id)


def get_current_user_id() -> str:
    """Return the current user id or raise if unset."""
    user_id = _user_ctx.get()
    if user_id is None:
        raise UserContextError()
    return user_id


def clear_user_context() -> None:
    _user_ctx.set(None)


def resolve_user_id(header_value: str | None) -> str:
    if not header_value or not header_value.strip():
        return settings.default_user_id
    return validate_user_id(header_value.strip())
