"""User middleware: resolves the user context from the request header.

Flow:
  1. Read the user id header (absent → configured default user)
  2. Validate it; malformed ids are rejected with 400
  3. Set the ContextVar so the store dependency can read it
  4. After the response, clear the ContextVar
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from farmlog.config import settings
from farmlog.middleware.exceptions import create_error_response
from farmlog.usercontext import (
    clear_user_context,
    resolve_user_id,
    set_current_user_id,
)


class UserContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            user_id = resolve_user_id(request.headers.get(settings.user_header))
        except ValueError as e:
            clear_user_context()
            return create_error_response(
                status_code=400,
                message=str(e),
                error_code="INVALID_USER_ID",
            )

        set_current_user_id(user_id)
        try:
            response = await call_next(request)
        finally:
            clear_user_context()

        return response
