from pictolaunch.local import app_globals
from starlette.requests import Request
from starlette.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


class DevHeadersMiddleware(BaseHTTPMiddleware):
    """Adds development headers to every response."""
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        if app_globals.DISABLE_CACHE:
            # Edits to the menu config must show up on a plain reload.
            response.headers["Cache-Control"] = "no-store"
        response.headers["X-Content-Type-Options"] = "nosniff"
        return response
