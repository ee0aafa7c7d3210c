from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp
import logging

from app.schemas.common import ErrorResponse, NotFoundResponse, ServerErrorResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong!"
HIDDEN_ERROR_MESSAGE = "Internal server error"
NOT_FOUND_ERROR = "Route not found"


class JSONErrorMiddleware(BaseHTTPMiddleware):
    """
    Turns any exception escaping the body parser or a route handler into a
    JSON 500 response. The exception text is only exposed in development.
    """

    def __init__(self, app: ASGIApp, expose_errors: bool = False):
        super().__init__(app)
        self.expose_errors = expose_errors

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500,
                content=ServerErrorResponse(
                    error=GENERIC_ERROR,
                    message=str(e) if self.expose_errors else HIDDEN_ERROR_MESSAGE,
                ).model_dump(),
            )


def original_url(request: Request) -> str:
    """Requested path and query string exactly as they arrived on the wire."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"")
    if query:
        path = f"{path}?{query.decode('latin-1')}"
    return path


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    # Un método no soportado en una ruta conocida tampoco tiene handler: 404
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content=NotFoundResponse(error=NOT_FOUND_ERROR, path=original_url(request)).model_dump(),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )
