from typing import Dict

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

CORS_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]

_BODY_HEADERS = {"content-length", "content-type"}


class OptionsCORSMiddleware(CORSMiddleware):
    """
    Starlette's CORS policy, with every OPTIONS request answered here with an
    empty 204 instead of reaching the router. Requests without
    `Access-Control-Request-Method` (or without `Origin`) get the same headers
    a preflight would.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "OPTIONS":
            await super().__call__(scope, receive, send)
            return

        response = self.options_response(Headers(scope=scope))
        await response(scope, receive, send)

    def options_response(self, request_headers: Headers) -> Response:
        origin = request_headers.get("origin")
        if origin is not None and "access-control-request-method" in request_headers:
            preflight = self.preflight_response(request_headers=request_headers)
            if preflight.status_code != 200:
                # disallowed origin, method or header
                return preflight
            headers = {k: v for k, v in preflight.headers.items() if k not in _BODY_HEADERS}
            return Response(status_code=204, headers=headers)

        headers: Dict[str, str] = dict(self.preflight_headers)
        if origin is not None and "Access-Control-Allow-Origin" not in headers and self.is_allowed_origin(origin):
            headers["Access-Control-Allow-Origin"] = origin
        requested_headers = request_headers.get("access-control-request-headers")
        if self.allow_all_headers and requested_headers:
            headers["Access-Control-Allow-Headers"] = requested_headers
        return Response(status_code=204, headers=headers)
