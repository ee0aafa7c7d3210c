import logging
from datetime import datetime
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.core.clock import utc_now
from app.core.logging_config import ACCESS_LOGGER
from app.middleware.error_handlers import original_url

access_logger = logging.getLogger(ACCESS_LOGGER)

CLF_DATE_FORMAT = "%d/%b/%Y:%H:%M:%S +0000"


def format_combined(
    *,
    remote_addr: str,
    moment: datetime,
    method: str,
    url: str,
    http_version: str,
    status: int,
    content_length: Optional[str],
    referrer: Optional[str],
    user_agent: Optional[str],
) -> str:
    """Apache combined log format line."""
    return (
        f'{remote_addr} - - [{moment.strftime(CLF_DATE_FORMAT)}] '
        f'"{method} {url} HTTP/{http_version}" {status} {content_length or "-"} '
        f'"{referrer or "-"}" "{user_agent or "-"}"'
    )


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Writes one combined-format line per request once the response is ready."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = utc_now()
        response = await call_next(request)

        access_logger.info(
            format_combined(
                remote_addr=request.client.host if request.client else "-",
                moment=started,
                method=request.method,
                url=original_url(request),
                http_version=request.scope.get("http_version", "1.1"),
                status=response.status_code,
                content_length=response.headers.get("content-length"),
                referrer=request.headers.get("referer"),
                user_agent=request.headers.get("user-agent"),
            )
        )
        return response
