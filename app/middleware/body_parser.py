"""
Request body parsing.

JSON and URL-encoded bodies are decoded once, before routing, and stored on
``request.state.payload`` as a dict. Handlers never read the raw body.
Malformed or oversized bodies raise :class:`BodyParseError`, which the error
middleware turns into a 500 response.

The size limit is checked against ``Content-Length`` before anything is read,
and again on the running total while the body streams in, so an oversized
upload is never held in memory. Compressed bodies (``gzip``/``deflate``) are
inflated under the same limit.
"""
import json
import logging
import re
import zlib
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

JSON_TYPE = "application/json"
FORM_TYPE = "application/x-www-form-urlencoded"

# Bracket nesting deeper than this is kept as a literal key segment
MAX_KEY_DEPTH = 5
# Numeric bracket indexes above this build objects, not arrays
MAX_ARRAY_INDEX = 20

_BRACKET = re.compile(r"\[([^\[\]]*)\]")
_JSON_WHITESPACE = b" \t\n\r"


class BodyParseError(Exception):
    """The request body could not be turned into a payload."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def _reject_constant(token: str) -> Any:
    raise BodyParseError(f"Unexpected token {token} in JSON")


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _charset(content_type: str) -> Optional[str]:
    for param in content_type.split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"').lower()
    return None


def _decode(body: bytes, charset: str) -> str:
    try:
        return body.decode(charset)
    except (LookupError, UnicodeDecodeError) as e:
        raise BodyParseError(f"invalid body encoding: {e}") from e


def parse_json(body: bytes, charset: Optional[str] = None) -> Dict[str, Any]:
    charset = charset or "utf-8"
    if not charset.startswith("utf-"):
        raise BodyParseError(f'unsupported charset "{charset.upper()}"', status_code=415)
    if not body:
        return {}

    text = _decode(body, charset)
    first = text.lstrip(_JSON_WHITESPACE.decode())[:1]
    if first not in ("{", "["):
        # only objects and arrays are accepted, whitespace alone included
        raise BodyParseError(f"Unexpected token {first or 'end of input'} in JSON at position 0")
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise BodyParseError(f"Unexpected token in JSON at position {e.pos}: {e.msg}") from e

    if isinstance(parsed, dict):
        return parsed
    # arrays are accepted but carry no named fields
    return {}


def _split_key(key: str) -> List[str]:
    """`user[address][city]` -> ["user", "address", "city"]."""
    head, sep, _ = key.partition("[")
    if not sep or not head:
        return [key]

    segments = [head]
    pos = len(head)
    for match in _BRACKET.finditer(key, pos):
        if match.start() != pos or len(segments) > MAX_KEY_DEPTH:
            break
        segments.append(match.group(1))
        pos = match.end()
    if pos < len(key):
        segments.append(key[pos:])
    return segments


def _nest(segments: List[str], value: Any) -> Any:
    if not segments:
        return value
    segment, rest = segments[0], segments[1:]
    if segment == "" or (segment.isdigit() and int(segment) <= MAX_ARRAY_INDEX):
        return [_nest(rest, value)]
    return {segment: _nest(rest, value)}


def _merge(target: Dict[str, Any], key: str, value: Any) -> None:
    if key not in target:
        target[key] = value
        return

    existing = target[key]
    if isinstance(existing, dict) and isinstance(value, dict):
        for sub_key, sub_value in value.items():
            _merge(existing, sub_key, sub_value)
    elif isinstance(existing, list):
        existing.extend(value if isinstance(value, list) else [value])
    else:
        target[key] = [existing] + (value if isinstance(value, list) else [value])


def parse_urlencoded(body: bytes, charset: Optional[str] = None) -> Dict[str, Any]:
    """Form bodies with bracket nesting: `a[b]=1` builds objects, `a[]=1` arrays."""
    charset = charset or "utf-8"
    if charset != "utf-8":
        raise BodyParseError(f'unsupported charset "{charset.upper()}"', status_code=415)

    payload: Dict[str, Any] = {}
    for key, value in parse_qsl(_decode(body, charset), keep_blank_values=True):
        segments = _split_key(key)
        _merge(payload, segments[0], _nest(segments[1:], value))
    return payload


def inflate(body: bytes, encoding: str, limit: int) -> bytes:
    if encoding == "gzip":
        decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
    elif encoding == "deflate":
        decompressor = zlib.decompressobj()
    else:
        raise BodyParseError(f'unsupported content encoding "{encoding}"', status_code=415)

    try:
        inflated = decompressor.decompress(body, limit + 1)
    except zlib.error as e:
        raise BodyParseError(f"invalid {encoding} body: {e}") from e
    if len(inflated) > limit:
        raise BodyParseError("request entity too large", status_code=413)
    return inflated


class BodyParserMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, limit: int = 100 * 1024):
        super().__init__(app)
        self.limit = limit

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.payload = await self.parse(request)
        return await call_next(request)

    async def parse(self, request: Request) -> Dict[str, Any]:
        content_type = request.headers.get("content-type", "")
        media_type = _media_type(content_type)
        if media_type not in (JSON_TYPE, FORM_TYPE):
            return {}

        encoding = request.headers.get("content-encoding", "identity").strip().lower()
        body = await self.read_body(request, check_length=encoding == "identity")
        if encoding != "identity":
            body = inflate(body, encoding, self.limit)

        if media_type == JSON_TYPE:
            return parse_json(body, _charset(content_type))
        return parse_urlencoded(body, _charset(content_type))

    async def read_body(self, request: Request, check_length: bool = True) -> bytes:
        declared = request.headers.get("content-length")
        if check_length and declared is not None and declared.isdigit() and int(declared) > self.limit:
            logger.warning("Rejected body declared as %s bytes on %s", declared, request.url.path)
            raise BodyParseError("request entity too large", status_code=413)

        chunks: List[bytes] = []
        received = 0
        async for chunk in request.stream():
            received += len(chunk)
            if received > self.limit:
                logger.warning("Rejected body over %s bytes on %s", self.limit, request.url.path)
                raise BodyParseError("request entity too large", status_code=413)
            chunks.append(chunk)
        return b"".join(chunks)
