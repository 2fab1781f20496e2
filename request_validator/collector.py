"""
Request body collection and decoding.

Reads a request stream fully into memory while enforcing a byte ceiling,
then decodes it according to the configured content type. Any object with
a ``headers`` mapping and a ``stream()`` method returning an async iterator
of chunks can be collected; ``starlette.requests.Request`` qualifies.
"""

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Protocol, Union
from urllib.parse import parse_qsl

from .errors import BadRequestError, ErrorType, PayloadTooLargeError, RequestParseError

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

CONTENT_TYPE_ALIASES = {
    "form": FORM_CONTENT_TYPE,
    FORM_CONTENT_TYPE: FORM_CONTENT_TYPE,
    "json": JSON_CONTENT_TYPE,
    JSON_CONTENT_TYPE: JSON_CONTENT_TYPE,
}

DEFAULT_MAX_BODY_SIZE = 1_000_000
DEFAULT_MAX_KEYS = 1000


class RequestStream(Protocol):
    """Minimal request interface the collector reads from."""

    headers: Optional[Mapping[str, str]]

    def stream(self) -> AsyncIterator[Union[bytes, str]]:
        ...


def _header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    if not headers:
        return None
    value = headers.get(name)
    if value is None:
        # Plain dicts are not case-insensitive like Starlette's Headers
        for key, candidate in headers.items():
            if key.lower() == name:
                return candidate
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON literal {name}")


def parse_form(text: str, max_keys: int = DEFAULT_MAX_KEYS) -> Dict[str, Union[str, List[str]]]:
    """
    Decode a form-urlencoded body.

    Duplicate keys collect into a list in order of appearance. Only the
    first ``max_keys`` pairs are read; ``0`` lifts the limit.
    """
    pairs = parse_qsl(text, keep_blank_values=True)
    if max_keys > 0:
        pairs = pairs[:max_keys]

    params: Dict[str, Union[str, List[str]]] = {}
    for key, value in pairs:
        if key not in params:
            params[key] = value
        elif isinstance(params[key], list):
            params[key].append(value)
        else:
            params[key] = [params[key], value]
    return params


def parse_json(text: str) -> Dict[str, Any]:
    """Strictly decode a JSON body. The top level value must be an object."""
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise RequestParseError(f"Invalid JSON body: {e}") from e
    if not isinstance(parsed, dict):
        raise RequestParseError("JSON body must be an object")
    return parsed


class BodyCollector:
    """Buffers and decodes request bodies for one configured content type."""

    def __init__(
        self,
        content_type: str,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
        max_keys: int = DEFAULT_MAX_KEYS
    ):
        self.content_type = content_type
        self.max_body_size = max_body_size
        self.max_keys = max_keys

    def check_content_type(self, request: RequestStream) -> None:
        """Reject requests whose content-type header is not exactly ours."""
        declared = _header(getattr(request, "headers", None), "content-type")
        if declared != self.content_type:
            raise BadRequestError(
                f'Content-type must be "{self.content_type}"',
                error_type=ErrorType.CONTENT_TYPE
            )

    async def read_body(self, request: RequestStream) -> bytes:
        """Read the whole stream, stopping as soon as the ceiling is passed."""
        buffer = bytearray()
        chunks = request.stream().__aiter__()
        try:
            while True:
                try:
                    chunk = await chunks.__anext__()
                except StopAsyncIteration:
                    break
                except Exception as e:
                    logger.warning(f"Request stream failed: {e}")
                    raise RequestParseError(f"Failed to read request body: {e}") from e

                if isinstance(chunk, str):
                    chunk = chunk.encode("utf-8")
                buffer.extend(chunk)

                if len(buffer) > self.max_body_size:
                    logger.info(f"Request body exceeded {self.max_body_size} bytes")
                    raise PayloadTooLargeError(self.max_body_size)
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()
        return bytes(buffer)

    def decode(self, body: bytes) -> Dict[str, Any]:
        text = body.decode("utf-8", errors="replace")
        if self.content_type == FORM_CONTENT_TYPE:
            return parse_form(text, self.max_keys)
        return parse_json(text)

    async def collect_body(self, request: RequestStream) -> Dict[str, Any]:
        """
        Read and decode a request body into a parameter map.

        Raises:
            PayloadTooLargeError: Body exceeded ``max_body_size`` bytes
            RequestParseError: Stream failed or payload could not be decoded
        """
        body = await self.read_body(request)
        logger.debug(f"Collected {len(body)} byte body as {self.content_type}")
        return self.decode(body)
