"""
Response Showcase — Request Binder
====================================

What:  Decodes a raw request body into a flat field-name → raw-value mapping.
Why:   The validation engine works on plain Python values; turning bytes into
       those values depends only on the content type, not on the route.
How:   read_body() receives the body under a size limit. JSON bodies then
       go through json.loads; multipart bodies go through Starlette's
       MultiPartParser (python-multipart underneath), fed from the
       already-received body bytes, with disk spooling turned off.
Who:   Called by the contract dispatcher before validation.
When:  Once per request to a contract route.

What the binder does NOT do:
    - No business-rule validation (that is the schema engine's job)
    - No filesystem or network writes: uploaded files are kept in memory
      (never rolled over to a temporary file) and released before the
      request finishes

Failure model:
    Anything that prevents decoding (bad JSON, non-object JSON, wrong content
    type, broken multipart framing) raises BodyUnparseableError, which the
    global handler turns into a 400 envelope with a single body-level
    violation. A body over the size limit raises PayloadTooLargeError (413)
    instead, before the whole body is buffered.

Resource scope:
    bind_body() is an async context manager. Decoded values live only inside
    the `async with` block; on exit (normal return, validation failure or a
    handler exception) the mapping is cleared and parser resources closed.
"""

import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Optional

from starlette.datastructures import FormData, Headers
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from showcase.exceptions import BodyUnparseableError, PayloadTooLargeError

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
MULTIPART_MEDIA_TYPE = "multipart/form-data"

# What browsers report when the part carries no Content-Type header
DEFAULT_FILE_MEDIA_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadedFile:
    """
    One file part of a multipart request.

    Attributes:
        name:       Client-supplied filename (never used as a filesystem path)
        size:       Payload length in bytes
        media_type: Declared Content-Type of the part
        payload:    Raw bytes; owned by the request that produced it
    """

    name: str
    size: int
    media_type: str
    payload: bytes = field(repr=False)


def media_type_of(content_type: Optional[str]) -> str:
    """'Application/JSON; charset=utf-8' → 'application/json'."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def _is_json(media_type: str) -> bool:
    return media_type == JSON_MEDIA_TYPE or media_type.endswith("+json")


def decode_json(body: bytes) -> Dict[str, Any]:
    """
    Parse a JSON body that must hold an object.

    Raises:
        BodyUnparseableError: empty body, undecodable bytes, malformed JSON,
            or a top-level value that is not an object.
    """
    if not body.strip():
        raise BodyUnparseableError("request body is empty")
    try:
        parsed = json.loads(body)
    except ValueError as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise BodyUnparseableError(f"malformed JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise BodyUnparseableError("JSON body must be an object")
    return parsed


async def read_body(
    chunks: AsyncIterator[bytes],
    content_length: Optional[str],
    limit: int,
) -> bytes:
    """
    Receive a request body of at most `limit` bytes.

    Args:
        chunks:         request.stream()
        content_length: The Content-Length header, if the client sent one
        limit:          Maximum body size in bytes

    Raises:
        PayloadTooLargeError: the declared length is over the limit (nothing
            is read), or the streamed body crosses it (reading stops there).
        BodyUnparseableError: Content-Length is not a number.
    """
    if content_length is not None:
        try:
            declared = int(content_length)
        except ValueError:
            raise BodyUnparseableError(f"invalid Content-Length {content_length!r}") from None
        if declared > limit:
            raise PayloadTooLargeError(declared, limit)

    # Chunked bodies carry no Content-Length, so count while receiving
    received = bytearray()
    async for chunk in chunks:
        received.extend(chunk)
        if len(received) > limit:
            raise PayloadTooLargeError(len(received), limit)
    return bytes(received)


class InMemoryMultiPartParser(MultiPartParser):
    """
    MultiPartParser whose file parts stay in memory.

    Starlette spools each file part into a SpooledTemporaryFile that rolls
    over to disk past spool_max_size (1MB). The body is already bounded by
    read_body(), and a part can never be larger than the body it came from,
    so the spool threshold is raised to the body length.
    """

    def __init__(self, headers: Headers, stream: AsyncIterator[bytes], *, body_size: int, **kwargs: Any):
        super().__init__(headers, stream, **kwargs)
        self.spool_max_size = max(body_size, 1)


async def parse_multipart(content_type: str, body: bytes) -> FormData:
    """
    Run the multipart parser over an in-memory body.

    The caller owns the returned FormData and must close() it.
    """
    params = [part.strip().lower() for part in content_type.split(";")[1:]]
    if not any(param.startswith("boundary=") for param in params):
        raise BodyUnparseableError("malformed multipart body: missing boundary")

    async def stream() -> AsyncIterator[bytes]:
        yield body

    parser = InMemoryMultiPartParser(
        Headers({"content-type": content_type}), stream(), body_size=len(body)
    )
    try:
        return await parser.parse()
    except (MultiPartException, ValueError) as e:
        # python-multipart's parse errors derive from ValueError
        raise BodyUnparseableError(f"malformed multipart body: {e}") from e


async def collect_form_fields(form: FormData) -> Dict[str, Any]:
    """
    Flatten parsed form parts into field values.

    Text parts become strings, file parts become UploadedFile. When a name
    repeats, the last part wins. A file part with no filename and no bytes
    is what a browser sends for an untouched <input type="file"> and is
    treated as absent.
    """
    fields: Dict[str, Any] = {}
    for name, value in form.multi_items():
        if isinstance(value, StarletteUploadFile):
            payload = await value.read()
            if not value.filename and not payload:
                continue
            fields[name] = UploadedFile(
                name=value.filename or "",
                size=len(payload),
                media_type=value.content_type or DEFAULT_FILE_MEDIA_TYPE,
                payload=payload,
            )
        else:
            fields[name] = value
    return fields


@asynccontextmanager
async def bind_body(
    declared_media_type: str,
    content_type: Optional[str],
    body: bytes,
) -> AsyncIterator[Dict[str, Any]]:
    """
    Decode `body` according to the route's declared media type.

    Usage:
        async with bind_body(MULTIPART_MEDIA_TYPE, request.headers.get("content-type"), raw) as values:
            result = validate_object(schema, values, name="UploadRequest")

    Raises:
        BodyUnparseableError: the request's content type does not match the
            declared one, or the body cannot be decoded.
    """
    actual = media_type_of(content_type)

    if _is_json(declared_media_type):
        if not _is_json(actual):
            raise BodyUnparseableError(
                f"expected content type {declared_media_type}, received {actual or 'none'}"
            )
        values = decode_json(body)
        logger.debug("Bound JSON body with %d field(s)", len(values))
        try:
            yield values
        finally:
            values.clear()
        return

    if declared_media_type == MULTIPART_MEDIA_TYPE:
        if actual != MULTIPART_MEDIA_TYPE:
            raise BodyUnparseableError(
                f"expected content type {declared_media_type}, received {actual or 'none'}"
            )
        form = await parse_multipart(content_type or "", body)
        try:
            values = await collect_form_fields(form)
            logger.debug("Bound multipart body with %d field(s)", len(values))
            try:
                yield values
            finally:
                values.clear()
        finally:
            await form.close()
        return

    raise BodyUnparseableError(f"unsupported content type {declared_media_type}")
