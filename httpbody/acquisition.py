"""
Body acquisition: buffered reads for small bodies, peek + replay for the rest.

A live ``httpx`` stream can be consumed once. To classify a body before
committing to a parse, the streaming path reads a bounded prefix, runs the
caller's check against it, and then hands out a ``ReplayStream`` that yields
the prefix followed by the untouched remainder, so the parser sees the body
exactly as sent. A rejected body is abandoned without reading further and the
connection is released.

Example:
    async with peek_body(response, 1024) as replay:
        if looks_like_json(replay.prefix):
            data = await replay.aread()
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

import httpx

from .config import ResolverSettings
from .exceptions import AcquisitionError
from .utils import declared_length, is_buffered, request_url

__all__ = [
    "BodyRead",
    "ReplayStream",
    "should_stream",
    "peek_body",
    "open_body",
    "acquire_body",
    "TRANSPORT_ERRORS",
]

# Failures of the connection or the stream, as opposed to the body itself
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.StreamError, OSError)


@dataclass
class BodyRead:
    """Outcome of one acquisition."""

    data: bytes = b""
    streamed: bool = False
    rejected: bool = False   # prefix check failed; ``data`` holds what was read before stopping

    @property
    def empty(self) -> bool:
        return not self.data and not self.rejected


class ReplayStream:
    """
    Async byte stream yielding an already-read prefix, then the live remainder.

    Iterate it once, or call ``aread()`` to collect everything into one buffer.
    """

    def __init__(self, prefix: bytes, remainder: Optional[AsyncIterator[bytes]] = None):
        self.prefix = prefix
        self._remainder = remainder
        self._consumed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise httpx.StreamConsumed()
        self._consumed = True
        if self.prefix:
            yield self.prefix
        if self._remainder is not None:
            async for chunk in self._remainder:
                if chunk:
                    yield chunk

    async def aread(self) -> bytes:
        buffer = bytearray()
        async for chunk in self:
            buffer.extend(chunk)
        return bytes(buffer)


def should_stream(response: httpx.Response, settings: Optional[ResolverSettings] = None) -> bool:
    """
    Default small/large routing.

    Buffered responses never stream. Otherwise a declared length at or below
    ``max_buffered_bytes`` is read in one call; unknown or larger lengths stream.
    """
    settings = settings or ResolverSettings()
    if settings.stream_predicate is not None:
        return settings.stream_predicate(response)
    if is_buffered(response):
        return False
    length = declared_length(response.headers)
    return length is None or length > settings.max_buffered_bytes


@contextlib.asynccontextmanager
async def peek_body(response: httpx.Response, peek_size: int) -> AsyncIterator[ReplayStream]:
    """
    Read up to ``peek_size`` bytes (at least one whole chunk) and yield a replay.

    On exit the peek buffer is released and the response is closed, whether the
    replay was drained, abandoned, or an exception escaped.
    """
    chunks = response.aiter_bytes()
    buffer = bytearray()
    try:
        async for chunk in chunks:
            buffer.extend(chunk)
            if len(buffer) >= peek_size:
                break
        yield ReplayStream(bytes(buffer), chunks)
    finally:
        buffer.clear()
        with contextlib.suppress(Exception):
            await chunks.aclose()
        with contextlib.suppress(Exception):
            await response.aclose()


@contextlib.asynccontextmanager
async def open_body(
    response: httpx.Response, settings: Optional[ResolverSettings] = None
) -> AsyncIterator[ReplayStream]:
    """
    Yield the body as a stream for incremental parsers.

    On the buffered path the whole body is read first and replayed from memory.
    """
    settings = settings or ResolverSettings()
    if not should_stream(response, settings):
        yield ReplayStream(await response.aread())
        return
    async with peek_body(response, settings.peek_size) as replay:
        yield replay


async def acquire_body(
    response: httpx.Response,
    settings: Optional[ResolverSettings] = None,
    accept: Optional[Callable[[bytes], bool]] = None,
) -> BodyRead:
    """
    Read the body once, choosing the buffered or streaming path.

    Args:
        response: Response whose body has not been consumed as a stream
        settings: Routing and peek configuration
        accept: Optional check on the leading bytes; on the streaming path a
            rejection stops reading after the prefix

    Returns:
        BodyRead with the full body, an empty body, or a rejection

    Raises:
        AcquisitionError: When the transport fails while reading
    """
    settings = settings or ResolverSettings()
    streamed = should_stream(response, settings)

    try:
        if not streamed:
            data = await response.aread()
            if data and accept is not None and not accept(data[:settings.peek_size]):
                return BodyRead(data=data, streamed=False, rejected=True)
            return BodyRead(data=data, streamed=False)

        async with peek_body(response, settings.peek_size) as replay:
            if not replay.prefix:
                return BodyRead(streamed=True)
            if accept is not None and not accept(replay.prefix):
                return BodyRead(data=replay.prefix, streamed=True, rejected=True)
            data = await replay.aread()
            return BodyRead(data=data, streamed=True)
    except TRANSPORT_ERRORS as exc:
        raise AcquisitionError(
            message="",
            url=request_url(response),
            response=response,
            cause=exc,
            streamed=streamed,
        ) from exc
