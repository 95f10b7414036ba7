"""
Exception hierarchy for the httpbody response toolkit.

Best-effort strategies never raise these; strict strategies and
``ensure_success`` do. Every exception carries the response URL and the
causal exception so log lines and tracebacks stay connected.

Exception Hierarchy:
    ResolverError (base)
    ├── InvalidSettingsError
    ├── AcquisitionError
    ├── ContentError
    │   └── DecodeError
    │       ├── EmptyBodyError
    │       │   └── NoContentError
    │       ├── ContentTypeError
    │       └── NullResultError
    └── HTTPError
        ├── ClientError (4xx)
        │   └── NotFoundError (404)
        └── ServerError (5xx)

Usage:
    from httpbody.exceptions import DecodeError

    try:
        item = await resolver.to_strict(response, Item)
    except DecodeError as e:
        logger.warning(f"Unusable body from {e.url}: {e}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Dict, Any

import httpx

__all__ = [
    "ResolverError",
    "InvalidSettingsError",
    "AcquisitionError",
    "ContentError",
    "DecodeError",
    "EmptyBodyError",
    "NoContentError",
    "ContentTypeError",
    "NullResultError",
    "HTTPError",
    "ClientError",
    "NotFoundError",
    "ServerError",
    "classify_http_error",
]


# ============================================================================
# Base Exception
# ============================================================================


@dataclass(slots=True)
class ResolverError(Exception):
    """
    Base exception for all body-resolution failures.

    Provides rich context including URL, response, and causal exception chain.
    """

    message: str
    url: Optional[str] = None
    response: Optional[httpx.Response] = None
    cause: Optional[BaseException] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)
        if self.cause is not None:
            self.__cause__ = self.cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"url={self.url}")
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"context=({ctx_str})")
        return " | ".join(parts)


@dataclass(slots=True)
class InvalidSettingsError(ResolverError):
    """Raised when ResolverSettings contains invalid configuration."""

    setting_name: Optional[str] = None
    setting_value: Optional[Any] = None

    def __post_init__(self) -> None:
        if not self.message and self.setting_name:
            self.message = f"Invalid setting {self.setting_name}={self.setting_value!r}"
        ResolverError.__post_init__(self)


@dataclass(slots=True)
class AcquisitionError(ResolverError):
    """
    Raised when the transport could not yield the body.

    Wraps the transport exception (``httpx.ReadError``, ``httpx.StreamConsumed``...)
    as ``cause``.
    """

    streamed: bool = False

    def __post_init__(self) -> None:
        if not self.message:
            path = "stream" if self.streamed else "buffer"
            self.message = f"Failed to read response body ({path})"
        ResolverError.__post_init__(self)


# ============================================================================
# Content Errors
# ============================================================================


@dataclass(slots=True)
class ContentError(ResolverError):
    """Base class for content processing failures."""
    pass


@dataclass(slots=True)
class DecodeError(ContentError):
    """
    Raised by strict strategies when the body cannot become the requested type.

    Parser exceptions themselves are re-raised unchanged; this type covers the
    cases where there was nothing valid to hand to the parser.
    """

    model: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Failed to deserialize ({self.model})"
        ResolverError.__post_init__(self)


@dataclass(slots=True)
class EmptyBodyError(DecodeError):
    """Raised when a body was expected but zero bytes arrived."""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Trying to deserialize an empty body for type ({self.model})"
        ResolverError.__post_init__(self)


@dataclass(slots=True)
class NoContentError(EmptyBodyError):
    """Raised when the response declares no content (204, 205 or Content-Length: 0)."""

    status_code: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = (
                f"Response declares no content (HTTP {self.status_code}); "
                f"cannot deserialize ({self.model})"
            )
        ResolverError.__post_init__(self)


@dataclass(slots=True)
class ContentTypeError(DecodeError):
    """
    Raised when classification says the body is not the expected shape.

    ``actual`` is the declared media type, or None when sniffing rejected it.
    """

    expected: Optional[str] = None
    actual: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = (
                f"Content type mismatch: expected {self.expected!r}, "
                f"got {self.actual!r}"
            )
        ResolverError.__post_init__(self)


@dataclass(slots=True)
class NullResultError(DecodeError):
    """Raised when the parser succeeded but produced None."""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Deserialization of type ({self.model}) resulted in null"
        ResolverError.__post_init__(self)


# ============================================================================
# HTTP Errors
# ============================================================================


@dataclass(slots=True)
class HTTPError(ResolverError):
    """
    Raised by ``ensure_success`` for non-2xx responses.

    Captures status code and a preview of the response body.
    """

    status_code: int = 0
    response_excerpt: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            excerpt = f": {self.response_excerpt!r}" if self.response_excerpt else ""
            self.message = f"HTTP {self.status_code}{excerpt}"
        ResolverError.__post_init__(self)


@dataclass(slots=True)
class ClientError(HTTPError):
    """Base class for client errors (4xx status codes)."""
    pass


@dataclass(slots=True)
class NotFoundError(ClientError):
    """Raised for HTTP 404 Not Found."""
    status_code: int = 404


@dataclass(slots=True)
class ServerError(HTTPError):
    """Base class for server errors (5xx status codes)."""
    pass


# ============================================================================
# Utility Functions
# ============================================================================


def classify_http_error(
    status_code: int,
    url: Optional[str] = None,
    response: Optional[httpx.Response] = None,
    excerpt: Optional[str] = None,
) -> HTTPError:
    """
    Factory function to create the most specific HTTPError for a status code.

    Examples:
        >>> classify_http_error(404, "https://example.com/missing")
        NotFoundError(status_code=404, url='https://example.com/missing')
    """
    if status_code == 404:
        error_class: type[HTTPError] = NotFoundError
    elif 400 <= status_code < 500:
        error_class = ClientError
    elif 500 <= status_code < 600:
        error_class = ServerError
    else:
        error_class = HTTPError

    return error_class(
        message="",
        url=url,
        response=response,
        status_code=status_code,
        response_excerpt=excerpt,
    )
