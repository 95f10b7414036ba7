from .resolver import ResponseBodyResolver
from .config import ResolverSettings
from .models import (
    DecodeResult,
    ProblemDetails,
)
from .exceptions import (
    # Base exceptions
    ResolverError,
    InvalidSettingsError,
    AcquisitionError,
    # Content errors
    ContentError,
    DecodeError,
    EmptyBodyError,
    NoContentError,
    ContentTypeError,
    NullResultError,
    # HTTP errors
    HTTPError,
    ClientError,
    NotFoundError,
    ServerError,
    # Utilities
    classify_http_error,
)
from .encoding import resolve_encoding, decode_bytes
from .classify import (
    is_success,
    is_no_content,
    is_json,
    is_problem_json,
    is_xml,
    looks_binary,
    looks_like_json,
    looks_like_xml,
)
from .acquisition import (
    BodyRead,
    ReplayStream,
    should_stream,
    peek_body,
    open_body,
    acquire_body,
)
from .preview import preview
from .logging import configure_logging, get_resolver_logger, ResolverLoggerAdapter


__all__ = [
    # Primary entry point
    "ResponseBodyResolver",

    # Configuration
    "ResolverSettings",

    # Result models
    "DecodeResult",
    "ProblemDetails",

    # Base exceptions
    "ResolverError",
    "InvalidSettingsError",
    "AcquisitionError",
    # Content errors
    "ContentError",
    "DecodeError",
    "EmptyBodyError",
    "NoContentError",
    "ContentTypeError",
    "NullResultError",
    # HTTP errors
    "HTTPError",
    "ClientError",
    "NotFoundError",
    "ServerError",
    # Utility functions
    "classify_http_error",

    # Encoding
    "resolve_encoding",
    "decode_bytes",

    # Classification
    "is_success",
    "is_no_content",
    "is_json",
    "is_problem_json",
    "is_xml",
    "looks_binary",
    "looks_like_json",
    "looks_like_xml",

    # Acquisition
    "BodyRead",
    "ReplayStream",
    "should_stream",
    "peek_body",
    "open_body",
    "acquire_body",

    # Diagnostics
    "preview",

    # Logging
    "configure_logging",
    "get_resolver_logger",
    "ResolverLoggerAdapter",
]
