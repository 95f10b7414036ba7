from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import httpx

from .acquisition import TRANSPORT_ERRORS, acquire_body, open_body
from .classify import (
    is_json,
    is_no_content,
    is_success,
    is_xml,
    looks_binary,
    looks_like_json,
    looks_like_xml,
    media_type,
)
from .config import ResolverSettings
from .encoding import decode_bytes
from .exceptions import (
    AcquisitionError,
    ContentTypeError,
    EmptyBodyError,
    InvalidSettingsError,
    NoContentError,
    NullResultError,
    classify_http_error,
)
from .logging import (
    ResolverLoggerAdapter,
    get_resolver_logger,
    log_content_processing,
    log_exception,
)
from .models import DecodeResult, ProblemDetails
from .parsers import parse_json, parse_xml_stream
from .preview import preview
from .utils import extract_charset, is_buffered, request_url, type_name

T = TypeVar("T")

JSON = "json"
XML = "xml"

# _Attempt.failure values
NO_CONTENT = "no_content"
EMPTY = "empty"
MISMATCH = "mismatch"
NULL = "null"
ACQUIRE = "acquire"
PARSE = "parse"


@dataclass
class _Attempt:
    """What one pass of the decode pipeline produced. Logging already happened."""

    value: Any = None
    failure: Optional[str] = None
    error: Optional[BaseException] = None
    actual: Optional[str] = None   # declared media type on a mismatch

    @property
    def ok(self) -> bool:
        return self.failure is None


class ResponseBodyResolver:
    """
    Reads, classifies and deserializes ``httpx`` response bodies.

    Strategies:
      - ``to``              best-effort; None on any failure, never raises
      - ``to_strict``       raises DecodeError, or the parser's or transport's own exception
      - ``to_with_string``  (value or None, body text)
      - ``to_from_xml``     best-effort XML
      - ``to_or_problem``   (value, None) on success, (None, ProblemDetails) otherwise
      - ``to_result``       DecodeResult; never raises, never leaks exception text
      - ``to_string_safe`` / ``to_string_strict``  raw text

    Every body is read at most once. Declared no-content responses (204, 205,
    Content-Length: 0) are answered without touching the body. Cancellation is
    never caught: ``asyncio.CancelledError`` propagates from any await.

    Example:
        resolver = ResponseBodyResolver()
        async with httpx.AsyncClient() as client:
            response = await client.get("https://api.example.com/items/1")
            item = await resolver.to(response, Item)
    """

    def __init__(self, settings: Optional[ResolverSettings] = None):
        self.settings = settings or ResolverSettings()
        self._validate_settings()
        self._logger: ResolverLoggerAdapter = (
            self.settings.logger or get_resolver_logger("httpbody.resolver")
        )

    def _validate_settings(self) -> None:
        for name in ("peek_size", "max_buffered_bytes", "max_preview_chars", "max_bytes_per_char"):
            value = getattr(self.settings, name)
            if not isinstance(value, int) or value <= 0:
                raise InvalidSettingsError(message="", setting_name=name, setting_value=value)

    # ------------------------------------------------------------------
    # Typed decode strategies
    # ------------------------------------------------------------------

    async def to(self, response: httpx.Response, model: Type[T]) -> Optional[T]:
        """Best-effort JSON decode. Failures are logged and yield None."""
        attempt = await self._attempt(response, model, JSON, self._log_for(response, model))
        return attempt.value if attempt.ok else None

    async def to_strict(self, response: httpx.Response, model: Type[T]) -> T:
        """
        Strict JSON decode.

        Raises:
            NoContentError: Response declares no content
            EmptyBodyError: Zero-length body
            ContentTypeError: Body is not JSON by header or by its leading bytes
            NullResultError: Body decoded to null
            httpx.TransportError, OSError: Transport failed while reading (re-raised as is)
            pydantic.ValidationError: Parser rejected the body (re-raised as is)
        """
        attempt = await self._attempt(response, model, JSON, self._log_for(response, model))
        if attempt.ok:
            return attempt.value
        raise self._strict_error(response, model, attempt, expected="application/json")

    async def to_from_xml(self, response: httpx.Response, model: Type[T]) -> Optional[T]:
        """Best-effort XML decode; an empty document counts as a failure."""
        attempt = await self._attempt(response, model, XML, self._log_for(response, model))
        return attempt.value if attempt.ok else None

    async def to_with_string(
        self, response: httpx.Response, model: Type[T]
    ) -> Tuple[Optional[T], Optional[str]]:
        """
        Decode to ``model`` and keep the body text.

        The body is decoded to text once; the JSON parse runs on the same bytes.
        The text is returned even when the typed parse fails. It is None only if
        the body could not be read and was not already buffered.
        """
        log = self._log_for(response, model)
        if is_no_content(response):
            log.debug("decode.no_content")
            return None, ""

        charset = extract_charset(response.headers)
        try:
            body = await acquire_body(response, self.settings)
        except Exception as exc:
            log_exception(log, exc, "decode.acquire_failed")
            return None, self._recover_text(response, charset)

        text = decode_bytes(body.data, charset)
        if not body.data:
            log.warning("decode.empty_body")
            return None, text

        declared = media_type(response)
        if (declared is not None and not is_json(response)) or not looks_like_json(body.data[:self.settings.peek_size], charset):
            log.warning("decode.content_mismatch", expected=JSON, actual=declared)
            return None, text

        try:
            value = parse_json(body.data, model, charset)
        except Exception as exc:
            log_exception(log, exc, "decode.parse_failed", **self._diagnostics(log, response, body.data, logging.ERROR))
            return None, text

        if value is None:
            log.warning("decode.null_result", **self._diagnostics(log, response, body.data, logging.WARNING))
        return value, text

    async def to_or_problem(
        self, response: httpx.Response, model: Type[T]
    ) -> Tuple[Optional[T], Optional[ProblemDetails]]:
        """
        Success responses decode to ``model``; others to ProblemDetails.

        Prefer ``to_result``, which wraps the same outcome in one value.
        """
        success = is_success(response)
        target = model if success else ProblemDetails
        log = self._log_for(response, target)
        attempt = await self._attempt(response, target, JSON, log)
        if not attempt.ok:
            if attempt.failure not in (NO_CONTENT, ACQUIRE, PARSE):
                log.warning("decode.problem_unparseable", success=success)
            return None, None
        if success:
            return attempt.value, None
        return None, attempt.value

    async def to_result(self, response: httpx.Response, model: Type[T]) -> DecodeResult[T]:
        """
        Result-wrapped decode.

        Returns:
            ``DecodeResult.success`` for a 2xx JSON body that fits ``model``;
            ``DecodeResult.from_problem`` (via ``ProblemDetails.to_result``) for a
            non-2xx JSON body; ``DecodeResult.empty`` when there is no body;
            otherwise a generic failure carrying only the status code.
        """
        status = response.status_code
        success = is_success(response)
        target = model if success else ProblemDetails
        log = self._log_for(response, target)
        attempt = await self._attempt(response, target, JSON, log)

        if attempt.ok:
            if success:
                return DecodeResult.success(attempt.value, status)
            return attempt.value.to_result(status)
        if attempt.failure in (NO_CONTENT, EMPTY):
            return DecodeResult.empty(status)
        if attempt.failure not in (ACQUIRE, PARSE):
            log.warning("decode.problem_unparseable", success=success)
        return DecodeResult.failure(status_code=status)

    # ------------------------------------------------------------------
    # Raw text
    # ------------------------------------------------------------------

    async def to_string_safe(self, response: httpx.Response) -> Optional[str]:
        """Body text, "" for binary media or no content, None if reading failed."""
        if looks_binary(response) or is_no_content(response):
            return ""
        try:
            if is_buffered(response):
                return decode_bytes(response.content, extract_charset(response.headers))
            return await self.to_string_strict(response)
        except Exception as exc:
            log_exception(self._log_for(response), exc, "body.read_failed")
            return None

    async def to_string_strict(self, response: httpx.Response) -> str:
        """Transport string read; exceptions propagate."""
        await response.aread()
        return response.text

    # ------------------------------------------------------------------
    # Diagnostics helpers
    # ------------------------------------------------------------------

    async def ensure_success(self, response: httpx.Response) -> None:
        """
        Return for 2xx; otherwise log the body and raise the matching HTTPError.

        Raises:
            HTTPError: NotFoundError, ClientError or ServerError
        """
        if is_success(response):
            return

        await self.to_string_strict(response)
        log = self._log_for(response)
        excerpt = None
        if response.content and not looks_binary(response):
            excerpt = preview(
                response.content,
                extract_charset(response.headers),
                self.settings.max_preview_chars,
                self.settings.max_bytes_per_char,
                self.settings.truncation_marker,
            )
        log.info("response.content", **({"preview": excerpt} if excerpt else {}))

        raise classify_http_error(
            status_code=response.status_code,
            url=request_url(response),
            response=response,
            excerpt=excerpt,
        )

    async def log_response(self, response: httpx.Response) -> None:
        """Log a preview of the body at DEBUG. Not exception safe."""
        log = self._log_for(response)
        if not log.is_enabled_for(logging.DEBUG):
            return
        await self.to_string_strict(response)
        log.debug("response.content", **self._diagnostics(log, response, response.content, logging.DEBUG))

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _attempt(
        self,
        response: httpx.Response,
        model: Any,
        fmt: str,
        log: ResolverLoggerAdapter,
    ) -> _Attempt:
        """
        classify -> acquire -> parse, logging each failure once.

        Catches ``Exception`` only; cancellation passes through.
        """
        if is_no_content(response):
            log.debug("decode.no_content")
            return _Attempt(failure=NO_CONTENT)

        declared = media_type(response)
        declared_ok = is_json(response) if fmt == JSON else is_xml(response)
        if declared is not None and not declared_ok:
            log.warning("decode.content_mismatch", expected=fmt, actual=declared)
            return _Attempt(failure=MISMATCH, actual=declared)

        charset = extract_charset(response.headers)
        looks_like = looks_like_json if fmt == JSON else looks_like_xml
        sniff = functools.partial(looks_like, charset=charset)
        seen = b""
        try:
            if fmt == JSON:
                body = await acquire_body(response, self.settings, accept=sniff)
                seen = body.data
                log_content_processing(
                    log, "acquire", content_type=declared, charset=charset,
                    size_bytes=len(body.data), kind=fmt, streamed=body.streamed,
                )
                if body.empty:
                    log.warning("decode.empty_body")
                    return _Attempt(failure=EMPTY)
                if body.rejected:
                    log.warning(
                        "decode.content_mismatch", expected=fmt, actual=declared,
                        **self._diagnostics(log, response, seen, logging.WARNING),
                    )
                    return _Attempt(failure=MISMATCH, actual=declared)
                value = parse_json(body.data, model, charset)
            else:
                async with open_body(response, self.settings) as stream:
                    seen = stream.prefix
                    if not seen:
                        log.warning("decode.empty_body")
                        return _Attempt(failure=EMPTY)
                    if not sniff(seen):
                        log.warning(
                            "decode.content_mismatch", expected=fmt, actual=declared,
                            **self._diagnostics(log, response, seen, logging.WARNING),
                        )
                        return _Attempt(failure=MISMATCH, actual=declared)
                    value = await parse_xml_stream(stream, model, charset)
        except AcquisitionError as exc:
            log_exception(log, exc, "decode.acquire_failed")
            return _Attempt(failure=ACQUIRE, error=exc.cause or exc)
        except TRANSPORT_ERRORS as exc:
            log_exception(log, exc, "decode.acquire_failed")
            return _Attempt(failure=ACQUIRE, error=exc)
        except Exception as exc:
            log_exception(
                log, exc, "decode.parse_failed",
                **self._diagnostics(log, response, seen, logging.ERROR),
            )
            return _Attempt(failure=PARSE, error=exc)

        if value is None:
            log.warning("decode.null_result", **self._diagnostics(log, response, seen, logging.WARNING))
            return _Attempt(failure=NULL)
        return _Attempt(value=value)

    def _strict_error(
        self, response: httpx.Response, model: Any, attempt: _Attempt, expected: str
    ) -> BaseException:
        if attempt.error is not None:
            return attempt.error

        url = request_url(response)
        name = type_name(model)
        if attempt.failure == NO_CONTENT:
            return NoContentError(message="", url=url, response=response, model=name,
                                  status_code=response.status_code)
        if attempt.failure == EMPTY:
            return EmptyBodyError(message="", url=url, response=response, model=name)
        if attempt.failure == MISMATCH:
            return ContentTypeError(message="", url=url, response=response, model=name,
                                    expected=expected, actual=attempt.actual)
        return NullResultError(message="", url=url, response=response, model=name)

    def _log_for(self, response: httpx.Response, model: Any = None) -> ResolverLoggerAdapter:
        context: Dict[str, Any] = {"status_code": response.status_code}
        url = request_url(response)
        if url is not None:
            context["url"] = url
        if model is not None:
            context["model"] = type_name(model)
        return self._logger.bind(**context)

    def _diagnostics(
        self,
        log: ResolverLoggerAdapter,
        response: httpx.Response,
        data: Optional[bytes],
        level: int,
    ) -> Dict[str, Any]:
        """``preview`` field for a log call, only when it will be emitted and is text."""
        if not data or looks_binary(response) or not log.is_enabled_for(level):
            return {}
        return {
            "preview": preview(
                data,
                extract_charset(response.headers),
                self.settings.max_preview_chars,
                self.settings.max_bytes_per_char,
                self.settings.truncation_marker,
            )
        }

    def _recover_text(self, response: httpx.Response, charset: Optional[str]) -> Optional[str]:
        if not is_buffered(response):
            return None
        return decode_bytes(response.content, charset)
