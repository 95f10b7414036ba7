"""
Logging adapter for the httpbody response toolkit.

This module provides dependency injection for structured logging while keeping
httpbody decoupled from specific logging implementations.

Architecture:
- ResolverLoggerAdapter wraps any LoggerAdapter and provides httpbody-specific helpers
- _logger_factory allows consumers to inject their logger factory
- Default factory uses standard library logging when no custom factory is configured

Usage in httpbody:
    from httpbody.logging import get_resolver_logger

    logger = get_resolver_logger(__name__, url="https://api.example.com/items")
    logger.warning("decode.content_mismatch", expected="json", actual="text/plain")

Usage in consumer applications (configuring the factory):
    from httpbody.logging import configure_logging
    from myapp.logging import get_custom_logger

    configure_logging(logger_factory=get_custom_logger)

    resolver = ResponseBodyResolver()
    item = await resolver.to(response, Item)
"""

from __future__ import annotations

import logging
from logging import Logger, LoggerAdapter
from typing import Any, Callable, Dict, MutableMapping, Optional, Tuple


# Global logger factory (can be injected by embedding applications)
_logger_factory: Optional[Callable[..., LoggerAdapter]] = None


class _ContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges bound context into each record's ``extra``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


class ResolverLoggerAdapter:
    """
    Thin wrapper around LoggerAdapter providing httpbody-specific logging helpers.

    Event names are dotted (``decode.parse_failed``) and structured fields travel
    in ``extra`` so any backend can index them.
    """

    def __init__(self, logger: LoggerAdapter, context: Optional[Dict[str, Any]] = None):
        """
        Initialize the adapter.

        Args:
            logger: Underlying LoggerAdapter (from custom logger or stdlib)
            context: Additional context to bind to all log records
        """
        self._logger = logger
        self._context = context or {}

    def _merge_context(self, **extra: Any) -> Dict[str, Any]:
        """Merge bound context with extra fields."""
        return {**self._context, **extra}

    def bind(self, **context: Any) -> "ResolverLoggerAdapter":
        """Return a new adapter with additional bound context."""
        return ResolverLoggerAdapter(self._logger, self._merge_context(**context))

    def is_enabled_for(self, level: int) -> bool:
        """Whether a record at ``level`` would be emitted by the underlying logger."""
        return self._logger.isEnabledFor(level)

    def debug(self, event: str, **extra: Any) -> None:
        """Log DEBUG-level event."""
        self._logger.debug(event, extra=self._merge_context(**extra))

    def info(self, event: str, **extra: Any) -> None:
        """Log INFO-level event."""
        self._logger.info(event, extra=self._merge_context(**extra))

    def warning(self, event: str, **extra: Any) -> None:
        """Log WARNING-level event."""
        self._logger.warning(event, extra=self._merge_context(**extra))

    def error(self, event: str, exc_info: Optional[BaseException] = None, **extra: Any) -> None:
        """Log ERROR-level event."""
        self._logger.error(event, extra=self._merge_context(**extra), exc_info=exc_info)


def _default_logger_factory(name: str, **context: Any) -> LoggerAdapter:
    """
    Default logger factory using standard library logging.

    Returns a context-merging LoggerAdapter when no custom factory is configured.
    """
    base_logger: Logger = logging.getLogger(name)
    return _ContextAdapter(base_logger, context)


def configure_logging(logger_factory: Optional[Callable[..., LoggerAdapter]]) -> None:
    """
    Configure httpbody to use a custom logger factory.

    Args:
        logger_factory: Callable that returns a LoggerAdapter, signature:
                       (name: str, **context) -> LoggerAdapter.
                       Pass None to restore the standard library default.
    """
    global _logger_factory
    _logger_factory = logger_factory


def get_resolver_logger(
    name: str,
    url: Optional[str] = None,
    method: Optional[str] = None,
    status_code: Optional[int] = None,
    **extra_context: Any
) -> ResolverLoggerAdapter:
    """
    Get an httpbody logger with HTTP response context.

    Uses the configured logger factory if set, otherwise falls back to stdlib logging.

    Args:
        name: Logger name (typically __name__)
        url: Request URL
        method: HTTP method (GET, POST, etc.)
        status_code: HTTP response status code
        **extra_context: Additional context to bind

    Returns:
        ResolverLoggerAdapter with bound context
    """
    context: Dict[str, Any] = {**extra_context}

    if url is not None:
        context["url"] = url
    if method is not None:
        context["method"] = method
    if status_code is not None:
        context["status_code"] = status_code

    factory = _logger_factory or _default_logger_factory
    base_logger = factory(name, **context)

    return ResolverLoggerAdapter(base_logger, context)


def log_exception(
    logger: ResolverLoggerAdapter,
    exc: BaseException,
    event: str,
    **context: Any
) -> None:
    """
    Log an exception with httpbody context.

    Args:
        logger: Logger instance
        exc: Exception to log
        event: Event name (e.g., "decode.parse_failed")
        **context: Additional context

    Usage:
        try:
            value = adapter.validate_json(data)
        except ValidationError as exc:
            log_exception(logger, exc, "decode.parse_failed", model="Item")
            raise
    """
    error_context = {
        **context,
        "error_type": exc.__class__.__name__,
        "error_message": str(exc),
    }

    logger.error(event, exc_info=exc, **error_context)


def log_content_processing(
    logger: ResolverLoggerAdapter,
    operation: str,
    content_type: Optional[str] = None,
    charset: Optional[str] = None,
    size_bytes: Optional[int] = None,
    kind: Optional[str] = None,
    **context: Any
) -> None:
    """
    Log content processing operations (acquire, classify, decode).

    Args:
        logger: Logger instance
        operation: Operation name (e.g., "acquire", "classify", "decode")
        content_type: Media type from the Content-Type header
        charset: Declared charset
        size_bytes: Content size in bytes
        kind: Classified content kind (json, xml, binary, ...)
        **context: Additional context
    """
    if not logger.is_enabled_for(logging.DEBUG):
        return
    logger.debug(
        f"content.{operation}",
        content_type=content_type,
        charset=charset,
        size_bytes=size_bytes,
        kind=kind,
        **context
    )
