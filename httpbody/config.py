from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    import httpx
    from .logging import ResolverLoggerAdapter

DEFAULT_PEEK_SIZE = 1024
DEFAULT_MAX_BUFFERED_BYTES = 64 * 1024
DEFAULT_MAX_PREVIEW_CHARS = 4096
DEFAULT_TRUNCATION_MARKER = "…"

@dataclass
class ResolverSettings:
    # Streaming path
    peek_size: int = DEFAULT_PEEK_SIZE               # bytes sniffed before committing to a parse
    max_buffered_bytes: int = DEFAULT_MAX_BUFFERED_BYTES  # declared lengths at or below this are buffered

    # Diagnostics
    max_preview_chars: int = DEFAULT_MAX_PREVIEW_CHARS
    max_bytes_per_char: int = 4                      # worst case for utf-8 / utf-32
    truncation_marker: str = DEFAULT_TRUNCATION_MARKER

    # Logging
    logger: Optional["ResolverLoggerAdapter"] = None  # Optional custom logger instance

    # Routing override: return True to take the streaming path
    stream_predicate: Optional[Callable[["httpx.Response"], bool]] = None

    @property
    def max_preview_bytes(self) -> int:
        return self.max_preview_chars * self.max_bytes_per_char
