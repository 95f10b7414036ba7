"""
Charset name to codec resolution.

``resolve_encoding`` never fails: empty, unknown or malformed charset names
resolve to UTF-8. Results are memoised in a process-wide, append-only cache.
Concurrent population is harmless: every writer for a given key stores an
equivalent ``CodecInfo`` (unknown names always map to UTF-8), and a single
dict assignment is atomic under the GIL.
"""

from __future__ import annotations

import codecs
from typing import Dict, Optional

__all__ = [
    "UTF8",
    "resolve_encoding",
    "decode_bytes",
    "cached_charsets",
]

UTF8: codecs.CodecInfo = codecs.lookup("utf-8")

_UTF8_ALIASES = frozenset({"utf-8", "utf8"})

_cache: Dict[str, codecs.CodecInfo] = {}


def resolve_encoding(charset: Optional[str]) -> codecs.CodecInfo:
    """
    Map a charset name to a codec.

    Args:
        charset: Charset token from a Content-Type header, case-insensitive.
            Surrounding quotes and whitespace are ignored.

    Returns:
        The codec for ``charset``, or UTF-8 when it is absent or unresolvable.
    """
    if charset is None:
        return UTF8

    key = charset.strip().strip('"\'').strip().lower()
    if not key or key in _UTF8_ALIASES:
        return UTF8

    codec = _cache.get(key)
    if codec is not None:
        return codec

    try:
        codec = codecs.lookup(key)
    except (LookupError, ValueError, TypeError):
        codec = UTF8
    else:
        # text-to-binary codecs (base64, rot13 ...) are not charsets
        if not getattr(codec, "_is_text_encoding", True):
            codec = UTF8

    _cache[key] = codec
    return codec


def decode_bytes(data: bytes, charset: Optional[str] = None, errors: str = "replace") -> str:
    """Decode ``data`` with the resolved charset; invalid sequences are replaced by default."""
    if not data:
        return ""
    codec = resolve_encoding(charset)
    text, _ = codec.decode(data, errors)
    return text


def cached_charsets() -> frozenset[str]:
    """Names currently held in the resolution cache."""
    return frozenset(_cache)


def _clear_cache() -> None:
    _cache.clear()
