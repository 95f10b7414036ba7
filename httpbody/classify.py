"""
Content classification and the success gate.

Every predicate here is a pure function of the response status and headers,
or of a byte prefix for the sniffers. They are independent: a problem+json
response is both ``is_json`` and ``is_problem_json``, so callers test the most
specific predicate first.
"""

from __future__ import annotations

from typing import Optional

import httpx

from .encoding import resolve_encoding
from .utils import declared_length, normalize_content_type

__all__ = [
    "NO_CONTENT_STATUSES",
    "is_success",
    "is_no_content",
    "is_json",
    "is_problem_json",
    "is_xml",
    "looks_binary",
    "looks_like_json",
    "looks_like_xml",
    "media_type",
]

NO_CONTENT_STATUSES = frozenset({204, 205})

PROBLEM_JSON = "application/problem+json"

_BINARY_PREFIXES = ("image/", "audio/", "video/")
_XML_TYPES = frozenset({"application/xml", "text/xml"})

_BOM = "\ufeff"
_WHITESPACE = " \t\r\n"
_JSON_LEADING = frozenset('{["-0123456789tfn')
_JSON_LITERALS = ("true", "false", "null")


def media_type(response: httpx.Response) -> Optional[str]:
    return normalize_content_type(response.headers)


# ============================================================================
# Success Gate
# ============================================================================


def is_success(response: httpx.Response) -> bool:
    """2xx status."""
    return 200 <= response.status_code <= 299


# ============================================================================
# Header-based classification
# ============================================================================


def is_no_content(response: httpx.Response) -> bool:
    """True for 204/205, or a declared Content-Length of exactly 0."""
    if response.status_code in NO_CONTENT_STATUSES:
        return True
    return declared_length(response.headers) == 0


def is_json(response: httpx.Response) -> bool:
    media = media_type(response)
    if media is None:
        return False
    return media == "application/json" or media.endswith("+json")


def is_problem_json(response: httpx.Response) -> bool:
    return media_type(response) == PROBLEM_JSON


def is_xml(response: httpx.Response) -> bool:
    media = media_type(response)
    if media is None:
        return False
    return media in _XML_TYPES or media.endswith("+xml")


def looks_binary(response: httpx.Response) -> bool:
    """Media payloads that should skip text decoding and body previews."""
    media = media_type(response)
    if media is None:
        return False
    return media.startswith(_BINARY_PREFIXES) or media == "application/octet-stream"


# ============================================================================
# Prefix sniffing
# ============================================================================


def _significant(prefix: bytes, charset: Optional[str] = None) -> str:
    # A trailing partial character stays in the decoder; only whole ones count.
    decoder = resolve_encoding(charset).incrementaldecoder(errors="replace")
    text = decoder.decode(prefix, final=False)
    return text.lstrip(_BOM).lstrip(_WHITESPACE)


def looks_like_json(prefix: bytes, charset: Optional[str] = None) -> bool:
    """
    Cheap structural check on the leading bytes of a body.

    The prefix is decoded with the declared charset first, so UTF-16 and
    UTF-32 documents are judged by their characters, not their bytes.
    Accepts an object, array, string or number by its first non-whitespace
    character. ``true``/``false``/``null`` must match as far as the prefix
    reaches, so ``not json`` is rejected. Nothing is parsed.
    """
    head = _significant(prefix, charset)
    if not head or head[0] not in _JSON_LEADING:
        return False
    for literal in _JSON_LITERALS:
        if head[0] == literal[0]:
            return literal.startswith(head[:len(literal)])
    return True


def looks_like_xml(prefix: bytes, charset: Optional[str] = None) -> bool:
    """First non-whitespace character opens a tag, declaration or comment."""
    return _significant(prefix, charset)[:1] == "<"
