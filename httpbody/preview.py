"""Length-capped, charset-correct body previews for log records."""

from __future__ import annotations

from typing import Optional

from .config import DEFAULT_MAX_PREVIEW_CHARS, DEFAULT_TRUNCATION_MARKER
from .encoding import resolve_encoding

__all__ = ["preview"]


def preview(
    data: Optional[bytes],
    charset: Optional[str] = None,
    max_chars: int = DEFAULT_MAX_PREVIEW_CHARS,
    max_bytes_per_char: int = 4,
    marker: str = DEFAULT_TRUNCATION_MARKER,
) -> str:
    """
    Render the start of a body as text for diagnostics.

    At most ``max_chars * max_bytes_per_char`` bytes are decoded, so a large
    body costs no more than a small one. A trailing partial multi-byte
    sequence at the cut is held back rather than rendered as a replacement
    character.

    Args:
        data: Body bytes (may be the full body; only a prefix is read)
        charset: Declared charset; unresolvable names fall back to UTF-8
        max_chars: Character cap before the marker
        max_bytes_per_char: Worst-case encoded width used to bound the byte budget
        marker: Appended when the text was cut

    Returns:
        The decoded text, or ``max_chars`` characters followed by ``marker``.
    """
    if not data:
        return ""

    max_bytes = max_chars * max_bytes_per_char
    cut = len(data) > max_bytes
    chunk = memoryview(data)[:max_bytes] if cut else data

    decoder = resolve_encoding(charset).incrementaldecoder("replace")
    text = decoder.decode(bytes(chunk), final=not cut)

    if len(text) > max_chars:
        return text[:max_chars] + marker
    if cut:
        return text + marker
    return text
