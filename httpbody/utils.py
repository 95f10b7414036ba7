from __future__ import annotations
from typing import Optional
import httpx

__all__ = [
    "normalize_content_type",
    "extract_charset",
    "declared_length",
    "is_buffered",
    "type_name",
    "request_url",
]

def normalize_content_type(hdrs: httpx.Headers) -> Optional[str]:
        ct = hdrs.get("Content-Type")
        if not ct:
            return None
        media = ct.split(";")[0].strip().lower()
        return media or None

def extract_charset(hdrs: httpx.Headers) -> Optional[str]:
        ct = hdrs.get("Content-Type", "")
        parts = ct.split(";")
        for p in parts[1:]:
            p = p.strip()
            if p.lower().startswith("charset="):
                return p.split("=", 1)[1].strip().strip('"\'') or None
        return None

def declared_length(hdrs: httpx.Headers) -> Optional[int]:
        """Content-Length as an int; None when absent or malformed."""
        raw = hdrs.get("Content-Length")
        if raw is None:
            return None
        raw = raw.strip()
        if not raw.isdigit():
            return None
        return int(raw)

def is_buffered(response: httpx.Response) -> bool:
        """True when the body is already in memory (``content=`` or a prior read)."""
        try:
            response.content
        except httpx.ResponseNotRead:
            return False
        return True

def type_name(model: object) -> str:
        return getattr(model, "__name__", None) or repr(model)

def request_url(response: httpx.Response) -> Optional[str]:
        try:
            return str(response.request.url)
        except RuntimeError:
            return None
