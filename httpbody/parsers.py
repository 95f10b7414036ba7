"""
Parser bindings: pydantic for typed validation, ElementTree for XML.

The resolver never parses by hand; it hands bytes or a stream to these
functions and decides what to do with the outcome.

XML documents become plain mappings before validation: child elements are
keyed by local name (namespaces dropped), attributes sit beside them,
repeated children collect into a list, and text-only leaves become strings.
The root element's own tag is not part of the mapping, so

    <Item id="7"><Name>Test</Name></Item>

validates against a model with ``id`` and ``Name`` fields.
"""

from __future__ import annotations

import codecs
import functools
from typing import Any, AsyncIterable, Optional
from xml.etree import ElementTree

from pydantic import TypeAdapter

from .encoding import UTF8, decode_bytes, resolve_encoding

__all__ = [
    "adapter_for",
    "parse_json",
    "parse_xml_stream",
    "element_to_data",
]

TEXT_KEY = "#text"


@functools.lru_cache(maxsize=256)
def adapter_for(model: Any) -> TypeAdapter[Any]:
    """Cached TypeAdapter; building one compiles a validator."""
    return TypeAdapter(model)


# ============================================================================
# JSON
# ============================================================================


def parse_json(data: bytes, model: Any, charset: Optional[str] = None) -> Any:
    """
    Validate a JSON document against ``model``. Raises ValidationError.

    Bytes in a declared non-UTF-8 charset are decoded to text first.
    """
    if charset is not None and resolve_encoding(charset) is not UTF8:
        return adapter_for(model).validate_json(decode_bytes(data, charset))
    return adapter_for(model).validate_json(data)


# ============================================================================
# XML
# ============================================================================


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def element_to_data(element: ElementTree.Element) -> Any:
    children = list(element)
    text = (element.text or "").strip()

    if not children and not element.attrib:
        return text or None

    data: dict[str, Any] = {_local_name(k): v for k, v in element.attrib.items()}
    repeated: set[str] = set()
    for child in children:
        key = _local_name(child.tag)
        value = element_to_data(child)
        if key not in data:
            data[key] = value
        elif key in repeated:
            data[key].append(value)
        else:
            data[key] = [data[key], value]
            repeated.add(key)

    if text and not children:
        data[TEXT_KEY] = text
    return data


def _text_decoder(charset: Optional[str]) -> Optional[codecs.IncrementalDecoder]:
    # expat only takes single-byte encodings by name, so anything that is not
    # UTF-8 is decoded here and fed as str. UTF-8 bytes go to expat untouched.
    if charset is None:
        return None
    codec = resolve_encoding(charset)
    if codec is UTF8:
        return None
    return codec.incrementaldecoder(errors="replace")


async def parse_xml_stream(
    stream: AsyncIterable[bytes], model: Any, charset: Optional[str] = None
) -> Any:
    """
    Parse an XML body chunk by chunk and validate it against ``model``.

    Without a declared charset (or with UTF-8) expat reads the bytes and
    honours the XML declaration. Any other declared charset wins over the
    declaration.

    Returns:
        The validated value, or None for an empty root element

    Raises:
        xml.etree.ElementTree.ParseError: Malformed XML
        pydantic.ValidationError: Document does not fit ``model``
    """
    parser = ElementTree.XMLParser()
    decoder = _text_decoder(charset)
    async for chunk in stream:
        parser.feed(decoder.decode(chunk) if decoder is not None else chunk)
    if decoder is not None:
        tail = decoder.decode(b"", final=True)
        if tail:
            parser.feed(tail)
    root = parser.close()
    data = element_to_data(root)
    if data is None:
        return None
    return adapter_for(model).validate_python(data)
