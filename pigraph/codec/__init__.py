"""Bidirectional conversion between PIG documents and the internal item shape.

The internal shape is a plain dictionary per item using the field names of
`pigschema.items` in camelCase (`id`, `itemType`, `hasClass`, `title`, ...).
Decoding never validates; it only normalizes. Validation is done when a
decoded item is instantiated (see `pigraph.items`). ReqIF documents can be
decoded as packages but not encoded.

Example:
    ```python
    from pigraph.codec import WireFormat, decode_item, encode

    item = decode_item(jsonld_text, WireFormat.JSONLD)
    xml_text = encode(item, WireFormat.XML)
    ```
"""

import json
from typing import Any

from pigraph.codec import jsonld, reqif, xml
from pigraph.codec.base import DecodedPackage, DecodeError, WireFormat
from pigraph.config import DEFAULT_CONFIG, PigConfig


def _import_only(fmt: WireFormat) -> ValueError:
    return ValueError(f"{fmt.value} is an import-only format")


def decode_item(document: Any, fmt: WireFormat | str, config: PigConfig = DEFAULT_CONFIG) -> dict[str, Any]:
    """Decode a document holding a single item."""
    fmt = WireFormat(fmt)
    if fmt == WireFormat.JSONLD:
        return jsonld.decode_item(document, config)
    if fmt == WireFormat.REQIF:
        raise DecodeError("a ReqIF document holds a package, not a single item")
    return xml.decode_item(document, config)


def decode(document: Any, fmt: WireFormat | str, config: PigConfig = DEFAULT_CONFIG) -> DecodedPackage:
    """Decode a package document into its header and graph items.

    Raises:
        DecodeError: The document is malformed.
    """
    fmt = WireFormat(fmt)
    if fmt == WireFormat.JSONLD:
        return jsonld.decode_package(document, config)
    if fmt == WireFormat.REQIF:
        return reqif.decode_package(document, config)
    return xml.decode_package(document, config)


def encode(item: Any, fmt: WireFormat | str, config: PigConfig = DEFAULT_CONFIG) -> str:
    """Encode a single item as a document string."""
    fmt = WireFormat(fmt)
    if fmt == WireFormat.JSONLD:
        return json.dumps(jsonld.encode_item(item), indent=2, ensure_ascii=False)
    if fmt == WireFormat.REQIF:
        raise _import_only(fmt)
    return xml.encode_item(item, config)


def encode_package(
    header: dict[str, Any], items: list[Any], fmt: WireFormat | str, config: PigConfig = DEFAULT_CONFIG
) -> str:
    """Encode a package header and its items as a document string."""
    fmt = WireFormat(fmt)
    if fmt == WireFormat.JSONLD:
        return json.dumps(jsonld.encode_package(header, items), indent=2, ensure_ascii=False)
    if fmt == WireFormat.REQIF:
        raise _import_only(fmt)
    return xml.encode_package(header, items, config)


__all__ = [
    "DecodeError",
    "DecodedPackage",
    "WireFormat",
    "decode",
    "decode_item",
    "encode",
    "encode_package",
    "jsonld",
    "reqif",
    "xml",
]
