"""
Product Information Graph - Codec, Validation and Consistency Checking.

Reads and writes PIG packages in JSON-LD and XML, validates every item against
its kind's JSON Schema and semantic rules, and checks whole graphs for
referential integrity, acyclic specialization and property cardinality.

This module uses lazy imports so that the codec and the checker can be used
without loading httpx, jsonschema or BeautifulSoup. For example:

    # This does NOT import httpx:
    from pigraph import WireFormat, decode

    # This DOES import httpx and jsonschema (when the symbol is accessed):
    from pigraph import Package
"""

from typing import TYPE_CHECKING

from pigraph.codec import DecodedPackage, DecodeError, WireFormat, decode, decode_item, encode, encode_package
from pigraph.config import DEFAULT_CONFIG, PigConfig
from pigraph.constraints import ConsistencyChecker, check
from pigraph.items import GraphItem, create_item, validate_item
from pigraph.text import get_local_text

if TYPE_CHECKING:
    from pigraph.loaders import load_package, read_document
    from pigraph.package import ImportResult, ItemFailure, Package, import_jsonld, import_reqif, import_xml
    from pigraph.render import render_item_html, sanitize_html
    from pigraph.schema import JsonSchemaValidator, SchemaCache, default_validator

__all__ = [
    "ConsistencyChecker",
    "DEFAULT_CONFIG",
    "DecodeError",
    "DecodedPackage",
    "GraphItem",
    "ImportResult",
    "ItemFailure",
    "JsonSchemaValidator",
    "Package",
    "PigConfig",
    "SchemaCache",
    "WireFormat",
    "check",
    "create_item",
    "decode",
    "decode_item",
    "default_validator",
    "encode",
    "encode_package",
    "get_local_text",
    "import_jsonld",
    "import_reqif",
    "import_xml",
    "load_package",
    "read_document",
    "render_item_html",
    "sanitize_html",
    "validate_item",
]

__version__ = "0.1.0"

_LAZY = {
    "ImportResult": "pigraph.package",
    "ItemFailure": "pigraph.package",
    "Package": "pigraph.package",
    "import_jsonld": "pigraph.package",
    "import_reqif": "pigraph.package",
    "import_xml": "pigraph.package",
    "load_package": "pigraph.loaders",
    "read_document": "pigraph.loaders",
    "render_item_html": "pigraph.render",
    "sanitize_html": "pigraph.render",
    "JsonSchemaValidator": "pigraph.schema",
    "SchemaCache": "pigraph.schema",
    "default_validator": "pigraph.schema",
}


def __getattr__(name: str):
    """Lazy import for modules depending on httpx, jsonschema or BeautifulSoup."""
    if name in _LAZY:
        import importlib

        return getattr(importlib.import_module(_LAZY[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
