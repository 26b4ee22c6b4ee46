"""JSON-LD codec.

A PIG JSON-LD package is an object with `@context` and `@graph`; each graph
entry carries its kind as `"pig:itemType": {"@id": ...}`. References appear
wrapped as `{"@id": ...}` and texts as `{"@value": ..., "@language": ...}`.

Individuals carry their property values and links as *configurable* keys:
the key is the identifier of the defining Property or Link class, e.g.

    "o:Weight": [{"pig:itemType": {"@id": "pig:aProperty"}, "@value": "100.5"}]

On decode these keys are moved into `hasProperty`, `hasSourceLink` and
`hasTargetLink`; on encode they are regrouped under their class identifier.
"""

import json
import logging
from typing import Any

from pigschema import ItemKind
from pigraph.codec.base import DecodedPackage, DecodeError
from pigraph.codec.normalize import FRAGMENT_FIELDS, as_internal_dict, finish_item, literal
from pigraph.config import DEFAULT_CONFIG, PigConfig
from pigraph.identifiers import is_valid_id
from pigraph.jsontree import KeyRenamer, unwrap_ids, wrap_ids
from pigraph.vocabulary import CONFIGURABLE_SKIP_KEYS, FROM_JSONLD, TO_JSONLD

logger = logging.getLogger(__name__)

_FROM_JSONLD = KeyRenamer(FROM_JSONLD)
_TO_JSONLD = KeyRenamer(TO_JSONLD)


def _load(document: str | bytes | dict[str, Any]) -> Any:
    if isinstance(document, (str, bytes)):
        try:
            return json.loads(document)
        except ValueError as exc:
            raise DecodeError(f"invalid JSON: {exc}") from exc
    return document


def _fragment(class_id: str, entry: Any) -> dict[str, Any]:
    """Turn one value under a configurable key into a fragment in internal shape."""
    if not isinstance(entry, dict):
        return {"itemType": ItemKind.A_PROPERTY.value, "hasClass": class_id, "value": literal(entry)}
    kind = ItemKind.parse(entry.get("itemType")) or ItemKind.A_PROPERTY
    fragment: dict[str, Any] = {"itemType": kind.value, "hasClass": class_id}
    if kind == ItemKind.A_PROPERTY:
        if "value" in entry:
            fragment["value"] = literal(entry["value"])
        if entry.get("lang"):
            fragment["lang"] = entry["lang"]
        if "id" in entry:
            fragment["idRef"] = entry["id"]
        if entry.get("aComposedProperty"):
            fragment["aComposedProperty"] = entry["aComposedProperty"]
    else:
        fragment["idRef"] = entry.get("id", entry.get("idRef"))
    return fragment


def collect_configurables(obj: dict[str, Any]) -> dict[str, Any]:
    """Move configurable keys of a renamed individual into its fragment lists.

    A key is configurable if it is not an internal field name and is an
    identifier. Its value may be a scalar, one object or a list of objects;
    each becomes a fragment whose `hasClass` is the key. The key is removed.
    """
    out = dict(obj)
    for key in list(obj):
        if key in CONFIGURABLE_SKIP_KEYS or not is_valid_id(key):
            continue
        raw = out.pop(key)
        for entry in raw if isinstance(raw, list) else [raw]:
            fragment = _fragment(key, entry)
            field = FRAGMENT_FIELDS.get(ItemKind(fragment["itemType"]))
            if field is None:
                logger.warning("Dropping %s value of %s with itemType %s", key, obj.get("id"), fragment["itemType"])
                continue
            out.setdefault(field, []).append(fragment)
    return out


def add_configurables(jld: dict[str, Any], fragments: list[dict[str, Any]]) -> dict[str, Any]:
    """Regroup fragments under their `hasClass` as configurable keys of jld."""
    for fragment in fragments:
        wire: dict[str, Any] = {"pig:itemType": fragment.get("itemType", ItemKind.A_PROPERTY.value)}
        if "value" in fragment:
            wire["@value"] = fragment["value"]
        if fragment.get("lang"):
            wire["@language"] = fragment["lang"]
        if "idRef" in fragment:
            wire["@id"] = fragment["idRef"]
        if fragment.get("aComposedProperty"):
            wire["pig:aComposedProperty"] = fragment["aComposedProperty"]
        jld.setdefault(fragment["hasClass"], []).append(wire)
    return jld


def decode_item(document: str | bytes | dict[str, Any], config: PigConfig = DEFAULT_CONFIG) -> dict[str, Any]:
    """Decode one JSON-LD item object into internal shape."""
    obj = _load(document)
    if not isinstance(obj, dict):
        raise DecodeError("a JSON-LD item must be an object")
    tree = _FROM_JSONLD.visit(unwrap_ids(obj))
    kind = ItemKind.parse(tree.get("itemType"))
    if kind is not None and kind.is_individual:
        tree = collect_configurables(tree)
    return finish_item(tree, config)


def encode_item(item: Any) -> dict[str, Any]:
    """Encode an item (model, `GraphItem` or internal dict) as a JSON-LD object."""
    obj = as_internal_dict(item)
    fragments: list[dict[str, Any]] = []
    for field in FRAGMENT_FIELDS.values():
        fragments.extend(obj.pop(field, None) or [])
    jld = add_configurables(_TO_JSONLD.visit(obj), fragments)
    return wrap_ids(jld)


def context_from_jsonld(context: Any) -> list[dict[str, str]]:
    """Flatten an `@context` value into `[{"tag": "prefix:", "uri": ...}]` entries."""
    namespaces: list[dict[str, str]] = []
    for part in context if isinstance(context, list) else [context]:
        if isinstance(part, str):
            namespaces.append({"tag": "@context", "uri": part})
        elif isinstance(part, dict):
            for prefix, uri in part.items():
                if isinstance(uri, dict):
                    uri = uri.get("@id")
                if not isinstance(uri, str):
                    continue
                tag = prefix if prefix.startswith("@") else f"{prefix}:"
                namespaces.append({"tag": tag, "uri": uri})
    return namespaces


def context_to_jsonld(namespaces: list[dict[str, str]]) -> dict[str, str]:
    return {ns["tag"].rstrip(":"): ns["uri"] for ns in namespaces if ns["tag"] != "@context"}


def decode_package(document: str | bytes | dict[str, Any], config: PigConfig = DEFAULT_CONFIG) -> DecodedPackage:
    """Decode a JSON-LD package document into its header and graph items."""
    doc = _load(document)
    if not isinstance(doc, dict):
        raise DecodeError("a JSON-LD package must be an object")
    graph = doc.get("@graph", [])
    if not isinstance(graph, list):
        raise DecodeError("@graph must be an array")
    if not graph:
        logger.warning("Package %s has an empty @graph", doc.get("@id"))

    head = {k: v for k, v in doc.items() if k not in ("@graph", "@context")}
    header = _FROM_JSONLD.visit(unwrap_ids(head))
    header["itemType"] = ItemKind.PACKAGE.value
    header = finish_item(header, config)
    context = context_from_jsonld(doc.get("@context"))
    header["context"] = context or [{"tag": f"{p}:", "uri": u} for p, u in config.namespaces.items()]

    items = [decode_item(entry, config) if isinstance(entry, dict) else entry for entry in graph]
    return DecodedPackage(header=header, items=items)


def encode_package(header: dict[str, Any], items: list[Any]) -> dict[str, Any]:
    """Encode a package header and its items as a JSON-LD document."""
    head = {k: v for k, v in header.items() if k != "context" and v is not None}
    doc: dict[str, Any] = {"@context": context_to_jsonld(header.get("context") or [])}
    doc.update(wrap_ids(_TO_JSONLD.visit(head)))
    doc["@graph"] = [encode_item(item) for item in items]
    return doc
