"""Normalization applied to every decoded item, whatever its wire format."""

import logging
from typing import Any, Optional

from pydantic import BaseModel

from pigschema import ItemKind
from pigraph.config import DEFAULT_CONFIG, PigConfig
from pigraph.identifiers import normalize_datetime, normalize_id, now_iso
from pigraph.text import normalize_text
from pigraph.vocabulary import INTEGER_FIELDS, NUMBER_FIELDS, TEXT_FIELDS

logger = logging.getLogger(__name__)

# Internal fields holding a list even when a document carries a single value.
ALWAYS_ARRAY = frozenset(
    {
        "eligibleValue",
        "eligibleEndpoint",
        "eligibleProperty",
        "composedProperty",
        "aComposedProperty",
        "priorRevision",
        "hasProperty",
        "hasSourceLink",
        "hasTargetLink",
    }
)

# Where each fragment kind is kept on an individual.
FRAGMENT_FIELDS: dict[ItemKind, str] = {
    ItemKind.A_PROPERTY: "hasProperty",
    ItemKind.A_SOURCE_LINK: "hasSourceLink",
    ItemKind.A_TARGET_LINK: "hasTargetLink",
}


def is_list_field(name: str, kind: Optional[ItemKind]) -> bool:
    """Whether name is list-valued on an item of kind.

    `eligibleTargetLink` is a list on entity classes and a single reference on
    relationship classes.
    """
    if name == "eligibleTargetLink":
        return kind == ItemKind.ENTITY
    return name in ALWAYS_ARRAY


def literal(value: Any) -> str:
    """Render a scalar property value as the string stored in `value`."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_number(name: str, value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return value
    try:
        if name in INTEGER_FIELDS:
            return int(value)
        number = float(value)
        return int(number) if isinstance(value, int) else number
    except ValueError:
        logger.warning("Field %s has non-numeric value %r", name, value)
        return value


def _normalize_fragment(fragment: dict[str, Any]) -> dict[str, Any]:
    fragment = {k: v for k, v in fragment.items() if v is not None}
    if "value" in fragment and not isinstance(fragment["value"], str):
        fragment["value"] = literal(fragment["value"])
    if "aComposedProperty" in fragment and not isinstance(fragment["aComposedProperty"], list):
        fragment["aComposedProperty"] = [fragment["aComposedProperty"]]
    return fragment


def finish_item(obj: dict[str, Any], config: PigConfig = DEFAULT_CONFIG) -> dict[str, Any]:
    """Bring a renamed, unwrapped item object into canonical internal shape.

    Normalizes the identifier, multi-language texts, datatype prefix, numeric
    constraint fields, list-valued fields and, on individuals, the `modified`
    timestamp. Values that cannot be normalized are left for validation to
    reject.
    """
    kind = ItemKind.parse(obj.get("itemType"))
    out: dict[str, Any] = {}
    for name, value in obj.items():
        if value is None:
            continue
        if name == "itemType" and kind is not None:
            value = kind.value
        elif name == "id" and isinstance(value, str):
            value = normalize_id(value, kind, config)
        elif name in TEXT_FIELDS:
            value = normalize_text(value)
        elif name == "datatype" and isinstance(value, str) and value.startswith("xsd:"):
            value = "xs:" + value[len("xsd:"):]
        elif name in INTEGER_FIELDS or name in NUMBER_FIELDS:
            value = _parse_number(name, value)
        elif name == "icon" and not isinstance(value, dict):
            value = {"value": str(value)}
        if is_list_field(name, kind) and not isinstance(value, list):
            value = [value]
        elif name == "eligibleTargetLink" and kind == ItemKind.RELATIONSHIP and isinstance(value, list) and len(value) == 1:
            value = value[0]
        if name == "eligibleValue":
            value = [{**entry, "title": normalize_text(entry.get("title"))} if isinstance(entry, dict) else entry for entry in value]
        elif name in FRAGMENT_FIELDS.values():
            value = [_normalize_fragment(f) if isinstance(f, dict) else f for f in value]
        out[name] = value

    if kind is not None and (kind.is_individual or kind == ItemKind.PACKAGE):
        raw = out.get("modified")
        modified = normalize_datetime(raw, config)
        if modified is None:
            if raw is not None:
                logger.warning("Item %s has invalid modified %r, using current time", out.get("id"), raw)
            modified = now_iso()
        out["modified"] = modified
    return out


def as_internal_dict(item: Any) -> dict[str, Any]:
    """Return the internal dictionary shape of a model, a `GraphItem` or a dict."""
    if isinstance(item, BaseModel):
        return item.model_dump(mode="json", by_alias=True, exclude_none=True)
    to_dict = getattr(item, "to_dict", None)
    if callable(to_dict):
        value = to_dict()
        if value is None:
            raise ValueError(f"cannot encode invalid item {item!r}")
        return value
    if isinstance(item, dict):
        return {k: v for k, v in item.items() if v is not None}
    raise TypeError(f"cannot encode {type(item).__name__}")
