"""Test fixtures and factories for PIG items and packages.

This module provides:
- A session-wide validator over the JSON Schemas shipped with pigraph
- Factory functions building items in internal dictionary shape, one per
  instantiable kind, with just enough content to pass validation
- `to_models`, turning such dictionaries into typed models for the checker
- A small JSON-LD package document used by codec and package tests

The sample vocabulary models a requirements repository: `o:Requirement`
entities with `o:Priority` and `o:Weight` properties, and `o:Refines`
relationships between requirements.
"""

from typing import Any, Optional

import pytest

from pigschema import KIND_MODELS, ItemKind
from pigraph.schema import JsonSchemaValidator, default_validator

MODIFIED = "2025-03-01T12:00:00Z"


@pytest.fixture(scope="session")
def validator() -> JsonSchemaValidator:
    return default_validator()


# --- Item factories ---


def _text(value: Optional[str], lang: Optional[str] = "en") -> Optional[list[dict[str, str]]]:
    if value is None:
        return None
    return [{"value": value, "lang": lang}] if lang else [{"value": value}]


def make_property(item_id: str = "o:Weight", datatype: str = "xs:double", **fields: Any) -> dict[str, Any]:
    """A Property class specializing pig:Property."""
    item: dict[str, Any] = {
        "id": item_id,
        "itemType": ItemKind.PROPERTY.value,
        "specializes": "pig:Property",
        "title": _text(item_id.split(":")[-1]),
        "datatype": datatype,
    }
    item.update(fields)
    return item


def make_link(item_id: str = "o:refinesTarget", **fields: Any) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": item_id,
        "itemType": ItemKind.LINK.value,
        "specializes": "pig:Link",
        "title": _text(item_id.split(":")[-1]),
    }
    item.update(fields)
    return item


def make_entity_class(item_id: str = "o:Requirement", **fields: Any) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": item_id,
        "itemType": ItemKind.ENTITY.value,
        "specializes": "pig:Entity",
        "title": _text(item_id.split(":")[-1]),
    }
    item.update(fields)
    return item


def make_relationship_class(item_id: str = "o:Refines", **fields: Any) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": item_id,
        "itemType": ItemKind.RELATIONSHIP.value,
        "specializes": "pig:Relationship",
        "title": _text(item_id.split(":")[-1]),
    }
    item.update(fields)
    return item


def prop(has_class: str, value: Optional[str] = None, lang: Optional[str] = None, id_ref: Optional[str] = None):
    """A property value fragment."""
    fragment: dict[str, Any] = {"itemType": ItemKind.A_PROPERTY.value, "hasClass": has_class}
    if value is not None:
        fragment["value"] = value
    if lang is not None:
        fragment["lang"] = lang
    if id_ref is not None:
        fragment["idRef"] = id_ref
    return fragment


def link(kind: ItemKind, has_class: str, id_ref: str) -> dict[str, Any]:
    return {"itemType": kind.value, "hasClass": has_class, "idRef": id_ref}


def make_entity(
    item_id: str = "d:req-1",
    has_class: str = "o:Requirement",
    properties: Optional[list[dict[str, Any]]] = None,
    **fields: Any,
) -> dict[str, Any]:
    """An entity individual with a title and the given property values."""
    item: dict[str, Any] = {
        "id": item_id,
        "itemType": ItemKind.AN_ENTITY.value,
        "hasClass": has_class,
        "title": _text(f"Requirement {item_id}"),
        "modified": MODIFIED,
    }
    if properties is not None:
        item["hasProperty"] = properties
    item.update(fields)
    return item


def make_relationship(
    item_id: str = "d:rel-1",
    has_class: str = "o:Refines",
    source: str = "d:req-1",
    target: str = "d:req-2",
    **fields: Any,
) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": item_id,
        "itemType": ItemKind.A_RELATIONSHIP.value,
        "hasClass": has_class,
        "modified": MODIFIED,
        "hasSourceLink": [link(ItemKind.A_SOURCE_LINK, "o:refinesSource", source)],
        "hasTargetLink": [link(ItemKind.A_TARGET_LINK, "o:refinesTarget", target)],
    }
    item.update(fields)
    return item


def to_models(*items: dict[str, Any]) -> list[Any]:
    """Build typed models from internal dictionaries without schema validation."""
    return [KIND_MODELS[ItemKind(item["itemType"])].model_validate(item) for item in items]


# --- Documents ---


def sample_jsonld_package() -> dict[str, Any]:
    """A JSON-LD package with two property classes, an entity class and two entities."""
    return {
        "@context": {
            "pig": "https://product-information-graph.org/v0.2/metamodel#",
            "dcterms": "http://purl.org/dc/terms/",
            "xs": "http://www.w3.org/2001/XMLSchema#",
            "o": "https://product-information-graph.org/ontology/application#",
            "d": "https://product-information-graph.org/example#",
        },
        "@id": "d:pkg-requirements",
        "pig:itemType": {"@id": "pig:aPackage"},
        "dcterms:title": [{"@value": "Requirements", "@language": "en"}],
        "dcterms:modified": "2025-03-01T12:00:00Z",
        "@graph": [
            {
                "@id": "o:Weight",
                "pig:itemType": {"@id": "pig:Property"},
                "pig:specializes": {"@id": "pig:Property"},
                "dcterms:title": [{"@value": "Weight", "@language": "en"}],
                "sh:datatype": {"@id": "xs:double"},
                "xs:minInclusive": 0,
                "pig:unit": "kg",
            },
            {
                "@id": "o:Name",
                "pig:itemType": {"@id": "pig:Property"},
                "pig:specializes": {"@id": "pig:Property"},
                "dcterms:title": [{"@value": "Name", "@language": "en"}],
                "sh:datatype": {"@id": "xs:string"},
                "sh:maxCount": 2,
            },
            {
                "@id": "o:Requirement",
                "pig:itemType": {"@id": "pig:Entity"},
                "pig:specializes": {"@id": "pig:Entity"},
                "dcterms:title": [{"@value": "Requirement", "@language": "en"}],
                "pig:eligibleProperty": [{"@id": "o:Weight"}, {"@id": "o:Name"}],
            },
            {
                "@id": "d:req-1",
                "pig:itemType": {"@id": "pig:anEntity"},
                "@type": {"@id": "o:Requirement"},
                "dcterms:title": [{"@value": "Load capacity", "@language": "en"}],
                "dcterms:modified": "2025-03-01T12:00:00Z",
                "o:Weight": [{"pig:itemType": {"@id": "pig:aProperty"}, "@value": "100.5"}],
                "o:Name": [
                    {"pig:itemType": {"@id": "pig:aProperty"}, "@value": "Crane", "@language": "en"},
                    {"pig:itemType": {"@id": "pig:aProperty"}, "@value": "Kran", "@language": "de"},
                ],
            },
            {
                "@id": "d:req-2",
                "pig:itemType": {"@id": "pig:anEntity"},
                "@type": {"@id": "o:Requirement"},
                "dcterms:title": [{"@value": "Reach", "@language": "en"}],
                "dcterms:modified": "2025-03-01T12:00:00Z",
                "o:Weight": [{"pig:itemType": {"@id": "pig:aProperty"}, "@value": "12"}],
            },
        ],
    }
