"""Item kinds and datatypes of the Product Information Graph.

The graph distinguishes three families of items:

- **Classes** (`pig:Property`, `pig:Link`, `pig:Entity`, `pig:Relationship`)
  define schema-level types. A class either specializes another class of the
  same kind or names its metaclass via `hasClass`.
- **Individuals** (`pig:anEntity`, `pig:aRelationship`) are nodes and edges of
  the graph. Each references its class via `hasClass`.
- **Fragments** (`pig:aProperty`, `pig:aSourceLink`, `pig:aTargetLink`) are
  payloads embedded in an individual. They have no identity of their own.

The package container (`pig:aPackage`) wraps a header and a list of classes
and individuals.
"""

from enum import Enum


class ItemKind(str, Enum):
    """Closed set of item kinds, valued by their namespaced wire name."""

    PROPERTY = "pig:Property"
    LINK = "pig:Link"
    ENTITY = "pig:Entity"
    RELATIONSHIP = "pig:Relationship"
    AN_ENTITY = "pig:anEntity"
    A_RELATIONSHIP = "pig:aRelationship"
    A_PROPERTY = "pig:aProperty"
    A_SOURCE_LINK = "pig:aSourceLink"
    A_TARGET_LINK = "pig:aTargetLink"
    PACKAGE = "pig:aPackage"

    @classmethod
    def parse(cls, value: object) -> "ItemKind | None":
        """Return the kind for a wire name, or None if it is not a PIG kind."""
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            value = value.get("@id", value.get("id"))
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def is_class(self) -> bool:
        return self in CLASS_KINDS

    @property
    def is_individual(self) -> bool:
        return self in INDIVIDUAL_KINDS

    @property
    def is_fragment(self) -> bool:
        return self in FRAGMENT_KINDS

    @property
    def defining_kind(self) -> "ItemKind | None":
        """The class kind that an individual or fragment's `hasClass` must resolve to."""
        return DEFINING_KINDS.get(self)


CLASS_KINDS = frozenset({ItemKind.PROPERTY, ItemKind.LINK, ItemKind.ENTITY, ItemKind.RELATIONSHIP})
INDIVIDUAL_KINDS = frozenset({ItemKind.AN_ENTITY, ItemKind.A_RELATIONSHIP})
FRAGMENT_KINDS = frozenset({ItemKind.A_PROPERTY, ItemKind.A_SOURCE_LINK, ItemKind.A_TARGET_LINK})

# Kinds a package graph may contain.
INSTANTIABLE_KINDS = CLASS_KINDS | INDIVIDUAL_KINDS

DEFINING_KINDS = {
    ItemKind.AN_ENTITY: ItemKind.ENTITY,
    ItemKind.A_RELATIONSHIP: ItemKind.RELATIONSHIP,
    ItemKind.A_PROPERTY: ItemKind.PROPERTY,
    ItemKind.A_SOURCE_LINK: ItemKind.LINK,
    ItemKind.A_TARGET_LINK: ItemKind.LINK,
}


class DataType(str, Enum):
    """XML Schema datatypes a Property class may declare."""

    ANY_TYPE = "xs:anyType"
    BOOLEAN = "xs:boolean"
    INTEGER = "xs:integer"
    DOUBLE = "xs:double"
    STRING = "xs:string"
    ANY_URI = "xs:anyURI"
    DATE = "xs:date"
    DATE_TIME = "xs:dateTime"
    DURATION = "xs:duration"
    COMPLEX_TYPE = "xs:complexType"

    @property
    def is_numeric(self) -> bool:
        return self in (DataType.INTEGER, DataType.DOUBLE)
