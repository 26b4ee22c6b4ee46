"""ReqIF import.

A ReqIF exchange document is read into the same internal shape as a PIG
package. The document's type system becomes PIG classes and its content
becomes individuals:

    DATATYPE-DEFINITION-*     datatype and constraints of the Properties using it
    ATTRIBUTE-DEFINITION-*    pig:Property
    SPEC-OBJECT-TYPE          pig:Entity
    SPECIFICATION-TYPE        pig:Entity
    SPEC-RELATION-TYPE        pig:Relationship, with a pig:Link for each end
    SPEC-OBJECT               pig:anEntity
    SPECIFICATION             pig:anEntity (the hierarchy below it is not kept)
    SPEC-RELATION             pig:aRelationship

ReqIF identifiers are bare, so classes get the configured class prefix and
individuals the individual prefix. XHTML attribute values keep their markup,
without the `xhtml:` prefix. ReqIF is read only; there is no ReqIF encoder.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Iterator, Optional

from pigschema import DataType, ItemKind
from pigraph.codec.base import DecodedPackage, DecodeError
from pigraph.codec.normalize import finish_item
from pigraph.codec.xml import markup_text
from pigraph.config import DEFAULT_CONFIG, PigConfig
from pigraph.identifiers import normalize_id
from pigraph.vocabulary import REQIF_NS, XHTML_NS

logger = logging.getLogger(__name__)

ROOT_TAG = "REQ-IF"

# Suffix of DATATYPE-DEFINITION-* and ATTRIBUTE-DEFINITION-* elements.
DATATYPES: dict[str, DataType] = {
    "STRING": DataType.STRING,
    "XHTML": DataType.STRING,
    "ENUMERATION": DataType.STRING,
    "INTEGER": DataType.INTEGER,
    "REAL": DataType.DOUBLE,
    "BOOLEAN": DataType.BOOLEAN,
    "DATE": DataType.DATE_TIME,
}

ELEMENT_TYPES = ("SPEC-OBJECT-TYPE", "SPECIFICATION-TYPE")


def _name(el: ET.Element) -> str:
    return el.tag.rsplit("}", 1)[-1]


def _children(el: Optional[ET.Element], name: str) -> Iterator[ET.Element]:
    if el is None:
        return
    for child in el:
        if _name(child) == name:
            yield child


def _child(el: Optional[ET.Element], *path: str) -> Optional[ET.Element]:
    for name in path:
        el = next(_children(el, name), None)
    return el


def _suffixed(el: Optional[ET.Element], prefix: str) -> Iterator[tuple[str, ET.Element]]:
    """Children named `prefix` + suffix, with their suffix."""
    if el is None:
        return
    for child in el:
        name = _name(child)
        if name.startswith(prefix):
            yield name[len(prefix):], child


def _ref(el: Optional[ET.Element]) -> Optional[str]:
    """Text of the first `*-REF` child of el."""
    if el is None:
        return None
    for child in el:
        if _name(child).endswith("-REF") and (child.text or "").strip():
            return child.text.strip()
    return None


class _Reader:
    def __init__(self, root: ET.Element, config: PigConfig):
        self.root = root
        self.config = config
        self.content = _child(root, "CORE-CONTENT", "REQ-IF-CONTENT")
        if self.content is None:
            raise DecodeError("ReqIF document has no REQ-IF-CONTENT")
        self.datatypes: dict[str, dict[str, Any]] = {}

    def class_id(self, identifier: Optional[str]) -> str:
        if not identifier:
            raise DecodeError("ReqIF identifier is missing")
        return normalize_id(identifier, ItemKind.PROPERTY, self.config)

    def individual_id(self, identifier: Optional[str]) -> str:
        if not identifier:
            raise DecodeError("ReqIF identifier is missing")
        return normalize_id(identifier, ItemKind.AN_ENTITY, self.config)

    def texts(self, el: ET.Element, obj: dict[str, Any]) -> None:
        obj["title"] = el.get("LONG-NAME") or el.get("IDENTIFIER")
        if el.get("DESC"):
            obj["description"] = el.get("DESC")

    # --- Header ---

    def header(self) -> dict[str, Any]:
        el = _child(self.root, "THE-HEADER", "REQ-IF-HEADER")
        if el is None:
            raise DecodeError("ReqIF document has no REQ-IF-HEADER")
        header: dict[str, Any] = {"itemType": ItemKind.PACKAGE.value, "id": el.get("IDENTIFIER")}
        title = _child(el, "TITLE")
        header["title"] = title.text if title is not None and title.text else el.get("IDENTIFIER")
        comment = _child(el, "COMMENT")
        if comment is not None and comment.text:
            header["description"] = comment.text
        created = _child(el, "CREATION-TIME")
        if created is not None and created.text:
            header["modified"] = created.text.strip()
        header = finish_item(header, self.config)
        header["context"] = [{"tag": f"{p}:", "uri": u} for p, u in self.config.namespaces.items()]
        return header

    # --- Type system ---

    def read_datatypes(self) -> None:
        for suffix, el in _suffixed(_child(self.content, "DATATYPES"), "DATATYPE-DEFINITION-"):
            datatype = DATATYPES.get(suffix)
            if datatype is None:
                logger.warning("Ignoring unknown ReqIF datatype %s", _name(el))
                continue
            fields: dict[str, Any] = {"datatype": datatype.value}
            if suffix == "STRING" and el.get("MAX-LENGTH"):
                fields["maxLength"] = el.get("MAX-LENGTH")
            if suffix in ("INTEGER", "REAL"):
                if el.get("MIN") is not None:
                    fields["minInclusive"] = el.get("MIN")
                if el.get("MAX") is not None:
                    fields["maxInclusive"] = el.get("MAX")
            if suffix == "ENUMERATION":
                fields["eligibleValue"] = [
                    {"id": self.class_id(value.get("IDENTIFIER")), "title": value.get("LONG-NAME") or value.get("IDENTIFIER")}
                    for value in _children(_child(el, "SPECIFIED-VALUES"), "ENUM-VALUE")
                ]
            self.datatypes[el.get("IDENTIFIER")] = fields

    def property_class(self, suffix: str, el: ET.Element) -> dict[str, Any]:
        obj: dict[str, Any] = {
            "itemType": ItemKind.PROPERTY.value,
            "id": self.class_id(el.get("IDENTIFIER")),
            "specializes": ItemKind.PROPERTY.value,
        }
        self.texts(el, obj)
        ref = _ref(_child(el, "TYPE"))
        fields = self.datatypes.get(ref)
        if fields is None:
            logger.warning("Attribute %s has unresolved datatype %s", el.get("IDENTIFIER"), ref)
            fields = {"datatype": DATATYPES.get(suffix, DataType.STRING).value}
        obj.update(fields)
        if suffix == "ENUMERATION" and el.get("MULTI-VALUED") == "true":
            obj["maxCount"] = max(1, len(fields.get("eligibleValue") or []))
        return finish_item(obj, self.config)

    def spec_types(self) -> Iterator[dict[str, Any]]:
        properties: list[dict[str, Any]] = []
        links: list[dict[str, Any]] = []
        classes: list[dict[str, Any]] = []
        for name, el in _suffixed(_child(self.content, "SPEC-TYPES"), ""):
            if name not in ELEMENT_TYPES and name != "SPEC-RELATION-TYPE":
                logger.warning("Ignoring ReqIF type %s %s", name, el.get("IDENTIFIER"))
                continue
            attributes = [
                self.property_class(suffix, a)
                for suffix, a in _suffixed(_child(el, "SPEC-ATTRIBUTES"), "ATTRIBUTE-DEFINITION-")
            ]
            properties.extend(attributes)
            obj: dict[str, Any] = {"id": self.class_id(el.get("IDENTIFIER"))}
            self.texts(el, obj)
            obj["eligibleProperty"] = [a["id"] for a in attributes]
            if name in ELEMENT_TYPES:
                obj.update(itemType=ItemKind.ENTITY.value, specializes=ItemKind.ENTITY.value)
            else:
                source, target = self.link_classes(el)
                links.extend((source, target))
                obj.update(
                    itemType=ItemKind.RELATIONSHIP.value,
                    specializes=ItemKind.RELATIONSHIP.value,
                    eligibleSourceLink=source["id"],
                    eligibleTargetLink=target["id"],
                )
            classes.append(finish_item(obj, self.config))
        yield from properties
        yield from links
        yield from classes

    def link_classes(self, el: ET.Element) -> tuple[dict[str, Any], dict[str, Any]]:
        identifier = el.get("IDENTIFIER")
        title = el.get("LONG-NAME") or identifier
        return tuple(
            finish_item(
                {
                    "itemType": ItemKind.LINK.value,
                    "id": self.class_id(f"{identifier}-{end}"),
                    "specializes": ItemKind.LINK.value,
                    "title": f"{title} ({end[2:].lower()})",
                    "eligibleEndpoint": [ItemKind.ENTITY.value],
                },
                self.config,
            )
            for end in ("toSource", "toTarget")
        )

    # --- Content ---

    def values(self, el: ET.Element) -> list[dict[str, Any]]:
        fragments: list[dict[str, Any]] = []
        for suffix, value in _suffixed(_child(el, "VALUES"), "ATTRIBUTE-VALUE-"):
            definition = _ref(_child(value, "DEFINITION"))
            if definition is None:
                logger.warning("Skipping %s of %s without a definition", _name(value), el.get("IDENTIFIER"))
                continue
            fragment = {"itemType": ItemKind.A_PROPERTY.value, "hasClass": self.class_id(definition)}
            if suffix == "ENUMERATION":
                for ref in _children(_child(value, "VALUES"), "ENUM-VALUE-REF"):
                    if (ref.text or "").strip():
                        fragments.append({**fragment, "idRef": self.class_id(ref.text.strip())})
            elif suffix == "XHTML":
                the_value = _child(value, "THE-VALUE")
                if the_value is not None:
                    fragments.append({**fragment, "value": markup_text(the_value, [("", XHTML_NS)], self.config)})
            elif value.get("THE-VALUE") is not None:
                fragments.append({**fragment, "value": value.get("THE-VALUE")})
        return fragments

    def individual(self, el: ET.Element, kind: ItemKind) -> dict[str, Any]:
        obj: dict[str, Any] = {
            "itemType": kind.value,
            "id": self.individual_id(el.get("IDENTIFIER")),
        }
        type_ref = _ref(_child(el, "TYPE"))
        if type_ref:
            obj["hasClass"] = self.class_id(type_ref)
        self.texts(el, obj)
        if el.get("LAST-CHANGE"):
            obj["modified"] = el.get("LAST-CHANGE")
        properties = self.values(el)
        if properties:
            obj["hasProperty"] = properties
        return obj

    def spec_objects(self) -> Iterator[dict[str, Any]]:
        for el in _children(_child(self.content, "SPEC-OBJECTS"), "SPEC-OBJECT"):
            yield finish_item(self.individual(el, ItemKind.AN_ENTITY), self.config)
        for el in _children(_child(self.content, "SPECIFICATIONS"), "SPECIFICATION"):
            if _child(el, "CHILDREN") is not None:
                logger.info("Specification %s: the hierarchy is not imported", el.get("IDENTIFIER"))
            yield finish_item(self.individual(el, ItemKind.AN_ENTITY), self.config)

    def spec_relations(self) -> Iterator[dict[str, Any]]:
        for el in _children(_child(self.content, "SPEC-RELATIONS"), "SPEC-RELATION"):
            obj = self.individual(el, ItemKind.A_RELATIONSHIP)
            relation_type = _ref(_child(el, "TYPE")) or ""
            for field, kind, end, path in (
                ("hasSourceLink", ItemKind.A_SOURCE_LINK, "toSource", "SOURCE"),
                ("hasTargetLink", ItemKind.A_TARGET_LINK, "toTarget", "TARGET"),
            ):
                ref = _ref(_child(el, path))
                if ref is None:
                    continue
                obj[field] = [
                    {
                        "itemType": kind.value,
                        "hasClass": self.class_id(f"{relation_type}-{end}"),
                        "idRef": self.individual_id(ref),
                    }
                ]
            yield finish_item(obj, self.config)


def is_reqif(root: ET.Element) -> bool:
    return root.tag == f"{{{REQIF_NS}}}{ROOT_TAG}"


def decode_package(document: str | bytes, config: PigConfig = DEFAULT_CONFIG) -> DecodedPackage:
    """Decode a ReqIF document into a package header and graph items.

    Raises:
        DecodeError: The document is not well-formed XML or not a ReqIF document.
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise DecodeError(f"invalid XML: {exc}") from exc
    if not is_reqif(root):
        raise DecodeError("missing required ReqIF namespace or root element")
    reader = _Reader(root, config)
    header = reader.header()
    reader.read_datatypes()
    items = [*reader.spec_types(), *reader.spec_objects(), *reader.spec_relations()]
    logger.info("Read %d items from ReqIF document %s", len(items), header.get("id"))
    return DecodedPackage(header=header, items=items)
