"""XML codec.

Items are elements named by their kind (`<pig:Entity>`, `<pig:anEntity>`, ...).
Scalar fields travel as attributes (`id`, `rdf:type` for `hasClass`), the rest
as child elements. A package is a root element holding its metadata and a
`<pig:graph>` child that wraps the top-level items:

    <pig:Package id="d:pkg" xmlns:pig="..." xmlns:dcterms="...">
        <dcterms:title xml:lang="en">Example</dcterms:title>
        <pig:graph>
            <pig:Entity id="o:Actor" rdf:type="owl:Class">...</pig:Entity>
            <pig:anEntity id="d:a1" rdf:type="o:Actor">
                <pig:aProperty rdf:type="o:Name"><value>Alice</value></pig:aProperty>
            </pig:anEntity>
        </pig:graph>
    </pig:Package>

XML has no arrays, so list-valued fields are recognized by name (see
`normalize.is_list_field`). Property constraints are carried in an
`xs:simpleType/xs:restriction` element. Texts containing XHTML markup are kept
as markup strings.
"""

import logging
import re
import uuid
import xml.etree.ElementTree as ET
from typing import Any, Optional
from xml.sax.saxutils import escape, quoteattr

from pigschema import ItemKind
from pigraph.codec.base import DecodedPackage, DecodeError
from pigraph.codec.normalize import FRAGMENT_FIELDS, as_internal_dict, finish_item, is_list_field
from pigraph.config import DEFAULT_CONFIG, PigConfig
from pigraph.vocabulary import FROM_XML, TEXT_FIELDS, TO_XML, XML_NS, split_term

logger = logging.getLogger(__name__)

XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")

GRAPH_TAGS = ("graph", "pig:graph")
PACKAGE_TAG = "pig:Package"
XML_LANG = f"{{{XML_NS}}}lang"

RICH_TEXT_TAGS = frozenset(
    {"p", "div", "span", "small", "i", "b", "em", "strong", "a", "br", "ul", "ol", "li", "table", "object", "img"}
)

FRAGMENT_TAGS: dict[str, ItemKind] = {
    "pig:aProperty": ItemKind.A_PROPERTY,
    "pig:aSourceLink": ItemKind.A_SOURCE_LINK,
    "pig:aTargetLink": ItemKind.A_TARGET_LINK,
}

# Restriction facets and occurrence attributes of xs:simpleType, by internal field.
FACETS: dict[str, str] = {
    "maxLength": "maxLength",
    "pattern": "pattern",
    "minInclusive": "minInclusive",
    "maxInclusive": "maxInclusive",
    "minOccurs": "minCount",
    "maxOccurs": "maxCount",
}

# Fields written into xs:simpleType on encode, with their facet element names.
CONSTRAINT_FACETS: list[tuple[str, str]] = [
    ("maxLength", "xs:maxLength"),
    ("pattern", "xs:pattern"),
    ("minInclusive", "xs:minInclusive"),
    ("maxInclusive", "xs:maxInclusive"),
    ("minCount", "xs:minOccurs"),
    ("maxCount", "xs:maxOccurs"),
]


def _local(term: str) -> str:
    return term.rsplit(":", 1)[-1]


class _Namespaces:
    """Resolves parsed `{uri}local` names back to `prefix:local` terms.

    Prefixes declared in the document take precedence over the configured
    defaults. Names in an undeclared or default namespace keep their local name.
    `scoped` maps each element to the declarations written on it, so markup can
    be copied out with the names it was written with.
    """

    def __init__(
        self,
        declared: list[tuple[str, str]],
        defaults: dict[str, str],
        scoped: Optional[dict[ET.Element, list[tuple[str, str]]]] = None,
    ):
        self.declared = declared
        self.scoped = scoped or {}
        self._prefixes: dict[str, str] = {uri: prefix for prefix, uri in defaults.items()}
        self._prefixes[XML_NS] = "xml"
        self._written: dict[str, str] = {XML_NS: "xml"}
        for prefix, uri in [*declared, *(d for decls in self.scoped.values() for d in decls)]:
            if prefix:
                self._prefixes[uri] = prefix
                self._written.setdefault(uri, prefix)
            else:
                self._prefixes.setdefault(uri, "")
                self._written[uri] = ""

    def term(self, name: str) -> str:
        if not name.startswith("{"):
            return name
        uri, local = name[1:].split("}", 1)
        prefix = self._prefixes.get(uri, "")
        return f"{prefix}:{local}" if prefix else local

    def written(self, name: str) -> str:
        """The name as the document writes it; a default namespace stays unprefixed."""
        if not name.startswith("{"):
            return name
        uri, local = name[1:].split("}", 1)
        prefix = self._written.get(uri, self._prefixes.get(uri, ""))
        return f"{prefix}:{local}" if prefix else local

    def context(self) -> list[dict[str, str]]:
        return [{"tag": f"{prefix}:" if prefix else "@vocab", "uri": uri} for prefix, uri in self.declared]


def _parse(text: str) -> tuple[ET.Element, dict[ET.Element, list[tuple[str, str]]]]:
    parser = ET.XMLPullParser(events=("start-ns", "start"))
    parser.feed(text)
    parser.close()
    scoped: dict[ET.Element, list[tuple[str, str]]] = {}
    pending: list[tuple[str, str]] = []
    root: Optional[ET.Element] = None
    for event, payload in parser.read_events():
        if event == "start-ns":
            pending.append(payload)
            continue
        if pending:
            scoped[payload] = pending
            pending = []
        if root is None:
            root = payload
    if root is None:
        raise DecodeError("document has no root element")
    return root, scoped


def parse_document(document: str | bytes, config: PigConfig = DEFAULT_CONFIG) -> tuple[ET.Element, _Namespaces]:
    """Parse an XML document or fragment.

    A fragment using prefixes it does not declare is wrapped in an element
    declaring the configured namespaces. Only the declarations of the outermost
    element make up the document context.
    """
    text = document.decode("utf-8") if isinstance(document, bytes) else document
    try:
        root, scoped = _parse(text)
        return root, _Namespaces(scoped.get(root, []), config.namespaces, scoped)
    except ET.ParseError as exc:
        if "unbound prefix" not in str(exc):
            raise DecodeError(f"invalid XML: {exc}") from exc
    body = XML_DECLARATION.sub("", text, count=1)
    wrapper = ET.Element("wrapper", _declarations(config.namespaces))
    opening = ET.tostring(wrapper, encoding="unicode").replace(" />", ">")
    try:
        root, scoped = _parse(f"{opening}{body}</wrapper>")
    except ET.ParseError as exc:
        raise DecodeError(f"invalid XML: {exc}") from exc
    children = list(root)
    if not children:
        raise DecodeError("document has no root element")
    return children[0], _Namespaces(scoped.pop(root, []), config.namespaces, scoped)


def _declarations(namespaces: dict[str, str]) -> dict[str, str]:
    return {f"xmlns:{prefix}": uri for prefix, uri in namespaces.items() if prefix != "xml"}


def _xmlns(prefix: str) -> str:
    return f"xmlns:{prefix}" if prefix else "xmlns"


def _indentation(text: str) -> bool:
    return "\n" in text and not text.strip()


class _Decoder:
    def __init__(self, namespaces: _Namespaces, config: PigConfig):
        self.ns = namespaces
        self.config = config

    def attrs(self, el: ET.Element) -> dict[str, str]:
        return {self.ns.term(k): v for k, v in el.attrib.items()}

    def field(self, term: str) -> str:
        if term in FROM_XML:
            return FROM_XML[term]
        prefix, local = split_term(term)
        return local if prefix in ("", "pig") else term

    def text(self, el: ET.Element) -> str:
        """Text content of el; XHTML children are kept as markup.

        Only line-break indentation before the first and after the last child
        is dropped.
        """
        children = list(el)
        if not any(_local(self.ns.term(c.tag)) in RICH_TEXT_TAGS for c in children):
            return "".join(el.itertext())
        parts = [escape(el.text or "")]
        for child in children:
            parts.append(self.markup(child))
            parts.append(escape(child.tail or ""))
        for index in (0, -1):
            if _indentation(parts[index]):
                parts[index] = ""
        return "".join(parts)

    def markup(self, el: ET.Element) -> str:
        name = self.ns.written(el.tag)
        attrs = "".join(f" {_xmlns(prefix)}={quoteattr(uri)}" for prefix, uri in self.ns.scoped.get(el, []))
        attrs += "".join(f" {self.ns.written(k)}={quoteattr(v)}" for k, v in el.attrib.items())
        if el.text is None and not len(el):
            return f"<{name}{attrs}/>"
        inner = escape(el.text or "") + "".join(self.markup(c) + escape(c.tail or "") for c in el)
        return f"<{name}{attrs}>{inner}</{name}>"

    def reference(self, el: ET.Element) -> str:
        attrs = self.attrs(el)
        for name in ("rdf:resource", "idRef", "id"):
            if name in attrs:
                return attrs[name]
        return (el.text or "").strip()

    def item(self, el: ET.Element) -> dict[str, Any]:
        term = self.ns.term(el.tag)
        kind = ItemKind.parse(term)
        obj: dict[str, Any] = {"itemType": kind.value if kind is not None else term}
        self.attributes(obj, el)
        for child in el:
            self.child(obj, child, kind)
        return finish_item(obj, self.config)

    def attributes(self, obj: dict[str, Any], el: ET.Element) -> None:
        for name, value in self.attrs(el).items():
            local = _local(name)
            if name in ("id", "rdf:about", "rdf:ID"):
                obj["id"] = value
            elif local in ("type", "hasClass"):
                obj["hasClass"] = value
            elif local == "specializes" or name in ("rdfs:subClassOf", "rdfs:subPropertyOf"):
                obj["specializes"] = value
            elif name != "xml:lang":
                obj[self.field(name)] = value

    def child(self, obj: dict[str, Any], el: ET.Element, kind: Optional[ItemKind]) -> None:
        term = self.ns.term(el.tag)
        if term in FRAGMENT_TAGS:
            fragment_kind = FRAGMENT_TAGS[term]
            obj.setdefault(FRAGMENT_FIELDS[fragment_kind], []).append(self.fragment(el, fragment_kind))
            return
        if _local(term) == "simpleType":
            obj.update(self.simple_type(el))
            return
        name = self.field(term)
        if name in FRAGMENT_FIELDS.values():
            for sub in el:
                self.child(obj, sub, kind)
            return
        if name in TEXT_FIELDS:
            entry = {"value": self.text(el)}
            if el.get(XML_LANG):
                entry["lang"] = el.get(XML_LANG)
            obj.setdefault(name, []).append(entry)
            return
        if name == "icon":
            value: Any = {"value": self.text(el)}
        elif name == "eligibleValue":
            value = self.eligible_value(el)
        else:
            value = self.reference(el)
        if is_list_field(name, kind):
            obj.setdefault(name, []).append(value)
        else:
            obj[name] = value

    def eligible_value(self, el: ET.Element) -> dict[str, Any]:
        attrs = self.attrs(el)
        entry: dict[str, Any] = {"id": attrs.get("id") or attrs.get("rdf:about") or (el.text or "").strip()}
        for child in el:
            if self.field(self.ns.term(child.tag)) == "title":
                text = {"value": self.text(child)}
                if child.get(XML_LANG):
                    text["lang"] = child.get(XML_LANG)
                entry.setdefault("title", []).append(text)
        return entry

    def fragment(self, el: ET.Element, kind: ItemKind) -> dict[str, Any]:
        fragment: dict[str, Any] = {"itemType": kind.value}
        for name, value in self.attrs(el).items():
            local = _local(name)
            if local in ("type", "hasClass"):
                fragment["hasClass"] = value
            elif local in ("value", "idRef"):
                fragment[local] = value
            elif name == "xml:lang":
                fragment["lang"] = value
        for child in el:
            local = _local(self.ns.term(child.tag))
            if local in ("type", "hasClass"):
                fragment["hasClass"] = self.reference(child)
            elif local == "value":
                fragment["value"] = self.text(child)
                if child.get(XML_LANG):
                    fragment["lang"] = child.get(XML_LANG)
            elif local == "idRef":
                fragment["idRef"] = self.reference(child)
            elif local == "aComposedProperty":
                fragment.setdefault("aComposedProperty", []).append(self.reference(child))
            else:
                logger.warning("Ignoring element %s in %s", self.ns.term(child.tag), kind.value)
        return fragment

    def simple_type(self, el: ET.Element) -> dict[str, Any]:
        out: dict[str, Any] = {}
        self.facets(out, self.attrs(el))
        restriction = next((c for c in el if _local(self.ns.term(c.tag)) == "restriction"), None)
        if restriction is None:
            if (el.text or "").strip():
                out["datatype"] = el.text.strip()
            return out
        attrs = self.attrs(restriction)
        if "base" in attrs:
            out["datatype"] = attrs["base"]
        self.facets(out, attrs)
        for facet in restriction:
            term = self.ns.term(facet.tag)
            value = facet.get("value")
            self.facets(out, {term: value if value is not None else (facet.text or "").strip()}, warn=True)
        return out

    def facets(self, out: dict[str, Any], values: dict[str, str], warn: bool = False) -> None:
        for term, value in values.items():
            field = FACETS.get(_local(term))
            if field is None:
                if warn:
                    logger.warning("Dropping unsupported restriction facet %s", term)
                continue
            if value == "unbounded":
                logger.warning("Dropping unbounded %s; the default applies", term)
                continue
            out[field] = value


def markup_text(el: ET.Element, declared: list[tuple[str, str]], config: PigConfig = DEFAULT_CONFIG) -> str:
    """Text of el, with rich-text children named as if declared were the document's namespaces."""
    return _Decoder(_Namespaces(declared, config.namespaces), config).text(el)


def decode_item(document: str | bytes, config: PigConfig = DEFAULT_CONFIG) -> dict[str, Any]:
    """Decode one XML item element into internal shape."""
    root, namespaces = parse_document(document, config)
    return _Decoder(namespaces, config).item(root)


def decode_package(document: str | bytes, config: PigConfig = DEFAULT_CONFIG) -> DecodedPackage:
    """Decode an XML package document into its header and graph items."""
    root, namespaces = parse_document(document, config)
    decoder = _Decoder(namespaces, config)
    header: dict[str, Any] = {"itemType": ItemKind.PACKAGE.value}
    decoder.attributes(header, root)
    header.pop("hasClass", None)
    items: list[dict[str, Any]] = []
    graph_found = False
    for child in root:
        if namespaces.term(child.tag) in GRAPH_TAGS:
            graph_found = True
            items.extend(decoder.item(el) for el in child)
        else:
            decoder.child(header, child, ItemKind.PACKAGE)
    if not graph_found:
        raise DecodeError(f"package {header.get('id')} has no graph element")
    if not items:
        logger.warning("Package %s has an empty graph", header.get("id"))
    header = finish_item(header, config)
    header["context"] = namespaces.context() or [{"tag": f"{p}:", "uri": u} for p, u in config.namespaces.items()]
    return DecodedPackage(header=header, items=items)


# --- Encoding ---
#
# Elements are built with prefixed names ("pig:Entity") and the namespace
# declarations are written on the root element, so documents keep the
# prefixes of the internal vocabulary. Rich text is spliced into the
# serialized document as written.


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class _Encoder:
    def __init__(self, namespaces: dict[str, str]):
        self.namespaces = namespaces
        self.markup: dict[str, str] = {}

    def is_markup(self, value: str) -> bool:
        if "<" not in value:
            return False
        opening = ET.tostring(ET.Element("w", _declarations(self.namespaces)), encoding="unicode")
        try:
            wrapper = ET.fromstring(f"{opening.replace(' />', '>')}{value}</w>")
        except ET.ParseError:
            return False
        return len(wrapper) > 0

    def content(self, el: ET.Element, value: str) -> None:
        if self.is_markup(value):
            token = f"pig-markup-{uuid.uuid4().hex}"
            self.markup[token] = value
            el.text = token
        else:
            el.text = value

    def text_elements(self, parent: ET.Element, tag: str, entries: list[dict[str, str]]) -> None:
        for entry in entries:
            el = ET.SubElement(parent, tag)
            if entry.get("lang"):
                el.set("xml:lang", entry["lang"])
            self.content(el, entry.get("value", ""))

    def fragment(self, parent: ET.Element, fragment: dict[str, Any]) -> None:
        el = ET.SubElement(parent, fragment.get("itemType", ItemKind.A_PROPERTY.value))
        el.set("rdf:type", fragment["hasClass"])
        if "value" in fragment:
            value = ET.SubElement(el, "value")
            if fragment.get("lang"):
                value.set("xml:lang", fragment["lang"])
            self.content(value, fragment["value"])
        if "idRef" in fragment:
            ET.SubElement(el, "idRef").text = fragment["idRef"]
        for ref in fragment.get("aComposedProperty") or []:
            ET.SubElement(el, "aComposedProperty").text = ref

    def item(self, obj: dict[str, Any]) -> ET.Element:
        el = ET.Element(obj["itemType"])
        el.set("id", obj["id"])
        if obj.get("hasClass"):
            el.set("rdf:type", obj["hasClass"])
        handled = {"itemType", "id", "hasClass", "datatype", *TEXT_FIELDS, *(f for f, _ in CONSTRAINT_FACETS)}
        if obj.get("specializes"):
            ET.SubElement(el, "pig:specializes").text = obj["specializes"]
        handled.add("specializes")
        for name in TEXT_FIELDS:
            self.text_elements(el, TO_XML[name], obj.get(name) or [])
        if "datatype" in obj:
            simple_type = ET.SubElement(el, "xs:simpleType")
            restriction = ET.SubElement(simple_type, "xs:restriction", {"base": obj["datatype"]})
            for field, facet in CONSTRAINT_FACETS:
                if field in obj:
                    ET.SubElement(restriction, facet, {"value": _scalar(obj[field])})
        for name, value in obj.items():
            if name in handled:
                continue
            if name in FRAGMENT_FIELDS.values():
                for fragment in value:
                    self.fragment(el, fragment)
                continue
            tag = TO_XML.get(name, f"pig:{name}")
            if name == "icon":
                ET.SubElement(el, tag).text = value["value"]
            elif name == "eligibleValue":
                for entry in value:
                    ev = ET.SubElement(el, tag, {"id": entry["id"]})
                    self.text_elements(ev, TO_XML["title"], entry.get("title") or [])
            else:
                for single in value if isinstance(value, list) else [value]:
                    ET.SubElement(el, tag).text = _scalar(single)
        return el

    def serialize(self, root: ET.Element) -> str:
        text = ET.tostring(root, encoding="unicode")
        for token, value in self.markup.items():
            text = text.replace(token, value, 1)
        return text


def encode_item(item: Any, config: PigConfig = DEFAULT_CONFIG) -> str:
    """Encode an item (model, `GraphItem` or internal dict) as a standalone XML element."""
    encoder = _Encoder(config.namespaces)
    el = encoder.item(as_internal_dict(item))
    for name, uri in _declarations(config.namespaces).items():
        el.set(name, uri)
    return encoder.serialize(el)


def encode_package(header: dict[str, Any], items: list[Any], config: PigConfig = DEFAULT_CONFIG) -> str:
    """Encode a package header and its items as an XML document."""
    root = ET.Element(PACKAGE_TAG)
    namespaces = dict(config.namespaces)
    for ns in header.get("context") or []:
        if ns["tag"] == "@vocab":
            root.set("xmlns", ns["uri"])
        elif ns["tag"].endswith(":"):
            namespaces[ns["tag"][:-1]] = ns["uri"]
    for name, uri in _declarations(namespaces).items():
        root.set(name, uri)
    root.set("id", header["id"])
    encoder = _Encoder(namespaces)
    encoder.text_elements(root, TO_XML["title"], header.get("title") or [])
    encoder.text_elements(root, TO_XML["description"], header.get("description") or [])
    for name in ("modified", "creator"):
        if header.get(name):
            ET.SubElement(root, TO_XML[name]).text = header[name]
    graph = ET.SubElement(root, "pig:graph")
    for item in items:
        graph.append(encoder.item(as_internal_dict(item)))
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + encoder.serialize(root)
