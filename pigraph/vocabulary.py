"""Namespaces and the field-name tables shared by both wire formats.

Both formats map onto one internal field vocabulary (`id`, `hasClass`,
`specializes`, `datatype`, ...). The `FROM_*` tables rename wire keys to
internal names on decode. The `TO_*` tables are their inverses, used on
encode. Where several wire names map to one internal name (e.g.
`rdfs:subClassOf` and `pig:specializes`), encode writes the preferred one:
format keywords first, then `pig:` and `dcterms:` names.
"""

PIG_NS = "https://product-information-graph.org/v0.2/metamodel#"
XML_NS = "http://www.w3.org/XML/1998/namespace"
XHTML_NS = "http://www.w3.org/1999/xhtml"
REQIF_NS = "http://www.omg.org/spec/ReqIF/20110401/reqif.xsd"

NAMESPACE_MAP: dict[str, str] = {
    "xml": XML_NS,
    "xs": "http://www.w3.org/2001/XMLSchema#",
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "owl": "http://www.w3.org/2002/07/owl#",
    "dcterms": "http://purl.org/dc/terms/",
    "FMC": "http://fmc-modeling.org#",
    "IREB": "https://cpre.ireb.org/en/downloads-and-resources/glossary#",
    "ReqIF": "https://www.prostep.org/fileadmin/downloads/PSI_ImplementationGuide_ReqIF_V1-7.pdf#",
    "oslc_rm": "http://open-services.net/ns/rm#",
    "pig": PIG_NS,
    "SpecIF": "https://specif.de/v1.2/schema#",
    "o": "https://product-information-graph.org/ontology/application#",
    "d": "https://product-information-graph.org/example#",
    "sh": "http://www.w3.org/ns/shacl#",
}

# Wire names shared by JSON-LD and XML.
_COMMON: list[tuple[str, str]] = [
    ("pig:revision", "revision"),
    ("pig:priorRevision", "priorRevision"),
    ("rdfs:subClassOf", "specializes"),
    ("rdfs:subPropertyOf", "specializes"),
    ("pig:specializes", "specializes"),
    ("pig:icon", "icon"),
    ("sh:datatype", "datatype"),
    ("xs:simpleType", "datatype"),
    ("sh:minCount", "minCount"),
    ("xs:minOccurs", "minCount"),
    ("sh:maxCount", "maxCount"),
    ("xs:maxOccurs", "maxCount"),
    ("sh:maxLength", "maxLength"),
    ("xs:maxLength", "maxLength"),
    ("xs:minInclusive", "minInclusive"),
    ("xs:maxInclusive", "maxInclusive"),
    ("sh:defaultValue", "defaultValue"),
    ("xs:default", "defaultValue"),
    ("sh:pattern", "pattern"),
    ("xs:pattern", "pattern"),
    ("pig:unit", "unit"),
    ("pig:itemType", "itemType"),
    ("pig:eligibleValue", "eligibleValue"),
    ("pig:composedProperty", "composedProperty"),
    ("pig:aComposedProperty", "aComposedProperty"),
    ("pig:eligibleProperty", "eligibleProperty"),
    ("pig:eligibleEndpoint", "eligibleEndpoint"),
    ("pig:eligibleSourceLink", "eligibleSourceLink"),
    ("pig:eligibleTargetLink", "eligibleTargetLink"),
    ("pig:hasProperty", "hasProperty"),
    ("pig:hasSourceLink", "hasSourceLink"),
    ("pig:hasTargetLink", "hasTargetLink"),
    ("pig:idRef", "idRef"),
    ("dcterms:title", "title"),
    ("dcterms:description", "description"),
    ("dcterms:created", "created"),
    ("dcterms:modified", "modified"),
    ("dcterms:creator", "creator"),
]

_JSONLD_ONLY: list[tuple[str, str]] = [
    ("@context", "context"),
    ("@id", "id"),
    ("@type", "hasClass"),
    ("pig:hasClass", "hasClass"),
    ("rdf:type", "hasClass"),
    ("@value", "value"),
    ("@language", "lang"),
]

_XML_ONLY: list[tuple[str, str]] = [
    ("rdf:type", "hasClass"),
    ("pig:hasClass", "hasClass"),
    ("rdf:about", "id"),
    ("pig:value", "value"),
    ("xml:lang", "lang"),
]


def _invert(pairs: list[tuple[str, str]]) -> dict[str, str]:
    inverted: dict[str, str] = {}
    for wire, internal in pairs:
        inverted.setdefault(internal, wire)
    return inverted


FROM_JSONLD: dict[str, str] = dict(_JSONLD_ONLY + _COMMON)
FROM_XML: dict[str, str] = dict(_XML_ONLY + _COMMON)

# On encode the first wire name listed for an internal name wins, so the
# JSON-LD keywords and the pig: names are preferred over rdfs:/sh:/xs: aliases.
TO_JSONLD: dict[str, str] = _invert(
    _JSONLD_ONLY + [p for p in _COMMON if p[0].startswith(("pig:", "dcterms:"))] + _COMMON
)
TO_XML: dict[str, str] = _invert(_XML_ONLY + [p for p in _COMMON if p[0].startswith(("pig:", "dcterms:"))] + _COMMON)

# Internal field names of an item; after renaming, any other key that is an
# identifier names a configurable property or link class.
CONFIGURABLE_SKIP_KEYS = frozenset(TO_JSONLD) | {"@graph", "context"}

# Internal fields whose values are numbers.
INTEGER_FIELDS = frozenset({"minCount", "maxCount", "maxLength"})
NUMBER_FIELDS = frozenset({"minInclusive", "maxInclusive"})

# Internal fields holding multi-language text.
TEXT_FIELDS = ("title", "description")


def split_term(term: str) -> tuple[str, str]:
    """Split `prefix:local` into its parts; a term without a colon has an empty prefix."""
    prefix, sep, local = term.partition(":")
    if not sep:
        return "", term
    return prefix, local
