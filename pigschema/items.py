"""Typed models for every PIG item kind.

Each kind is assembled from independent attribute groups:

- **Identifiable**: `id`, `itemType`, `hasClass`, `specializes`, `title`,
  `description`
- **Element** (entity and relationship classes): `eligibleProperty`, `icon`
- **AnElement** (individuals): `revision`, `priorRevision`, `modified`,
  `creator`, `hasProperty`

The groups only contribute fields. All behavior (validation, normalization,
encoding) lives in plain functions in `pigraph` that dispatch on `ItemKind`.

Models are frozen. Field names are snake_case in Python and camelCase on the
internal dictionary representation (`model_dump(by_alias=True)`), which is the
shape the codecs produce and consume.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pigschema.kinds import DataType, ItemKind

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    populate_by_name=True,
    alias_generator=to_camel,
)


class LanguageText(BaseModel):
    """One entry of a multi-language text: a value and an optional language tag."""

    model_config = _MODEL_CONFIG

    value: str
    lang: Optional[str] = None


class Icon(BaseModel):
    """A character, URL or data URI representing a class."""

    model_config = _MODEL_CONFIG

    value: str


class EligibleValue(BaseModel):
    """An enumerated value a Property class permits."""

    model_config = _MODEL_CONFIG

    id: str
    title: list[LanguageText] = Field(min_length=1)


class Namespace(BaseModel):
    """A namespace declaration of a package, e.g. `{"tag": "pig:", "uri": ...}`."""

    model_config = _MODEL_CONFIG

    tag: str
    uri: str


# --- Attribute groups ---


class Identifiable(BaseModel):
    model_config = _MODEL_CONFIG

    id: str = Field(description="Namespaced term (prefix:local) or absolute URI.")
    item_type: ItemKind
    has_class: Optional[str] = Field(default=None, description="Identifier of the defining class.")
    specializes: Optional[str] = Field(default=None, description="Identifier of a same-kind parent class.")
    title: Optional[list[LanguageText]] = None
    description: Optional[list[LanguageText]] = None


class Element(BaseModel):
    model_config = _MODEL_CONFIG

    eligible_property: Optional[list[str]] = Field(
        default=None,
        description="Allow-list of Property class ids; absent means unrestricted, empty means none.",
    )
    icon: Optional[Icon] = None


# --- Fragments embedded in individuals ---


class PropertyValue(BaseModel):
    """A configurable property of an individual (`pig:aProperty`).

    Carries either a literal `value` (with an optional `lang` for strings) or an
    `idRef` pointing to another item, e.g. an enumerated eligible value.
    """

    model_config = _MODEL_CONFIG

    item_type: ItemKind = ItemKind.A_PROPERTY
    has_class: str
    value: Optional[str] = None
    lang: Optional[str] = None
    id_ref: Optional[str] = None
    a_composed_property: Optional[list[str]] = None


class SourceLinkValue(BaseModel):
    """The source end of a relationship individual (`pig:aSourceLink`)."""

    model_config = _MODEL_CONFIG

    item_type: ItemKind = ItemKind.A_SOURCE_LINK
    has_class: str
    id_ref: str


class TargetLinkValue(BaseModel):
    """The target end of a relationship or entity individual (`pig:aTargetLink`)."""

    model_config = _MODEL_CONFIG

    item_type: ItemKind = ItemKind.A_TARGET_LINK
    has_class: str
    id_ref: str


class AnElement(BaseModel):
    model_config = _MODEL_CONFIG

    revision: Optional[str] = None
    prior_revision: Optional[list[str]] = None
    modified: Optional[str] = Field(default=None, description="ISO 8601 date-time of the last change.")
    creator: Optional[str] = None
    has_property: Optional[list[PropertyValue]] = None


# --- Classes ---


class PropertyClass(Identifiable):
    """Definition of a property (`pig:Property`): datatype and value constraints."""

    item_type: ItemKind = ItemKind.PROPERTY
    # Unknown xs: datatypes are kept as declared and handled as strings.
    datatype: DataType | str = Field(default=DataType.STRING, union_mode="left_to_right")
    min_count: Optional[int] = Field(default=None, ge=0)
    max_count: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)
    min_inclusive: Optional[float] = None
    max_inclusive: Optional[float] = None
    pattern: Optional[str] = None
    unit: Optional[str] = None
    default_value: Optional[str] = None
    eligible_value: Optional[list[EligibleValue]] = None
    composed_property: Optional[list[str]] = None

    @property
    def is_string(self) -> bool:
        return not isinstance(self.datatype, DataType) or self.datatype == DataType.STRING

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.datatype, DataType) and self.datatype.is_numeric

    @property
    def effective_min_count(self) -> int:
        return 0 if self.min_count is None else self.min_count

    @property
    def effective_max_count(self) -> int:
        return 1 if self.max_count is None else self.max_count


class LinkClass(Identifiable):
    """Definition of a link (`pig:Link`) with the classes it may point to."""

    item_type: ItemKind = ItemKind.LINK
    eligible_endpoint: Optional[list[str]] = None


class EntityClass(Identifiable, Element):
    """Definition of an entity (`pig:Entity`)."""

    item_type: ItemKind = ItemKind.ENTITY
    eligible_target_link: Optional[list[str]] = None


class RelationshipClass(Identifiable, Element):
    """Definition of a relationship (`pig:Relationship`) with one source and one target link class."""

    item_type: ItemKind = ItemKind.RELATIONSHIP
    eligible_source_link: Optional[str] = None
    eligible_target_link: Optional[str] = None


# --- Individuals ---


class EntityInstance(Identifiable, AnElement):
    """A node of the graph (`pig:anEntity`)."""

    item_type: ItemKind = ItemKind.AN_ENTITY
    has_target_link: Optional[list[TargetLinkValue]] = None


class RelationshipInstance(Identifiable, AnElement):
    """An edge of the graph (`pig:aRelationship`)."""

    item_type: ItemKind = ItemKind.A_RELATIONSHIP
    has_source_link: Optional[list[SourceLinkValue]] = None
    has_target_link: Optional[list[TargetLinkValue]] = None


class PackageHeader(BaseModel):
    """Metadata of a package (`pig:aPackage`); the graph items are held separately."""

    model_config = _MODEL_CONFIG

    id: str
    item_type: ItemKind = ItemKind.PACKAGE
    title: Optional[list[LanguageText]] = None
    description: Optional[list[LanguageText]] = None
    modified: Optional[str] = None
    creator: Optional[str] = None
    context: list[Namespace] = Field(default_factory=list)


AnyItem = PropertyClass | LinkClass | EntityClass | RelationshipClass | EntityInstance | RelationshipInstance

KIND_MODELS: dict[ItemKind, type[BaseModel]] = {
    ItemKind.PROPERTY: PropertyClass,
    ItemKind.LINK: LinkClass,
    ItemKind.ENTITY: EntityClass,
    ItemKind.RELATIONSHIP: RelationshipClass,
    ItemKind.AN_ENTITY: EntityInstance,
    ItemKind.A_RELATIONSHIP: RelationshipInstance,
    ItemKind.A_PROPERTY: PropertyValue,
    ItemKind.A_SOURCE_LINK: SourceLinkValue,
    ItemKind.A_TARGET_LINK: TargetLinkValue,
    ItemKind.PACKAGE: PackageHeader,
}
