"""Creating, validating and mutating graph items.

Every kind is validated by the same pipeline, stopping at the first failure:

1. the value's declared `itemType` must equal the item's kind (else
   `ItemKindMismatchError`)
2. structural schema check through the injected `SchemaValidatorInterface`
3. `id` and `specializes` must not change once set (else `ImmutableFieldError`)
4. multi-language text shape of `title` and `description`
5. kind-specific semantic checks, looked up in `SEMANTIC_CHECKS`

References to other items are not resolved here; that needs the whole graph
and is done by `pigraph.constraints`.
"""

import logging
import re
from typing import Any, Callable, Optional

from pydantic import ValidationError

from pigschema import (
    INSTANTIABLE_KINDS,
    KIND_MODELS,
    AnyItem,
    DataType,
    ImmutableFieldError,
    ItemKind,
    ItemKindMismatchError,
    SchemaValidatorInterface,
    Status,
    StatusCode,
)
from pigraph.identifiers import is_valid_id, normalize_datetime
from pigraph.text import validate_text
from pigraph.vocabulary import TEXT_FIELDS

logger = logging.getLogger(__name__)

SemanticCheck = Callable[[dict[str, Any]], tuple[dict[str, Any], Status]]


def _check_class_or_specializes(value: dict[str, Any]) -> Status:
    if ("hasClass" in value) == ("specializes" in value):
        return Status.error(
            StatusCode.CLASS_OR_SPECIALIZES,
            "exactly one of hasClass and specializes must be present",
            item_id=value.get("id"),
        )
    return Status.success()


def _check_references(value: dict[str, Any], fields: tuple[str, ...]) -> Status:
    for name in fields:
        refs = value.get(name)
        if refs is None:
            continue
        for ref in refs if isinstance(refs, list) else [refs]:
            if not is_valid_id(ref):
                return Status.error(
                    StatusCode.INVALID_REFERENCE, f"{name} holds invalid identifier {ref!r}", item_id=value.get("id"), field=name
                )
    return Status.success()


def _check_property_class(value: dict[str, Any]) -> tuple[dict[str, Any], Status]:
    status = _check_class_or_specializes(value)
    if not status.ok:
        return value, status
    item_id = value.get("id")
    result = Status.success()
    datatype = value.get("datatype")
    if datatype not in {d.value for d in DataType}:
        logger.warning("Property %s has unsupported datatype %r, its values are handled as strings", item_id, datatype)
        result = Status.warning(
            StatusCode.UNSUPPORTED_DATATYPE,
            f"unsupported datatype {datatype!r}, values are handled as strings",
            item_id=item_id,
            field="datatype",
        )
    low, high = value.get("minCount"), value.get("maxCount")
    if low is not None and high is not None and low > high:
        return value, Status.error(
            StatusCode.INVALID_CARDINALITY_BOUNDS, f"minCount {low} exceeds maxCount {high}", item_id=item_id
        )
    low, high = value.get("minInclusive"), value.get("maxInclusive")
    if low is not None and high is not None and low > high:
        return value, Status.error(
            StatusCode.INVALID_CARDINALITY_BOUNDS, f"minInclusive {low} exceeds maxInclusive {high}", item_id=item_id
        )
    if value.get("pattern") is not None:
        try:
            re.compile(value["pattern"])
        except re.error as exc:
            return value, Status.error(
                StatusCode.VALUE_RANGE, f"pattern {value['pattern']!r} is not a regular expression: {exc}", item_id=item_id
            )
    for index, eligible in enumerate(value.get("eligibleValue") or []):
        status = validate_text(f"eligibleValue[{index}].title", eligible.get("title"), item_id)
        if not status.ok:
            return value, status
    status = _check_references(value, ("composedProperty",))
    return value, status if not status.ok else result


def _check_link_class(value: dict[str, Any]) -> tuple[dict[str, Any], Status]:
    status = _check_class_or_specializes(value)
    if status.ok:
        status = _check_references(value, ("eligibleEndpoint",))
    return value, status


def _check_element_class(value: dict[str, Any]) -> tuple[dict[str, Any], Status]:
    status = _check_class_or_specializes(value)
    if status.ok:
        status = _check_references(value, ("eligibleProperty", "eligibleSourceLink", "eligibleTargetLink"))
    return value, status


def _check_individual(value: dict[str, Any]) -> tuple[dict[str, Any], Status]:
    item_id = value.get("id")
    if not value.get("hasClass"):
        return value, Status.error(StatusCode.MISSING_HAS_CLASS, "an individual must have hasClass", item_id=item_id)
    modified = normalize_datetime(value.get("modified"))
    if modified is None:
        return value, Status.error(
            StatusCode.INVALID_DATETIME, f"modified {value.get('modified')!r} is not a date-time", item_id=item_id
        )
    value = {**value, "modified": modified}
    for fragment in value.get("hasProperty") or []:
        if ("value" in fragment) == ("idRef" in fragment):
            return value, Status.error(
                StatusCode.INVALID_REFERENCE,
                f"property {fragment.get('hasClass')} needs exactly one of value and idRef",
                item_id=item_id,
                field=fragment.get("hasClass"),
            )
    return value, Status.success()


SEMANTIC_CHECKS: dict[ItemKind, SemanticCheck] = {
    ItemKind.PROPERTY: _check_property_class,
    ItemKind.LINK: _check_link_class,
    ItemKind.ENTITY: _check_element_class,
    ItemKind.RELATIONSHIP: _check_element_class,
    ItemKind.AN_ENTITY: _check_individual,
    ItemKind.A_RELATIONSHIP: _check_individual,
}


def validate_item(
    kind: ItemKind,
    value: dict[str, Any],
    validator: SchemaValidatorInterface,
    previous: Optional[dict[str, Optional[str]]] = None,
) -> tuple[Optional[AnyItem], Status]:
    """Validate value as an item of kind and build its typed model.

    Args:
        kind: The kind of the item receiving the value.
        value: Item in internal dictionary shape, as produced by the codec.
        validator: Structural schema checker.
        previous: `id` and `specializes` of the item before this change, if any.

    Returns:
        The model and a success or warning status, or None and the first error.

    Raises:
        ItemKindMismatchError: value declares a different kind.
        ImmutableFieldError: value changes a previously set id or specializes.
    """
    declared = ItemKind.parse(value.get("itemType"))
    if declared != kind:
        raise ItemKindMismatchError(kind.value, value.get("itemType"))

    if not validator.has_schema(kind):
        return None, Status.error(
            StatusCode.SCHEMA_UNAVAILABLE, f"no schema registered for {kind.value}", item_id=value.get("id")
        )
    ok, diagnostic = validator.validate(kind, value)
    if not ok:
        return None, Status.error(
            StatusCode.SCHEMA_INVALID, f"{kind.value} {value.get('id')}: {diagnostic}", item_id=value.get("id")
        )

    for name in ("id", "specializes"):
        old = (previous or {}).get(name)
        if old is not None and value.get(name) != old:
            raise ImmutableFieldError(name, old, value.get(name))

    for name in TEXT_FIELDS:
        status = validate_text(name, value.get(name), value.get("id"))
        if not status.ok:
            return None, status

    check = SEMANTIC_CHECKS.get(kind)
    status = Status.success()
    if check is not None:
        value, status = check(value)
        if not status.ok:
            return None, status

    try:
        model = KIND_MODELS[kind].model_validate(value)
    except ValidationError as exc:
        return None, Status.error(StatusCode.ITEM_INVALID, f"{kind.value} {value.get('id')}: {exc}", item_id=value.get("id"))
    return model, status


class GraphItem:
    """A graph item of a fixed kind holding its last valid value.

    The kind is fixed at construction. `set` replaces the value and returns the
    outcome; after a failed `set` the item is inert and `get` returns None
    until a valid value is set again. `id` and `specializes` cannot change
    once they have been set on a valid value.
    """

    def __init__(self, kind: ItemKind, validator: SchemaValidatorInterface):
        self.kind = kind
        self._validator = validator
        self._model: Optional[AnyItem] = None
        self._fixed: dict[str, Optional[str]] = {}

    def set(self, value: dict[str, Any]) -> Status:
        model, status = validate_item(self.kind, value, self._validator, self._fixed)
        self._model = model
        if model is not None:
            self._fixed.setdefault("id", model.id)
            if getattr(model, "specializes", None) is not None:
                self._fixed.setdefault("specializes", model.specializes)
        return status

    def get(self) -> Optional[AnyItem]:
        return self._model

    def to_dict(self) -> Optional[dict[str, Any]]:
        """The item in internal dictionary shape, or None if it is invalid."""
        if self._model is None:
            return None
        return self._model.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def is_valid(self) -> bool:
        return self._model is not None

    @property
    def id(self) -> Optional[str]:
        return self._fixed.get("id")

    def __repr__(self) -> str:
        return f"GraphItem({self.kind.value}, {self.id!r}, valid={self.is_valid})"


def create_item(value: Any, validator: SchemaValidatorInterface) -> tuple[Optional[GraphItem], Status]:
    """Instantiate a package graph item from its internal dictionary shape.

    Returns (None, status) when the value names no instantiable kind, else the
    item (possibly inert) and the outcome of validating it.
    """
    if not isinstance(value, dict) or not value.get("itemType"):
        item_id = value.get("id") if isinstance(value, dict) else None
        return None, Status.error(StatusCode.MISSING_ITEM_TYPE, "item has no itemType", item_id=item_id)
    kind = ItemKind.parse(value["itemType"])
    if kind not in INSTANTIABLE_KINDS:
        return None, Status.error(
            StatusCode.ITEM_TYPE_NOT_ALLOWED,
            f"itemType {value['itemType']!r} cannot appear in a package graph",
            item_id=value.get("id"),
        )
    item = GraphItem(kind, validator)
    return item, item.set(value)
