"""Whole-graph consistency checks.

Item validation (`pigraph.items`) looks at one item at a time. The checks here
need the whole package: identifier uniqueness, resolution of class and link
references, acyclic specialization, and property cardinality and value ranges
measured against the Property classes of the package.

Each invocation stops at the first violation. Callers may run the checker
again with a narrower set of checks, e.g. to skip checks a partially complete
dataset is known to violate.
"""

import logging
import math
import re
from collections import defaultdict
from typing import Iterable, Iterator, Optional, Sequence

from pigschema import (
    ALL_CHECKS,
    AnyItem,
    ConstraintCheck,
    DataType,
    EntityClass,
    EntityInstance,
    ItemKind,
    LinkClass,
    PropertyClass,
    PropertyValue,
    RelationshipClass,
    RelationshipInstance,
    Status,
    StatusCode,
)

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE_KEY = "default"

Individual = EntityInstance | RelationshipInstance


class ConsistencyChecker:
    """Runs consistency checks over the valid items of one package.

    Indices over the items are built once, so repeated invocations with
    different check sets do not rebuild them.

    Example:
        ```python
        checker = ConsistencyChecker(items)
        status = checker.check({ConstraintCheck.UNIQUE_IDS, ConstraintCheck.CLASS_REFERENCES})
        if not status.ok:
            print(status.item_id, status.message)
        ```
    """

    def __init__(self, items: Sequence[AnyItem]):
        self.items = list(items)
        self._by_id: dict[str, AnyItem] = {}
        for item in self.items:
            self._by_id.setdefault(item.id, item)
        self._properties = {i.id: i for i in self.items if isinstance(i, PropertyClass)}
        self._individuals: list[Individual] = [
            i for i in self.items if isinstance(i, (EntityInstance, RelationshipInstance))
        ]
        self._runners = {
            ConstraintCheck.UNIQUE_IDS: self.check_unique_ids,
            ConstraintCheck.CLASS_REFERENCES: self.check_class_references,
            ConstraintCheck.SPECIALIZATION_CYCLES: self.check_specialization_cycles,
            ConstraintCheck.PROPERTY_OCCURRENCES: self.check_property_occurrences,
            ConstraintCheck.LINK_TARGETS: self.check_link_targets,
            ConstraintCheck.VALUE_RANGES: self.check_value_ranges,
        }

    def check(self, checks: Iterable[ConstraintCheck] = ALL_CHECKS) -> Status:
        """Run the requested checks in a fixed order and return the first violation."""
        requested = {ConstraintCheck(c) for c in checks}
        for check, runner in self._runners.items():
            if check not in requested:
                continue
            status = runner()
            if not status.ok:
                logger.info("Consistency check %s failed: %s", check.value, status.message)
                return status
        return Status.success()

    def get(self, item_id: Optional[str]) -> Optional[AnyItem]:
        return self._by_id.get(item_id) if item_id else None

    # --- Identifiers ---

    def check_unique_ids(self) -> Status:
        seen: dict[str, AnyItem] = {}
        for item in self.items:
            if not item.id:
                return Status.error(StatusCode.MISSING_ID, f"{item.item_type.value} has no identifier")
            if item.id in seen:
                return Status.error(
                    StatusCode.DUPLICATE_ID,
                    f"identifier {item.id} is used by {seen[item.id].item_type.value} and {item.item_type.value}",
                    item_id=item.id,
                )
            seen[item.id] = item
        return Status.success()

    # --- Class references ---

    def _resolve_class(self, class_id: str, expected: ItemKind) -> Optional[str]:
        """Return None if class_id names a class of the expected kind, else the reason."""
        target = self.get(class_id)
        if target is None:
            return "not found in package"
        if target.item_type != expected:
            return f"expected {expected.value}, found {target.item_type.value}"
        return None

    def check_class_references(self) -> Status:
        for individual in self._individuals:
            expected = individual.item_type.defining_kind
            reason = self._resolve_class(individual.has_class, expected)
            if reason:
                return Status.error(
                    StatusCode.INDIVIDUAL_CLASS_UNRESOLVED,
                    f"{individual.item_type.value} {individual.id}: hasClass {individual.has_class} {reason}",
                    item_id=individual.id,
                    field=individual.has_class,
                )
            for index, prop in enumerate(individual.has_property or []):
                if not prop.has_class:
                    return Status.error(
                        StatusCode.PROPERTY_CLASS_MISSING,
                        f"{individual.id}: hasProperty[{index}] has no hasClass",
                        item_id=individual.id,
                    )
                reason = self._resolve_class(prop.has_class, ItemKind.PROPERTY)
                if reason:
                    return Status.error(
                        StatusCode.PROPERTY_CLASS_UNRESOLVED,
                        f"{individual.id}: hasProperty[{index}] class {prop.has_class} {reason}",
                        item_id=individual.id,
                        field=prop.has_class,
                    )
            for field, links in _links(individual):
                for index, link in enumerate(links):
                    if not link.has_class:
                        return Status.error(
                            StatusCode.LINK_CLASS_MISSING,
                            f"{individual.id}: {field}[{index}] has no hasClass",
                            item_id=individual.id,
                        )
                    reason = self._resolve_class(link.has_class, ItemKind.LINK)
                    if reason:
                        return Status.error(
                            StatusCode.LINK_CLASS_UNRESOLVED,
                            f"{individual.id}: {field}[{index}] class {link.has_class} {reason}",
                            item_id=individual.id,
                            field=link.has_class,
                        )
        return Status.success()

    # --- Specialization ---

    def lineage(self, class_id: str) -> Iterator[str]:
        """Yield class_id and the ids it specializes, nearest first; stops at a repeat."""
        seen: set[str] = set()
        current: Optional[str] = class_id
        while current and current not in seen:
            seen.add(current)
            yield current
            item = self.get(current)
            current = getattr(item, "specializes", None)

    def check_specialization_cycles(self) -> Status:
        """Specialization chains are acyclic and stay within one kind of class."""
        for item in self.items:
            if not item.item_type.is_class or not item.specializes:
                continue
            parent = self.get(item.specializes)
            if parent is not None and parent.item_type != item.item_type:
                return Status.error(
                    StatusCode.SPECIALIZATION_KIND,
                    f"{item.item_type.value} {item.id} specializes {parent.item_type.value} {parent.id}",
                    item_id=item.id,
                    field="specializes",
                )
            path = [item.id]
            current = item.specializes
            while current is not None:
                if current in path:
                    cycle = path[path.index(current):] + [current]
                    return Status.error(
                        StatusCode.SPECIALIZATION_CYCLE,
                        f"specialization cycle: {' -> '.join(cycle)}",
                        item_id=item.id,
                        field="specializes",
                    )
                path.append(current)
                target = self.get(current)
                # An unresolved target, e.g. a metamodel class, ends the chain.
                current = getattr(target, "specializes", None) if target is not None else None
        return Status.success()

    # --- Property occurrences ---

    def _expected_properties(self, individual: Individual) -> list[str]:
        cls = self.get(individual.has_class)
        if isinstance(cls, (EntityClass, RelationshipClass)) and cls.eligible_property is not None:
            return list(cls.eligible_property)
        return list(self._properties)

    def check_property_occurrences(self) -> Status:
        for individual in self._individuals:
            groups: dict[str, list[PropertyValue]] = defaultdict(list)
            for prop in individual.has_property or []:
                groups[prop.has_class].append(prop)
            property_ids = dict.fromkeys(self._expected_properties(individual) + list(groups))
            for property_id in property_ids:
                property_class = self._properties.get(property_id)
                if property_class is None:
                    continue
                status = self._check_occurrences(individual, property_class, groups.get(property_id, []))
                if not status.ok:
                    return status
        return Status.success()

    def _check_occurrences(self, individual: Individual, pc: PropertyClass, values: list[PropertyValue]) -> Status:
        low, high = pc.effective_min_count, pc.effective_max_count
        where = f"{individual.id}: property {pc.id}"
        if not values:
            if low >= 1:
                return _cardinality(f"{where} requires at least {low} value(s), no values present", individual, pc)
            return Status.success()
        if pc.is_string:
            buckets: dict[str, int] = defaultdict(int)
            for value in values:
                buckets[value.lang or DEFAULT_LANGUAGE_KEY] += 1
            for lang, count in buckets.items():
                if count < low:
                    return _cardinality(
                        f"{where} has too few values for language '{lang}': {count} < minCount {low}", individual, pc
                    )
                if count > high:
                    return _cardinality(
                        f"{where} has too many values for language '{lang}': {count} > maxCount {high}", individual, pc
                    )
            return Status.success()
        if len(values) < low:
            return _cardinality(f"{where} has too few occurrences: {len(values)} < minCount {low}", individual, pc)
        if len(values) > high:
            return _cardinality(f"{where} has too many occurrences: {len(values)} > maxCount {high}", individual, pc)
        return Status.success()

    # --- Link targets ---

    def check_link_targets(self) -> Status:
        for individual in self._individuals:
            for field, links in _links(individual):
                for link in links:
                    target = self.get(link.id_ref)
                    if target is None:
                        return Status.error(
                            StatusCode.LINK_TARGET_UNRESOLVED,
                            f"{individual.id}: {field} {link.has_class} points to unknown item {link.id_ref}",
                            item_id=individual.id,
                            field=link.has_class,
                        )
                    link_class = self.get(link.has_class)
                    if not isinstance(link_class, LinkClass) or link_class.eligible_endpoint is None:
                        continue
                    if not self._is_eligible(target, link_class.eligible_endpoint):
                        return Status.error(
                            StatusCode.LINK_TARGET_NOT_ELIGIBLE,
                            f"{individual.id}: {field} {link.has_class} points to {link.id_ref} whose class is not "
                            f"an eligible endpoint {link_class.eligible_endpoint}",
                            item_id=individual.id,
                            field=link.has_class,
                        )
        return Status.success()

    def _is_eligible(self, target: AnyItem, eligible: list[str]) -> bool:
        if target.item_type.is_individual:
            candidates = set(self.lineage(target.has_class))
            candidates.add(target.item_type.defining_kind.value)
        else:
            candidates = set(self.lineage(target.id))
            candidates.add(target.item_type.value)
        return not candidates.isdisjoint(eligible)

    # --- Value ranges ---

    def check_value_ranges(self) -> Status:
        for individual in self._individuals:
            for prop in individual.has_property or []:
                property_class = self._properties.get(prop.has_class)
                if property_class is None:
                    continue
                reason = _value_violation(prop, property_class)
                if reason:
                    return Status.error(
                        StatusCode.VALUE_RANGE,
                        f"{individual.id}: property {property_class.id} {reason}",
                        item_id=individual.id,
                        field=property_class.id,
                    )
        return Status.success()


def _links(individual: Individual):
    if isinstance(individual, RelationshipInstance):
        yield "hasSourceLink", individual.has_source_link or []
    yield "hasTargetLink", individual.has_target_link or []


def _cardinality(message: str, individual: Individual, pc: PropertyClass) -> Status:
    return Status.error(StatusCode.CARDINALITY, message, item_id=individual.id, field=pc.id)


def _value_violation(prop: PropertyValue, pc: PropertyClass) -> Optional[str]:
    """Return why prop violates the value constraints of pc, or None."""
    if pc.eligible_value is not None:
        allowed = [v.id for v in pc.eligible_value]
        chosen = prop.id_ref if prop.id_ref is not None else prop.value
        if chosen not in allowed:
            return f"value {chosen} is not in eligibleValue list {allowed}"
        return None
    value = prop.value
    if value is None:
        return None
    if pc.is_numeric:
        try:
            number = int(value) if pc.datatype == DataType.INTEGER else float(value)
        except ValueError:
            return f"value {value!r} is not a valid number for {pc.datatype.value}"
        if isinstance(number, float) and math.isnan(number):
            return f"value {value!r} is not a valid number for {pc.datatype.value}"
        if pc.min_inclusive is not None and number < pc.min_inclusive:
            return f"value {value} is less than minInclusive {pc.min_inclusive}"
        if pc.max_inclusive is not None and number > pc.max_inclusive:
            return f"value {value} exceeds maxInclusive {pc.max_inclusive}"
        return None
    if pc.max_length is not None and len(value) > pc.max_length:
        return f"string length {len(value)} exceeds maxLength {pc.max_length}"
    if pc.pattern is not None and re.fullmatch(pc.pattern, value) is None:
        return f"value {value!r} does not match pattern {pc.pattern}"
    return None


def check(items: Sequence[AnyItem], checks: Iterable[ConstraintCheck] = ALL_CHECKS) -> Status:
    """Run the requested consistency checks over items; see `ConsistencyChecker`."""
    return ConsistencyChecker(items).check(checks)
