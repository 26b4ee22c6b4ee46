"""Kinds of whole-graph consistency checks."""

from enum import Enum


class ConstraintCheck(str, Enum):
    """A check the consistency checker can be asked to run.

    Callers pass a subset to skip checks a dataset is known to violate.
    """

    UNIQUE_IDS = "unique_ids"
    """No two items of a package share an identifier."""

    CLASS_REFERENCES = "class_references"
    """Every `hasClass` of an individual or fragment resolves to a class of the matching kind."""

    SPECIALIZATION_CYCLES = "specialization_cycles"
    """No chain of `specializes` references returns to its origin."""

    PROPERTY_OCCURRENCES = "property_occurrences"
    """Property values of each individual respect `minCount` and `maxCount`."""

    LINK_TARGETS = "link_targets"
    """Every link `idRef` resolves to an item whose class is an eligible endpoint."""

    VALUE_RANGES = "value_ranges"
    """Property values respect `maxLength`, `pattern`, numeric bounds and eligible values."""


ALL_CHECKS = frozenset(ConstraintCheck)
