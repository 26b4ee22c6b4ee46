"""
Product Information Graph Schema - Item Models and Interfaces

This package contains only Pydantic models, enums and ABC interfaces with no
functional code. It defines:

- The closed set of item kinds and supported datatypes
- Typed models for classes, individuals, embedded fragments and the package header
- Status codes and the `Status` result model
- Exceptions for violated component contracts
- The schema validator interface

These are used by pigraph (codec, package, consistency checker) and can be
referenced by applications that consume PIG data.
"""

from pigschema.checks import ALL_CHECKS, ConstraintCheck
from pigschema.errors import ImmutableFieldError, ItemKindMismatchError, PigContractError
from pigschema.items import (
    KIND_MODELS,
    AnyItem,
    EligibleValue,
    EntityClass,
    EntityInstance,
    Icon,
    LanguageText,
    LinkClass,
    Namespace,
    PackageHeader,
    PropertyClass,
    PropertyValue,
    RelationshipClass,
    RelationshipInstance,
    SourceLinkValue,
    TargetLinkValue,
)
from pigschema.kinds import CLASS_KINDS, INDIVIDUAL_KINDS, INSTANTIABLE_KINDS, DataType, ItemKind
from pigschema.status import Severity, Status, StatusCategory, StatusCode
from pigschema.validator import SchemaValidatorInterface

__all__ = [
    "ALL_CHECKS",
    "AnyItem",
    "CLASS_KINDS",
    "ConstraintCheck",
    "DataType",
    "EligibleValue",
    "EntityClass",
    "EntityInstance",
    "INDIVIDUAL_KINDS",
    "INSTANTIABLE_KINDS",
    "Icon",
    "ImmutableFieldError",
    "ItemKind",
    "ItemKindMismatchError",
    "KIND_MODELS",
    "LanguageText",
    "LinkClass",
    "Namespace",
    "PackageHeader",
    "PigContractError",
    "PropertyClass",
    "PropertyValue",
    "RelationshipClass",
    "RelationshipInstance",
    "SchemaValidatorInterface",
    "Severity",
    "SourceLinkValue",
    "Status",
    "StatusCategory",
    "StatusCode",
    "TargetLinkValue",
]

__version__ = "0.1.0"
