"""Status codes and the result value returned by every PIG operation.

A `Status` is returned instead of raising whenever the input data is at fault.
Codes are grouped in numeric ranges so that callers can branch on the
`StatusCategory` without knowing individual codes.
"""

from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, Field


class StatusCategory(str, Enum):
    """Coarse classification of a status code for automated handling."""

    OK = "ok"
    IMMUTABILITY = "immutability"
    IDENTIFIER = "identifier"
    TEXT = "text"
    INSTANTIATION = "instantiation"
    REFERENCE = "reference"
    CARDINALITY = "cardinality"
    VALUE_RANGE = "value_range"
    SCHEMA = "schema"
    PARSE = "parse"
    IO = "io"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class StatusCode(IntEnum):
    """Numeric status codes."""

    OK = 0

    ITEM_TYPE_CHANGED = 600
    MISSING_HAS_CLASS = 601
    ID_CHANGED = 602
    SPECIALIZES_CHANGED = 603

    INVALID_REFERENCE = 621
    CLASS_OR_SPECIALIZES = 623
    INVALID_DATETIME = 624
    INVALID_CARDINALITY_BOUNDS = 625

    TEXT_NOT_LIST = 640
    TEXT_ENTRY_NOT_OBJECT = 641
    TEXT_VALUE_NOT_STRING = 642
    TEXT_LANG_NOT_STRING = 643
    TEXT_LANG_MISSING = 644

    MISSING_ITEM_TYPE = 650
    ITEM_TYPE_NOT_ALLOWED = 651
    ITEM_INVALID = 653

    MISSING_ID = 670
    DUPLICATE_ID = 671
    PROPERTY_CLASS_MISSING = 672
    PROPERTY_CLASS_UNRESOLVED = 673
    LINK_CLASS_MISSING = 674
    LINK_CLASS_UNRESOLVED = 675
    INDIVIDUAL_CLASS_UNRESOLVED = 676
    SPECIALIZATION_CYCLE = 677
    CARDINALITY = 678
    VALUE_RANGE = 679
    LINK_TARGET_UNRESOLVED = 680
    LINK_TARGET_NOT_ELIGIBLE = 681
    SPECIALIZATION_KIND = 682

    UNSUPPORTED_DATATYPE = 685
    SCHEMA_INVALID = 686
    SCHEMA_UNAVAILABLE = 688

    PARSE_FAILURE = 690
    PARTIAL_IMPORT = 691
    FETCH_FAILED = 692
    READ_FAILED = 693
    UNSUPPORTED_FORMAT = 694
    PACKAGE_INVALID = 697

    @property
    def category(self) -> StatusCategory:
        code = int(self)
        if code == 0:
            return StatusCategory.OK
        if code < 620:
            return StatusCategory.IMMUTABILITY
        if code < 640:
            return StatusCategory.IDENTIFIER
        if code < 650:
            return StatusCategory.TEXT
        if code < 670:
            return StatusCategory.INSTANTIATION
        if code == 678:
            return StatusCategory.CARDINALITY
        if code == 679:
            return StatusCategory.VALUE_RANGE
        if code < 685:
            return StatusCategory.REFERENCE
        if code < 690:
            return StatusCategory.SCHEMA
        if code in (692, 693):
            return StatusCategory.IO
        return StatusCategory.PARSE


class Status(BaseModel, frozen=True):
    """Outcome of a validation, import or consistency check.

    Attributes:
        code: Numeric status code, 0 on success.
        message: Human-readable description of the outcome.
        severity: `error` for failures, `warning` or `info` for accepted input.
        item_id: Identifier of the offending item, if any.
        field: Name of the offending field or class, if any.
    """

    code: StatusCode = Field(default=StatusCode.OK, description="Numeric status code.")
    message: str = Field(default="OK", description="Human-readable description.")
    severity: Severity = Field(default=Severity.INFO)
    item_id: Optional[str] = Field(default=None, description="Offending item identifier.")
    field: Optional[str] = Field(default=None, description="Offending field or class identifier.")

    @property
    def ok(self) -> bool:
        return self.code == StatusCode.OK or self.severity != Severity.ERROR

    @property
    def category(self) -> StatusCategory:
        return self.code.category

    @classmethod
    def success(cls, message: str = "OK") -> "Status":
        return cls(message=message)

    @classmethod
    def error(
        cls,
        code: StatusCode,
        message: str,
        *,
        item_id: Optional[str] = None,
        field: Optional[str] = None,
    ) -> "Status":
        return cls(code=code, message=message, severity=Severity.ERROR, item_id=item_id, field=field)

    @classmethod
    def warning(cls, code: StatusCode, message: str, **kwargs) -> "Status":
        return cls(code=code, message=message, severity=Severity.WARNING, **kwargs)

    def __str__(self) -> str:
        return f"[{int(self.code)}] {self.message}"
