"""Types shared by the wire-format codecs."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class WireFormat(str, Enum):
    JSONLD = "jsonld"
    XML = "xml"
    REQIF = "reqif"


class DecodeError(ValueError):
    """A document is not well-formed or lacks the structure of its format."""


class DecodedPackage(BaseModel):
    """A package document in internal shape, before item validation.

    Attributes:
        header: Package metadata (`id`, `itemType`, `title`, `description`,
            `modified`, `creator`, `context`).
        items: Decoded graph items in document order. Entries that could not
            be decoded as objects are kept as found so that item instantiation
            can report them.
    """

    header: dict[str, Any] = Field(default_factory=dict)
    items: list[Any] = Field(default_factory=list)
