"""Interface of the structural schema checker consumed by the item model."""

from abc import ABC, abstractmethod
from typing import Any

from pigschema.kinds import ItemKind


class SchemaValidatorInterface(ABC):
    """Checks a value in internal dictionary shape against the schema of its kind.

    The item model depends only on this capability, not on where schema
    documents come from. Implementations are passed explicitly into item and
    package constructors.
    """

    @abstractmethod
    def validate(self, kind: ItemKind, value: dict[str, Any]) -> tuple[bool, str]:
        """Return (True, "") if value conforms, otherwise (False, diagnostic text)."""

    def has_schema(self, kind: ItemKind) -> bool:
        """Whether a schema is registered for this kind."""
        return True
