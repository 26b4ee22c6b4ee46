"""Runtime configuration for decoding, validation and document loading."""

from pydantic import BaseModel, Field

from pigschema.checks import ALL_CHECKS, ConstraintCheck
from pigraph.vocabulary import NAMESPACE_MAP


class PigConfig(BaseModel, frozen=True):
    """Settings shared by the codec, the package and the loaders.

    Attributes:
        class_id_prefix: Prefix given to bare class identifiers on decode.
        individual_id_prefix: Prefix given to bare individual identifiers on decode.
        default_timezone: Offset appended to date-times that carry none.
        default_language: Language assumed for untagged text when rendering.
        namespaces: Prefix to URI map used for XML fragments without declarations.
        fetch_timeout: Timeout in seconds for fetching schemas and documents.
        default_checks: Consistency checks run on import when none are requested.
    """

    class_id_prefix: str = Field(default="o:", description="Default prefix for class identifiers.")
    individual_id_prefix: str = Field(default="d:", description="Default prefix for individual identifiers.")
    default_timezone: str = Field(default="Z", pattern=r"^(Z|[+-]\d{2}:\d{2})$")
    default_language: str = Field(default="en")
    namespaces: dict[str, str] = Field(default_factory=lambda: dict(NAMESPACE_MAP))
    fetch_timeout: float = Field(default=10.0, gt=0)
    default_checks: frozenset[ConstraintCheck] = Field(default=ALL_CHECKS)


DEFAULT_CONFIG = PigConfig()
