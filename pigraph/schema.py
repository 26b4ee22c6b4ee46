"""JSON Schema validation of items and memoized loading of schema documents.

Schema documents are held in an explicit `SchemaCache` rather than in module
globals. The cache is filled once, either from the schemas shipped with this
package or from caller-supplied files and URLs, and is then shared by every
`JsonSchemaValidator` built on it. Fetching a remote schema is the only
asynchronous step of the library.
"""

import asyncio
import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Optional

import httpx
from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError

from pigschema import ItemKind, SchemaValidatorInterface, StatusCode
from pigraph.config import DEFAULT_CONFIG, PigConfig
from pigraph.logging import setup_logging

SCHEMA_FILES: dict[ItemKind, str] = {
    ItemKind.PROPERTY: "property.json",
    ItemKind.LINK: "link.json",
    ItemKind.ENTITY: "entity.json",
    ItemKind.RELATIONSHIP: "relationship.json",
    ItemKind.AN_ENTITY: "an_entity.json",
    ItemKind.A_RELATIONSHIP: "a_relationship.json",
}


class SchemaLoadError(Exception):
    """A schema document could not be read, fetched or parsed."""

    code = StatusCode.SCHEMA_UNAVAILABLE

    def __init__(self, source: str, reason: str):
        self.source = source
        super().__init__(f"cannot load schema from {source}: {reason}")


class SchemaCache:
    """Memoized schema documents keyed by item kind.

    `load` fetches a schema once per kind; later calls return the cached
    document without touching the source again, and concurrent calls for the
    same kind wait on a single fetch.
    """

    def __init__(self, config: PigConfig = DEFAULT_CONFIG, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client
        self._schemas: dict[ItemKind, dict[str, Any]] = {}
        self._pending: dict[ItemKind, asyncio.Task] = {}
        self.logger = setup_logging(name=__name__)

    def get(self, kind: ItemKind) -> Optional[dict[str, Any]]:
        return self._schemas.get(kind)

    def register(self, kind: ItemKind, schema: dict[str, Any]) -> None:
        Draft7Validator.check_schema(schema)
        self._schemas[kind] = schema

    def clear(self) -> None:
        self._schemas.clear()
        self._pending.clear()

    def __contains__(self, kind: object) -> bool:
        return kind in self._schemas

    def load_packaged(self) -> "SchemaCache":
        """Register the schemas shipped with pigraph for every instantiable kind."""
        folder = resources.files("pigraph") / "schemas"
        for kind, filename in SCHEMA_FILES.items():
            if kind not in self._schemas:
                self.register(kind, json.loads((folder / filename).read_text(encoding="utf-8")))
        self.logger.debug({"event": "packaged_schemas_loaded", "kinds": [k.value for k in self._schemas]})
        return self

    async def load(self, kind: ItemKind, source: str | Path) -> dict[str, Any]:
        """Return the schema for kind, fetching it from source on first use.

        Args:
            kind: Item kind the schema describes.
            source: Local file path or http(s) URL.

        Raises:
            SchemaLoadError: The source is unreachable or not a valid JSON Schema.
        """
        if kind in self._schemas:
            return self._schemas[kind]
        task = self._pending.get(kind)
        if task is None:
            task = asyncio.ensure_future(self._fetch(str(source)))
            self._pending[kind] = task
        try:
            schema = await task
        finally:
            self._pending.pop(kind, None)
        if kind not in self._schemas:
            try:
                self.register(kind, schema)
            except SchemaError as exc:
                raise SchemaLoadError(str(source), str(exc)) from exc
            self.logger.debug({"event": "schema_loaded", "kind": kind.value, "source": str(source)})
        return self._schemas[kind]

    async def load_all(self, sources: dict[ItemKind, str | Path]) -> None:
        await asyncio.gather(*(self.load(kind, source) for kind, source in sources.items()))

    async def _fetch(self, source: str) -> dict[str, Any]:
        try:
            if source.startswith(("http://", "https://")):
                text = await self._fetch_remote(source)
            else:
                text = await asyncio.to_thread(Path(source).read_text, encoding="utf-8")
            return json.loads(text)
        except (httpx.HTTPError, OSError, ValueError) as exc:
            self.logger.warning({"event": "schema_load_failed", "source": source, "error": str(exc)})
            raise SchemaLoadError(source, str(exc)) from exc

    async def _fetch_remote(self, url: str) -> str:
        if self._client is not None:
            response = await self._client.get(url)
            response.raise_for_status()
            return response.text
        async with httpx.AsyncClient(timeout=self.config.fetch_timeout) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text


class JsonSchemaValidator(SchemaValidatorInterface):
    """Draft-07 JSON Schema validation backed by a `SchemaCache`."""

    def __init__(self, cache: SchemaCache):
        self.cache = cache
        self._validators: dict[ItemKind, Draft7Validator] = {}

    def has_schema(self, kind: ItemKind) -> bool:
        return kind in self.cache

    def _validator_for(self, kind: ItemKind) -> Optional[Draft7Validator]:
        schema = self.cache.get(kind)
        if schema is None:
            return None
        validator = self._validators.get(kind)
        if validator is None or validator.schema is not schema:
            validator = Draft7Validator(schema, format_checker=Draft7Validator.FORMAT_CHECKER)
            self._validators[kind] = validator
        return validator

    def validate(self, kind: ItemKind, value: dict[str, Any]) -> tuple[bool, str]:
        validator = self._validator_for(kind)
        if validator is None:
            return False, f"no schema registered for {kind.value}"
        errors = sorted(validator.iter_errors(value), key=lambda e: e.json_path)
        if not errors:
            return True, ""
        return False, "; ".join(f"{e.json_path}: {e.message}" for e in errors)


@lru_cache()
def default_validator() -> JsonSchemaValidator:
    """A validator over the packaged schemas, built once per process."""
    return JsonSchemaValidator(SchemaCache().load_packaged())
