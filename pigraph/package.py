"""Package import, export and re-checking.

A `Package` owns a header and the graph items decoded from one document. The
import runs in three stages and never raises on bad input data:

1. **Decode** the document with the codec of its wire format. A malformed
   document ends the import with `PARSE_FAILURE`.
2. **Instantiate** every graph entry through `create_item`. Items failing
   validation stay in the package as inert items and are reported in
   `ImportResult.failures`; the import continues with the next entry.
3. **Check** the valid items with the `ConsistencyChecker`.

Example usage:
    ```python
    package, result = import_jsonld(document_text)
    if result.status.code == StatusCode.PARTIAL_IMPORT:
        for failure in result.failures:
            print(failure.index, failure.item_id, failure.status)
    xml_text = package.export(WireFormat.XML)
    ```
"""

from typing import Any, Iterable, Optional

from pydantic import BaseModel, ValidationError

from pigschema import (
    AnyItem,
    ConstraintCheck,
    ItemKind,
    PackageHeader,
    PigContractError,
    SchemaValidatorInterface,
    Status,
    StatusCode,
)
from pigraph import codec
from pigraph.codec import DecodeError, WireFormat
from pigraph.config import DEFAULT_CONFIG, PigConfig
from pigraph.constraints import ConsistencyChecker
from pigraph.items import GraphItem, create_item
from pigraph.logging import setup_logging
from pigraph.render import render_item_html
from pigraph.schema import default_validator

HEADER_FIELDS = frozenset(field.alias or name for name, field in PackageHeader.model_fields.items())


class ItemFailure(BaseModel):
    """An entry of the package graph that did not become a valid item.

    Attributes:
        index: Position of the entry in the document's graph.
        item_id: Identifier of the entry, if it has one.
        status: The first error found for the entry.
    """

    model_config = {"frozen": True}

    index: int
    item_id: Optional[str] = None
    status: Status


class ImportResult(BaseModel):
    """Outcome of importing one package document.

    Attributes:
        status: `OK`, `PARTIAL_IMPORT` ("Imported N of M items"), the first
            consistency violation, or the reason the document was rejected.
        header: The package header, absent if the document was rejected.
        items: The valid items, in document order.
        total: Number of entries in the document's graph.
        failures: Entries that did not become valid items.
    """

    model_config = {"frozen": True}

    status: Status
    header: Optional[PackageHeader] = None
    items: tuple[AnyItem, ...] = ()
    total: int = 0
    failures: tuple[ItemFailure, ...] = ()

    @property
    def imported(self) -> int:
        return len(self.items)


class Package:
    """A package header plus its graph items, built from one document."""

    def __init__(
        self,
        validator: Optional[SchemaValidatorInterface] = None,
        config: PigConfig = DEFAULT_CONFIG,
    ):
        self.config = config
        self.validator = validator if validator is not None else default_validator()
        self.header: Optional[PackageHeader] = None
        self._items: list[GraphItem] = []
        self.logger = setup_logging(name=__name__)

    def import_document(
        self,
        document: Any,
        fmt: WireFormat | str,
        checks: Optional[Iterable[ConstraintCheck]] = None,
    ) -> ImportResult:
        """Replace the package content with the content of document.

        Args:
            document: JSON-LD text or object, or XML text.
            fmt: Wire format of document.
            checks: Consistency checks to run; the configured defaults if None.
        """
        self.header = None
        self._items = []
        try:
            fmt = WireFormat(fmt)
        except ValueError:
            return ImportResult(status=Status.error(StatusCode.UNSUPPORTED_FORMAT, f"unsupported format {fmt!r}"))
        try:
            decoded = codec.decode(document, fmt, self.config)
        except DecodeError as exc:
            self.logger.warning({"event": "document_rejected", "format": fmt.value, "error": str(exc)})
            return ImportResult(status=Status.error(StatusCode.PARSE_FAILURE, str(exc)))

        header = {k: v for k, v in decoded.header.items() if k in HEADER_FIELDS}
        ignored = sorted(set(decoded.header) - set(header))
        if ignored:
            self.logger.debug({"event": "header_fields_ignored", "fields": ignored})
        try:
            self.header = PackageHeader.model_validate(header)
        except ValidationError as exc:
            return ImportResult(
                status=Status.error(
                    StatusCode.PACKAGE_INVALID, f"invalid package header: {exc}", item_id=decoded.header.get("id")
                )
            )

        failures: list[ItemFailure] = []
        for index, raw in enumerate(decoded.items):
            item, status = create_item(raw, self.validator)
            if item is not None:
                self._items.append(item)
            if item is None or not item.is_valid:
                item_id = raw.get("id") if isinstance(raw, dict) else None
                failures.append(ItemFailure(index=index, item_id=item_id, status=status))
                self.logger.debug({"event": "item_rejected", "index": index, "id": item_id, "status": str(status)})

        valid = [item.get() for item in self.get_items()]
        total = len(decoded.items)
        status = self.check(checks)
        if status.ok and failures:
            status = Status.error(StatusCode.PARTIAL_IMPORT, f"Imported {len(valid)} of {total} items")
        elif status.ok:
            status = Status.success(f"Imported {total} of {total} items")
        self.logger.info(
            {"event": "package_imported", "id": self.header.id, "items": len(valid), "total": total, "status": str(status)}
        )
        return ImportResult(
            status=status, header=self.header, items=tuple(valid), total=total, failures=tuple(failures)
        )

    def get_items(self, valid_items_only: bool = True) -> list[GraphItem]:
        if valid_items_only:
            return [item for item in self._items if item.is_valid]
        return list(self._items)

    def get(self) -> Optional[dict[str, Any]]:
        """The package header in internal dictionary shape."""
        if self.header is None:
            return None
        return self.header.model_dump(mode="json", by_alias=True, exclude_none=True)

    def check(self, checks: Optional[Iterable[ConstraintCheck]] = None) -> Status:
        """Run the consistency checker over the current valid items."""
        requested = self.config.default_checks if checks is None else checks
        return ConsistencyChecker([item.get() for item in self.get_items()]).check(requested)

    def export(self, fmt: WireFormat | str) -> str:
        """Encode the header and the valid items as a document of format fmt.

        Raises:
            PigContractError: Nothing has been imported.
            ValueError: fmt cannot be written, e.g. ReqIF.
        """
        header = self.get()
        if header is None:
            raise PigContractError("package has no content to export")
        return codec.encode_package(header, self.get_items(), fmt, self.config)

    def get_html(self, lang: Optional[str] = None) -> list[str]:
        """Render every valid entity individual as an HTML fragment."""
        lang = lang or self.config.default_language
        return [
            render_item_html(item.get(), lang, self)
            for item in self.get_items()
            if item.kind == ItemKind.AN_ENTITY
        ]


def import_jsonld(
    document: str | bytes | dict[str, Any],
    validator: Optional[SchemaValidatorInterface] = None,
    config: PigConfig = DEFAULT_CONFIG,
    checks: Optional[Iterable[ConstraintCheck]] = None,
) -> tuple[Package, ImportResult]:
    package = Package(validator, config)
    return package, package.import_document(document, WireFormat.JSONLD, checks)


def import_xml(
    document: str | bytes,
    validator: Optional[SchemaValidatorInterface] = None,
    config: PigConfig = DEFAULT_CONFIG,
    checks: Optional[Iterable[ConstraintCheck]] = None,
) -> tuple[Package, ImportResult]:
    package = Package(validator, config)
    return package, package.import_document(document, WireFormat.XML, checks)


def import_reqif(
    document: str | bytes,
    validator: Optional[SchemaValidatorInterface] = None,
    config: PigConfig = DEFAULT_CONFIG,
    checks: Optional[Iterable[ConstraintCheck]] = None,
) -> tuple[Package, ImportResult]:
    package = Package(validator, config)
    return package, package.import_document(document, WireFormat.REQIF, checks)
