"""Reading package documents from files and URLs."""

import asyncio
from pathlib import Path
from typing import Iterable, Optional

import httpx

from pigschema import ConstraintCheck, SchemaValidatorInterface, Status, StatusCode
from pigraph.codec import WireFormat
from pigraph.config import DEFAULT_CONFIG, PigConfig
from pigraph.logging import setup_logging
from pigraph.package import ImportResult, Package

FORMAT_BY_SUFFIX: dict[str, WireFormat] = {
    ".jsonld": WireFormat.JSONLD,
    ".json": WireFormat.JSONLD,
    ".xml": WireFormat.XML,
    ".pig": WireFormat.XML,
    ".reqif": WireFormat.REQIF,
}

logger = setup_logging(name=__name__)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def infer_format(source: str | Path) -> Optional[WireFormat]:
    """The wire format implied by the file extension of source, if any."""
    path = httpx.URL(source).path if _is_url(str(source)) else str(source)
    return FORMAT_BY_SUFFIX.get(Path(path).suffix.lower())


async def read_document(
    source: str | Path,
    config: PigConfig = DEFAULT_CONFIG,
    client: Optional[httpx.AsyncClient] = None,
) -> tuple[Optional[str], Status]:
    """Read the text of a local file or an http(s) URL.

    Returns:
        The text and a success status, or None and `FETCH_FAILED` /
        `READ_FAILED`.
    """
    source = str(source)
    if _is_url(source):
        try:
            if client is not None:
                response = await client.get(source)
            else:
                async with httpx.AsyncClient(timeout=config.fetch_timeout) as own_client:
                    response = await own_client.get(source)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning({"event": "fetch_failed", "source": source, "error": str(exc)})
            return None, Status.error(StatusCode.FETCH_FAILED, f"cannot fetch {source}: {exc}")
        return response.text, Status.success()
    try:
        text = await asyncio.to_thread(Path(source).read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning({"event": "read_failed", "source": source, "error": str(exc)})
        return None, Status.error(StatusCode.READ_FAILED, f"cannot read {source}: {exc}")
    return text, Status.success()


async def load_package(
    source: str | Path,
    validator: Optional[SchemaValidatorInterface] = None,
    fmt: Optional[WireFormat | str] = None,
    config: PigConfig = DEFAULT_CONFIG,
    checks: Optional[Iterable[ConstraintCheck]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> tuple[Package, ImportResult]:
    """Read a package document and import it.

    The format is taken from fmt or, if omitted, from the extension of source.
    """
    package = Package(validator, config)
    fmt = fmt or infer_format(source)
    if fmt is None:
        status = Status.error(StatusCode.UNSUPPORTED_FORMAT, f"cannot tell the format of {source} from its extension")
        return package, ImportResult(status=status)
    text, status = await read_document(source, config, client)
    if text is None:
        return package, ImportResult(status=status)
    return package, package.import_document(text, fmt, checks)
