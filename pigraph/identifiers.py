"""Identifier and date-time normalization."""

import logging
import re
from datetime import date, datetime, timezone
from typing import Optional

from pigschema import ItemKind
from pigraph.config import DEFAULT_CONFIG, PigConfig

logger = logging.getLogger(__name__)

TERM_WITH_NAMESPACE = re.compile(r"^([a-zA-Z_][a-zA-Z0-9_\-.]*):([^\s]+)$")
URI = re.compile(r"^(https?|ftp)://[^\s/$.?#].[^\s]*$", re.IGNORECASE)
DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
HAS_TIMEZONE = re.compile(r"(Z|[+-]\d{2}:?\d{2})$")


def is_valid_id(value: object) -> bool:
    """True for a namespaced term (`prefix:local`) or an absolute URI."""
    if not isinstance(value, str):
        return False
    return bool(URI.match(value) or TERM_WITH_NAMESPACE.match(value))


def normalize_id(value: str, kind: Optional[ItemKind], config: PigConfig = DEFAULT_CONFIG) -> str:
    """Return value unchanged if it is a valid identifier, else prefix it.

    Class kinds get the ontology prefix, everything else the data prefix. The
    rewrite is lossy and is logged.
    """
    value = value.strip()
    if is_valid_id(value):
        return value
    prefix = config.class_id_prefix if kind is not None and kind.is_class else config.individual_id_prefix
    normalized = f"{prefix}{value}"
    logger.info("Identifier %r normalized to %r", value, normalized)
    return normalized


def normalize_datetime(value: object, config: PigConfig = DEFAULT_CONFIG) -> Optional[str]:
    """Return an ISO 8601 date-time string with timezone, or None if value is not one.

    A date-time without offset gets the configured default timezone. A bare date
    is taken as midnight of that day.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if DATE_ONLY.match(text):
        try:
            date.fromisoformat(text)
        except ValueError:
            logger.warning("Invalid date %r", text)
            return None
        text = f"{text}T00:00:00"
    if not HAS_TIMEZONE.search(text):
        text = f"{text}{config.default_timezone}"
    try:
        datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Invalid date-time %r", value)
        return None
    return text


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
