"""Multi-language text: normalization, validation and language selection.

A text attribute is an ordered list of `{"value": ..., "lang": ...}` entries.
Zero entries means the attribute is absent. A single entry may omit `lang`.
With two or more entries every entry must carry a non-empty `lang`, otherwise
the language of each entry would be ambiguous.
"""

from typing import Any, Optional

from pigschema import Status, StatusCode


def normalize_text(raw: Any) -> Optional[list[dict[str, str]]]:
    """Collapse any accepted text shape into the canonical list of entries.

    Accepts None, a plain string, a single `{value, lang}` object (JSON-LD
    `@value`/`@language` keys are accepted too) or a list of those. Canonical
    input is returned unchanged in content.
    """
    if raw is None:
        return None
    if isinstance(raw, list):
        entries: list[dict[str, str]] = []
        for entry in raw:
            normalized = normalize_text(entry)
            if normalized:
                entries.extend(normalized)
        return entries
    if isinstance(raw, dict):
        value = raw.get("value", raw.get("@value"))
        lang = raw.get("lang", raw.get("@language", raw.get("xml:lang")))
        entry = {"value": value if isinstance(value, str) else ("" if value is None else str(value))}
        if lang:
            entry["lang"] = lang
        return [entry]
    return [{"value": str(raw)}]


def validate_text(field: str, entries: Any, item_id: Optional[str] = None) -> Status:
    """Check the multi-language invariant for one text attribute."""
    if entries is None:
        return Status.success()
    if not isinstance(entries, list):
        return Status.error(StatusCode.TEXT_NOT_LIST, f"{field} must be a list of language texts", item_id=item_id, field=field)
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            return Status.error(
                StatusCode.TEXT_ENTRY_NOT_OBJECT,
                f"{field}[{index}] must be an object with value and lang",
                item_id=item_id,
                field=field,
            )
        if not isinstance(entry.get("value"), str):
            return Status.error(
                StatusCode.TEXT_VALUE_NOT_STRING, f"{field}[{index}].value must be a string", item_id=item_id, field=field
            )
        lang = entry.get("lang")
        if lang is not None and not isinstance(lang, str):
            return Status.error(
                StatusCode.TEXT_LANG_NOT_STRING, f"{field}[{index}].lang must be a string", item_id=item_id, field=field
            )
        if len(entries) > 1 and not lang:
            return Status.error(
                StatusCode.TEXT_LANG_MISSING,
                f"{field}[{index}] needs a language tag because {field} has {len(entries)} entries",
                item_id=item_id,
                field=field,
            )
    return Status.success()


def get_local_text(entries: Optional[list[Any]], lang: Optional[str] = None) -> str:
    """Pick the entry for lang: exact match, then same primary language, then the first entry.

    Accepts dictionaries or `LanguageText` models.
    """
    if not entries:
        return ""

    def _lang(entry: Any) -> str:
        value = entry.get("lang") if isinstance(entry, dict) else getattr(entry, "lang", None)
        return (value or "").lower()

    def _value(entry: Any) -> str:
        return entry.get("value", "") if isinstance(entry, dict) else entry.value

    if lang:
        wanted = lang.lower()
        for entry in entries:
            if _lang(entry) == wanted:
                return _value(entry)
        primary = wanted.split("-")[0]
        for entry in entries:
            if _lang(entry).split("-")[0] == primary:
                return _value(entry)
    return _value(entries[0])
