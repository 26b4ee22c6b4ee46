"""HTML rendering of items, with sanitation of embedded rich text.

Rich text is kept verbatim by the codecs. It is only made safe here, right
before it is put into a page, so that a round trip through decode and encode
never loses markup.
"""

import html
import re
from typing import Any, Optional

from bs4 import BeautifulSoup

from pigschema import EntityInstance, PropertyClass, RelationshipInstance
from pigraph.text import get_local_text

REMOVED_TAGS = ("script", "style", "embed", "iframe", "link", "meta", "base", "form")
REMOVED_ATTRIBUTES = frozenset({"formaction", "action", "dynsrc", "lowsrc"})
SAFE_OBJECT_TYPES = frozenset(
    {"image/png", "image/jpeg", "image/gif", "image/webp", "image/svg+xml", "application/pdf"}
)
SAFE_DATA_URL = re.compile(r"^data:image/(png|jpeg|jpg|gif|webp)[;,]", re.IGNORECASE)
JAVASCRIPT_URL = re.compile(r"^\s*javascript:", re.IGNORECASE)


def sanitize_html(markup: str) -> str:
    """Remove executable and embedding markup from an HTML fragment."""
    if not markup or "<" not in markup:
        return markup
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(REMOVED_TAGS):
        tag.decompose()
    for tag in soup.find_all("object"):
        if (tag.get("type") or "").lower() not in SAFE_OBJECT_TYPES:
            tag.decompose()
    for tag in soup.find_all(True):
        for name in list(tag.attrs):
            lowered = name.lower()
            if lowered.startswith("on") or lowered in REMOVED_ATTRIBUTES:
                del tag[name]
        for name in ("href", "src"):
            url = tag.get(name)
            if not isinstance(url, str):
                continue
            if JAVASCRIPT_URL.match(url):
                tag[name] = "#"
            elif url.strip().lower().startswith("data:") and not (name == "src" and SAFE_DATA_URL.match(url.strip())):
                del tag[name]
    return str(soup)


def _property_title(property_id: str, lang: Optional[str], package: Any) -> str:
    if package is not None:
        for graph_item in package.get_items():
            model = graph_item.get()
            if isinstance(model, PropertyClass) and model.id == property_id:
                return get_local_text(model.title, lang) or property_id
    return property_id


def render_item_html(
    item: EntityInstance | RelationshipInstance,
    lang: Optional[str] = None,
    package: Any = None,
) -> str:
    """Render an individual as a `<div class="pig-item">` fragment.

    Property values are listed in a table whose row labels are the titles of
    their Property classes, looked up in package when one is given.
    """
    title = get_local_text(item.title, lang)
    parts = [f'<div class="pig-item" id="{html.escape(item.id)}">']
    parts.append(f"<h3>{sanitize_html(title) if title else html.escape(item.id)}</h3>")
    description = get_local_text(item.description, lang)
    if description:
        parts.append(f'<div class="pig-description">{sanitize_html(description)}</div>')
    rows = []
    for prop in item.has_property or []:
        if prop.lang and lang and prop.lang.split("-")[0].lower() != lang.split("-")[0].lower():
            continue
        label = html.escape(_property_title(prop.has_class, lang, package))
        value = sanitize_html(prop.value) if prop.value is not None else html.escape(prop.id_ref or "")
        rows.append(f"<tr><th>{label}</th><td>{value}</td></tr>")
    if rows:
        parts.append('<table class="pig-properties">' + "".join(rows) + "</table>")
    parts.append("</div>")
    return "".join(parts)
