"""Page property extraction.

Reads the handful of named properties an export cares about from a page's
open-ended property map:

=============  ==========  =============================================
Property       Notion type Used for
=============  ==========  =============================================
``Name``       title       document title, category label
``Slug``       rich_text   output slug (falls back to the title)
``Keywords``   rich_text   ``tags`` front-matter entry
``Parent``     relation    parent page id
``Sub-Items``  relation    child page ids, in order
=============  ==========  =============================================

Every lookup is optional.  A missing property, an empty list or a value of
the wrong shape yields the default and is logged at DEBUG; nothing here
raises on a schema the exporter did not expect.
"""

from __future__ import annotations

from typing import Any

from notiondocs.models import Page, PageProperties, PageRelations
from notiondocs.observability import get_logger

log = get_logger("notiondocs.properties")

TITLE_PROPERTY = "Name"
SLUG_PROPERTY = "Slug"
KEYWORDS_PROPERTY = "Keywords"
PARENT_PROPERTY = "Parent"
CHILDREN_PROPERTY = "Sub-Items"


def _property_list(page: Page, name: str, key: str) -> list[Any] | None:
    """Return ``properties[name][key]`` if it is a list, else ``None``."""
    prop = page.properties.get(name)
    if prop is None:
        return None
    if not isinstance(prop, dict):
        _malformed(page, name, "property is not an object")
        return None
    value = prop.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        _malformed(page, name, f"'{key}' is not a list")
        return None
    return value


def _first_plain_text(page: Page, name: str, key: str) -> str | None:
    """Plain text of the first run of a title / rich_text property.

    ``None`` when the property is absent or its run list is empty, so the
    caller can tell "no value" from an empty string.
    """
    runs = _property_list(page, name, key)
    if not runs:
        return None
    first = runs[0]
    if not isinstance(first, dict):
        _malformed(page, name, "first run is not an object")
        return None
    text = first.get("plain_text")
    if text is None and isinstance(first.get("text"), dict):
        text = first["text"].get("content")
    if not isinstance(text, str):
        _malformed(page, name, "first run has no plain_text")
        return None
    return text


def _relation_ids(page: Page, name: str) -> list[str]:
    ids: list[str] = []
    for item in _property_list(page, name, "relation") or []:
        item_id = item.get("id") if isinstance(item, dict) else None
        if isinstance(item_id, str) and item_id:
            ids.append(item_id)
        else:
            _malformed(page, name, "relation entry has no id")
    return ids


def _malformed(page: Page, name: str, reason: str) -> None:
    log.debug(
        "Malformed page property",
        extra={"extra_fields": {"page_id": page.id, "property": name, "reason": reason}},
    )


def extract_properties(page: Page) -> PageProperties:
    """Return the title, slug and keywords of *page*.

    * Title: first run of ``Name``, else ``""``.
    * Slug: first run of ``Slug``, else the title; spaces become hyphens.
    * Keywords: first run of ``Keywords``, else ``""``.
    """
    title = _first_plain_text(page, TITLE_PROPERTY, "title") or ""

    slug = _first_plain_text(page, SLUG_PROPERTY, "rich_text")
    if not slug:
        slug = title
    slug = slug.replace(" ", "-")

    keywords = _first_plain_text(page, KEYWORDS_PROPERTY, "rich_text") or ""

    return PageProperties(title=title, slug=slug, keywords=keywords)


def extract_relations(page: Page) -> PageRelations:
    """Return the parent id (first ``Parent`` relation) and the ordered
    ``Sub-Items`` child ids of *page*."""
    parents = _relation_ids(page, PARENT_PROPERTY)
    return PageRelations(
        parent_id=parents[0] if parents else None,
        child_ids=tuple(_relation_ids(page, CHILDREN_PROPERTY)),
    )
