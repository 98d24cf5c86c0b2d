"""Inline rendering: rich-text runs to Markdown/HTML fragments.

Runs are styled with HTML tags rather than Markdown emphasis so that the
output survives inside Docusaurus admonitions and HTML tables alike.
Styling order (innermost first)::

    bold -> italic -> underline -> strikethrough -> code

Before styling, ``·`` becomes ``-`` and newlines become ``<br />``.

Page mentions are displayed as a link to the mentioned page, which means
fetching that page: :func:`render_rich_text` needs an
:class:`~notiondocs.context.ExportContext`, while :func:`render_run` is pure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from notiondocs.errors import NotiondocsError
from notiondocs.models import Annotations, RichText
from notiondocs.observability import get_logger
from notiondocs.properties import extract_properties

if TYPE_CHECKING:
    from notiondocs.context import ExportContext

log = get_logger("notiondocs.renderer")

# (flag, opening tag, closing tag) in wrapping order.
_STYLE_TAGS: tuple[tuple[str, str, str], ...] = (
    ("bold", "<strong>", "</strong>"),
    ("italic", "<em>", "</em>"),
    ("underline", "<u>", "</u>"),
    ("strikethrough", "<del>", "</del>"),
    ("code", "<code>", "</code>"),
)


def style_text(text: str, annotations: Annotations) -> str:
    """Apply character substitutions and annotation tags to *text*."""
    text = text.replace("·", "-").replace("\n", "<br />")
    for flag, opening, closing in _STYLE_TAGS:
        if getattr(annotations, flag):
            text = f"{opening}{text}{closing}"
    return text


def render_run(run: RichText, text: str | None = None) -> str:
    """Render one run.

    Parameters
    ----------
    run:
        The rich-text run.
    text:
        Display text overriding ``run.plain_text`` (used for resolved
        mentions).
    """
    rendered = style_text(run.plain_text if text is None else text, run.annotations)
    if run.href and not run.is_page_mention:
        rendered = f"[{rendered}]({run.href})"
    return rendered


def link_target(slug: str, docs_root: str) -> str:
    """Absolute slugs (``/intro``) live under the documentation root."""
    if slug.startswith("/"):
        return docs_root.rstrip("/") + slug
    return slug


def resolve_page_link(ctx: ExportContext, page_id: str) -> str | None:
    """``[title](slug)`` for *page_id*, or ``None`` if it cannot be fetched.

    Failures are logged and recorded as a context warning.
    """
    try:
        page = ctx.fetcher.fetch_page(page_id)
    except NotiondocsError as exc:
        log.warning(
            "Failed to resolve page reference",
            extra={"extra_fields": {"page_id": page_id, "error": str(exc)}},
        )
        ctx.warn("PAGE_UNRESOLVED", f"Could not fetch page {page_id}: {exc}", page_id=page_id)
        return None
    props = extract_properties(page)
    return f"[{props.title}]({link_target(props.slug, ctx.config.docs_root)})"


def render_rich_text(runs: tuple[RichText, ...] | list[RichText], ctx: ExportContext) -> str:
    """Render a run list, resolving page mentions through *ctx*.

    An unresolvable mention falls back to the run's own text.
    """
    parts: list[str] = []
    for run in runs:
        if run.is_page_mention:
            link = resolve_page_link(ctx, run.mention_page_id or "")
            parts.append(render_run(run, link))
        else:
            parts.append(render_run(run))
    return "".join(parts)


def plain_text(runs: tuple[RichText, ...] | list[RichText]) -> str:
    """Concatenated unstyled text of *runs*."""
    return "".join(run.plain_text for run in runs)
