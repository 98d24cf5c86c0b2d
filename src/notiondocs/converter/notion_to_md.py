"""Notion block tree to Markdown renderer.

Converts decoded :class:`~notiondocs.models.Block` values into the Markdown
body of a Docusaurus document.  Rendering is not pure: page mentions, page
links, tables and nested children each fetch more data through the
context's fetcher.  A failure in one of those nested lookups is logged and
degrades that one fragment; it never aborts the page.

Usage::

    from notiondocs.context import ExportContext
    from notiondocs.converter.notion_to_md import NotionToMarkdownRenderer

    renderer = NotionToMarkdownRenderer(ctx)
    md = renderer.render_blocks(ctx.fetcher.list_block_children(page_id))
"""

from __future__ import annotations

from collections.abc import Callable as _Callable
from pathlib import Path
from typing import TYPE_CHECKING

from notiondocs.config import IMAGE_SUBDIR
from notiondocs.errors import NotiondocsError
from notiondocs.models import (
    Block,
    Bookmark,
    BulletedListItem,
    Callout,
    ChildPage,
    Code,
    Divider,
    FileBlock,
    Heading,
    Image,
    LinkToPage,
    NumberedListItem,
    Paragraph,
    Quote,
    Table,
    TableRow,
    ToDo,
    Unsupported,
)
from notiondocs.observability import NoopMetricsHook, get_logger

from .inline_renderer import plain_text, render_rich_text, resolve_page_link
from .tables import fetch_table_rows, render_table

if TYPE_CHECKING:
    from notiondocs.context import ExportContext

log = get_logger("notiondocs.renderer")

# Payloads whose children are not rendered as nested content: table rows are
# consumed by the table itself, child pages are exported as subtrees.
_CHILDREN_HANDLED_ELSEWHERE: tuple[type, ...] = (Table, ChildPage)

TABLE_ERROR_PLACEHOLDER = "[Error: Could not fetch table content]\n"


class NotionToMarkdownRenderer:
    """Renders blocks to Markdown within one export context.

    Parameters
    ----------
    ctx:
        The export context (configuration, fetcher, image downloader,
        warning sink).
    """

    def __init__(self, ctx: ExportContext) -> None:
        self._ctx = ctx
        metrics = ctx.config.metrics
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self._child_pages: list[tuple[str, str]] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def take_child_pages(self) -> list[tuple[str, str]]:
        """Return and forget the ``(block id, title)`` of every child page
        met since the last call.

        Child pages have no inline rendering; the caller exports them as a
        subtree of their own.
        """
        found, self._child_pages = self._child_pages, []
        return found

    def render_blocks(self, blocks: list[Block], depth: int = 0) -> str:
        """Render a list of sibling blocks.

        Parameters
        ----------
        blocks:
            Decoded blocks, in order.
        depth:
            Nesting depth; ``0`` for a page's top-level blocks.  List items
            below depth 0 are indented with one tab per level.
        """
        return "".join(self.render_block(block, depth) for block in blocks)

    def render_block(self, block: Block, depth: int = 0) -> str:
        """Render one block followed by its nested children."""
        if block.is_deleted:
            return ""

        renderer = _BLOCK_RENDERERS.get(type(block.payload))
        if renderer is None:
            renderer = NotionToMarkdownRenderer._render_unsupported
        result = renderer(self, block, depth)

        if block.has_children and not isinstance(block.payload, _CHILDREN_HANDLED_ELSEWHERE):
            result += self._render_children(block, depth)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _text(self, runs) -> str:
        return render_rich_text(runs, self._ctx)

    @staticmethod
    def _indent(depth: int) -> str:
        return "\t" * depth

    def _render_children(self, block: Block, depth: int) -> str:
        try:
            children = self._ctx.fetcher.list_block_children(block.id)
        except NotiondocsError as exc:
            log.warning(
                "Failed to fetch block children",
                extra={"extra_fields": {"block_id": block.id, "error": str(exc)}},
            )
            self._ctx.warn("CHILDREN_UNAVAILABLE", str(exc), block_id=block.id)
            return ""
        return self.render_blocks(children, depth + 1)

    # ------------------------------------------------------------------
    # Block type renderers
    # ------------------------------------------------------------------

    def _render_paragraph(self, block: Block, depth: int) -> str:
        return f"{self._text(block.payload.rich_text)}  \n"

    def _render_heading(self, block: Block, depth: int) -> str:
        payload: Heading = block.payload
        return f"{'#' * payload.level} {self._text(payload.rich_text)}  \n"

    def _render_bulleted_list_item(self, block: Block, depth: int) -> str:
        return f"{self._indent(depth)}- {self._text(block.payload.rich_text)}  \n"

    def _render_numbered_list_item(self, block: Block, depth: int) -> str:
        return f"{self._indent(depth)}1. {self._text(block.payload.rich_text)}  \n"

    def _render_to_do(self, block: Block, depth: int) -> str:
        payload: ToDo = block.payload
        checkbox = "[x]" if payload.checked else "[ ]"
        return f"{self._indent(depth)}- {checkbox} {self._text(payload.rich_text)}  \n"

    def _render_code(self, block: Block, depth: int) -> str:
        payload: Code = block.payload
        # Notion uses "plain text" for unspecified language
        language = "" if payload.language == "plain text" else payload.language
        # Code is kept verbatim: no styling, no <br /> substitution.
        return f"```{language}\n{plain_text(payload.rich_text)}\n```\n"

    def _render_quote(self, block: Block, depth: int) -> str:
        return f"> {self._text(block.payload.rich_text)}  \n"

    def _render_callout(self, block: Block, depth: int) -> str:
        payload: Callout = block.payload
        icon = f"{payload.emoji} " if payload.emoji else ""
        return f"> {icon}{self._text(payload.rich_text)}  \n"

    def _render_divider(self, block: Block, depth: int) -> str:
        return "\n---\n"

    def _render_image(self, block: Block, depth: int) -> str:
        payload: Image = block.payload
        if not payload.url:
            return ""
        config = self._ctx.config
        if not config.download_images:
            return f"![]({payload.url})\n\n"

        image_dir = Path(config.image_dir)
        try:
            image_dir.mkdir(parents=True, exist_ok=True)
            filename = self._ctx.download_image(payload.url, image_dir)
        except (NotiondocsError, OSError) as exc:
            log.warning(
                "Error occurred while downloading image",
                extra={"extra_fields": {"block_id": block.id, "url": payload.url, "error": str(exc)}},
            )
            self._metrics.increment("notiondocs.images_failed_total")
            self._ctx.warn("IMAGE_DOWNLOAD_FAILED", str(exc), block_id=block.id, url=payload.url)
            return f"![]({payload.url})\n\n"
        return f"![{filename}](/{IMAGE_SUBDIR}/{filename})\n\n"

    def _render_file(self, block: Block, depth: int) -> str:
        payload: FileBlock = block.payload
        name = plain_text(payload.caption) or payload.name or "File"
        return f"[{name}]({payload.url})  \n"

    def _render_bookmark(self, block: Block, depth: int) -> str:
        payload: Bookmark = block.payload
        caption = plain_text(payload.caption) or payload.url
        return f"[{caption}]({payload.url})  \n"

    def _render_table(self, block: Block, depth: int) -> str:
        try:
            rows = fetch_table_rows(self._ctx, block.id)
        except NotiondocsError as exc:
            log.warning(
                "Error fetching table content",
                extra={"extra_fields": {"block_id": block.id, "error": str(exc)}},
            )
            self._ctx.warn("TABLE_UNAVAILABLE", str(exc), block_id=block.id)
            return TABLE_ERROR_PLACEHOLDER
        html = render_table(rows, self._ctx)
        return f"{html}  \n" if html else ""

    def _render_table_row(self, block: Block, depth: int) -> str:
        # Rows are rendered by their table.
        return ""

    def _render_link_to_page(self, block: Block, depth: int) -> str:
        payload: LinkToPage = block.payload
        link = resolve_page_link(self._ctx, payload.page_id)
        return f"{link}<br/>" if link is not None else ""

    def _render_child_page(self, block: Block, depth: int) -> str:
        payload: ChildPage = block.payload
        if block.has_children:
            self._child_pages.append((block.id, payload.title))
        return ""

    def _render_unsupported(self, block: Block, depth: int) -> str:
        type_name = (
            block.payload.type_name if isinstance(block.payload, Unsupported) else block.type
        )
        return f"[Unsupported block type: {type_name}]  \n"


# ------------------------------------------------------------------
# Block renderer dispatch table
# ------------------------------------------------------------------

_BlockRenderer = _Callable[["NotionToMarkdownRenderer", Block, int], str]

_BLOCK_RENDERERS: dict[type, _BlockRenderer] = {
    Paragraph: NotionToMarkdownRenderer._render_paragraph,
    Heading: NotionToMarkdownRenderer._render_heading,
    BulletedListItem: NotionToMarkdownRenderer._render_bulleted_list_item,
    NumberedListItem: NotionToMarkdownRenderer._render_numbered_list_item,
    ToDo: NotionToMarkdownRenderer._render_to_do,
    Code: NotionToMarkdownRenderer._render_code,
    Quote: NotionToMarkdownRenderer._render_quote,
    Callout: NotionToMarkdownRenderer._render_callout,
    Divider: NotionToMarkdownRenderer._render_divider,
    Image: NotionToMarkdownRenderer._render_image,
    FileBlock: NotionToMarkdownRenderer._render_file,
    Bookmark: NotionToMarkdownRenderer._render_bookmark,
    Table: NotionToMarkdownRenderer._render_table,
    TableRow: NotionToMarkdownRenderer._render_table_row,
    LinkToPage: NotionToMarkdownRenderer._render_link_to_page,
    ChildPage: NotionToMarkdownRenderer._render_child_page,
    Unsupported: NotionToMarkdownRenderer._render_unsupported,
}
