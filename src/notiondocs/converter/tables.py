"""Table rendering: Notion ``table`` blocks to HTML tables.

A table block only declares its width and header flags; the rows are
``table_row`` children fetched through the same paginated children
endpoint as any other block.  They are aggregated first and rendered as a
single ``<table>``: the first row in ``<th>`` cells, the rest in ``<td>``.

HTML is used instead of GFM pipe tables because cells routinely contain
line breaks.  ``|`` is still escaped as ``&#124;`` so a cell never closes a
Markdown table by accident.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from notiondocs.models import RichText, TableRow

from .inline_renderer import render_rich_text

if TYPE_CHECKING:
    from notiondocs.context import ExportContext


def fetch_table_rows(ctx: ExportContext, table_id: str) -> list[TableRow]:
    """All rows of table *table_id*, in order, across every remote page.

    Raises whatever the fetcher raises; the caller decides how to degrade.
    """
    rows: list[TableRow] = []
    for response in ctx.fetcher.iter_block_children_pages(table_id):
        for block in response.results:
            if isinstance(block.payload, TableRow):
                rows.append(block.payload)
    return rows


def render_table_cell(cell: tuple[RichText, ...], ctx: ExportContext) -> str:
    """Render one cell's runs, trimming a trailing newline and escaping pipes."""
    content = render_rich_text(cell, ctx)
    content = content.removesuffix("<br />")
    return content.replace("|", "&#124;")


def render_table(rows: list[TableRow], ctx: ExportContext) -> str:
    """Render *rows* as ``<table>`` HTML.  Empty input renders nothing."""
    if not rows:
        return ""

    parts: list[str] = ["<table>"]
    for index, row in enumerate(rows):
        tag = "th" if index == 0 else "td"
        parts.append("<tr>")
        for cell in row.cells:
            parts.append(f"<{tag}>{render_table_cell(cell, ctx)}</{tag}>")
        parts.append("</tr>")
    parts.append("</table>")
    return "".join(parts)
