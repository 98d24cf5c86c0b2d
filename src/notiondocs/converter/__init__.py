"""Notion -> Markdown conversion.

Public API:

- :class:`NotionToMarkdownRenderer` -- decoded blocks to a Markdown body.
- :func:`render_run` / :func:`style_text` -- rich-text run styling.
- :func:`render_rich_text` -- run lists with page mentions resolved.
- :func:`render_table` / :func:`fetch_table_rows` -- HTML tables.
"""

from notiondocs.converter.inline_renderer import (
    render_rich_text,
    render_run,
    resolve_page_link,
    style_text,
)
from notiondocs.converter.notion_to_md import NotionToMarkdownRenderer
from notiondocs.converter.tables import fetch_table_rows, render_table

__all__ = [
    "NotionToMarkdownRenderer",
    "fetch_table_rows",
    "render_rich_text",
    "render_run",
    "render_table",
    "resolve_page_link",
    "style_text",
]
