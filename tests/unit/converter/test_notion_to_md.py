"""Tests for notiondocs/converter/notion_to_md.py.

Covers every block renderer, nested children and indentation, skipped
deleted blocks, tables with and without a fetch failure, link_to_page,
and image download with its remote-URL fallback.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fakes import (
    FakeNotion,
    make_config,
    make_context,
    raw_block,
    raw_link_to_page,
    raw_paragraph,
    raw_text,
)

from notiondocs.converter.notion_to_md import TABLE_ERROR_PLACEHOLDER, NotionToMarkdownRenderer
from notiondocs.errors import NotiondocsAssetError
from notiondocs.models import parse_block


def render(ctx, *raw_blocks: dict, depth: int = 0) -> str:
    blocks = [parse_block(raw) for raw in raw_blocks]
    return NotionToMarkdownRenderer(ctx).render_blocks(blocks, depth)


def text_block(block_type: str, content: str, **kwargs) -> dict:
    return raw_block(block_type, rich_text=[raw_text(content)], **kwargs)


# ---------------------------------------------------------------------------
# Text blocks
# ---------------------------------------------------------------------------

class TestTextBlocks:
    def test_paragraph(self, ctx):
        assert render(ctx, text_block("paragraph", "Hello")) == "Hello  \n"

    @pytest.mark.parametrize("level", [1, 2, 3])
    def test_headings(self, ctx, level):
        assert render(ctx, text_block(f"heading_{level}", "Title")) == f"{'#' * level} Title  \n"

    def test_bulleted_and_numbered(self, ctx):
        out = render(ctx, text_block("bulleted_list_item", "a"), text_block("numbered_list_item", "b"))
        assert out == "- a  \n1. b  \n"

    def test_to_do(self, ctx):
        out = render(
            ctx,
            raw_block("to_do", rich_text=[raw_text("done")], checked=True),
            raw_block("to_do", rich_text=[raw_text("open")], checked=False),
        )
        assert out == "- [x] done  \n- [ ] open  \n"

    def test_quote(self, ctx):
        assert render(ctx, text_block("quote", "wise")) == "> wise  \n"

    def test_callout_with_emoji(self, ctx):
        raw = raw_block("callout", rich_text=[raw_text("Note")], icon={"type": "emoji", "emoji": "💡"})
        assert render(ctx, raw) == "> 💡 Note  \n"

    def test_divider(self, ctx):
        assert render(ctx, raw_block("divider")) == "\n---\n"

    def test_styled_paragraph(self, ctx):
        raw = raw_paragraph(raw_text("bold", bold=True), raw_text(" and "), raw_text("link", href="https://x.io"))
        assert render(ctx, raw) == "<strong>bold</strong> and [link](https://x.io)  \n"


class TestCode:
    def test_language_fence(self, ctx):
        raw = raw_block("code", rich_text=[raw_text("print(1)")], language="python")
        assert render(ctx, raw) == "```python\nprint(1)\n```\n"

    def test_plain_text_language_is_dropped(self, ctx):
        raw = raw_block("code", rich_text=[raw_text("x")], language="plain text")
        assert render(ctx, raw) == "```\nx\n```\n"

    def test_code_is_verbatim(self, ctx):
        raw = raw_block("code", rich_text=[raw_text("a\nb·c", bold=True)], language="")
        assert render(ctx, raw) == "```\na\nb·c\n```\n"


class TestLinksAndMedia:
    def test_bookmark_uses_caption_or_url(self, ctx):
        with_caption = raw_block("bookmark", url="https://a.io", caption=[raw_text("A site")])
        without = raw_block("bookmark", url="https://b.io", caption=[])
        assert render(ctx, with_caption, without) == "[A site](https://a.io)  \n[https://b.io](https://b.io)  \n"

    def test_file(self, ctx):
        raw = raw_block("file", type="external", external={"url": "https://f.io/a.pdf"}, name="a.pdf")
        assert render(ctx, raw) == "[a.pdf](https://f.io/a.pdf)  \n"

    def test_unsupported_placeholder(self, ctx):
        assert render(ctx, raw_block("synced_block")) == "[Unsupported block type: synced_block]  \n"

    def test_link_to_page(self, notion, ctx):
        notion.add_page("other", title="Other", slug="/other")
        assert render(ctx, raw_link_to_page("other")) == "[Other](/docs/other)<br/>"

    def test_unresolvable_link_to_page_renders_nothing(self, ctx):
        assert render(ctx, raw_link_to_page("missing")) == ""
        assert ctx.warnings[0].code == "PAGE_UNRESOLVED"

    def test_child_page_renders_nothing(self, ctx):
        assert render(ctx, raw_block("child_page", has_children=True, title="Sub")) == ""

    def test_child_pages_are_reported_once(self, notion, ctx):
        renderer = NotionToMarkdownRenderer(ctx)
        blocks = [
            parse_block(raw_block("child_page", block_id="sub", has_children=True, title="Sub")),
            parse_block(raw_block("child_page", block_id="empty", has_children=False, title="Empty")),
        ]

        assert renderer.render_blocks(blocks) == ""
        assert renderer.take_child_pages() == [("sub", "Sub")]
        assert renderer.take_child_pages() == []
        assert notion.paths() == []


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

def raw_image(url: str = "https://s3.example.com/img?X-Amz-Signature=abc") -> dict:
    return raw_block("image", type="file", file={"url": url}, caption=[])


class TestImages:
    def test_remote_url_when_downloads_disabled(self, ctx):
        assert render(ctx, raw_image("https://e.io/a.png")) == "![](https://e.io/a.png)\n\n"

    def test_downloaded_image_is_linked_under_docs_images(self, tmp_path):
        calls: list[tuple[str, Path]] = []

        def fake_download(url: str, dest: Path) -> str:
            calls.append((url, dest))
            return "AbCdEfGh_1.png"

        config = make_config(download_images=True, assets_dir=str(tmp_path / "static"))
        ctx = make_context(FakeNotion(), config, download_image=fake_download)

        out = render(ctx, raw_image("https://s3/x"))

        assert out == "![AbCdEfGh_1.png](/docs-images/AbCdEfGh_1.png)\n\n"
        assert calls == [("https://s3/x", Path(tmp_path / "static" / "docs-images"))]
        assert (tmp_path / "static" / "docs-images").is_dir()

    def test_failed_download_falls_back_to_remote_url(self, tmp_path):
        def failing_download(url: str, dest: Path) -> str:
            raise NotiondocsAssetError(message="status code 403", context={"url": url})

        config = make_config(download_images=True, assets_dir=str(tmp_path))
        ctx = make_context(FakeNotion(), config, download_image=failing_download)

        assert render(ctx, raw_image("https://s3/x")) == "![](https://s3/x)\n\n"
        assert [w.code for w in ctx.warnings] == ["IMAGE_DOWNLOAD_FAILED"]

    def test_image_without_url(self, ctx):
        assert render(ctx, raw_block("image", type="unknown")) == ""


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

class TestTables:
    def test_table_block(self, notion, ctx):
        notion.children["tbl"] = [
            raw_block("table_row", cells=[[raw_text("H1")], [raw_text("H2")]]),
            raw_block("table_row", cells=[[raw_text("a")], [raw_text("b")]]),
        ]
        raw = raw_block("table", block_id="tbl", has_children=True, table_width=2)

        out = render(ctx, raw)

        assert out == "<table><tr><th>H1</th><th>H2</th></tr><tr><td>a</td><td>b</td></tr></table>  \n"
        # Rows are fetched once, by the table itself.
        assert notion.paths() == ["/blocks/tbl/children"]

    def test_table_fetch_failure_renders_placeholder(self, notion, ctx):
        notion.fail("/blocks/tbl/children", 500)
        raw = raw_block("table", block_id="tbl", has_children=True, table_width=2)
        assert render(ctx, raw) == TABLE_ERROR_PLACEHOLDER
        assert ctx.warnings[0].code == "TABLE_UNAVAILABLE"


# ---------------------------------------------------------------------------
# Nesting
# ---------------------------------------------------------------------------

class TestNesting:
    def test_nested_list_items_are_indented(self, notion, ctx):
        notion.children["parent"] = [text_block("bulleted_list_item", "child")]
        raw = text_block("bulleted_list_item", "parent", block_id="parent", has_children=True)

        assert render(ctx, raw) == "- parent  \n\t- child  \n"

    def test_depth_argument_indents(self, ctx):
        assert render(ctx, text_block("numbered_list_item", "x"), depth=2) == "\t\t1. x  \n"

    def test_children_of_paragraph_follow_it(self, notion, ctx):
        notion.children["p"] = [text_block("paragraph", "inner")]
        raw = text_block("paragraph", "outer", block_id="p", has_children=True)
        assert render(ctx, raw) == "outer  \ninner  \n"

    def test_children_fetch_failure_keeps_the_block(self, notion, ctx):
        notion.fail("/blocks/p/children", 403)
        raw = text_block("paragraph", "outer", block_id="p", has_children=True)
        assert render(ctx, raw) == "outer  \n"
        assert ctx.warnings[0].code == "CHILDREN_UNAVAILABLE"

    def test_deleted_blocks_are_skipped(self, ctx):
        archived = text_block("paragraph", "gone")
        archived["archived"] = True
        trashed = text_block("paragraph", "also gone")
        trashed["in_trash"] = True
        assert render(ctx, archived, trashed, text_block("paragraph", "kept")) == "kept  \n"
