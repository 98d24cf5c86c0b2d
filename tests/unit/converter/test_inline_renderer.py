"""Tests for notiondocs/converter/inline_renderer.py.

Covers style_text tag order and substitutions, hyperlinks, page mention
resolution (absolute slugs under the docs root) and the unresolved
mention fallback.
"""

from __future__ import annotations

from fakes import FakeNotion, make_config, make_context, raw_mention, raw_text
from hypothesis import given
from hypothesis import strategies as st

from notiondocs.converter.inline_renderer import (
    link_target,
    plain_text,
    render_rich_text,
    render_run,
    resolve_page_link,
    style_text,
)
from notiondocs.models import Annotations, RichText, parse_rich_text

# ---------------------------------------------------------------------------
# style_text
# ---------------------------------------------------------------------------

class TestStyleText:
    def test_plain(self):
        assert style_text("hello", Annotations()) == "hello"

    def test_bold_italic(self):
        assert style_text("x", Annotations(bold=True, italic=True)) == "<em><strong>x</strong></em>"

    def test_all_flags_nest_in_fixed_order(self):
        ann = Annotations(bold=True, italic=True, underline=True, strikethrough=True, code=True)
        assert style_text("x", ann) == (
            "<code><del><u><em><strong>x</strong></em></u></del></code>"
        )

    def test_newline_becomes_br(self):
        assert style_text("a\nb", Annotations()) == "a<br />b"

    def test_middle_dot_becomes_hyphen(self):
        assert style_text("a·b", Annotations()) == "a-b"

    def test_color_is_ignored(self):
        assert style_text("x", Annotations(color="red")) == "x"

    @given(
        text=st.text(alphabet="abcXYZ 019|*_-[]()/", max_size=20),
        flags=st.tuples(*[st.booleans()] * 5),
    )
    def test_each_enabled_tag_appears_once_in_order(self, text, flags):
        bold, italic, underline, strike, code = flags
        ann = Annotations(
            bold=bold, italic=italic, underline=underline, strikethrough=strike, code=code,
        )
        rendered = style_text(text, ann)

        tags = [("strong", bold), ("em", italic), ("u", underline), ("del", strike), ("code", code)]
        enabled = [tag for tag, on in tags if on]
        for tag, on in tags:
            assert rendered.count(f"<{tag}>") == (1 if on else 0)
        # Outermost tag is the last enabled one.
        prefix = "".join(f"<{tag}>" for tag in reversed(enabled))
        suffix = "".join(f"</{tag}>" for tag in enabled)
        assert rendered == f"{prefix}{text}{suffix}"


# ---------------------------------------------------------------------------
# render_run / link_target
# ---------------------------------------------------------------------------

class TestRenderRun:
    def test_href_wraps_styled_text(self):
        run = RichText(plain_text="docs", annotations=Annotations(bold=True), href="https://d.io")
        assert render_run(run) == "[<strong>docs</strong>](https://d.io)"

    def test_text_override(self):
        run = RichText(plain_text="ignored")
        assert render_run(run, "shown") == "shown"

    def test_link_target_prefixes_absolute_slugs(self):
        assert link_target("/intro", "/docs") == "/docs/intro"
        assert link_target("/intro", "/docs/") == "/docs/intro"
        assert link_target("intro", "/docs") == "intro"

    def test_plain_text(self):
        runs = parse_rich_text([raw_text("a", bold=True), raw_text("b")])
        assert plain_text(runs) == "ab"


# ---------------------------------------------------------------------------
# Mentions
# ---------------------------------------------------------------------------

class TestMentions:
    def test_mention_resolves_to_docs_link(self):
        notion = FakeNotion()
        notion.add_page("target", title="Setup", slug="/setup")
        ctx = make_context(notion, make_config(docs_root="/docs"))

        runs = parse_rich_text([raw_text("See "), raw_mention("target")])
        assert render_rich_text(runs, ctx) == "See [Setup](/docs/setup)"

    def test_relative_slug_is_left_alone(self):
        notion = FakeNotion()
        notion.add_page("target", title="Setup Guide")
        ctx = make_context(notion)

        runs = parse_rich_text([raw_mention("target")])
        assert render_rich_text(runs, ctx) == "[Setup Guide](Setup-Guide)"

    def test_mention_annotations_are_applied(self):
        notion = FakeNotion()
        notion.add_page("t", title="T", slug="/t")
        ctx = make_context(notion)
        seg = raw_mention("t")
        seg["annotations"] = {"bold": True}

        assert render_rich_text(parse_rich_text([seg]), ctx) == "<strong>[T](/docs/t)</strong>"

    def test_unresolved_mention_falls_back_to_text(self, caplog):
        notion = FakeNotion()
        ctx = make_context(notion)

        runs = parse_rich_text([raw_mention("gone", "Old page")])
        with caplog.at_level("WARNING", logger="notiondocs.renderer"):
            assert render_rich_text(runs, ctx) == "Old page"

        assert [w.code for w in ctx.warnings] == ["PAGE_UNRESOLVED"]
        assert any("Failed to resolve" in r.getMessage() for r in caplog.records)

    def test_repeated_mentions_hit_the_cache(self):
        notion = FakeNotion()
        notion.add_page("t", title="T", slug="/t")
        ctx = make_context(notion)

        runs = parse_rich_text([raw_mention("t"), raw_mention("t")])
        render_rich_text(runs, ctx)
        assert notion.paths() == ["/pages/t"]

    def test_resolve_page_link_returns_none_on_failure(self):
        notion = FakeNotion()
        notion.fail("/pages/p", 500)
        ctx = make_context(notion)
        assert resolve_page_link(ctx, "p") is None
