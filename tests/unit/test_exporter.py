"""End-to-end tests for notiondocs/exporter.py against the in-memory API.

Covers:
- front matter and document layout
- Sub-Items become <id>/index.md plus _category_.json
- slug collisions across one run
- sidebar positions restart on every remote page of results
- child_page blocks become subdirectories, at listing level and in page bodies
- front matter values are quoted for YAML
- per-page failures are skipped, listing failures abort
- database exports
"""

from __future__ import annotations

import json

import pytest
from fakes import (
    FakeNotion,
    make_context,
    raw_child_page,
    raw_link_to_page,
    raw_paragraph,
    raw_text,
)

from notiondocs.errors import NotiondocsNotFoundError
from notiondocs.exporter import (
    TreeExporter,
    build_category_metadata,
    build_document,
    build_front_matter,
    safe_dirname,
)


def front_matter_of(path) -> dict[str, str]:
    lines = path.read_text(encoding="utf-8").split("\n")
    assert lines[0] == "---"
    end = lines.index("---", 1)
    fields = dict(line.split(": ", 1) for line in lines[1:end])
    for key in ("title", "slug"):
        if key in fields:
            fields[key] = json.loads(fields[key])
    return fields


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

class TestFormatting:
    def test_front_matter(self):
        assert build_front_matter("Intro", "/intro", "a, b", 3) == (
            '---\ntitle: "Intro"\nslug: "/intro"\ntags: [a, b]\nsidebar_position: 3\n---\n'
        )

    def test_front_matter_quotes_yaml_special_characters(self):
        fm = build_front_matter('Setup: step #1 "quoted"', "/setup", "", 0)
        title_line = fm.split("\n")[1]
        assert title_line == 'title: "Setup: step #1 \\"quoted\\""'
        assert json.loads(title_line.removeprefix("title: ")) == 'Setup: step #1 "quoted"'

    def test_document(self):
        assert build_document("---\n---\n", "Body  \n") == "---\n---\n\nBody  \n\n"

    def test_category_metadata(self):
        assert json.loads(build_category_metadata("Guides é", 2)) == {"label": "Guides é", "position": 2}
        assert "é" in build_category_metadata("é", 0)

    @pytest.mark.parametrize(
        "name, expected",
        [("Guides", "Guides"), ("a/b", "a-b"), ("", "fallback"), ("..", "fallback")],
    )
    def test_safe_dirname(self, name, expected):
        assert safe_dirname(name, "fallback") == expected


# ---------------------------------------------------------------------------
# Page tree export
# ---------------------------------------------------------------------------

class TestExportBlockTree:
    def test_page_with_sub_items(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_link_to_page("p1"))
        notion.add_page(
            "p1", raw_paragraph(raw_text("Body")),
            title="Intro", slug="/intro", keywords="start", sub_items=["c1"],
        )
        notion.add_page("c1", raw_paragraph(raw_text("Child body")), title="Child", slug="/child")

        with make_context(notion) as ctx:
            result = TreeExporter(ctx).export("root", tmp_path)

        index = tmp_path / "p1" / "index.md"
        assert index.read_text(encoding="utf-8") == (
            '---\ntitle: "Intro"\nslug: "/intro"\ntags: [start]\nsidebar_position: 0\n---\n'
            "\nBody  \n\n"
        )
        category = json.loads((tmp_path / "p1" / "_category_.json").read_text(encoding="utf-8"))
        assert category == {"label": "Intro", "position": 0}

        child = tmp_path / "p1" / "c1.md"
        assert front_matter_of(child) == {
            "title": "Child", "slug": "/child", "tags": "[]", "sidebar_position": "0",
        }
        assert not (tmp_path / "p1.md").exists()
        assert result.pages_written == 2
        assert str(index) in result.files

    def test_leaf_page_is_written_flat(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_link_to_page("p1"))
        notion.add_page("p1", title="Leaf")

        with make_context(notion) as ctx:
            TreeExporter(ctx).export("root", tmp_path)

        assert front_matter_of(tmp_path / "p1.md")["slug"] == "Leaf"
        assert not (tmp_path / "p1").exists()

    def test_slug_collision_gets_dup_suffix(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_link_to_page("a"), raw_link_to_page("b"))
        notion.add_page("a", title="A", slug="/intro")
        notion.add_page("b", title="B", slug="/(intro)")

        with make_context(notion) as ctx:
            TreeExporter(ctx).export("root", tmp_path)

        assert front_matter_of(tmp_path / "a.md")["slug"] == "/intro"
        assert front_matter_of(tmp_path / "b.md")["slug"] == "/intro-dup"

    def test_positions_restart_on_each_remote_page(self, tmp_path):
        notion = FakeNotion(page_size=2)
        notion.add_page(
            "root",
            raw_paragraph(raw_text("ignored")),
            raw_link_to_page("p1"),
            raw_link_to_page("p2"),
        )
        notion.add_page("p1", title="One")
        notion.add_page("p2", title="Two")

        with make_context(notion) as ctx:
            TreeExporter(ctx).export("root", tmp_path)

        assert front_matter_of(tmp_path / "p1.md")["sidebar_position"] == "1"
        assert front_matter_of(tmp_path / "p2.md")["sidebar_position"] == "0"

    def test_child_page_becomes_directory(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_child_page("Guides", block_id="g"))
        notion.children["g"] = [raw_link_to_page("p3")]
        notion.add_page("p3", title="Install")

        with make_context(notion) as ctx:
            TreeExporter(ctx).export("root", tmp_path)

        assert (tmp_path / "Guides" / "p3.md").is_file()

    def test_child_page_without_children_is_ignored(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_child_page("Empty", block_id="e", has_children=False))

        with make_context(notion) as ctx:
            TreeExporter(ctx).export("root", tmp_path)

        assert list(tmp_path.iterdir()) == []
        assert "/blocks/e/children" not in notion.paths()

    def test_child_page_in_page_body_is_exported_as_subtree(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_link_to_page("p1"))
        notion.add_page(
            "p1", raw_paragraph(raw_text("Body")), raw_child_page("Sub", block_id="sub"),
            title="Intro",
        )
        notion.children["sub"] = [raw_paragraph(raw_text("Sub content")), raw_link_to_page("p2")]
        notion.add_page("p2", title="Nested")

        with make_context(notion) as ctx:
            result = TreeExporter(ctx).export("root", tmp_path)

        assert (tmp_path / "p1.md").read_text(encoding="utf-8").endswith("\nBody  \n\n")
        assert front_matter_of(tmp_path / "p1" / "Sub" / "p2.md")["title"] == "Nested"
        assert "/blocks/sub/children" in notion.paths()
        assert result.pages_written == 2
        assert result.warnings == []

    def test_unlistable_child_page_in_body_is_skipped(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_link_to_page("p1"))
        notion.add_page("p1", raw_child_page("Sub", block_id="sub"), title="Intro")
        notion.fail("/blocks/sub/children", 500)

        with make_context(notion) as ctx:
            result = TreeExporter(ctx).export("root", tmp_path)

        assert (tmp_path / "p1.md").is_file()
        assert not (tmp_path / "p1").exists()
        assert [(w.code, w.context["page_id"]) for w in result.warnings] == [("PAGE_SKIPPED", "sub")]

    def test_parent_slug_registered_before_children(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_link_to_page("p"))
        notion.add_page("p", title="P", slug="/same", sub_items=["c"])
        notion.add_page("c", title="C", slug="/same")

        with make_context(notion) as ctx:
            TreeExporter(ctx).export("root", tmp_path)

        assert front_matter_of(tmp_path / "p" / "index.md")["slug"] == "/same"
        assert front_matter_of(tmp_path / "p" / "c.md")["slug"] == "/same-dup"

    def test_missing_linked_page_is_skipped(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_link_to_page("gone"), raw_link_to_page("ok"))
        notion.add_page("ok", title="Ok")

        with make_context(notion) as ctx:
            result = TreeExporter(ctx).export("root", tmp_path)

        assert (tmp_path / "ok.md").is_file()
        assert result.pages_written == 1
        assert [w.code for w in result.warnings] == ["PAGE_SKIPPED"]

    def test_all_sub_items_failing_writes_flat_file(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root", raw_link_to_page("p"))
        notion.add_page("p", title="P", sub_items=["missing"])

        with make_context(notion) as ctx:
            TreeExporter(ctx).export("root", tmp_path)

        assert (tmp_path / "p.md").is_file()
        assert not (tmp_path / "p").exists()

    def test_root_listing_failure_propagates(self, tmp_path):
        with make_context(FakeNotion()) as ctx:
            with pytest.raises(NotiondocsNotFoundError):
                TreeExporter(ctx).export("nope", tmp_path)

    def test_output_directory_is_created(self, tmp_path):
        notion = FakeNotion()
        notion.add_page("root")
        target = tmp_path / "a" / "b"

        with make_context(notion) as ctx:
            result = TreeExporter(ctx).export("root", target)

        assert target.is_dir()
        assert result.output_dir == str(target)

    def test_invalid_root_type(self, tmp_path):
        with make_context(FakeNotion()) as ctx:
            with pytest.raises(ValueError):
                TreeExporter(ctx).export("root", tmp_path, root_type="workspace")


# ---------------------------------------------------------------------------
# Database export
# ---------------------------------------------------------------------------

class TestExportDatabase:
    def test_rows_become_documents(self, tmp_path):
        notion = FakeNotion()
        rows = [
            notion.add_page("r1", raw_paragraph(raw_text("first")), title="First", keywords="x"),
            notion.add_page("r2", title="Second"),
        ]
        notion.rows["db"] = rows

        with make_context(notion) as ctx:
            result = TreeExporter(ctx).export("db", tmp_path, root_type="database")

        assert front_matter_of(tmp_path / "r1.md") == {
            "title": "First", "slug": "First", "tags": "[x]", "sidebar_position": "0",
        }
        assert front_matter_of(tmp_path / "r2.md")["sidebar_position"] == "1"
        assert "first  \n" in (tmp_path / "r1.md").read_text(encoding="utf-8")
        assert result.pages_written == 2

    def test_row_failure_is_skipped(self, tmp_path):
        notion = FakeNotion()
        good = notion.add_page("good", title="Good")
        notion.rows["db"] = [{"object": "page", "id": "broken", "properties": {}}, good]

        with make_context(notion) as ctx:
            result = TreeExporter(ctx).export("db", tmp_path, root_type="database")

        assert (tmp_path / "good.md").is_file()
        assert result.pages_written == 1
        assert result.warnings[0].context["page_id"] == "broken"
