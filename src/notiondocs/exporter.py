"""Tree exporter: mirror a Notion page hierarchy into a docs directory.

Traversal runs as a small loop per listing::

    Listing  -- fetch one remote page of results (block children or
                database rows)
    Dispatch -- per result: link_to_page -> write that page here,
                child_page -> recurse into a subdirectory
    Writing  -- render the page, write its children, persist it
    ... back to Listing with the next cursor until has_more is false.

Layout of one written page::

    <output_dir>/<page id>.md                 page without Sub-Items
    <output_dir>/<page id>/index.md           page with Sub-Items
    <output_dir>/<page id>/_category_.json    {"label": ..., "position": ...}
    <output_dir>/<page id>/<child id>.md      ... one per child, recursively
    <output_dir>/<page id>/<child title>/     subtree of a child_page in the body

Positions are the index of a result within its remote page of results (or
within the parent's ``Sub-Items`` list), so they restart at zero on every
page of 100 results.

A failure to list the top-level tree is fatal and propagates.  A failure
to fetch or write one page is logged, recorded as a warning and skipped.
"""

from __future__ import annotations

import json
from pathlib import Path

from notiondocs.context import ExportContext
from notiondocs.converter.notion_to_md import NotionToMarkdownRenderer
from notiondocs.errors import NotiondocsError, NotiondocsExportError
from notiondocs.models import ChildPage, ExportResult, LinkToPage, Page
from notiondocs.observability import NoopMetricsHook, get_logger
from notiondocs.properties import extract_properties, extract_relations
from notiondocs.slugs import clean_slug

log = get_logger("notiondocs.exporter")

INDEX_FILENAME = "index.md"
CATEGORY_FILENAME = "_category_.json"


# ---------------------------------------------------------------------------
# Document formatting
# ---------------------------------------------------------------------------

def build_front_matter(title: str, slug: str, keywords: str, position: int) -> str:
    """Docusaurus front matter block, closing delimiter included.

    *title* and *slug* are emitted as double-quoted scalars (JSON strings
    are valid YAML), so values containing ``:`` or ``#`` stay intact.
    """
    return (
        "---\n"
        f"title: {_yaml_quote(title)}\n"
        f"slug: {_yaml_quote(slug)}\n"
        f"tags: [{keywords}]\n"
        f"sidebar_position: {position}\n"
        "---\n"
    )


def _yaml_quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def build_document(front_matter: str, body: str) -> str:
    return f"{front_matter}\n{body}\n"


def build_category_metadata(label: str, position: int) -> str:
    """Contents of a ``_category_.json`` sidebar metadata file."""
    return json.dumps({"label": label, "position": position}, indent="\t", ensure_ascii=False)


def safe_dirname(name: str, fallback: str) -> str:
    """A single path component for *name* (path separators replaced)."""
    cleaned = name.replace("/", "-").replace("\\", "-").strip()
    if cleaned in ("", ".", ".."):
        return fallback
    return cleaned


def write_text(path: Path, content: str) -> None:
    """Write *content* to *path* as UTF-8, wrapping OS errors."""
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise NotiondocsExportError(
            message=f"Failed to write {path}: {exc}",
            context={"path": str(path)},
            cause=exc,
        ) from exc


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise NotiondocsExportError(
            message=f"Failed to create directory {path}: {exc}",
            context={"path": str(path)},
            cause=exc,
        ) from exc


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------

class TreeExporter:
    """Walks a Notion tree and writes it below an output directory.

    Parameters
    ----------
    ctx:
        Export context.  Its slug registry spans everything this exporter
        writes.
    """

    def __init__(self, ctx: ExportContext) -> None:
        self._ctx = ctx
        self._renderer = NotionToMarkdownRenderer(ctx)
        metrics = ctx.config.metrics
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self._files: list[str] = []
        self._pages_written = 0

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def export(
        self,
        root_id: str,
        output_dir: str | Path,
        root_type: str = "page",
    ) -> ExportResult:
        """Export the tree rooted at *root_id*.

        Parameters
        ----------
        root_id:
            Page (or block) id whose children are listed, or a database id
            when *root_type* is ``"database"``.
        output_dir:
            Destination directory; created if missing.
        root_type:
            ``"page"`` or ``"database"``.
        """
        if root_type not in ("page", "database"):
            raise ValueError(f"root_type must be 'page' or 'database', got {root_type!r}")

        out = Path(output_dir)
        _ensure_dir(out)
        log.info(
            "Export started",
            extra={"extra_fields": {"root_id": root_id, "root_type": root_type, "output": str(out)}},
        )

        if root_type == "database":
            self.export_database(root_id, out)
        else:
            self.export_block_tree(root_id, out)

        log.info(
            "Export completed successfully",
            extra={"extra_fields": {"pages": self._pages_written, "warnings": len(self._ctx.warnings)}},
        )
        return ExportResult(
            root_id=root_id,
            output_dir=str(out),
            pages_written=self._pages_written,
            files=list(self._files),
            warnings=list(self._ctx.warnings),
        )

    def export_block_tree(self, block_id: str, output_dir: Path) -> None:
        """Export every linked page and child page below *block_id*."""
        for response in self._ctx.fetcher.iter_block_children_pages(block_id):
            for index, block in enumerate(response.results):
                payload = block.payload
                if isinstance(payload, LinkToPage):
                    self._export_linked_page(payload.page_id, output_dir, index)
                elif isinstance(payload, ChildPage) and block.has_children:
                    sub_dir = output_dir / safe_dirname(payload.title, block.id)
                    _ensure_dir(sub_dir)
                    self.export_block_tree(block.id, sub_dir)

    def export_database(self, database_id: str, output_dir: Path) -> None:
        """Export every row of database *database_id* as a page."""
        for response in self._ctx.fetcher.iter_database_pages(database_id):
            for index, page in enumerate(response.results):
                log.info(
                    "Writing markdown for page",
                    extra={"extra_fields": {"page_id": page.id, "position": index}},
                )
                try:
                    self.write_page(output_dir, page, index)
                except NotiondocsError as exc:
                    self._skip_page(page.id, exc)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def render_page(self, page: Page, position: int) -> str:
        """Full document (front matter and body) for *page*.

        Claims the page's slug in the run's registry.
        """
        document, _ = self._render_page(page, position)
        return document

    def write_page(self, output_dir: Path, page: Page, position: int) -> Path:
        """Write *page* (and, recursively, its ``Sub-Items``) below
        *output_dir* and return the path of the page's own document.

        Child pages found in the page body are exported afterwards as
        subtrees under ``<output_dir>/<page id>/<child title>/``.
        """
        document, child_pages = self._render_page(page, position)
        relations = extract_relations(page)

        target = output_dir / f"{page.id}.md"
        if relations.child_ids:
            page_dir = output_dir / page.id
            _ensure_dir(page_dir)
            if self._write_children(page_dir, relations.child_ids):
                title = extract_properties(page).title
                category = page_dir / CATEGORY_FILENAME
                write_text(category, build_category_metadata(title, position))
                self._files.append(str(category))
                target = page_dir / INDEX_FILENAME
            else:
                _remove_if_empty(page_dir)

        write_text(target, document)
        self._files.append(str(target))
        self._pages_written += 1
        self._metrics.increment("notiondocs.pages_written_total")
        log.info(
            "Page written",
            extra={"extra_fields": {"page_id": page.id, "path": str(target)}},
        )

        for block_id, title in child_pages:
            self._export_body_subtree(output_dir / page.id, block_id, title)
        return target

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _render_page(self, page: Page, position: int) -> tuple[str, list[tuple[str, str]]]:
        props = extract_properties(page)
        blocks = self._ctx.fetcher.list_block_children(page.id)
        self._renderer.take_child_pages()
        body = self._renderer.render_blocks(blocks)
        child_pages = self._renderer.take_child_pages()
        slug = self._ctx.slugs.register(clean_slug(props.slug))
        front_matter = build_front_matter(props.title, slug, props.keywords, position)
        return build_document(front_matter, body), child_pages

    def _export_body_subtree(self, page_dir: Path, block_id: str, title: str) -> None:
        sub_dir = page_dir / safe_dirname(title, block_id)
        log.info(
            "Exporting child page",
            extra={"extra_fields": {"block_id": block_id, "path": str(sub_dir)}},
        )
        try:
            _ensure_dir(sub_dir)
            self.export_block_tree(block_id, sub_dir)
        except NotiondocsError as exc:
            self._skip_page(block_id, exc)
            _remove_if_empty(sub_dir)
            _remove_if_empty(page_dir)

    def _write_children(self, page_dir: Path, child_ids: tuple[str, ...]) -> int:
        """Write each child page; return how many were written."""
        written = 0
        for index, child_id in enumerate(child_ids):
            try:
                child = self._ctx.fetcher.fetch_page(child_id)
                self.write_page(page_dir, child, index)
            except NotiondocsError as exc:
                self._skip_page(child_id, exc)
                continue
            written += 1
        return written

    def _export_linked_page(self, page_id: str, output_dir: Path, position: int) -> None:
        log.info(
            "Fetching page",
            extra={"extra_fields": {"page_id": page_id, "position": position}},
        )
        try:
            page = self._ctx.fetcher.fetch_page(page_id)
            self.write_page(output_dir, page, position)
        except NotiondocsError as exc:
            self._skip_page(page_id, exc)

    def _skip_page(self, page_id: str, exc: NotiondocsError) -> None:
        log.warning(
            "Failed to export page",
            extra={"extra_fields": {"page_id": page_id, "error": str(exc)}},
        )
        self._ctx.warn("PAGE_SKIPPED", f"Failed to export page {page_id}: {exc}", page_id=page_id)


def _remove_if_empty(path: Path) -> None:
    try:
        path.rmdir()
    except OSError:
        # Not empty (or already gone): leave it.
        pass
