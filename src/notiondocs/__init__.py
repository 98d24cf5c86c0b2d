"""notiondocs: export a Notion page tree as Docusaurus Markdown.

Public re-exports
-----------------

* **Export:** :class:`TreeExporter`, :class:`ExportContext`
* **Configuration:** :class:`ExportConfig`
* **Errors:** Every :class:`NotiondocsError` subclass and :class:`ErrorCode`
* **Models:** Decoded blocks, pages and export results

Usage::

    from notiondocs import ExportConfig, ExportContext, TreeExporter

    config = ExportConfig(token="secret_xxx", assets_dir="./static")
    with ExportContext.create(config) as ctx:
        result = TreeExporter(ctx).export("<root page id>", "./docs")
"""

from __future__ import annotations

# ── Cache ───────────────────────────────────────────────────────────────
from notiondocs.cache import ResponseCache, get_default_cache

# ── Configuration ───────────────────────────────────────────────────────
from notiondocs.config import DEFAULT_NOTION_VERSION, ExportConfig

# ── Export ──────────────────────────────────────────────────────────────
from notiondocs.context import ExportContext
from notiondocs.converter import NotionToMarkdownRenderer

# ── Errors ──────────────────────────────────────────────────────────────
from notiondocs.errors import (
    ErrorCode,
    NotiondocsAssetError,
    NotiondocsAuthError,
    NotiondocsDecodeError,
    NotiondocsError,
    NotiondocsExportError,
    NotiondocsHTTPError,
    NotiondocsNetworkError,
    NotiondocsNotFoundError,
    NotiondocsPermissionError,
    NotiondocsRateLimitError,
    NotiondocsValidationError,
)
from notiondocs.exporter import TreeExporter

# ── Models ──────────────────────────────────────────────────────────────
from notiondocs.models import (
    Block,
    BlockChildrenResponse,
    DatabaseQueryResponse,
    ExportResult,
    ExportWarning,
    Page,
    PageProperties,
    PageRelations,
    RichText,
)
from notiondocs.notion_api import NotionFetcher, NotionTransport
from notiondocs.properties import extract_properties, extract_relations
from notiondocs.slugs import SlugRegistry

__version__ = "0.1.0"

__all__ = [
    # Export
    "TreeExporter",
    "ExportContext",
    "NotionToMarkdownRenderer",
    "NotionFetcher",
    "NotionTransport",
    "ResponseCache",
    "get_default_cache",
    "SlugRegistry",
    "extract_properties",
    "extract_relations",
    # Configuration
    "ExportConfig",
    "DEFAULT_NOTION_VERSION",
    # Errors
    "ErrorCode",
    "NotiondocsError",
    "NotiondocsValidationError",
    "NotiondocsAuthError",
    "NotiondocsPermissionError",
    "NotiondocsNotFoundError",
    "NotiondocsHTTPError",
    "NotiondocsRateLimitError",
    "NotiondocsNetworkError",
    "NotiondocsDecodeError",
    "NotiondocsAssetError",
    "NotiondocsExportError",
    # Models
    "Block",
    "BlockChildrenResponse",
    "DatabaseQueryResponse",
    "Page",
    "PageProperties",
    "PageRelations",
    "RichText",
    "ExportResult",
    "ExportWarning",
]
