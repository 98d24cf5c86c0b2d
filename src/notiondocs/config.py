"""Export configuration for notiondocs.

:class:`ExportConfig` captures every tuneable knob of an export run.  A
single instance is carried by :class:`~notiondocs.context.ExportContext`
and read by the transport, the fetcher, the renderer and the exporter, so
none of them consult module-level state.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

DEFAULT_NOTION_VERSION = "2022-06-28"
"""Value of the ``Notion-Version`` header sent with every request."""

IMAGE_SUBDIR = "docs-images"
"""Directory (below ``assets_dir``) where downloaded images are stored, and
the URL prefix under which rendered documents reference them."""


@dataclass
class ExportConfig:
    """Complete configuration for an export run.

    Only ``token`` is required; everything else has a default matching a
    Docusaurus site layout.

    Parameters
    ----------
    token:
        Notion integration token.  **Required.**  Never logged.
    notion_version:
        Value of the ``Notion-Version`` header.
    base_url:
        API root URL.  Override for proxy or testing environments.
    docs_root:
        Prefix prepended to page slugs that start with ``/`` when rendering
        mentions and page links.
    assets_dir:
        Static asset root.  Images are downloaded into
        ``<assets_dir>/docs-images``.
    download_images:
        When ``False`` image blocks keep their remote URL and nothing is
        downloaded.
    cache_ttl_seconds:
        Lifetime of a cached API response.
    page_delay_seconds:
        Courtesy delay inserted between two pages of a paginated listing.
    rate_limit_delay_seconds:
        Delay before retrying a request that was answered with HTTP 429.
    rate_limit_backoff:
        Multiplier applied to the delay after each consecutive 429.  The
        default of ``1.0`` keeps the delay fixed.
    rate_limit_max_delay_seconds:
        Upper cap on the computed 429 delay.
    rate_limit_max_retries:
        Maximum number of 429 retries for one request.  ``None`` retries
        forever, which suits a one-shot batch export.
    timeout_seconds:
        HTTP request timeout in seconds.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~notiondocs.observability.MetricsHook` backend.
    debug_dump_payload:
        Write every (redacted) request/response pair to *stderr*.
    """

    # ── Core ────────────────────────────────────────────────────────────
    token: str = ""

    notion_version: str = DEFAULT_NOTION_VERSION

    base_url: str = "https://api.notion.com/v1"

    # ── Output ──────────────────────────────────────────────────────────
    docs_root: str = "/docs"

    assets_dir: str = "./static"

    download_images: bool = True

    # ── Cache & pagination ──────────────────────────────────────────────
    cache_ttl_seconds: float = 600.0

    page_delay_seconds: float = 1.0

    # ── Rate limiting ───────────────────────────────────────────────────
    rate_limit_delay_seconds: float = 3.0

    rate_limit_backoff: float = 1.0

    rate_limit_max_delay_seconds: float = 60.0

    rate_limit_max_retries: int | None = None

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        from urllib.parse import urlparse

        parsed = urlparse(self.base_url)
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise ValueError(
                f"base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your API token, or target localhost for testing."
            )

        if self.cache_ttl_seconds < 0:
            raise ValueError(f"cache_ttl_seconds must be >= 0, got {self.cache_ttl_seconds}")
        if self.page_delay_seconds < 0:
            raise ValueError(f"page_delay_seconds must be >= 0, got {self.page_delay_seconds}")
        if self.rate_limit_delay_seconds < 0:
            raise ValueError(
                f"rate_limit_delay_seconds must be >= 0, got {self.rate_limit_delay_seconds}"
            )
        if self.rate_limit_backoff < 1.0:
            raise ValueError(f"rate_limit_backoff must be >= 1.0, got {self.rate_limit_backoff}")
        if self.rate_limit_max_retries is not None and self.rate_limit_max_retries < 0:
            raise ValueError(
                f"rate_limit_max_retries must be >= 0 or None, got {self.rate_limit_max_retries}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    @property
    def image_dir(self) -> str:
        """Filesystem directory that receives downloaded images."""
        return f"{self.assets_dir.rstrip('/')}/{IMAGE_SUBDIR}"

    def __repr__(self) -> str:
        """Mask the token to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "token":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"token='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"ExportConfig({', '.join(parts)})"
