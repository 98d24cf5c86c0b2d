"""Explicit per-run state shared by the fetcher, renderer and exporter.

Everything an export needs besides its arguments (configuration, the
cached fetcher, the run's slug registry and the image downloader) travels in
one :class:`ExportContext`.  Two contexts never share a slug registry, so
independent exports (or tests) can run side by side.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from notiondocs.cache import ResponseCache
from notiondocs.config import ExportConfig
from notiondocs.image.download import build_image_client, download_image
from notiondocs.models import ExportWarning
from notiondocs.notion_api.fetcher import NotionFetcher
from notiondocs.notion_api.transport import NotionTransport
from notiondocs.slugs import SlugRegistry

ImageDownloader = Callable[[str, Path], str]
"""``(url, dest_dir) -> stored filename``; raises on failure."""


@dataclass
class ExportContext:
    """State threaded through every export entry point.

    Attributes
    ----------
    config:
        Export configuration.
    fetcher:
        Cached access to the Notion API.
    slugs:
        Slugs assigned so far in this run.
    download_image:
        Image download collaborator.
    warnings:
        Non-fatal issues collected during the run.
    """

    config: ExportConfig
    fetcher: NotionFetcher
    slugs: SlugRegistry = field(default_factory=SlugRegistry)
    download_image: ImageDownloader = download_image
    warnings: list[ExportWarning] = field(default_factory=list)
    _transport: NotionTransport | None = field(default=None, repr=False)
    _image_client: httpx.Client | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        config: ExportConfig,
        cache: ResponseCache | None = None,
    ) -> ExportContext:
        """Build a context with a fresh transport and slug registry.

        The fetcher uses *cache*, or the process-wide cache when omitted.
        Images are downloaded through a client built from *config*.
        """
        transport = NotionTransport(config)
        fetcher = NotionFetcher(transport, config, cache=cache)
        image_client = build_image_client(config)
        return cls(
            config=config,
            fetcher=fetcher,
            download_image=functools.partial(download_image, client=image_client),
            _transport=transport,
            _image_client=image_client,
        )

    def warn(self, code: str, message: str, **context: object) -> None:
        self.warnings.append(ExportWarning(code=code, message=message, context=dict(context)))

    def close(self) -> None:
        if self._transport is not None:
            self._transport.close()
        if self._image_client is not None:
            self._image_client.close()

    def __enter__(self) -> ExportContext:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
