"""notiondocs.notion_api -- Notion API transport, endpoint wrappers and the
cached fetcher.

* :mod:`.retries` -- 429 retry decision and delay computation.
* :mod:`.transport` -- HTTP transport with auth and rate-limit retries.
* :mod:`.blocks`, :mod:`.pages`, :mod:`.databases` -- endpoint wrappers.
* :mod:`.fetcher` -- cached, decoded, paginated access used by the exporter.
"""

from __future__ import annotations

from .blocks import BlockAPI
from .databases import DatabaseAPI
from .fetcher import NotionFetcher, cache_key
from .pages import PageAPI
from .retries import compute_backoff, should_retry
from .transport import NotionTransport

__all__ = [
    "BlockAPI",
    "DatabaseAPI",
    "NotionFetcher",
    "NotionTransport",
    "PageAPI",
    "cache_key",
    "compute_backoff",
    "should_retry",
]
