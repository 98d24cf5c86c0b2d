"""Remote content fetcher: cached, decoded access to the three endpoints an
export needs.

Each ``fetch_*`` method builds a cache key from the logical request, serves
a hit from the shared :class:`~notiondocs.cache.ResponseCache`, and on a miss
calls the endpoint wrapper, decodes the body into the response model and
caches it for ``config.cache_ttl_seconds``.

The ``iter_*`` generators walk a paginated listing, issuing exactly one
request per remote page and stopping as soon as ``has_more`` is false.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator

from notiondocs.cache import ResponseCache, get_default_cache
from notiondocs.config import ExportConfig
from notiondocs.models import (
    Block,
    BlockChildrenResponse,
    DatabaseQueryResponse,
    Page,
    parse_block_children,
    parse_database_query,
    parse_page,
)
from notiondocs.observability import NoopMetricsHook, get_logger

from .blocks import BlockAPI, children_path
from .databases import DatabaseAPI, query_path
from .pages import PageAPI, page_path
from .transport import NotionTransport

log = get_logger("notiondocs.fetcher")


def cache_key(method: str, path: str, cursor: str | None = None) -> str:
    """Cache key of one logical request.

    The cursor is part of the key: page two of a listing must never be
    answered with page one's cached body.
    """
    key = f"{method} {path}"
    if cursor:
        key += f"?start_cursor={cursor}"
    return key


class NotionFetcher:
    """Cached access to block children, database rows and pages.

    Parameters
    ----------
    transport:
        The HTTP transport.
    config:
        Export configuration; defaults to the transport's.
    cache:
        Response cache.  Defaults to the process-wide instance from
        :func:`~notiondocs.cache.get_default_cache`.
    sleep:
        Callable used for the courtesy delay between pages.
    """

    def __init__(
        self,
        transport: NotionTransport,
        config: ExportConfig | None = None,
        cache: ResponseCache | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config if config is not None else transport.config
        self._cache = cache if cache is not None else get_default_cache()
        self._blocks = BlockAPI(transport)
        self._pages = PageAPI(transport)
        self._databases = DatabaseAPI(transport)
        self._sleep = sleep
        metrics = self._config.metrics
        self._metrics = metrics if metrics is not None else NoopMetricsHook()

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    # ------------------------------------------------------------------
    # Single requests
    # ------------------------------------------------------------------

    def fetch_block_children(
        self, block_id: str, cursor: str | None = None
    ) -> BlockChildrenResponse:
        """One page of children of *block_id*."""
        key = cache_key("GET", children_path(block_id), cursor)
        return self._cached(
            key,
            lambda: parse_block_children(self._blocks.list_children(block_id, cursor)),
        )

    def fetch_database_pages(
        self, database_id: str, cursor: str | None = None
    ) -> DatabaseQueryResponse:
        """One page of rows of *database_id*."""
        key = cache_key("POST", query_path(database_id), cursor)
        return self._cached(
            key,
            lambda: parse_database_query(self._databases.query(database_id, cursor)),
        )

    def fetch_page(self, page_id: str) -> Page:
        """The page object (id and properties) of *page_id*."""
        key = cache_key("GET", page_path(page_id))
        return self._cached(key, lambda: parse_page(self._pages.retrieve(page_id)))

    # ------------------------------------------------------------------
    # Pagination walkers
    # ------------------------------------------------------------------

    def iter_block_children_pages(self, block_id: str) -> Iterator[BlockChildrenResponse]:
        """Yield every page of children of *block_id*, in order."""
        return self._paginate(lambda cursor: self.fetch_block_children(block_id, cursor))

    def iter_database_pages(self, database_id: str) -> Iterator[DatabaseQueryResponse]:
        """Yield every page of rows of *database_id*, in order."""
        return self._paginate(lambda cursor: self.fetch_database_pages(database_id, cursor))

    def list_block_children(self, block_id: str) -> list[Block]:
        """All children of *block_id*, aggregated across pages."""
        blocks: list[Block] = []
        for response in self.iter_block_children_pages(block_id):
            blocks.extend(response.results)
        return blocks

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cached(self, key: str, load: Callable[[], object]) -> object:
        value, found = self._cache.get(key)
        if found:
            self._metrics.increment("notiondocs.cache_hits_total")
            log.debug("Cache hit", extra={"extra_fields": {"key": key}})
            return value
        self._metrics.increment("notiondocs.cache_misses_total")
        value = load()
        self._cache.set(key, value, self._config.cache_ttl_seconds)
        return value

    def _paginate(self, fetch: Callable[[str | None], object]) -> Iterator:
        cursor: str | None = None
        while True:
            response = fetch(cursor)
            yield response
            if not response.has_more or response.next_cursor is None:
                return
            cursor = response.next_cursor
            if self._config.page_delay_seconds > 0:
                self._sleep(self._config.page_delay_seconds)
