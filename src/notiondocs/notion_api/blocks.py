"""Block API wrapper for the Notion API.

:class:`BlockAPI` is a thin wrapper around ``GET /blocks/{id}/children``.
It returns one raw page of results per call; cursor walking and caching
live in :class:`~notiondocs.notion_api.fetcher.NotionFetcher`.
"""

from __future__ import annotations

from typing import Any

from .transport import NotionTransport

PAGE_SIZE = 100


def children_path(block_id: str) -> str:
    return f"/blocks/{block_id}/children"


class BlockAPI:
    """Synchronous wrapper for the Notion Blocks API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport` instance.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def list_children(self, block_id: str, cursor: str | None = None) -> dict[str, Any]:
        """Retrieve one page of children of a block (or page).

        Parameters
        ----------
        block_id:
            The UUID of the parent block or page.
        cursor:
            ``next_cursor`` from the previous page, or ``None`` for the
            first page.

        Returns
        -------
        dict
            The raw response with ``results``, ``next_cursor``, ``has_more``.
        """
        params: dict[str, Any] = {"page_size": PAGE_SIZE}
        if cursor:
            params["start_cursor"] = cursor
        return self._transport.request("GET", children_path(block_id), params=params)
