"""Page API wrapper for the Notion API."""

from __future__ import annotations

from typing import Any

from .transport import NotionTransport


def page_path(page_id: str) -> str:
    return f"/pages/{page_id}"


class PageAPI:
    """Synchronous wrapper for the Notion Pages API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport` instance.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def retrieve(self, page_id: str) -> dict[str, Any]:
        """Retrieve a page object (id and properties, no content).

        Parameters
        ----------
        page_id:
            The UUID of the page to retrieve (with or without hyphens).
        """
        return self._transport.request("GET", page_path(page_id))
