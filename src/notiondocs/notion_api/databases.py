"""Database API wrapper for the Notion API."""

from __future__ import annotations

from typing import Any

from .transport import NotionTransport


def query_path(database_id: str) -> str:
    return f"/databases/{database_id}/query"


class DatabaseAPI:
    """Synchronous wrapper for ``POST /databases/{id}/query``.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport` instance.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def query(self, database_id: str, cursor: str | None = None) -> dict[str, Any]:
        """Retrieve one page of database rows.

        The body is empty for the first page and ``{"start_cursor": ...}``
        afterwards.
        """
        body: dict[str, Any] = {}
        if cursor:
            body["start_cursor"] = cursor
        return self._transport.request("POST", query_path(database_id), json=body)
