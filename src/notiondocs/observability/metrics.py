"""Metrics hook protocol and no-op default implementation.

notiondocs emits counters and timings while it talks to the Notion API and
writes documents.  :class:`NoopMetricsHook` is used unless
``ExportConfig.metrics`` supplies an object satisfying :class:`MetricsHook`.

Emitted metric names:

* ``notiondocs.requests_total``       -- counter
* ``notiondocs.rate_limited_total``   -- counter
* ``notiondocs.request_duration_ms``  -- timing
* ``notiondocs.cache_hits_total``     -- counter
* ``notiondocs.cache_misses_total``   -- counter
* ``notiondocs.pages_written_total``  -- counter
* ``notiondocs.images_failed_total``  -- counter
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    *tags* are string key/value pairs; backends translate them into their
    own labelling scheme.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...


class NoopMetricsHook:
    """Default backend that discards every data point."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
