"""Synchronous HTTP transport for the Notion API.

Request lifecycle:

1. Send the HTTP request with bearer-token and ``Notion-Version`` headers.
2. On ``2xx`` -- decode and return the JSON body.
3. On ``429`` -- sleep the rate-limit delay and resend the identical
   request (unbounded unless ``rate_limit_max_retries`` is set).
4. On any other status -- raise the matching typed error immediately.
5. On a transport failure or an undecodable body -- raise
   :class:`NotiondocsNetworkError` / :class:`NotiondocsDecodeError`.

Export traversal is strictly sequential, so there is a single blocking
client and no async variant.
"""

from __future__ import annotations

import json as _json
import sys
import time
from collections.abc import Callable
from typing import Any

import httpx

from notiondocs.config import ExportConfig
from notiondocs.errors import (
    NotiondocsAuthError,
    NotiondocsDecodeError,
    NotiondocsHTTPError,
    NotiondocsNetworkError,
    NotiondocsNotFoundError,
    NotiondocsPermissionError,
    NotiondocsRateLimitError,
    NotiondocsValidationError,
)
from notiondocs.observability import NoopMetricsHook, get_logger

from .retries import compute_backoff, should_retry

log = get_logger("notiondocs.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the :class:`NotiondocsError` subclass matching a non-2xx,
    non-429 response."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    notion_message = body.get("message", response.text[:500])
    notion_code = body.get("code", "")

    if status == 400:
        raise NotiondocsValidationError(
            message=f"Validation error on {method} {path}: {notion_message}",
            context={"status_code": status, "notion_code": notion_code, "body": body},
        )
    if status == 401:
        raise NotiondocsAuthError(
            message=f"Authentication failed on {method} {path}: {notion_message}",
            context={"status_code": status, "notion_code": notion_code},
        )
    if status == 403:
        raise NotiondocsPermissionError(
            message=f"Permission denied on {method} {path}: {notion_message}",
            context={
                "status_code": status,
                "notion_code": notion_code,
                "operation": f"{method} {path}",
            },
        )
    if status == 404:
        raise NotiondocsNotFoundError(
            message=f"Resource not found on {method} {path}: {notion_message}",
            context={"status_code": status, "notion_code": notion_code, "path": path},
        )

    raise NotiondocsHTTPError(
        message=f"HTTP {status} on {method} {path}: {notion_message}",
        context={"status_code": status, "notion_code": notion_code, "body": body},
    )


def _dump_payload(
    method: str,
    url: str,
    payload: Any | None,
    response_status: int | None,
    response_body: Any | None,
    token: str | None = None,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    from notiondocs.utils.redact import redact

    dump: dict[str, Any] = {
        "method": method,
        "url": url,
    }
    if payload is not None:
        dump["request_body"] = payload
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    safe_dump = redact(dump, token)
    print(
        _json.dumps(safe_dump, indent=2, default=str),
        file=sys.stderr,
    )


def _emit_debug_dump(
    config: ExportConfig,
    method: str,
    response: httpx.Response,
    json_payload: Any,
) -> None:
    """Emit a redacted debug dump of request/response if enabled."""
    if not config.debug_dump_payload:
        return
    try:
        resp_body = response.json()
    except ValueError:
        resp_body = response.text[:1000]
    _dump_payload(
        method, str(response.url), json_payload,
        response.status_code, resp_body,
        token=config.token,
    )


def build_client(config: ExportConfig) -> httpx.Client:
    """Create the :class:`httpx.Client` used by :class:`NotionTransport`."""
    return httpx.Client(
        base_url=config.base_url,
        headers={
            "Authorization": f"Bearer {config.token}",
            "Notion-Version": config.notion_version,
            "Content-Type": "application/json",
        },
        timeout=httpx.Timeout(config.timeout_seconds),
        proxy=config.http_proxy,
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class NotionTransport:
    """Blocking HTTP transport with auth headers and 429 handling.

    Parameters
    ----------
    config:
        Export configuration (token, version header, retry policy).
    client:
        Optional pre-built :class:`httpx.Client`.  Tests pass one backed by
        :class:`httpx.MockTransport`.
    sleep:
        Callable used to wait between rate-limit retries.
    """

    def __init__(
        self,
        config: ExportConfig,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._client = client if client is not None else build_client(config)
        self._sleep = sleep

    @property
    def config(self) -> ExportConfig:
        return self._config

    # -- public API --------------------------------------------------------

    def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Execute an HTTP request against the Notion API.

        Parameters
        ----------
        method:
            HTTP method (``GET`` or ``POST`` for the export endpoints).
        path:
            API path relative to ``base_url`` (e.g. ``/pages/{id}``).
        **kwargs:
            Forwarded to :meth:`httpx.Client.request` (``json=``,
            ``params=``).

        Returns
        -------
        dict
            Parsed JSON response body.

        Raises
        ------
        NotiondocsValidationError, NotiondocsAuthError,
        NotiondocsPermissionError, NotiondocsNotFoundError,
        NotiondocsHTTPError
            On non-2xx responses other than 429.
        NotiondocsRateLimitError
            When a configured 429 retry bound is exhausted.
        NotiondocsNetworkError
            On transport-level failures.
        NotiondocsDecodeError
            When a 2xx body is not a JSON object.
        """
        config = self._config
        json_payload = kwargs.get("json")
        retries = 0

        while True:
            t0 = time.monotonic()
            try:
                response = self._client.request(method, path, **kwargs)
            except httpx.TransportError as exc:
                self._metrics.increment(
                    "notiondocs.requests_total",
                    tags={"method": method, "status": "error"},
                )
                raise NotiondocsNetworkError(
                    message=f"Network error on {method} {path}: {exc}",
                    context={"url": path},
                    cause=exc,
                ) from exc
            elapsed_ms = (time.monotonic() - t0) * 1000

            self._metrics.increment(
                "notiondocs.requests_total",
                tags={"method": method, "status": str(response.status_code)},
            )
            self._metrics.timing(
                "notiondocs.request_duration_ms",
                elapsed_ms,
                tags={"method": method, "status": str(response.status_code)},
            )

            _emit_debug_dump(config, method, response, json_payload)

            if 200 <= response.status_code < 300:
                return self._decode(response, method, path)

            if not should_retry(response.status_code, retries, config.rate_limit_max_retries):
                if response.status_code == 429:
                    raise NotiondocsRateLimitError(
                        message=(
                            f"Still rate limited after {retries} retries on {method} {path}"
                        ),
                        context={"retries": retries, "path": path},
                    )
                _raise_for_status(response, method, path)

            delay = compute_backoff(
                retries,
                base=config.rate_limit_delay_seconds,
                multiplier=config.rate_limit_backoff,
                maximum=config.rate_limit_max_delay_seconds,
            )
            self._metrics.increment(
                "notiondocs.rate_limited_total",
                tags={"method": method},
            )
            log.warning(
                "Rate limited. Waiting for retry...",
                extra={
                    "extra_fields": {
                        "method": method,
                        "path": path,
                        "status_code": 429,
                        "delay": delay,
                        "retry": retries + 1,
                    }
                },
            )
            self._sleep(delay)
            retries += 1

    def close(self) -> None:
        """Close the underlying HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> NotionTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # -- internals ---------------------------------------------------------

    @staticmethod
    def _decode(response: httpx.Response, method: str, path: str) -> dict:
        try:
            result = response.json()
        except ValueError as exc:
            raise NotiondocsDecodeError(
                message=f"Invalid JSON body on {method} {path}",
                context={"path": path, "status_code": response.status_code},
                cause=exc,
            ) from exc
        if not isinstance(result, dict):
            raise NotiondocsDecodeError(
                message=f"Expected a JSON object on {method} {path}",
                context={"path": path, "status_code": response.status_code},
            )
        return result
