"""Error hierarchy for notiondocs.

Every public error class inherits from :class:`NotiondocsError`.  Each
carries a machine-readable ``code`` (from :class:`ErrorCode`), a
human-readable ``message``, an optional structured ``context`` dict, and an
optional ``cause`` (chained exception).

Only failures while listing the top-level tree stop an export; the
renderer and exporter catch :class:`NotiondocsError` around nested lookups
(mentions, page links, child fetches, image downloads) and degrade the one
affected reference instead.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error notiondocs can raise."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    HTTP_ERROR = "HTTP_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    DECODE_ERROR = "DECODE_ERROR"
    ASSET_ERROR = "ASSET_ERROR"
    EXPORT_ERROR = "EXPORT_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class NotiondocsError(Exception):
    """Base exception for all notiondocs errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


class _CodedError(NotiondocsError):
    """Internal helper: subclasses fix ``code`` through a class attribute."""

    default_code: str = ErrorCode.EXPORT_ERROR

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=self.default_code,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# API / transport errors
# ---------------------------------------------------------------------------

class NotiondocsValidationError(_CodedError):
    """Notion API returned 400: the request was invalid.

    Context keys: ``status_code``, ``notion_code``, ``body``.
    """

    default_code = ErrorCode.VALIDATION_ERROR


class NotiondocsAuthError(_CodedError):
    """Notion API returned 401: the integration token is invalid or expired.

    Context keys: ``status_code``, ``notion_code``.
    """

    default_code = ErrorCode.AUTH_ERROR


class NotiondocsPermissionError(_CodedError):
    """Notion API returned 403: the integration lacks access to the resource.

    Context keys: ``status_code``, ``notion_code``, ``operation``.
    """

    default_code = ErrorCode.PERMISSION_ERROR


class NotiondocsNotFoundError(_CodedError):
    """Notion API returned 404: the page, block or database does not exist
    or is not shared with the integration.

    Context keys: ``status_code``, ``notion_code``, ``path``.
    """

    default_code = ErrorCode.NOT_FOUND


class NotiondocsHTTPError(_CodedError):
    """Any other non-2xx response (409, 5xx, ...).  Never retried.

    Context keys: ``status_code``, ``notion_code``, ``body``.
    """

    default_code = ErrorCode.HTTP_ERROR


class NotiondocsRateLimitError(_CodedError):
    """HTTP 429 persisted beyond ``rate_limit_max_retries``.

    Only raised when a retry bound is configured; the default is to retry
    forever.

    Context keys: ``retries``, ``path``.
    """

    default_code = ErrorCode.RATE_LIMITED


class NotiondocsNetworkError(_CodedError):
    """A transport-level failure occurred (timeout, DNS, connection reset).

    Context keys: ``url``.
    """

    default_code = ErrorCode.NETWORK_ERROR


class NotiondocsDecodeError(_CodedError):
    """A response body could not be decoded into the expected shape.

    Context keys: ``path``, ``status_code``.
    """

    default_code = ErrorCode.DECODE_ERROR


# ---------------------------------------------------------------------------
# Export errors
# ---------------------------------------------------------------------------

class NotiondocsAssetError(_CodedError):
    """An image could not be downloaded or stored.

    Context keys: ``url``, ``status_code``, ``content_type``.
    """

    default_code = ErrorCode.ASSET_ERROR


class NotiondocsExportError(_CodedError):
    """The export could not write its output.

    Context keys: ``path``, ``page_id``.
    """

    default_code = ErrorCode.EXPORT_ERROR
