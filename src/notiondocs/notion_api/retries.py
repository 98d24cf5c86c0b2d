"""Rate-limit retry decision and delay computation.

Only HTTP 429 is retried.  The export is a one-shot batch job, so by
default a persistent rate limit simply stretches the run: the retry count is
unbounded and the delay is fixed.  Both are configurable through
``ExportConfig.rate_limit_max_retries`` and ``rate_limit_backoff``.
"""

from __future__ import annotations

RATE_LIMITED_STATUS = 429


def should_retry(
    status_code: int | None,
    retries: int,
    max_retries: int | None,
) -> bool:
    """Decide whether a response warrants another attempt.

    Parameters
    ----------
    status_code:
        HTTP status code of the response, or ``None`` when no response was
        received (network failures are never retried).
    retries:
        Number of retries already performed for this request.
    max_retries:
        Retry bound, or ``None`` for no bound.
    """
    if status_code != RATE_LIMITED_STATUS:
        return False
    if max_retries is None:
        return True
    return retries < max_retries


def compute_backoff(
    retries: int,
    base: float = 3.0,
    multiplier: float = 1.0,
    maximum: float = 60.0,
) -> float:
    """Delay in seconds before retry number ``retries + 1``.

    ``base * multiplier ** retries`` capped at *maximum*.  With the default
    multiplier of ``1.0`` every retry waits exactly *base* seconds.
    """
    return min(base * (multiplier ** retries), maximum)
