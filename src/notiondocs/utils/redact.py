"""Token redaction for debug dumps.

:func:`redact` is applied to every request/response pair before
``debug_dump_payload`` writes it to stderr:

* values under sensitive-looking keys (``Authorization``, ``token``...)
  are masked;
* the integration token is scrubbed from every string in the tree;
* ``Bearer <token>`` patterns are masked even when the token is unknown;
* hosted-file URLs keep their path but lose their signed query string.
"""

from __future__ import annotations

import copy
import re
from typing import Any

# If any of these appear in a key name (case-insensitive) the value is masked.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "token",
    "secret",
    "password",
    "authorization",
    "cookie",
    "api_key",
})

_BEARER_RE = re.compile(r"(Bearer\s+)\S+")

# Notion-hosted files are served from S3 with signature query parameters.
_SIGNED_URL_RE = re.compile(r"(https://[^\s?]*amazonaws\.com/[^\s?]*)\?\S*")


def _mask_token(value: str, token: str | None) -> str:
    """Replace bearer / token strings with a safe placeholder."""
    if token and token in value:
        suffix = token[-4:] if len(token) >= 4 else "****"
        placeholder = f"<redacted:...{suffix}>"
        if token in placeholder:
            placeholder = "<redacted>"
        value = value.replace(token, placeholder)
    return _BEARER_RE.sub(lambda m: f"{m.group(1)}<redacted>", value)


def _redact_value(value: Any, token: str | None) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, token)
    if isinstance(value, list):
        return [_redact_value(item, token) for item in value]
    if isinstance(value, str):
        value = _SIGNED_URL_RE.sub(r"\1?<signed>", value)
        return _mask_token(value, token)
    return value


def _redact_dict(d: dict, token: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            if isinstance(value, str):
                result[key] = _mask_token(value, token)
            else:
                result[key] = "<redacted>"
        else:
            result[key] = _redact_value(value, token)
    return result


def redact(payload: dict, token: str | None = None) -> dict:
    """Return a deep copy of *payload* with sensitive data redacted.

    The original *payload* is never mutated.

    Examples
    --------
    >>> redact({"Authorization": "Bearer ntn_abc123"})
    {'Authorization': 'Bearer <redacted>'}
    """
    safe = copy.deepcopy(payload)
    return _redact_dict(safe, token)
