"""Secret / payload redaction for safe logging.

Before any storage request or configuration is written to logs the
:func:`redact` function must be applied.  It enforces the following rules:

* **Sensitive keys** (``secret``, ``token``, ``password``, ``access_key``,
  ...) have their values masked, keeping only the last four characters.
* **Binary values** and open file objects are replaced with
  ``<binary:N_bytes>`` / ``<stream>`` placeholders.
* An explicitly supplied **secret is never present** in the output, even
  when it appears inside an unrelated string value.
"""

from __future__ import annotations

import copy
import io
from typing import Any

# Substrings: if any of these appear in a key name (case-insensitive), the
# value is redacted.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "token",
    "secret",
    "password",
    "credential",
    "authorization",
    "access_key",
    "private_key",
    "api_key",
})


def _mask(value: str) -> str:
    """Replace a secret with a placeholder showing its last four characters."""
    if len(value) < 8:
        return "<redacted>"
    return f"<redacted:...{value[-4:]}>"


def _redact_value(value: Any, secret: str | None) -> Any:
    """Redact a single value (recursive for dicts / lists)."""
    if isinstance(value, dict):
        return _redact_dict(value, secret)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, secret) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return f"<binary:{len(value)}_bytes>"
    if isinstance(value, io.IOBase):
        return "<stream>"
    if isinstance(value, str) and secret and secret in value:
        return value.replace(secret, _mask(secret))
    return value


def _redact_dict(d: dict, secret: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            result[key] = _mask(value) if isinstance(value, str) and value else "<redacted>"
        else:
            result[key] = _redact_value(value, secret)
    return result


def redact(payload: dict, secret: str | None = None) -> dict:
    """Return a copy of *payload* with sensitive data redacted.

    Parameters
    ----------
    payload:
        The dictionary to sanitize (typically storage request parameters
        or a configuration dump).
    secret:
        A known secret.  Any occurrence of this exact string anywhere in the
        payload is replaced.

    Returns
    -------
    dict
        A new dictionary; the original *payload* is never mutated.

    Examples
    --------
    >>> redact({"secret_key": "abcd1234wxyz"})
    {'secret_key': '<redacted:...wxyz>'}
    """
    # File objects cannot be deep-copied; they are replaced, not mutated.
    safe = {
        k: v if isinstance(v, io.IOBase) else copy.deepcopy(v)
        for k, v in payload.items()
    }
    return _redact_dict(safe, secret)
