"""Redaction of sensitive fields before payloads reach a log record.

``redact_sensitive_fields`` walks dicts and lists and replaces the value of
any key that looks like a credential. The appliance client runs every
outbound payload and every response body through it, so an account's
``password`` never appears in the request/response debug log.
"""

from __future__ import annotations

_MAX_REDACT_DEPTH = 20

# Substring match, case-insensitive.
SENSITIVE_KEY_MARKERS: tuple[str, ...] = (
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "credential",
    "authorization",
)


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEY_MARKERS)


def redact_sensitive_fields(
    value: object,
    *,
    mask: str = "***",
    depth: int = 0,
    max_depth: int = _MAX_REDACT_DEPTH,
) -> object:
    """Return a copy of *value* with sensitive dict values replaced by *mask*.

    Nesting deeper than ``max_depth`` collapses to *mask* as a whole.
    Scalars and strings pass through unchanged.
    """
    if depth >= max_depth:
        return mask
    if isinstance(value, dict):
        return {
            key: (
                mask
                if isinstance(key, str) and is_sensitive_key(key)
                else redact_sensitive_fields(
                    val, mask=mask, depth=depth + 1, max_depth=max_depth
                )
            )
            for key, val in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [
            redact_sensitive_fields(item, mask=mask, depth=depth + 1, max_depth=max_depth)
            for item in value
        ]
    return value
