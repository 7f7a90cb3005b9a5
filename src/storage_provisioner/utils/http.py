"""Shared HTTP utilities."""

from __future__ import annotations

from urllib.parse import urlparse

_BASE_URL_ALLOWED_SCHEMES = frozenset({"http", "https"})


def normalize_base_url(value: str, *, label: str = "base_url") -> str:
    """Normalize and validate a service base URL.

    Lower-cases the scheme and strips any trailing slash so that API paths can
    be appended with a plain f-string. Raises ``ValueError`` when the URL is
    not usable as a base.
    """
    candidate = value.strip()
    if not candidate:
        raise ValueError(f"{label} must not be empty")

    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in _BASE_URL_ALLOWED_SCHEMES:
        raise ValueError(f"{label} must use http or https")
    if not parsed.netloc:
        raise ValueError(f"{label} must include host")
    if parsed.query or parsed.fragment:
        raise ValueError(f"{label} must not include query or fragment")
    if parsed.username or parsed.password:
        raise ValueError(f"{label} must not include userinfo")

    normalized_path = parsed.path.rstrip("/")
    return f"{parsed.scheme.lower()}://{parsed.netloc}{normalized_path}"


def split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]

