"""Normalization and validation for link and image targets."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

_WHITESPACE_RE = re.compile(r"\s+")
_ALLOWED_SCHEMES = frozenset({"http", "https"})


def sanitize_url(raw: str) -> str:
    """Trim ``raw`` and encode each internal whitespace run as ``%20``."""

    return _WHITESPACE_RE.sub("%20", raw.strip())


def is_likely_valid_url(url: str) -> bool:
    """Return True when ``url`` is an http(s) URL with a non-empty host.

    The scheme is matched as written; ``HTTPS://...`` is rejected.
    """

    scheme, colon, _ = url.partition(":")
    if not colon or scheme not in _ALLOWED_SCHEMES:
        return False
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return False
    return bool(host)


__all__ = ["is_likely_valid_url", "sanitize_url"]
