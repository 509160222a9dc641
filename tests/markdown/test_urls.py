from __future__ import annotations

import pytest

from mdnotion.markdown import urls


def test_sanitize_url_trims_and_encodes_whitespace():
    assert urls.sanitize_url("  https://x.com/a b\tc  ") == (
        "https://x.com/a%20b%20c"
    )


def test_sanitize_url_collapses_whitespace_runs():
    assert urls.sanitize_url("https://x.com/a   b") == "https://x.com/a%20b"


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com",
        "http://example.com/path?q=1",
    ],
)
def test_is_likely_valid_url_accepts_http_with_host(url):
    assert urls.is_likely_valid_url(url) is True


@pytest.mark.parametrize(
    "url",
    [
        "",
        "example.com",
        "ftp://example.com/file",
        "mailto:someone@example.com",
        "javascript:alert(1)",
        "http://",
        "https:///path-only",
        "http://[::1",
        "HTTPS://EXAMPLE.COM/x",
        "Http://example.com",
    ],
)
def test_is_likely_valid_url_rejects_other_inputs(url):
    assert urls.is_likely_valid_url(url) is False
