"""Inline Markdown to rich-text spans.

A single composite pattern is scanned left to right. Alternatives are tried
in priority order at each position: bold, italic, strikethrough, inline
code, ``[text](url)`` links, ``<scheme:...>`` autolinks and bare
``scheme:...`` tokens. Text between matches becomes unstyled spans. Bold and
italic bodies are tokenized again so styles nest (``**a *b* c**``); every other
construct produces one span.
"""

from __future__ import annotations

import re

from mdnotion.blocks import Annotations, Span

from .urls import is_likely_valid_url, sanitize_url

AUTOLINK_SCHEMES = r"(?:https?|mailto|tel|ftp|file)"

_INLINE_RE = re.compile(
    r"\*\*.+?\*\*"
    r"|\*[^*\s][^*]*?\*"
    r"|~~[^~]+~~"
    r"|`[^`]+`"
    r"|\[[^\]]+\]\([^)]+\)"
    rf"|<{AUTOLINK_SCHEMES}:[^>]+>"
    rf"|{AUTOLINK_SCHEMES}:[^\s)<>]+"
)
_LINK_PARTS_RE = re.compile(r"\[(.+)\]\((.+)\)", re.DOTALL)
_SCHEME_PREFIX_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


def plain_span(text: str) -> Span:
    return Span(content=text)


def linked_span(text: str, url: str) -> Span:
    """Build a span linking ``text`` to ``url``.

    The URL is sanitized first; when it is not an http(s) URL with a host the
    span keeps its text and carries no link.
    """

    sanitized = sanitize_url(url)
    if not is_likely_valid_url(sanitized):
        return plain_span(text)
    return Span(content=text, link=sanitized)


def tokenize_inline(raw: str) -> list[Span]:
    """Convert one line of inline Markdown into an ordered list of spans."""

    spans: list[Span] = []
    cursor = 0
    for match in _INLINE_RE.finditer(raw):
        if match.start() > cursor:
            spans.append(plain_span(raw[cursor:match.start()]))
        spans.extend(_token_spans(match.group(0)))
        cursor = match.end()
    if cursor < len(raw):
        spans.append(plain_span(raw[cursor:]))
    return spans


def _token_spans(token: str) -> list[Span]:
    if token.startswith("**"):
        return [
            span.with_style(bold=True) for span in tokenize_inline(token[2:-2])
        ]
    if token.startswith("*"):
        return [
            span.with_style(italic=True)
            for span in tokenize_inline(token[1:-1])
        ]
    if token.startswith("~~"):
        return [
            Span(
                content=token[2:-2],
                annotations=Annotations(strikethrough=True),
            )
        ]
    if token.startswith("`"):
        return [Span(content=token[1:-1], annotations=Annotations(code=True))]
    if token.startswith("["):
        parts = _LINK_PARTS_RE.match(token)
        if parts is None:  # pragma: no cover - guarded by _INLINE_RE
            return [plain_span(token)]
        return [linked_span(parts.group(1), parts.group(2))]
    if token.startswith("<") and token.endswith(">"):
        inner = token[1:-1]
        return [linked_span(inner, inner)]
    # Bare tokens without a scheme prefix are dropped rather than emitted.
    if _SCHEME_PREFIX_RE.match(token):
        return [linked_span(token, token)]
    return []


__all__ = [
    "AUTOLINK_SCHEMES",
    "linked_span",
    "plain_span",
    "tokenize_inline",
]
