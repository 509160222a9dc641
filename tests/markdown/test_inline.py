from __future__ import annotations

import pytest

from mdnotion.blocks import Annotations
from mdnotion.markdown.inline import linked_span, tokenize_inline


def _contents(spans):
    return [span.content for span in spans]


def test_empty_input_has_no_spans():
    assert tokenize_inline("") == []


def test_plain_text_is_single_unstyled_span():
    spans = tokenize_inline("just words")

    assert _contents(spans) == ["just words"]
    assert spans[0].annotations == Annotations()
    assert spans[0].link is None


def test_bold_and_italic_segments():
    spans = tokenize_inline("Some **bold** and *italic* text.")

    assert _contents(spans) == ["Some ", "bold", " and ", "italic", " text."]
    assert [span.annotations.bold for span in spans] == [
        False,
        True,
        False,
        False,
        False,
    ]
    assert [span.annotations.italic for span in spans] == [
        False,
        False,
        False,
        True,
        False,
    ]


def test_italic_nested_inside_bold_keeps_both_styles():
    spans = tokenize_inline("**bold *and italic* text**")

    assert _contents(spans) == ["bold ", "and italic", " text"]
    assert all(span.annotations.bold for span in spans)
    assert [span.annotations.italic for span in spans] == [False, True, False]


def test_strikethrough_and_code():
    spans = tokenize_inline("~~gone~~ then `x = 1`")

    assert _contents(spans) == ["gone", " then ", "x = 1"]
    assert spans[0].annotations.strikethrough is True
    assert spans[2].annotations.code is True
    assert spans[2].annotations.bold is False


def test_code_span_content_is_not_restyled():
    spans = tokenize_inline("`**not bold**`")

    assert _contents(spans) == ["**not bold**"]
    assert spans[0].annotations.code is True
    assert spans[0].annotations.bold is False


def test_lone_asterisk_is_plain_text():
    spans = tokenize_inline("a * b")

    assert _contents(spans) == ["a * b"]


def test_markdown_link_carries_url():
    spans = tokenize_inline("see [docs](https://example.com/docs) now")

    assert _contents(spans) == ["see ", "docs", " now"]
    assert spans[1].link == "https://example.com/docs"


def test_link_with_unsafe_scheme_keeps_text_without_link():
    spans = tokenize_inline("[x](javascript:alert(1))")

    assert spans[0].content == "x"
    assert all(span.link is None for span in spans)


@pytest.mark.parametrize("url", ["HTTPS://example.com", "Http://example.com"])
def test_link_scheme_must_be_lowercase(url):
    spans = tokenize_inline(f"[x]({url})")

    assert [span.content for span in spans] == ["x"]
    assert spans[0].link is None


def test_angle_autolink():
    spans = tokenize_inline("<https://example.com/a>")

    assert _contents(spans) == ["https://example.com/a"]
    assert spans[0].link == "https://example.com/a"


def test_bare_url_is_linked_in_place():
    spans = tokenize_inline("visit https://example.com/x today")

    assert _contents(spans) == ["visit ", "https://example.com/x", " today"]
    assert spans[1].link == "https://example.com/x"
    assert spans[0].link is None and spans[2].link is None


def test_bare_mailto_stays_plain():
    spans = tokenize_inline("mailto:me@example.com")

    assert _contents(spans) == ["mailto:me@example.com"]
    assert spans[0].link is None


def test_linked_span_sanitizes_whitespace():
    span = linked_span("file", " https://example.com/a b ")

    assert span.link == "https://example.com/a%20b"


def test_span_serializes_link_and_annotations():
    span = tokenize_inline("[t](https://example.com)")[0]

    assert span.to_dict() == {
        "type": "text",
        "text": {
            "content": "t",
            "link": {"type": "url", "url": "https://example.com"},
        },
        "annotations": {
            "bold": False,
            "italic": False,
            "strikethrough": False,
            "underline": False,
            "code": False,
            "color": "default",
        },
    }
