"""Line-oriented Markdown block parser.

The document is first rewritten by :func:`normalize_markdown` so every link
form is a canonical ``[text](url)`` / ``![alt](url)``. The parser then walks
the lines once. It keeps two pieces of state: an open code fence (with its
language tag and collected lines) and a buffer of pending table rows.

Lines are classified in this order:

1. table row containing an image (rendered as image + caption paragraph,
   since table cells cannot hold images)
2. table row (buffered)
3. any other line ends a pending table
4. divider
5. standalone image
6. code fence delimiter
7. heading 1-4
8. quote
9. bulleted / numbered list item
10. blank line (skipped)
11. paragraph

While a fence is open only a closing delimiter is recognized; every other
line is kept verbatim as code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from mdnotion.blocks import (
    Block,
    BlockType,
    CodeBlock,
    DividerBlock,
    HEADING_TYPES,
    RichText,
    TableBlock,
    TableRowBlock,
    TextBlock,
)

from .images import ImageBlockBuilder
from .inline import AUTOLINK_SCHEMES, plain_span, tokenize_inline
from .languages import normalize_code_language
from .urls import sanitize_url

FENCE = "```"

_NORMALIZE_RE = re.compile(
    r"(?P<fence>^[^\S\n]*```.*?(?:^[^\S\n]*```[^\n]*$|\Z))"
    r"|(?P<code>`[^`\n]+`)"
    r"|!\[(?P<img_alt>[^\]]*)\]\((?P<img_url>[^)]+)\)"
    r"|【(?P<cjk_text>[^】]+)】\s*\[(?P<cjk_url>[^\]]+)\]"
    r"|\[(?P<link_text>[^\n]+?)\]\((?P<link_url>[^)]+)\)"
    rf"|\[(?P<bracket_url>{AUTOLINK_SCHEMES}:[^\s\]]+)\]"
    rf"|<(?P<angle_url>{AUTOLINK_SCHEMES}:[^>]+)>"
    rf"|(?P<bare_url>{AUTOLINK_SCHEMES}:[^\s\]()<>]+)",
    re.DOTALL | re.MULTILINE,
)

_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")
_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]*)\)")
_DIVIDER_RE = re.compile(r"[-*_]{3,}\s*")
_NUMBERED_RE = re.compile(r"(\d+)\.\s+")
_HEADING_PREFIXES: tuple[tuple[str, BlockType], ...] = tuple(
    ("#" * level + " ", block_type)
    for level, block_type in enumerate(HEADING_TYPES, start=1)
)


def normalize_markdown(markdown: str) -> str:
    """Rewrite link-ish forms into canonical Markdown links and images.

    Handled forms: ``![alt](url)`` and ``[text](url)`` (URL re-sanitized),
    ``【text】[url]``, ``[scheme:...]``, ``<scheme:...>`` and bare
    ``scheme:...`` tokens. Fenced code blocks and inline code spans are
    copied through untouched.
    """

    return _NORMALIZE_RE.sub(_rewrite_link, markdown)


def _rewrite_link(match: re.Match[str]) -> str:
    groups = match.groupdict()
    if groups["fence"] is not None or groups["code"] is not None:
        return match.group(0)
    if groups["img_alt"] is not None:
        return f"![{groups['img_alt']}]({sanitize_url(groups['img_url'])})"
    if groups["cjk_text"] is not None:
        return f"[{groups['cjk_text']}]({sanitize_url(groups['cjk_url'])})"
    if groups["link_text"] is not None:
        return f"[{groups['link_text']}]({sanitize_url(groups['link_url'])})"
    url = groups["bracket_url"] or groups["angle_url"] or groups["bare_url"]
    return f"[{url}]({url})"


def split_table_cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.strip().strip("|").split("|")]


def build_table_block(lines: list[str]) -> Optional[TableBlock]:
    """Build a table from buffered ``|``-delimited lines.

    The first line is the header and fixes ``table_width``. The second line
    is taken to be the ``|---|`` separator and skipped. Remaining rows are
    padded with empty cells or truncated to the header width. Fewer than two
    lines yield ``None``.
    """

    if len(lines) < 2:
        return None

    header = split_table_cells(lines[0])
    width = len(header)
    rows = [_table_row(header)]
    for line in lines[2:]:
        cells = split_table_cells(line)
        if len(cells) < width:
            cells.extend([""] * (width - len(cells)))
        rows.append(_table_row(cells[:width]))
    return TableBlock(table_width=width, rows=tuple(rows))


def _table_row(cells: list[str]) -> TableRowBlock:
    return TableRowBlock(cells=tuple(_cell_text(cell) for cell in cells))


def _cell_text(cell: str) -> RichText:
    spans = tokenize_inline(cell)
    return tuple(spans) if spans else (plain_span(""),)


@dataclass
class _ParseState:
    blocks: list[Block] = field(default_factory=list)
    in_code: bool = False
    code_language: str = ""
    code_lines: list[str] = field(default_factory=list)
    table_lines: list[str] = field(default_factory=list)


class BlockParser:
    """Convert Markdown text into a list of :class:`~mdnotion.blocks.Block`."""

    def __init__(self, images: Optional[ImageBlockBuilder] = None) -> None:
        self._images = images or ImageBlockBuilder()

    def parse(self, markdown: str) -> list[Block]:
        state = _ParseState()
        for line in _LINE_SPLIT_RE.split(normalize_markdown(markdown)):
            self._consume(state, line)
        self._flush_table(state)
        if state.in_code:
            self._emit_code(state)
        return state.blocks

    def _consume(self, state: _ParseState, line: str) -> None:
        trimmed = line.strip()

        if state.in_code:
            if trimmed.startswith(FENCE):
                self._emit_code(state)
            else:
                state.code_lines.append(line)
            return

        is_table_row = (
            len(trimmed) > 1 and trimmed.startswith("|") and trimmed.endswith("|")
        )
        if is_table_row and "![" in trimmed:
            self._flush_table(state)
            self._emit_table_image(state, trimmed)
            return
        if is_table_row:
            state.table_lines.append(trimmed)
            return
        self._flush_table(state)

        if _is_divider(trimmed):
            state.blocks.append(DividerBlock())
            return

        image = _IMAGE_RE.fullmatch(trimmed)
        if image is not None:
            state.blocks.append(self._images.build_image_block(image[2], image[1]))
            return

        if trimmed.startswith(FENCE):
            state.in_code = True
            state.code_language = trimmed[len(FENCE):].strip()
            return

        block = self._classify(trimmed)
        if block is not None:
            state.blocks.append(block)

    def _classify(self, trimmed: str) -> Optional[Block]:
        for prefix, block_type in _HEADING_PREFIXES:
            if trimmed.startswith(prefix):
                return _text_block(block_type, trimmed[len(prefix):].strip())

        if trimmed.startswith("> "):
            return self._wrapping_block(BlockType.QUOTE, trimmed[2:].strip())

        if trimmed.startswith(("- ", "* ")):
            return self._wrapping_block(
                BlockType.BULLETED_LIST_ITEM, trimmed[2:].strip()
            )

        numbered = _NUMBERED_RE.match(trimmed)
        if numbered is not None:
            return self._wrapping_block(
                BlockType.NUMBERED_LIST_ITEM, trimmed[numbered.end():].strip()
            )

        if not trimmed:
            return None

        return _text_block(BlockType.PARAGRAPH, trimmed)

    def _wrapping_block(self, block_type: BlockType, content: str) -> Block:
        """Quote or list item; a lone image becomes the block's child."""

        image = _IMAGE_RE.fullmatch(content)
        if image is None:
            return _text_block(block_type, content)
        child = self._images.build_image_block(image[2], image[1])
        return TextBlock(block_type, rich_text=(), children=(child,))

    def _emit_table_image(self, state: _ParseState, row: str) -> None:
        cells = split_table_cells(row)
        image = _IMAGE_RE.search(cells[0])
        if image is None:
            return
        alt, url = image[1], image[2]
        state.blocks.append(self._images.build_image_block(url, alt))
        caption = cells[1] if len(cells) > 1 and cells[1] else alt
        if caption.strip():
            state.blocks.append(_text_block(BlockType.PARAGRAPH, caption))

    def _flush_table(self, state: _ParseState) -> None:
        table = build_table_block(state.table_lines)
        if table is not None:
            state.blocks.append(table)
        state.table_lines.clear()

    def _emit_code(self, state: _ParseState) -> None:
        state.blocks.append(
            CodeBlock(
                language=normalize_code_language(state.code_language),
                rich_text=(plain_span("\n".join(state.code_lines)),),
            )
        )
        state.in_code = False
        state.code_language = ""
        state.code_lines.clear()


def _is_divider(trimmed: str) -> bool:
    return trimmed in ("---", "***") or _DIVIDER_RE.fullmatch(trimmed) is not None


def _text_block(block_type: BlockType, content: str) -> TextBlock:
    return TextBlock(block_type, rich_text=tuple(tokenize_inline(content)))


__all__ = [
    "BlockParser",
    "build_table_block",
    "normalize_markdown",
    "split_table_cells",
]
