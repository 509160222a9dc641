"""Typed block and rich-text model serialized to Notion's block JSON."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

JsonBlock = dict[str, Any]


class BlockType(Enum):
    """Block kinds the converter can emit."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    HEADING_4 = "heading_4"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    QUOTE = "quote"
    CODE = "code"
    DIVIDER = "divider"
    IMAGE = "image"
    TABLE = "table"
    TABLE_ROW = "table_row"


HEADING_TYPES: tuple[BlockType, ...] = (
    BlockType.HEADING_1,
    BlockType.HEADING_2,
    BlockType.HEADING_3,
    BlockType.HEADING_4,
)

TEXT_TYPES: frozenset[BlockType] = frozenset(
    {
        BlockType.PARAGRAPH,
        BlockType.BULLETED_LIST_ITEM,
        BlockType.NUMBERED_LIST_ITEM,
        BlockType.QUOTE,
        *HEADING_TYPES,
    }
)


@dataclass(frozen=True)
class Annotations:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    code: bool = False
    color: str = "default"

    def to_dict(self) -> dict[str, Any]:
        return {
            "bold": self.bold,
            "italic": self.italic,
            "strikethrough": self.strikethrough,
            "underline": self.underline,
            "code": self.code,
            "color": self.color,
        }


@dataclass(frozen=True)
class Span:
    """One run of inline text with a uniform set of annotations.

    ``link`` is only ever set by :func:`mdnotion.markdown.inline.linked_span`,
    which drops targets that fail URL validation.
    """

    content: str
    annotations: Annotations = field(default_factory=Annotations)
    link: Optional[str] = None

    def with_style(self, *, bold: bool = False, italic: bool = False) -> "Span":
        """Return a copy with ``bold``/``italic`` forced on where requested."""

        annotations = replace(
            self.annotations,
            bold=self.annotations.bold or bold,
            italic=self.annotations.italic or italic,
        )
        return replace(self, annotations=annotations)

    def to_dict(self) -> dict[str, Any]:
        text: dict[str, Any] = {"content": self.content}
        if self.link is not None:
            text["link"] = {"type": "url", "url": self.link}
        return {
            "type": "text",
            "text": text,
            "annotations": self.annotations.to_dict(),
        }


RichText = tuple[Span, ...]


def rich_text_to_list(spans: RichText) -> list[dict[str, Any]]:
    return [span.to_dict() for span in spans]


@dataclass(frozen=True)
class ImageSource:
    """Where an image lives: an external URL or a Notion file upload id."""

    external_url: Optional[str] = None
    file_upload_id: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.external_url is None) == (self.file_upload_id is None):
            raise ValueError(
                "ImageSource requires exactly one of external_url or "
                "file_upload_id."
            )


@dataclass(frozen=True)
class UploadResult:
    """Value returned by an image uploader for a decoded data URI."""

    external_url: Optional[str] = None
    file_upload_id: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.external_url is None) == (self.file_upload_id is None):
            raise ValueError(
                "UploadResult requires exactly one of external_url or "
                "file_upload_id."
            )


class Block:
    """Base class for every block variant."""

    block_type: BlockType

    def payload(self) -> dict[str, Any]:
        raise NotImplementedError

    def to_dict(self) -> JsonBlock:
        kind = self.block_type.value
        return {"object": "block", "type": kind, kind: self.payload()}


@dataclass(frozen=True)
class TextBlock(Block):
    """Paragraph, heading, list item, or quote."""

    block_type: BlockType
    rich_text: RichText = ()
    children: tuple[Block, ...] = ()

    def __post_init__(self) -> None:
        if self.block_type not in TEXT_TYPES:
            raise ValueError(
                f"{self.block_type.value} is not a rich-text block type."
            )

    def payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {"rich_text": rich_text_to_list(self.rich_text)}
        if self.children:
            body["children"] = [child.to_dict() for child in self.children]
        return body


@dataclass(frozen=True)
class CodeBlock(Block):
    language: str
    rich_text: RichText = ()
    block_type: BlockType = field(default=BlockType.CODE, init=False)

    def payload(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "rich_text": rich_text_to_list(self.rich_text),
        }


@dataclass(frozen=True)
class DividerBlock(Block):
    block_type: BlockType = field(default=BlockType.DIVIDER, init=False)

    def payload(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class ImageBlock(Block):
    source: ImageSource
    caption: RichText = ()
    block_type: BlockType = field(default=BlockType.IMAGE, init=False)

    def payload(self) -> dict[str, Any]:
        body: dict[str, Any]
        if self.source.file_upload_id is not None:
            body = {
                "type": "file_upload",
                "file_upload": {"id": self.source.file_upload_id},
            }
        else:
            body = {
                "type": "external",
                "external": {"url": self.source.external_url},
            }
        body["caption"] = rich_text_to_list(self.caption)
        return body


@dataclass(frozen=True)
class TableRowBlock(Block):
    cells: tuple[RichText, ...]
    block_type: BlockType = field(default=BlockType.TABLE_ROW, init=False)

    def payload(self) -> dict[str, Any]:
        return {"cells": [rich_text_to_list(cell) for cell in self.cells]}


@dataclass(frozen=True)
class TableBlock(Block):
    """A table whose first row is the column header."""

    table_width: int
    rows: tuple[TableRowBlock, ...] = ()
    block_type: BlockType = field(default=BlockType.TABLE, init=False)

    def __post_init__(self) -> None:
        if self.table_width < 1:
            raise ValueError("table_width must be at least 1.")
        for row in self.rows:
            if len(row.cells) != self.table_width:
                raise ValueError(
                    "Table row has {0} cells, expected {1}.".format(
                        len(row.cells), self.table_width
                    )
                )

    def payload(self) -> dict[str, Any]:
        return {
            "table_width": self.table_width,
            "has_column_header": True,
            "has_row_header": False,
            "children": [row.to_dict() for row in self.rows],
        }


def blocks_to_json(blocks: list[Block] | tuple[Block, ...]) -> list[JsonBlock]:
    return [block.to_dict() for block in blocks]


__all__ = [
    "Annotations",
    "Block",
    "BlockType",
    "CodeBlock",
    "DividerBlock",
    "HEADING_TYPES",
    "ImageBlock",
    "ImageSource",
    "JsonBlock",
    "RichText",
    "Span",
    "TableBlock",
    "TableRowBlock",
    "TEXT_TYPES",
    "TextBlock",
    "UploadResult",
    "blocks_to_json",
    "rich_text_to_list",
]
