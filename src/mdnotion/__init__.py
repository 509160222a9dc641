"""Convert Markdown into Notion API block trees."""

from __future__ import annotations

from .markdown import MarkdownConverter, markdown_to_blocks

__all__ = ["MarkdownConverter", "markdown_to_blocks"]
