"""Markdown to Notion block conversion entry point."""

from __future__ import annotations

import logging
from typing import Optional

from mdnotion.blocks import JsonBlock, blocks_to_json

from .delegate import BlockDelegate
from .images import ImageBlockBuilder, ImageUploader
from .parser import BlockParser
from .sanitizer import sanitize_block_tree

logger = logging.getLogger(__name__)


class MarkdownConverter:
    """Convert Markdown into block JSON ready for the Notion API.

    When a ``delegate`` is configured it gets the first attempt; a ``None``
    result or any exception it raises falls back to the local
    :class:`BlockParser`. Either way the tree is passed through
    :func:`sanitize_block_tree` before being returned.
    """

    def __init__(
        self,
        *,
        delegate: Optional[BlockDelegate] = None,
        uploader: Optional[ImageUploader] = None,
    ) -> None:
        self._delegate = delegate
        self._parser = BlockParser(ImageBlockBuilder(uploader))

    def convert(self, markdown: str) -> list[JsonBlock]:
        if not markdown.strip():
            return []
        blocks = self._try_delegate(markdown)
        if blocks is None:
            blocks = self.convert_locally(markdown)
        return sanitize_block_tree(blocks)

    def convert_locally(self, markdown: str) -> list[JsonBlock]:
        return blocks_to_json(self._parser.parse(markdown))

    def _try_delegate(self, markdown: str) -> Optional[list[JsonBlock]]:
        if self._delegate is None:
            return None
        try:
            blocks = self._delegate.try_convert(markdown)
        except Exception:
            logger.warning(
                "Block delegate raised; using local parser", exc_info=True
            )
            return None
        if blocks is None:
            logger.debug("Block delegate declined; using local parser")
        return blocks


def markdown_to_blocks(
    markdown: str,
    *,
    delegate: Optional[BlockDelegate] = None,
    uploader: Optional[ImageUploader] = None,
) -> list[JsonBlock]:
    """Convert ``markdown`` with a one-off :class:`MarkdownConverter`."""

    converter = MarkdownConverter(delegate=delegate, uploader=uploader)
    return converter.convert(markdown)


__all__ = ["MarkdownConverter", "markdown_to_blocks"]
