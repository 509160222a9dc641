"""Markdown to Notion block conversion."""

from __future__ import annotations

from .converter import MarkdownConverter, markdown_to_blocks
from .delegate import BlockDelegate, NodeMartianDelegate
from .images import ImageBlockBuilder, ImageUploader
from .inline import tokenize_inline
from .languages import (
    FALLBACK_LANGUAGE,
    VALID_CODE_LANGUAGES,
    normalize_code_language,
)
from .parser import BlockParser, build_table_block, normalize_markdown
from .sanitizer import sanitize_block_tree, walk_blocks
from .urls import is_likely_valid_url, sanitize_url

__all__ = [
    "BlockDelegate",
    "BlockParser",
    "FALLBACK_LANGUAGE",
    "ImageBlockBuilder",
    "ImageUploader",
    "MarkdownConverter",
    "NodeMartianDelegate",
    "VALID_CODE_LANGUAGES",
    "build_table_block",
    "is_likely_valid_url",
    "markdown_to_blocks",
    "normalize_code_language",
    "normalize_markdown",
    "sanitize_block_tree",
    "sanitize_url",
    "tokenize_inline",
    "walk_blocks",
]
