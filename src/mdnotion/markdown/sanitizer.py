"""Recursive post-processing of block JSON trees."""

from __future__ import annotations

from typing import Any, Callable, Iterator, Sequence

from mdnotion.blocks import JsonBlock

from .languages import normalize_code_language

BlockTransformer = Callable[[JsonBlock], bool]
"""Visit one block, mutating it in place; return True if it changed."""


def walk_blocks(blocks: Sequence[Any], transformer: BlockTransformer) -> int:
    """Apply ``transformer`` to every block in the tree, depth first.

    Children are read from both ``block["children"]`` and the type payload
    (``block[block["type"]]["children"]``), which covers list items, quotes,
    and tables. Non-dict entries are skipped. Returns how many blocks the
    transformer reported as changed.
    """

    changed = 0
    for block in blocks:
        if not isinstance(block, dict):
            continue
        if transformer(block):
            changed += 1
        for children in _child_lists(block):
            changed += walk_blocks(children, transformer)
    return changed


def _child_lists(block: JsonBlock) -> Iterator[list[Any]]:
    children = block.get("children")
    if isinstance(children, list):
        yield children
    kind = block.get("type")
    payload = block.get(kind) if isinstance(kind, str) else None
    if isinstance(payload, dict):
        nested = payload.get("children")
        if isinstance(nested, list):
            yield nested


def normalize_code_block(block: JsonBlock) -> bool:
    if block.get("type") != "code":
        return False
    payload = block.get("code")
    if not isinstance(payload, dict):
        payload = {}
        block["code"] = payload
    current = payload.get("language")
    normalized = normalize_code_language(current)
    if current == normalized:
        return False
    payload["language"] = normalized
    return True


def sanitize_block_tree(blocks: list[JsonBlock]) -> list[JsonBlock]:
    """Force every code block's language into the accepted set, in place.

    Safe to run on trees from any source and idempotent. Returns ``blocks``.
    """

    walk_blocks(blocks, normalize_code_block)
    return blocks


__all__ = [
    "BlockTransformer",
    "normalize_code_block",
    "sanitize_block_tree",
    "walk_blocks",
]
