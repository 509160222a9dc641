"""File discovery helpers shared across mdnotion modules."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

__all__ = [
    "extension_for",
    "iter_matching_files",
    "normalize_extensions",
    "read_text_file",
]


def normalize_extensions(values: Optional[Sequence[str]]) -> tuple[str, ...]:
    """Lowercase ``values``, drop leading dots and duplicates, keep order.

    Blank entries raise :class:`ValueError` rather than being skipped so a
    typo in config does not silently widen or narrow the file filter.
    """

    seen: set[str] = set()
    result: list[str] = []
    for item in values or ():
        candidate = str(item).strip().lower().lstrip(".")
        if not candidate:
            raise ValueError("Extensions must be non-empty strings.")
        if candidate not in seen:
            seen.add(candidate)
            result.append(candidate)
    return tuple(result)


def extension_for(path: Path) -> str | None:
    suffix = path.suffix
    if not suffix:
        return None
    return suffix.lstrip(".").lower()


def iter_matching_files(
    inputs: Sequence[Path], extensions: Iterable[str]
) -> Iterator[Path]:
    """Yield files from ``inputs``, expanding directories recursively.

    Explicit file inputs are always yielded (the caller decides whether
    their extension is acceptable). Directory members are filtered by
    ``extensions`` and sorted. Each path is yielded once.
    """

    allowed = set(extensions)
    seen: set[Path] = set()
    for path in sorted(inputs, key=str):
        if path.is_dir():
            members = (
                child
                for child in sorted(path.rglob("*"))
                if child.is_file() and extension_for(child) in allowed
            )
        else:
            members = iter((path,))
        for member in members:
            if member not in seen:
                seen.add(member)
                yield member


def read_text_file(path: Path) -> str:
    """Read ``path`` as UTF-8, replacing undecodable bytes."""
    with Path(path).open("r", encoding="utf-8", errors="replace") as fh:
        return fh.read()
