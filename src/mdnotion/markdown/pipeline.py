"""Convert one Markdown file into a ``<stem>.json`` block document."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from mdnotion.blocks import JsonBlock
from mdnotion.core.files import read_text_file

from .config import CollisionPolicy
from .output import render_document

ConvertFn = Callable[[str], list[JsonBlock]]


class ConversionError(RuntimeError):
    """A source path is missing or is not a regular file."""


class ConversionStatus(Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionOutcome:
    """What happened to a single source file."""

    source: Path
    status: ConversionStatus
    output_path: Optional[Path] = None
    block_count: int = 0
    reason: Optional[str] = None
    error: Optional[Exception] = None


def convert_file(
    source: Path,
    *,
    output_dir: Path,
    collision: CollisionPolicy,
    convert: ConvertFn,
    now: Callable[[], datetime] | None = None,
) -> ConversionOutcome:
    """Convert ``source`` into ``output_dir`` and describe the result.

    Errors from reading, converting or writing are returned as a ``FAILED``
    outcome instead of being raised, so one bad file does not stop a batch.
    """

    clock = now or (lambda: datetime.now(timezone.utc))
    try:
        source = _existing_file(source)
        default_target = output_dir / f"{source.stem}.json"
        target = choose_output_path(default_target, collision)
        if target is None:
            return ConversionOutcome(
                source=source,
                status=ConversionStatus.SKIPPED,
                output_path=default_target,
                reason="Output already exists and collision policy is 'skip'.",
            )
        blocks = convert(read_text_file(source))
        _write_document(target, source=source, blocks=blocks, now=clock())
    except Exception as exc:
        return ConversionOutcome(
            source=source,
            status=ConversionStatus.FAILED,
            reason=str(exc),
            error=exc,
        )
    return ConversionOutcome(
        source=source,
        status=ConversionStatus.SUCCESS,
        output_path=target,
        block_count=len(blocks),
    )


def choose_output_path(
    base: Path, collision: CollisionPolicy
) -> Optional[Path]:
    """Pick where to write ``base``; ``None`` means the file is skipped.

    ``VERSION`` picks the first free ``<stem>-NN<suffix>`` sibling.
    """

    if collision is CollisionPolicy.OVERWRITE or not base.exists():
        return base
    if collision is CollisionPolicy.SKIP:
        return None
    versions = (
        base.with_name(f"{base.stem}-{number:02d}{base.suffix}")
        for number in itertools.count(1)
    )
    return next(path for path in versions if not path.exists())


def _existing_file(source: Path) -> Path:
    resolved = source.resolve()
    if not resolved.exists():
        raise ConversionError(f"Source file not found: {resolved}")
    if not resolved.is_file():
        raise ConversionError(f"Source path is not a file: {resolved}")
    return resolved


def _write_document(
    target: Path, *, source: Path, blocks: list[JsonBlock], now: datetime
) -> None:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    modified = datetime.fromtimestamp(source.stat().st_mtime, tz=timezone.utc)
    metadata = {
        "source_path": str(source),
        "converted_at": now,
        "source_modified_at": modified,
    }
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_document(metadata, blocks), encoding="utf-8")


__all__ = [
    "ConversionError",
    "ConversionOutcome",
    "ConversionStatus",
    "ConvertFn",
    "choose_output_path",
    "convert_file",
]
