"""Run ``mdnotion convert`` over a set of files and directories."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from mdnotion.core.files import extension_for, iter_matching_files

from .config import ConvertConfig
from .pipeline import (
    ConversionOutcome,
    ConversionStatus,
    ConvertFn,
    convert_file,
)

_OUTCOME_LOG = {
    ConversionStatus.SUCCESS: (logging.INFO, "Converted document"),
    ConversionStatus.SKIPPED: (logging.INFO, "Skipped document"),
    ConversionStatus.FAILED: (logging.ERROR, "Failed to convert document"),
}


@dataclass(frozen=True)
class ExecutionSummary:
    """Inputs as given, files actually considered, and one outcome each."""

    requested: tuple[Path, ...]
    processed: tuple[Path, ...]
    outcomes: tuple[ConversionOutcome, ...]
    _tally: Counter = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        tally = Counter(outcome.status for outcome in self.outcomes)
        object.__setattr__(self, "_tally", tally)

    @property
    def success_count(self) -> int:
        return self._tally[ConversionStatus.SUCCESS]

    @property
    def skipped_count(self) -> int:
        return self._tally[ConversionStatus.SKIPPED]

    @property
    def failure_count(self) -> int:
        return self._tally[ConversionStatus.FAILED]

    @property
    def exit_code(self) -> int:
        return 1 if self.failure_count else 0


def run_conversion(
    inputs: Sequence[Path],
    *,
    config: ConvertConfig,
    convert: ConvertFn,
    logger: logging.Logger,
) -> ExecutionSummary:
    """Convert each Markdown source reachable from ``inputs``, one at a time.

    Directories contribute files with an enabled extension. Explicit files
    with another extension are reported as skipped rather than converted.
    """

    requested = tuple(_absolute(Path(raw)) for raw in inputs)
    enabled = frozenset(config.extensions)
    logger.info(
        "Starting convert run",
        extra={
            "input_count": len(requested),
            "extensions": sorted(enabled),
            "output_dir": str(config.output_dir),
            "delegate_enabled": config.delegate.enabled,
        },
    )

    sources = tuple(iter_matching_files(requested, enabled))
    logger.info(
        "Collected Markdown sources", extra={"candidate_count": len(sources)}
    )

    outcomes = []
    for source in sources:
        outcome = _convert_one(
            source, config=config, enabled=enabled, convert=convert
        )
        level, message = _OUTCOME_LOG[outcome.status]
        logger.log(
            level,
            message,
            extra={
                "source": str(outcome.source),
                "output_path": (
                    str(outcome.output_path) if outcome.output_path else None
                ),
                "block_count": outcome.block_count,
                "reason": outcome.reason,
            },
        )
        outcomes.append(outcome)

    summary = ExecutionSummary(
        requested=requested, processed=sources, outcomes=tuple(outcomes)
    )
    logger.info(
        "Completed convert run",
        extra={
            "success_count": summary.success_count,
            "skipped_count": summary.skipped_count,
            "failure_count": summary.failure_count,
        },
    )
    return summary


def _convert_one(
    source: Path,
    *,
    config: ConvertConfig,
    enabled: frozenset[str],
    convert: ConvertFn,
) -> ConversionOutcome:
    extension = extension_for(source)
    if extension is not None and extension not in enabled:
        return ConversionOutcome(
            source=source,
            status=ConversionStatus.SKIPPED,
            reason=f"Extension '.{extension}' not enabled in configuration.",
        )
    return convert_file(
        source,
        output_dir=config.output_dir,
        collision=config.collision,
        convert=convert,
    )


def _absolute(path: Path) -> Path:
    expanded = path.expanduser()
    try:
        return expanded.resolve(strict=False)
    except OSError:
        return expanded.absolute()


__all__ = ["ExecutionSummary", "run_conversion"]
