from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mdnotion.markdown import config as cfg
from mdnotion.markdown import executor
from mdnotion.markdown import pipeline

DIVIDER = {"object": "block", "type": "divider", "divider": {}}


@pytest.fixture(name="logger")
def _quiet_logger() -> logging.Logger:
    logger = logging.getLogger("mdnotion.tests.convert_executor")
    logger.handlers.clear()
    logger.propagate = False
    logger.addHandler(logging.NullHandler())
    return logger


def _config(
    tmp_path: Path, extensions: tuple[str, ...] = ("md", "markdown")
) -> cfg.ConvertConfig:
    return cfg.ConvertConfig(
        extensions=extensions,
        output_dir=tmp_path / "out",
        collision=cfg.CollisionPolicy.OVERWRITE,
        log_level="INFO",
    )


def _convert(markdown: str) -> list[dict]:
    return [DIVIDER]


def test_directory_inputs_are_walked_in_sorted_order(tmp_path, logger):
    source_dir = tmp_path / "inputs"
    nested = source_dir / "nested"
    nested.mkdir(parents=True)

    first = source_dir / "b.md"
    second = nested / "a.markdown"
    ignored = nested / "c.txt"
    for path in (first, second, ignored):
        path.write_text("---", encoding="utf-8")

    summary = executor.run_conversion(
        [source_dir],
        config=_config(tmp_path),
        convert=_convert,
        logger=logger,
    )

    assert summary.success_count == 2
    assert summary.failure_count == 0
    assert summary.skipped_count == 0
    assert summary.exit_code == 0
    assert ignored.resolve() not in summary.processed
    assert summary.processed == tuple(
        sorted(summary.processed, key=lambda path: str(path))
    )
    for outcome in summary.outcomes:
        assert outcome.output_path is not None
        assert outcome.output_path.exists()
        assert outcome.block_count == 1


def test_explicit_file_with_disabled_extension_is_skipped(tmp_path, logger):
    source = tmp_path / "notes.txt"
    source.write_text("data", encoding="utf-8")

    summary = executor.run_conversion(
        [source],
        config=_config(tmp_path),
        convert=_convert,
        logger=logger,
    )

    assert summary.success_count == 0
    assert summary.skipped_count == 1
    outcome = summary.outcomes[0]
    assert outcome.status is pipeline.ConversionStatus.SKIPPED
    assert "'.txt'" in (outcome.reason or "")
    assert not (tmp_path / "out").exists()


def test_run_conversion_counts_failures(tmp_path, logger):
    good = tmp_path / "good.md"
    bad = tmp_path / "bad.md"
    good.write_text("ok", encoding="utf-8")
    bad.write_text("boom", encoding="utf-8")

    def convert(markdown: str) -> list[dict]:
        if markdown == "boom":
            raise RuntimeError("cannot convert")
        return [DIVIDER]

    summary = executor.run_conversion(
        [good, bad],
        config=_config(tmp_path),
        convert=convert,
        logger=logger,
    )

    assert summary.success_count == 1
    assert summary.failure_count == 1
    assert summary.exit_code == 1
    failed = [
        outcome
        for outcome in summary.outcomes
        if outcome.status is pipeline.ConversionStatus.FAILED
    ]
    assert failed[0].source == bad.resolve()
    assert failed[0].reason == "cannot convert"


def test_overlapping_inputs_convert_each_file_once(tmp_path, logger):
    source = tmp_path / "notes.md"
    source.write_text("x", encoding="utf-8")

    summary = executor.run_conversion(
        [source, tmp_path, Path(str(source))],
        config=_config(tmp_path),
        convert=_convert,
        logger=logger,
    )

    assert summary.processed == (source.resolve(),)
    assert summary.success_count == 1


def test_run_conversion_logs_with_structured_extras(tmp_path):
    records: list[logging.LogRecord] = []

    class _Collector(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    logger = logging.getLogger("mdnotion.tests.convert_executor.records")
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    logger.addHandler(_Collector())

    source = tmp_path / "notes.md"
    source.write_text("x", encoding="utf-8")

    executor.run_conversion(
        [source],
        config=_config(tmp_path),
        convert=_convert,
        logger=logger,
    )

    messages = [record.getMessage() for record in records]
    assert messages[0] == "Starting convert run"
    assert "Converted document" in messages
    completed = records[-1]
    assert completed.getMessage() == "Completed convert run"
    assert completed.success_count == 1
    assert completed.failure_count == 0
