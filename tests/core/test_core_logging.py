from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

from mdnotion.core.logging import JsonLogFormatter, configure_logger


@pytest.fixture
def logger_name(request):
    name = f"mdnotion.tests.logging.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _records(path: Path) -> list[dict]:
    return [
        json.loads(line)
        for line in path.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]


def test_configure_logger_writes_json_lines(tmp_path, logger_name):
    logger, log_path = configure_logger(logger_name, log_dir=tmp_path / "logs")

    logger.info(
        "Converted document",
        extra={"source": Path("/notes/a.md"), "block_count": 3},
    )
    logger.debug("hidden at INFO")

    assert log_path.parent == tmp_path / "logs"
    assert log_path.name == f"{logger_name.rsplit('.', 1)[-1]}.log"
    (record,) = _records(log_path)
    assert record["level"] == "INFO"
    assert record["logger"] == logger_name
    assert record["message"] == "Converted document"
    assert record["extra"] == {"source": "/notes/a.md", "block_count": 3}
    assert record["timestamp"].endswith("+00:00")


def test_configure_logger_reuses_file_handler(tmp_path, logger_name):
    configure_logger(logger_name, log_dir=tmp_path)
    logger, _ = configure_logger(logger_name, log_dir=tmp_path, level="DEBUG")

    file_handlers = [
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.DEBUG


def test_configure_logger_verbose_adds_console_once(tmp_path, logger_name):
    configure_logger(logger_name, log_dir=tmp_path, verbose=True)
    logger, _ = configure_logger(logger_name, log_dir=tmp_path, verbose=True)

    consoles = [
        handler
        for handler in logger.handlers
        if type(handler) is logging.StreamHandler
    ]
    assert len(consoles) == 1

    logger, _ = configure_logger(logger_name, log_dir=tmp_path)
    assert not [
        handler
        for handler in logger.handlers
        if type(handler) is logging.StreamHandler
    ]


def test_configure_logger_custom_filename(tmp_path, logger_name):
    _, log_path = configure_logger(
        logger_name, log_dir=tmp_path, filename="run.log"
    )

    assert log_path == tmp_path / "run.log"
    assert log_path.exists()


def test_formatter_includes_exception_text():
    formatter = JsonLogFormatter()
    try:
        raise ValueError("bad value")
    except ValueError:
        record = logging.LogRecord(
            "mdnotion.test",
            logging.ERROR,
            __file__,
            1,
            "failed %s",
            ("job",),
            sys.exc_info(),
        )

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "failed job"
    assert "ValueError: bad value" in payload["exception"]
    assert "extra" not in payload
