"""JSON-lines run logs for mdnotion commands.

Each command logs to ``<workspace>/logs/<command>.log`` through a rotating
handler. Structured context passed via ``extra=`` is kept under an
``"extra"`` key so log lines stay greppable with ``jq``.
"""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_ROLE_ATTR = "mdnotion_role"


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record."""

    _STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {
        "message",
        "asctime",
        "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        document: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in self._STANDARD_ATTRS
        }
        if extra:
            document["extra"] = extra
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            document["stack"] = self.formatStack(record.stack_info)
        return json.dumps(document, ensure_ascii=True, default=_json_default)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    filename: Optional[str] = None,
) -> tuple[logging.Logger, Path]:
    """Route ``name`` to a JSON log file and return the logger and its path.

    Safe to call repeatedly: the managed file handler is reused while the
    target path is unchanged. ``verbose`` lowers the file threshold to DEBUG
    and mirrors records to stderr.
    """

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    log_path = _writable_log_path(
        log_dir, filename or f"{name.rsplit('.', 1)[-1]}.log"
    )
    file_handler = _managed(logger, "file")
    if file_handler is None or Path(file_handler.baseFilename) != log_path:
        _drop(logger, "file")
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(JsonLogFormatter())
        _adopt(logger, file_handler, "file")
    file_handler.setLevel(logging.DEBUG if verbose else _level_number(level))

    if not verbose:
        _drop(logger, "console")
    elif _managed(logger, "console") is None:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(
            logging.Formatter("%(levelname)s %(name)s: %(message)s")
        )
        _adopt(logger, console, "console")

    return logger, log_path


def _level_number(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _managed(logger: logging.Logger, role: str) -> Any:
    for handler in logger.handlers:
        if getattr(handler, _ROLE_ATTR, None) == role:
            return handler
    return None


def _adopt(logger: logging.Logger, handler: logging.Handler, role: str) -> None:
    setattr(handler, _ROLE_ATTR, role)
    logger.addHandler(handler)


def _drop(logger: logging.Logger, role: str) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _ROLE_ATTR, None) == role:
            logger.removeHandler(handler)
            handler.close()


def _json_default(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return repr(value)


def _writable_log_path(log_dir: Path, filename: str) -> Path:
    """Create the log file (dir 0700, file 0600), else use the temp dir."""

    fallback = Path(tempfile.gettempdir()) / "mdnotion-logs"
    for directory in (Path(log_dir).expanduser().absolute(), fallback):
        target = directory / filename
        try:
            directory.mkdir(parents=True, exist_ok=True)
            target.touch(exist_ok=True)
        except PermissionError:
            continue
        _restrict(directory, 0o700)
        _restrict(target, 0o600)
        return target
    raise PermissionError(f"No writable directory for log file {filename}")


def _restrict(path: Path, mode: int) -> None:
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
