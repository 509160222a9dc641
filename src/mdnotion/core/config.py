"""Layered settings shared by mdnotion commands.

Every setting is resolved from the first source that provides it:
command-line override, ``<PREFIX><KEY>`` environment variable, TOML file,
then the built-in default table.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - interpreter guard
    raise RuntimeError("Python 3.11+ is required for tomllib support.") from exc

__all__ = [
    "EnvReader",
    "TomlConfigError",
    "first_set",
    "load_toml",
    "overlay_table",
    "parse_bool",
    "write_toml_template",
]

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


class TomlConfigError(RuntimeError):
    """Raised for unreadable, malformed, or unknown TOML settings."""


def load_toml(path: Path) -> dict[str, Any]:
    """Parse ``path``; a missing file and bad syntax both raise TomlConfigError."""

    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    try:
        return tomllib.loads(raw.decode("utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise TomlConfigError(f"Failed to parse config TOML: {exc}") from exc


def overlay_table(
    defaults: Mapping[str, Any],
    overrides: Mapping[str, Any],
    *,
    section: str = "",
) -> dict[str, Any]:
    """Return a copy of ``defaults`` with ``overrides`` laid on top.

    Keys absent from ``defaults`` are rejected with their dotted name, and a
    table in ``defaults`` can only be replaced by another table.
    """

    merged = copy.deepcopy(dict(defaults))
    for key, value in overrides.items():
        name = f"{section}.{key}" if section else key
        if key not in merged:
            raise TomlConfigError(f"Unknown configuration key '{name}'.")
        if isinstance(merged[key], Mapping):
            if not isinstance(value, Mapping):
                raise TomlConfigError(
                    f"Expected table for '{name}', found {type(value).__name__}."
                )
            merged[key] = overlay_table(merged[key], value, section=name)
        else:
            merged[key] = value
    return merged


@dataclass(frozen=True)
class EnvReader:
    """Typed lookups of ``<prefix><KEY>`` environment variables.

    Unset and blank variables both read as ``None`` so they never shadow a
    value from the TOML file.
    """

    env: Mapping[str, str]
    prefix: str

    def text(self, key: str) -> Optional[str]:
        raw = self.env.get(f"{self.prefix}{key}")
        if raw is None:
            return None
        return raw.strip() or None

    def words(self, key: str) -> Optional[list[str]]:
        """Split on commas and whitespace."""
        raw = self.text(key)
        if raw is None:
            return None
        return raw.replace(",", " ").split() or None

    def path(self, key: str) -> Optional[Path]:
        raw = self.text(key)
        return None if raw is None else Path(raw).expanduser()


def first_set(*candidates: object) -> object:
    """Return the first candidate that is not ``None``."""

    return next((item for item in candidates if item is not None), None)


def parse_bool(value: object) -> bool:
    """Accept real booleans and the usual on/off spellings."""

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"Not a boolean: {value!r}")


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path``, refusing to clobber unless ``overwrite``."""

    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(template, encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
