"""Settings for ``mdnotion convert``.

Sources, highest priority first: CLI flags (:class:`ConfigOverrides`),
``MDNOTION_CONVERT_*`` environment variables, ``convert.toml`` and the
defaults below. The TOML file is looked up at ``--config``, then
``MDNOTION_CONVERT_CONFIG``, then ``<workspace>/config/convert.toml``.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from mdnotion.core import config as core_config
from mdnotion.core import files as files_mod
from mdnotion.core import workspace as workspace_mod

from .delegate import DEFAULT_COMMAND, DEFAULT_TIMEOUT

CONFIG_FILENAME = "convert.toml"
CONFIG_ENV = "MDNOTION_CONVERT_CONFIG"
ENV_PREFIX = "MDNOTION_CONVERT_"

DEFAULTS: Mapping[str, Mapping[str, Any]] = {
    "paths": {"output_dir": None},
    "execution": {"extensions": ["md", "markdown"], "collision": "skip"},
    "delegate": {
        "enabled": True,
        "command": list(DEFAULT_COMMAND),
        "timeout": DEFAULT_TIMEOUT,
    },
    "logging": {"level": "INFO"},
}


class ConvertConfigError(RuntimeError):
    """Raised when a convert setting is missing, unknown, or invalid."""


class CollisionPolicy(Enum):
    """What to do when the output JSON file already exists."""

    SKIP = "skip"
    OVERWRITE = "overwrite"
    VERSION = "version"

    @classmethod
    def from_value(cls, value: str) -> "CollisionPolicy":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(policy.value for policy in cls)
            raise ConvertConfigError(
                f"Unknown collision policy '{value}'. Expected one of: "
                f"{choices}."
            ) from None


@dataclass(frozen=True)
class DelegateSettings:
    """How (and whether) to call the external converter."""

    enabled: bool = True
    command: tuple[str, ...] = DEFAULT_COMMAND
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class ConvertConfig:
    extensions: tuple[str, ...]
    output_dir: Path
    collision: CollisionPolicy
    log_level: str
    delegate: DelegateSettings = DelegateSettings()


@dataclass(frozen=True)
class ConfigOverrides:
    """Values taken from command-line flags; ``None`` means not given."""

    extensions: Optional[Sequence[str]] = None
    output_dir: Optional[Path] = None
    collision: Optional[CollisionPolicy] = None
    log_level: Optional[str] = None
    delegate_enabled: Optional[bool] = None
    delegate_timeout: Optional[float] = None


@dataclass(frozen=True)
class LoadResult:
    config: ConvertConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    cli = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env
    env_vars = core_config.EnvReader(env_map, ENV_PREFIX)

    layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    file_values, loaded_path = _read_config_file(
        explicit=config_path,
        env_path=(env_map.get(CONFIG_ENV) or "").strip(),
        fallback=layout.path_for("config") / CONFIG_FILENAME,
    )
    paths = file_values["paths"]
    execution = file_values["execution"]
    delegate = file_values["delegate"]

    config = ConvertConfig(
        extensions=_extensions(
            core_config.first_set(
                cli.extensions,
                env_vars.words("EXTENSIONS"),
                execution["extensions"],
            )
        ),
        output_dir=_output_dir(
            core_config.first_set(
                cli.output_dir,
                env_vars.path("OUTPUT_DIR"),
                paths["output_dir"],
            ),
            layout=layout,
        ),
        collision=_collision(
            core_config.first_set(
                cli.collision,
                env_vars.text("COLLISION"),
                execution["collision"],
            )
        ),
        log_level=_log_level(
            core_config.first_set(
                cli.log_level,
                env_vars.text("LOG_LEVEL"),
                file_values["logging"]["level"],
            )
        ),
        delegate=DelegateSettings(
            enabled=_enabled(
                core_config.first_set(
                    cli.delegate_enabled,
                    env_vars.text("DELEGATE"),
                    delegate["enabled"],
                )
            ),
            command=_command(
                core_config.first_set(
                    env_vars.text("DELEGATE_COMMAND"), delegate["command"]
                )
            ),
            timeout=_timeout(
                core_config.first_set(
                    cli.delegate_timeout,
                    env_vars.text("DELEGATE_TIMEOUT"),
                    delegate["timeout"],
                )
            ),
        ),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _read_config_file(
    *, explicit: Optional[Path], env_path: str, fallback: Path
) -> tuple[dict[str, Any], Optional[Path]]:
    """Overlay the config file on DEFAULTS.

    Only the workspace default may be absent; a path named by flag or
    environment variable must exist.
    """

    if explicit is not None:
        candidate, required = explicit.expanduser(), True
    elif env_path:
        candidate, required = Path(env_path).expanduser(), True
    else:
        candidate, required = fallback, False

    if not candidate.exists():
        if required:
            raise ConvertConfigError(f"Config file not found: {candidate}")
        return core_config.overlay_table(DEFAULTS, {}), None
    try:
        values = core_config.overlay_table(
            DEFAULTS, core_config.load_toml(candidate)
        )
    except core_config.TomlConfigError as exc:
        raise ConvertConfigError(str(exc)) from exc
    return values, candidate


def _extensions(value: object) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ConvertConfigError("execution.extensions must be a list.")
    try:
        extensions = files_mod.normalize_extensions(value)
    except ValueError as exc:
        raise ConvertConfigError(str(exc)) from exc
    if not extensions:
        raise ConvertConfigError("At least one extension must be configured.")
    return extensions


def _output_dir(
    value: object, *, layout: workspace_mod.WorkspaceLayout
) -> Path:
    # An empty string in the template means "use the workspace default".
    if value is None or value == "":
        return layout.path_for("converted")
    if not isinstance(value, (str, Path)):
        raise ConvertConfigError(
            "paths.output_dir must be a string when provided."
        )
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = layout.home / path
    return path.resolve()


def _collision(value: object) -> CollisionPolicy:
    if isinstance(value, CollisionPolicy):
        return value
    if not isinstance(value, str):
        raise ConvertConfigError(
            "execution.collision must be one of: skip, overwrite, version."
        )
    return CollisionPolicy.from_value(value)


def _log_level(value: object) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip().upper()
    raise ConvertConfigError("logging.level must be a non-empty string.")


def _enabled(value: object) -> bool:
    try:
        return core_config.parse_bool(value)
    except ValueError as exc:
        raise ConvertConfigError("delegate.enabled must be a boolean.") from exc


def _command(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        parts = shlex.split(value)
    elif isinstance(value, Sequence) and all(
        isinstance(item, str) for item in value
    ):
        parts = [item for item in value if item.strip()]
    else:
        raise ConvertConfigError("delegate.command must be a list of strings.")
    if not parts:
        raise ConvertConfigError("delegate.command must not be empty.")
    return tuple(parts)


def _timeout(value: object) -> float:
    if isinstance(value, bool):
        raise ConvertConfigError("delegate.timeout must be a number.")
    try:
        seconds = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConvertConfigError("delegate.timeout must be a number.") from exc
    if seconds <= 0:
        raise ConvertConfigError("delegate.timeout must be positive.")
    return seconds
