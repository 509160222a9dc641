"""TOML templates scaffolded by the ``config init`` subcommands."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Iterable

from .config import TomlConfigError, write_toml_template

__all__ = [
    "ConfigTemplate",
    "ConfigTemplateError",
    "get_template",
    "iter_templates",
]


class ConfigTemplateError(RuntimeError):
    """Raised for unknown templates or when one cannot be installed."""


@dataclass(frozen=True)
class ConfigTemplate:
    """A template file shipped inside ``package``."""

    name: str
    package: str
    resource: str = "template.toml"

    def read_text(self) -> str:
        source = resources.files(self.package) / self.resource
        try:
            return source.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigTemplateError(
                f"Template '{self.name}' is missing from {self.package}."
            ) from exc

    def write(self, path: Path, *, overwrite: bool = False) -> Path:
        try:
            return write_toml_template(
                path, template=self.read_text(), overwrite=overwrite
            )
        except TomlConfigError as exc:
            raise ConfigTemplateError(str(exc)) from exc


_REGISTRY: dict[str, ConfigTemplate] = {
    template.name: template
    for template in (ConfigTemplate("convert", "mdnotion.markdown"),)
}


def get_template(name: str) -> ConfigTemplate:
    if name not in _REGISTRY:
        raise ConfigTemplateError(f"Unknown config template '{name}'.")
    return _REGISTRY[name]


def iter_templates() -> Iterable[ConfigTemplate]:
    return tuple(_REGISTRY.values())
