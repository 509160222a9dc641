"""Core shared helpers for mdnotion subcommands."""

from __future__ import annotations

from .config import (
    EnvReader,
    TomlConfigError,
    first_set,
    load_toml,
    overlay_table,
    parse_bool,
    write_toml_template,
)
from .config_templates import (
    ConfigTemplate,
    ConfigTemplateError,
    get_template,
    iter_templates,
)
from .files import (
    extension_for,
    iter_matching_files,
    normalize_extensions,
    read_text_file,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "EnvReader",
    "TomlConfigError",
    "first_set",
    "load_toml",
    "overlay_table",
    "parse_bool",
    "write_toml_template",
    "ConfigTemplate",
    "ConfigTemplateError",
    "get_template",
    "iter_templates",
    "extension_for",
    "iter_matching_files",
    "normalize_extensions",
    "read_text_file",
    "configure_logger",
    "JsonLogFormatter",
    "ensure_workspace",
    "WorkspaceLayout",
    "WorkspaceError",
    "WORKSPACE_ENV",
]
