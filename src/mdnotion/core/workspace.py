"""Per-user data directory holding mdnotion config, logs, and output.

The root is the explicit ``path`` argument, else ``$MDNOTION_DATA_HOME``,
else ``~/.mdnotion``. Only the implicit default may fall back to a temp
directory when the home directory is read-only.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional


WORKSPACE_ENV = "MDNOTION_DATA_HOME"
DEFAULT_WORKSPACE = Path.home() / ".mdnotion"
SUBDIRECTORIES: tuple[str, ...] = ("config", "logs", "converted")


class WorkspaceError(RuntimeError):
    """Raised when the workspace cannot be located or created."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Workspace root, its named subdirectories, and which were just made."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        if key not in self.directories:
            raise KeyError(f"Unknown workspace directory '{key}'.")
        return self.directories[key]

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Locate the workspace and, when ``create``, make its directories."""

    root, pinned = _locate_root(os.environ if env is None else env, path)
    roots = [root]
    if create and not pinned:
        roots.append(Path(tempfile.gettempdir()) / "mdnotion-data")

    denied: Optional[PermissionError] = None
    for candidate in dict.fromkeys(roots):
        try:
            return _build_layout(candidate, create=create)
        except PermissionError as exc:
            denied = exc
    raise WorkspaceError(f"Unable to prepare workspace at {root}") from denied


def _locate_root(
    env: Mapping[str, str], path: Path | None
) -> tuple[Path, bool]:
    from_env = (env.get(WORKSPACE_ENV) or "").strip()
    if path is not None:
        chosen, pinned = Path(path), True
    elif from_env:
        chosen, pinned = Path(from_env), True
    else:
        chosen, pinned = DEFAULT_WORKSPACE, False
    return chosen.expanduser().resolve(), pinned


def _build_layout(root: Path, *, create: bool) -> WorkspaceLayout:
    entries = {"home": root}
    entries.update((name, root / name) for name in SUBDIRECTORIES)

    created: dict[str, bool] = {}
    for key, directory in entries.items():
        if directory.exists() and not directory.is_dir():
            raise WorkspaceError(
                f"Workspace entry '{key}' exists and is not a directory: "
                f"{directory}"
            )
        created[key] = create and _make_private_dir(directory)

    return WorkspaceLayout(
        home=root,
        directories=MappingProxyType(
            {name: entries[name] for name in SUBDIRECTORIES}
        ),
        created=MappingProxyType(created),
    )


def _make_private_dir(directory: Path) -> bool:
    """Create ``directory`` with mode 0700; True if it did not exist."""

    existed = directory.exists()
    directory.mkdir(parents=True, exist_ok=True)
    try:
        directory.chmod(0o700)
    except (PermissionError, NotImplementedError):
        pass
    return not existed
