"""``mdnotion init``: create the workspace and, optionally, its config."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from mdnotion.core.config_templates import ConfigTemplateError, get_template
from mdnotion.core.workspace import (
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)
from mdnotion.markdown.config import CONFIG_FILENAME


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdnotion init",
        description="Create the mdnotion workspace: config/, logs/, converted/.",
    )
    parser.add_argument(
        "--path",
        type=Path,
        help="Workspace root (default: $MDNOTION_DATA_HOME or ~/.mdnotion).",
    )
    parser.add_argument(
        "--with-config",
        action="store_true",
        help=f"Also write config/{CONFIG_FILENAME} if it does not exist yet.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Print nothing on success.",
    )
    return parser


def _state(layout: WorkspaceLayout, key: str) -> str:
    return "created" if layout.created.get(key) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        layout = ensure_workspace(path=args.path)
    except WorkspaceError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    report = [f"Workspace ready at {layout.home} ({_state(layout, 'home')})"]
    report.extend(
        f"  {name:<9}  {directory} ({_state(layout, name)})"
        for name, directory in layout.items()
    )

    if args.with_config:
        target = layout.path_for("config") / CONFIG_FILENAME
        if target.exists():
            report.append(f"Config kept at {target}")
        else:
            try:
                get_template("convert").write(target)
            except ConfigTemplateError as exc:
                sys.stderr.write(f"{exc}\n")
                return 1
            report.append(f"Config written to {target}")

    if not args.quiet:
        sys.stdout.write("\n".join(report) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
