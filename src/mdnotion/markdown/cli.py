"""``mdnotion convert``: Markdown files in, Notion block JSON documents out."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from mdnotion.core import config_templates
from mdnotion.core import workspace as workspace_mod
from mdnotion.core.config_templates import ConfigTemplateError
from mdnotion.core.logging import configure_logger
from mdnotion.core.workspace import WorkspaceError

from .config import (
    CONFIG_FILENAME,
    CollisionPolicy,
    ConfigOverrides,
    ConvertConfig,
    ConvertConfigError,
    load_config,
)
from .converter import MarkdownConverter
from .delegate import NodeMartianDelegate
from .executor import ExecutionSummary, run_conversion

LOGGER_NAME = "mdnotion.convert"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdnotion convert",
        description="Convert Markdown files into Notion block JSON documents.",
        epilog="Use `mdnotion convert config init` to write a convert.toml.",
    )
    parser.add_argument(
        "paths", nargs="+", type=Path, help="Markdown files or directories."
    )

    where = parser.add_argument_group("locations")
    where.add_argument(
        "--config", type=Path, help="TOML config file to read."
    )
    where.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root holding config/, logs/ and converted/.",
    )
    where.add_argument(
        "--output-dir", type=Path, help="Where the JSON documents go."
    )
    where.add_argument(
        "--extensions",
        nargs="+",
        metavar="EXT",
        help="Extensions collected from directories, e.g. md markdown.",
    )

    collisions = parser.add_mutually_exclusive_group()
    collisions.add_argument(
        "--overwrite",
        dest="collision",
        action="store_const",
        const=CollisionPolicy.OVERWRITE,
        help="Replace an existing <name>.json.",
    )
    collisions.add_argument(
        "--version-output",
        dest="collision",
        action="store_const",
        const=CollisionPolicy.VERSION,
        help="Write <name>-01.json, <name>-02.json, ... instead.",
    )

    parser.add_argument(
        "--no-delegate",
        dest="delegate_enabled",
        action="store_const",
        const=False,
        help="Use only the built-in parser, never the Node converter.",
    )
    parser.add_argument(
        "--delegate-timeout",
        type=float,
        metavar="SECONDS",
        help="Time limit for one Node converter call.",
    )
    parser.add_argument("--log-level", help="Log file threshold, e.g. DEBUG.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    arguments = list(sys.argv[1:] if argv is None else argv)
    if arguments and arguments[0] == "config":
        return _config_main(arguments[1:])

    parser = _build_parser()
    args = parser.parse_args(arguments)
    load_dotenv()

    try:
        loaded = load_config(
            config_path=args.config,
            overrides=_overrides(args),
            workspace_path=args.workspace,
        )
    except (ConvertConfigError, WorkspaceError) as exc:
        parser.error(str(exc))

    config = loaded.config
    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=loaded.layout.path_for("logs"),
        level=config.log_level,
        verbose=args.verbose,
    )
    if loaded.config_path is not None:
        logger.debug(
            "Loaded convert config",
            extra={"config_path": str(loaded.config_path)},
        )

    summary = run_conversion(
        args.paths,
        config=config,
        convert=build_converter(config).convert,
        logger=logger,
    )
    sys.stdout.write(_report(summary, config.output_dir, log_path))
    return summary.exit_code


def build_converter(config: ConvertConfig) -> MarkdownConverter:
    """Return a converter, wired to the Node delegate when it is enabled."""

    if not config.delegate.enabled:
        return MarkdownConverter()
    return MarkdownConverter(
        delegate=NodeMartianDelegate(
            command=config.delegate.command,
            timeout=config.delegate.timeout,
        )
    )


def _overrides(args: argparse.Namespace) -> ConfigOverrides:
    return ConfigOverrides(
        extensions=args.extensions,
        output_dir=args.output_dir,
        collision=args.collision,
        log_level=args.log_level,
        delegate_enabled=args.delegate_enabled,
        delegate_timeout=args.delegate_timeout,
    )


def _report(summary: ExecutionSummary, output_dir: Path, log_path: Path) -> str:
    return (
        f"Converted {summary.success_count}, "
        f"skipped {summary.skipped_count}, "
        f"failed {summary.failure_count}.\n"
        f"Output directory: {output_dir}\n"
        f"Log file: {log_path}\n"
    )


def _config_main(argv: Sequence[str]) -> int:
    parser = argparse.ArgumentParser(prog="mdnotion convert config")
    actions = parser.add_subparsers(dest="action", required=True)
    init = actions.add_parser("init", help=f"Write a default {CONFIG_FILENAME}.")
    target_group = init.add_mutually_exclusive_group()
    target_group.add_argument("--path", type=Path, help="Exact file to write.")
    target_group.add_argument(
        "--workspace",
        type=Path,
        help=f"Write <workspace>/config/{CONFIG_FILENAME}.",
    )
    init.add_argument(
        "--force", action="store_true", help="Replace an existing file."
    )
    args = parser.parse_args(argv)

    try:
        if args.path is not None:
            target = args.path.expanduser().resolve()
        else:
            layout = workspace_mod.ensure_workspace(path=args.workspace)
            target = layout.path_for("config") / CONFIG_FILENAME
        written = config_templates.get_template("convert").write(
            target, overwrite=args.force
        )
    except (WorkspaceError, ConfigTemplateError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    sys.stdout.write(f"Wrote convert config to {written}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
