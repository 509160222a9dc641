"""The ``mdnotion`` command: routes ``mdnotion <command>`` to its module."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass
from importlib import import_module, metadata
from typing import Callable, Iterator, Optional, Sequence, TextIO


@dataclass(frozen=True)
class CommandSpec:
    """A subcommand backed by ``<module>.main``."""

    name: str
    summary: str
    module: str

    @property
    def prog(self) -> str:
        return f"mdnotion {self.name}"

    def run(self, argv: Sequence[str]) -> int:
        entry = getattr(import_module(self.module), "main")
        args = list(argv)
        try:
            with _argv_as(self.prog, args):
                result = entry(args)
        except SystemExit as exc:
            return _exit_status(exc)
        return result if isinstance(result, int) else 0


COMMANDS: dict[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec(
            "init",
            "Create the mdnotion workspace (config, logs, converted).",
            "mdnotion.workspace.cli",
        ),
        CommandSpec(
            "convert",
            "Convert Markdown files into Notion block JSON.",
            "mdnotion.markdown.cli",
        ),
    )
}


def format_command_table() -> str:
    width = max(map(len, COMMANDS), default=0)
    rows = [f"  {name:<{width}}  {spec.summary}" for name, spec in COMMANDS.items()]
    return "\n".join(["Available commands:", *rows])


def format_usage() -> str:
    return (
        "Usage: mdnotion <command> [args...]\n"
        "Commands: `mdnotion list`. Details: `mdnotion help <command>`.\n"
        "\n" + format_command_table()
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _emit(format_usage())
        return 2

    command, rest = args[0], args[1:]
    builtin = _BUILTINS.get(command)
    if builtin is not None:
        return builtin(rest)
    if command in COMMANDS:
        return COMMANDS[command].run(rest)
    return _unknown(command)


def _show_usage(_: Sequence[str]) -> int:
    _emit(format_usage())
    return 0


def _show_commands(_: Sequence[str]) -> int:
    _emit(format_command_table())
    return 0


def _show_version(_: Sequence[str]) -> int:
    try:
        _emit(metadata.version("mdnotion"))
    except metadata.PackageNotFoundError:
        _emit("unknown")
    return 0


def _show_help(args: Sequence[str]) -> int:
    if not args:
        return _show_usage(args)
    spec = COMMANDS.get(args[0])
    if spec is None:
        return _unknown(args[0])
    _emit(f"{spec.name}: {spec.summary}\nSee `{spec.prog} --help` for options.")
    return 0


_BUILTINS: dict[str, Callable[[Sequence[str]], int]] = {
    "-h": _show_usage,
    "--help": _show_usage,
    "list": _show_commands,
    "help": _show_help,
    "version": _show_version,
    "--version": _show_version,
    "-V": _show_version,
}


def _unknown(command: str) -> int:
    _emit(f"Unknown command '{command}'.", sys.stderr)
    _emit(format_command_table(), sys.stderr)
    return 2


def _emit(text: str, stream: Optional[TextIO] = None) -> None:
    (stream or sys.stdout).write(text + "\n")


@contextmanager
def _argv_as(prog: str, args: list[str]) -> Iterator[None]:
    saved = sys.argv
    sys.argv = [prog, *args]
    try:
        yield
    finally:
        sys.argv = saved


def _exit_status(exc: SystemExit) -> int:
    if exc.code is None:
        return 0
    if isinstance(exc.code, int):
        return exc.code
    _emit(str(exc.code), sys.stderr)
    return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
