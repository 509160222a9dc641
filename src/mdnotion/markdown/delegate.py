"""Best-effort delegation to an external Markdown-to-blocks converter.

The default delegate runs ``@tryfabric/martian`` through Node. The Markdown
goes in on stdin and one JSON array of blocks is expected on stdout. Every
failure mode (missing binary, timeout, non-zero exit, empty or unparseable
output) is reported as ``None`` so the caller can use the local parser.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from mdnotion.blocks import JsonBlock

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_COMMAND: tuple[str, ...] = ("node",)

MARTIAN_SCRIPT = "\n".join(
    (
        "const { markdownToBlocks } = require('@tryfabric/martian');",
        "const fs = require('fs');",
        "const md = fs.readFileSync(0, 'utf8');",
        "console.log(JSON.stringify(markdownToBlocks(md)));",
    )
)


class BlockDelegate(Protocol):
    """Anything that may produce a block tree for a Markdown document."""

    def try_convert(self, markdown: str) -> Optional[list[JsonBlock]]: ...


@dataclass(frozen=True)
class NodeMartianDelegate:
    """Run the martian converter in a Node subprocess with a hard timeout."""

    command: Sequence[str] = DEFAULT_COMMAND
    timeout: float = DEFAULT_TIMEOUT
    script: str = MARTIAN_SCRIPT

    def argv(self) -> list[str]:
        return [*self.command, "-e", self.script]

    def try_convert(self, markdown: str) -> Optional[list[JsonBlock]]:
        # stderr is merged so diagnostics never reach the caller's terminal;
        # they simply make the output unparseable.
        try:
            completed = subprocess.run(
                self.argv(),
                input=markdown,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            # subprocess.run kills the child before re-raising.
            logger.warning(
                "External converter timed out",
                extra={"timeout": self.timeout},
            )
            return None
        except OSError as exc:
            logger.debug(
                "External converter unavailable",
                extra={"command": list(self.command), "error": str(exc)},
            )
            return None

        if completed.returncode != 0:
            logger.debug(
                "External converter exited with an error",
                extra={"returncode": completed.returncode},
            )
            return None
        return parse_delegate_output(completed.stdout or "")


def parse_delegate_output(output: str) -> Optional[list[JsonBlock]]:
    """Decode delegate stdout into a block list, or ``None`` if unusable."""

    text = output.strip()
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        logger.debug(
            "External converter produced unparseable output",
            extra={"output_prefix": text[:200]},
        )
        return None
    if not isinstance(parsed, list) or not all(
        isinstance(block, dict) for block in parsed
    ):
        logger.debug("External converter output is not a list of blocks")
        return None
    if not parsed:
        return None
    return parsed


__all__ = [
    "BlockDelegate",
    "DEFAULT_COMMAND",
    "DEFAULT_TIMEOUT",
    "MARTIAN_SCRIPT",
    "NodeMartianDelegate",
    "parse_delegate_output",
]
