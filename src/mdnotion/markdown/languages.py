"""Code-block language normalization against Notion's accepted values.

The block API rejects a ``code.language`` outside this list with a
validation error, so every code block goes through
:func:`normalize_code_language` before it leaves the converter.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

FALLBACK_LANGUAGE = "plain text"

VALID_CODE_LANGUAGES: frozenset[str] = frozenset(
    {
        "abap",
        "abc",
        "agda",
        "arduino",
        "ascii art",
        "assembly",
        "bash",
        "basic",
        "bnf",
        "c",
        "c#",
        "c++",
        "clojure",
        "coffeescript",
        "coq",
        "css",
        "dart",
        "dhall",
        "diff",
        "docker",
        "ebnf",
        "elixir",
        "elm",
        "erlang",
        "f#",
        "flow",
        "fortran",
        "gherkin",
        "glsl",
        "go",
        "graphql",
        "groovy",
        "haskell",
        "hcl",
        "html",
        "idris",
        "java",
        "javascript",
        "json",
        "julia",
        "kotlin",
        "latex",
        "less",
        "lisp",
        "livescript",
        "llvm ir",
        "lua",
        "makefile",
        "markdown",
        "markup",
        "matlab",
        "mathematica",
        "mermaid",
        "nix",
        "notion formula",
        "objective-c",
        "ocaml",
        "pascal",
        "perl",
        "php",
        "plain text",
        "powershell",
        "prolog",
        "protobuf",
        "purescript",
        "python",
        "r",
        "racket",
        "reason",
        "ruby",
        "rust",
        "sass",
        "scala",
        "scheme",
        "scss",
        "shell",
        "smalltalk",
        "solidity",
        "sql",
        "swift",
        "toml",
        "typescript",
        "vb.net",
        "verilog",
        "vhdl",
        "visual basic",
        "webassembly",
        "xml",
        "yaml",
        "java/c/c++/c#",
    }
)

LANGUAGE_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "js": "javascript",
        "node": "javascript",
        "ts": "typescript",
        "py": "python",
        "csharp": "c#",
        "c-sharp": "c#",
        "cpp": "c++",
        "plaintext": "plain text",
        "plain": "plain text",
        "text": "plain text",
        "sh": "shell",
        "zsh": "shell",
        "ps1": "powershell",
        "md": "markdown",
    }
)


def normalize_code_language(raw: object) -> str:
    """Map a fence tag to an accepted language, defaulting to plain text.

    Non-string input (as found in untrusted block JSON) is treated as blank.
    """

    if not isinstance(raw, str):
        return FALLBACK_LANGUAGE
    candidate = raw.strip().lower()
    if not candidate:
        return FALLBACK_LANGUAGE
    resolved = LANGUAGE_ALIASES.get(candidate, candidate)
    if resolved in VALID_CODE_LANGUAGES:
        return resolved
    return FALLBACK_LANGUAGE


__all__ = [
    "FALLBACK_LANGUAGE",
    "LANGUAGE_ALIASES",
    "VALID_CODE_LANGUAGES",
    "normalize_code_language",
]
