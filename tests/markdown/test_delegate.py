from __future__ import annotations

import json
import subprocess

import pytest

from mdnotion.markdown import delegate

DIVIDER = {"object": "block", "type": "divider", "divider": {}}


def _completed(stdout: str, returncode: int = 0):
    return subprocess.CompletedProcess(
        args=["node"], returncode=returncode, stdout=stdout
    )


def test_argv_runs_script_with_configured_command():
    runner = delegate.NodeMartianDelegate(command=("npx", "node"))

    assert runner.argv() == ["npx", "node", "-e", delegate.MARTIAN_SCRIPT]


def test_try_convert_returns_parsed_blocks(monkeypatch):
    captured: dict[str, object] = {}

    def fake_run(argv, **kwargs):
        captured["argv"] = argv
        captured.update(kwargs)
        return _completed(json.dumps([DIVIDER]))

    monkeypatch.setattr(delegate.subprocess, "run", fake_run)

    result = delegate.NodeMartianDelegate(timeout=2.5).try_convert("---")

    assert result == [DIVIDER]
    assert captured["input"] == "---"
    assert captured["timeout"] == 2.5
    assert captured["stderr"] is subprocess.STDOUT
    assert captured["check"] is False
    assert captured["argv"][0] == "node"


def test_try_convert_times_out(monkeypatch):
    def fake_run(argv, **kwargs):
        raise subprocess.TimeoutExpired(argv, kwargs["timeout"])

    monkeypatch.setattr(delegate.subprocess, "run", fake_run)

    assert delegate.NodeMartianDelegate().try_convert("# hi") is None


def test_try_convert_missing_binary(monkeypatch):
    def fake_run(argv, **kwargs):
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(delegate.subprocess, "run", fake_run)

    assert delegate.NodeMartianDelegate().try_convert("# hi") is None


def test_try_convert_real_missing_binary():
    runner = delegate.NodeMartianDelegate(
        command=("mdnotion-no-such-binary-for-tests",)
    )

    assert runner.try_convert("# hi") is None


def test_try_convert_non_zero_exit(monkeypatch):
    monkeypatch.setattr(
        delegate.subprocess,
        "run",
        lambda argv, **kwargs: _completed(json.dumps([DIVIDER]), 1),
    )

    assert delegate.NodeMartianDelegate().try_convert("# hi") is None


@pytest.mark.parametrize(
    "output",
    [
        "",
        "   \n",
        "Error: Cannot find module '@tryfabric/martian'",
        "{}",
        "[]",
        '["not a block"]',
        "[{}] trailing",
    ],
)
def test_unusable_output_is_rejected(output):
    assert delegate.parse_delegate_output(output) is None


def test_output_with_surrounding_whitespace_is_accepted():
    assert delegate.parse_delegate_output(f"\n{json.dumps([DIVIDER])}\n") == [
        DIVIDER
    ]
