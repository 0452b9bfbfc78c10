from __future__ import annotations

import pytest

from guestprov.util import CmdError, shell_join, stream_cmd
from guestprov.util import run_cmd as _run_cmd


def test_shell_join_quotes() -> None:
    cmd = ["echo", "a b", "c'd"]
    s = shell_join(cmd)
    assert "'a b'" in s
    assert "echo" in s


def test_run_cmd_success_and_failure() -> None:
    ok = _run_cmd(["bash", "-lc", "printf ok"], check=True, capture=True)
    assert ok.code == 0
    assert ok.stdout == "ok"
    bad = _run_cmd(["bash", "-lc", "exit 7"], check=False, capture=True)
    assert bad.code == 7
    with pytest.raises(CmdError):
        _run_cmd(["bash", "-lc", "exit 9"], check=True, capture=True)


def test_stream_cmd_yields_lines_in_order() -> None:
    run = stream_cmd(["bash", "-c", "printf 'one\\ntwo\\n'; echo err >&2; exit 2"])
    assert run.returncode is None
    lines = list(run)
    assert lines[:2] == ["one\n", "two\n"]
    assert "err\n" in lines
    assert run.returncode == 2


def test_stream_cmd_terminated_when_closed_early() -> None:
    run = stream_cmd(["bash", "-c", "echo first; sleep 30; echo never"])
    it = iter(run)
    assert next(it) == "first\n"
    it.close()
    assert run.returncode is not None
    assert run.returncode != 0


def test_stream_cmd_does_not_share_caller_stdin() -> None:
    run = stream_cmd(["bash", "-c", "cat; echo done"])
    assert list(run) == ["done\n"]
    assert run.returncode == 0
