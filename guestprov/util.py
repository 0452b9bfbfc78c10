"""Shared utility helpers for subprocess execution, paths, and command formatting."""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from loguru import logger

log = logger


@dataclass(frozen=True)
class CmdResult:
    code: int
    stdout: str
    stderr: str


class CmdError(RuntimeError):
    def __init__(self, cmd: Sequence[str] | str, result: CmdResult):
        self.cmd = cmd
        self.result = result
        super().__init__(
            f'Command failed (code={result.code}): {cmd}\n{result.stderr}'.strip()
        )


def shell_join(cmd: Sequence[str]) -> str:
    return ' '.join(shlex.quote(c) for c in cmd)


def run_cmd(
    cmd: Sequence[str],
    *,
    check: bool = True,
    capture: bool = True,
    text: bool = True,
    input_text: Optional[str] = None,
    env: Optional[dict[str, str]] = None,
) -> CmdResult:
    log.opt(depth=1).debug('RUN: {}', shell_join(cmd))
    p = subprocess.run(
        cmd,
        input=input_text if input_text is not None else None,
        capture_output=capture,
        text=text,
        env=env,
    )
    res = CmdResult(p.returncode, p.stdout or '', p.stderr or '')
    if check and p.returncode != 0:
        log.opt(depth=1).error(
            'Command failed code={} cmd={} stderr={} stdout={}',
            p.returncode,
            shell_join(cmd),
            res.stderr.strip(),
            res.stdout.strip(),
        )
        raise CmdError(cmd, res)
    if p.returncode == 0:
        log.opt(depth=1).debug('Command ok code=0 cmd={}', shell_join(cmd))
    return res


class StreamedCommand:
    """
    A running command whose merged stdout/stderr is consumed line by line.

    Iterating blocks until the next line arrives. Once the iterator is
    exhausted (or closed early) the process has been reaped and
    :attr:`returncode` is set. Closing early terminates the process, so an
    interrupted run reports a failing (negative) return code.
    """

    def __init__(
        self,
        cmd: Sequence[str],
        *,
        env: Optional[dict[str, str]] = None,
    ) -> None:
        self.cmd = list(cmd)
        self.returncode: int | None = None
        self._proc = subprocess.Popen(
            self.cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
            env=env,
        )

    def __iter__(self) -> Iterator[str]:
        proc = self._proc
        assert proc.stdout is not None
        finished = False
        try:
            for line in proc.stdout:
                yield line
            finished = True
        finally:
            if not finished and proc.poll() is None:
                log.warning('Terminating interrupted command: {}', shell_join(self.cmd))
                proc.terminate()
            proc.stdout.close()
            self.returncode = proc.wait()
            log.debug(
                'Streamed command exited code={} cmd={}',
                self.returncode,
                shell_join(self.cmd),
            )


def stream_cmd(
    cmd: Sequence[str],
    *,
    env: Optional[dict[str, str]] = None,
) -> StreamedCommand:
    log.opt(depth=1).debug('STREAM: {}', shell_join(cmd))
    return StreamedCommand(cmd, env=env)


def expand(path: str) -> str:
    return os.path.expandvars(os.path.expanduser(path))
