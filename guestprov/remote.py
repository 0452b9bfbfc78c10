"""Remote execution on the guest: the communicator protocol and its SSH implementation."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Iterable, Iterator, Protocol

from loguru import logger

from .config import ProvisionerConfig
from .runtime import guest_platform, ssh_base_args
from .util import CmdError, CmdResult, run_cmd, stream_cmd

log = logger

# ssh exits 255 when the connection or authentication fails.
SSH_TRANSPORT_ERROR = 255


class LineStream(Protocol):
    returncode: int | None

    def __iter__(self) -> Iterator[str]: ...


class Communicator(Protocol):
    def test(self, condition: str, *, sudo: bool = False) -> bool: ...

    def sudo(self, command: str, *, check: bool = True) -> CmdResult: ...

    def stream(
        self, command: str, *, sudo: bool = True, elevated: bool = False
    ) -> LineStream: ...

    def upload(self, local_path: Path | str, guest_path: str) -> None: ...


class RecordedCommand:
    """Replay pre-recorded output lines followed by a fixed exit code."""

    def __init__(self, lines: Iterable[str], returncode: int = 0) -> None:
        self._lines = list(lines)
        self._final = returncode
        self.returncode: int | None = None

    def __iter__(self) -> Iterator[str]:
        yield from self._lines
        self.returncode = self._final


class SSHCommunicator:
    """Run guest commands with the host ``ssh``/``scp`` clients."""

    def __init__(self, cfg: ProvisionerConfig) -> None:
        cfg = cfg.expanded_paths()
        host = (cfg.guest.host or '').strip()
        if not host:
            raise RuntimeError(
                'guest.host is empty; set it in config to the guest address.'
            )
        self.cfg = cfg
        self.platform = guest_platform(cfg.guest.platform)
        self.target = f'{cfg.guest.user}@{host}' if cfg.guest.user else host

    def _ssh_args(self) -> list[str]:
        return ssh_base_args(
            self.cfg.paths.ssh_identity_file,
            port=int(self.cfg.guest.port),
            batch_mode=True,
            strict_host_key_checking='accept-new',
        )

    def _remote(self, command: str, *, sudo: bool) -> str:
        if sudo and not self.platform.windows:
            return f'sudo -n -E sh -c {shlex.quote(command)}'
        return command

    def ssh_cmd(self, command: str, *, sudo: bool = False) -> list[str]:
        return ['ssh', *self._ssh_args(), self.target, self._remote(command, sudo=sudo)]

    def test(self, condition: str, *, sudo: bool = False) -> bool:
        """
        True when ``condition`` exits 0 on the guest.

        Raises:
            CmdError: when ssh itself fails (exit 255), so an unreachable
                guest is never mistaken for a failed condition.
        """
        cmd = self.ssh_cmd(condition, sudo=sudo)
        res = run_cmd(cmd, check=False, capture=True)
        if res.code == SSH_TRANSPORT_ERROR:
            raise CmdError(cmd, res)
        return res.code == 0

    def sudo(self, command: str, *, check: bool = True) -> CmdResult:
        return run_cmd(self.ssh_cmd(command, sudo=True), check=check, capture=True)

    def stream(
        self, command: str, *, sudo: bool = True, elevated: bool = False
    ) -> LineStream:
        if elevated and self.platform.windows:
            log.debug('Elevated run requested; relying on the SSH account privileges')
        return stream_cmd(self.ssh_cmd(command, sudo=sudo))

    def upload(self, local_path: Path | str, guest_path: str) -> None:
        cmd = ['scp', '-o', 'BatchMode=yes', '-o', 'StrictHostKeyChecking=accept-new']
        if int(self.cfg.guest.port) != 22:
            cmd.extend(['-P', str(self.cfg.guest.port)])
        if self.cfg.paths.ssh_identity_file:
            cmd.extend(['-i', self.cfg.paths.ssh_identity_file])
        cmd.extend([str(local_path), f'{self.target}:{guest_path}'])
        run_cmd(cmd, check=True, capture=True)
