"""In-memory stand-ins for the guest communicator used across tests."""

from __future__ import annotations

import shlex

from guestprov.remote import RecordedCommand
from guestprov.util import CmdResult


class FakeComm:
    def __init__(
        self,
        *,
        missing=(),
        on_path=True,
        fallback_ok=True,
        env_conf=None,
        lines=(),
        returncode=0,
        reachable=True,
    ):
        self.missing = set(missing)
        self.on_path = on_path
        self.fallback_ok = fallback_ok
        self.env_conf = env_conf
        self.lines = list(lines)
        self.returncode = returncode
        self.reachable = reachable
        self.calls = []

    def test(self, condition, *, sudo=False):
        self.calls.append(('test', condition, sudo))
        parts = shlex.split(condition)
        if parts[:2] == ['test', '-d']:
            return parts[2] not in self.missing
        if parts[:2] == ['sh', '-c']:
            return self.on_path
        if parts[:2] == ['test', '-x']:
            return self.fallback_ok
        if parts[:2] == ['test', '-e']:
            return self.env_conf is not None
        if parts == ['true']:
            return self.reachable
        raise AssertionError(f'unexpected test: {condition}')

    def sudo(self, command, *, check=True):
        self.calls.append(('sudo', command))
        if command.startswith('cat '):
            return CmdResult(0, self.env_conf or '', '')
        return CmdResult(0, '', '')

    def stream(self, command, *, sudo=True, elevated=False):
        self.calls.append(('stream', command, sudo, elevated))
        return RecordedCommand(self.lines, self.returncode)

    def upload(self, local_path, guest_path):
        self.calls.append(('upload', str(local_path), guest_path))

    def kinds(self):
        return [c[0] for c in self.calls]
