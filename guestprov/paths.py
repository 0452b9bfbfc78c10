"""Host/guest tagged paths and their resolution to guest-absolute paths."""

from __future__ import annotations

import hashlib
import os
import posixpath
from dataclasses import dataclass
from typing import Union

from .util import expand

GUEST_PATH_KINDS = ('manifests', 'environments', 'modules')


@dataclass(frozen=True)
class HostPath:
    """A path on the host that must be shared into the guest."""

    path: str

    @property
    def tag(self) -> str:
        return 'host'


@dataclass(frozen=True)
class GuestPath:
    """A path that already exists on the guest and is used as is."""

    path: str

    @property
    def tag(self) -> str:
        return 'guest'


TaggedPath = Union[HostPath, GuestPath]


def stable_hash(path: str) -> str:
    """Fixed-width hex digest of the path string (never of file contents)."""
    return hashlib.md5(path.encode('utf-8')).hexdigest()


def resolve_guest_path(tagged: TaggedPath, temp_dir: str, kind: str) -> str:
    """
    Return the path the applier sees on the guest.

    Guest paths pass through unchanged. Host paths map to a mount point
    below ``temp_dir`` named after ``kind`` and a hash of the host path, so
    an unchanged config always reproduces the same mount point.

    Example:
        >>> from guestprov.paths import HostPath, GuestPath, resolve_guest_path
        >>> resolve_guest_path(GuestPath('/etc/puppet/manifests'), '/tmp/x', 'manifests')
        '/etc/puppet/manifests'
        >>> resolve_guest_path(HostPath('/src/mods'), '/tmp/x', 'modules').startswith('/tmp/x/modules-')
        True
    """
    if kind not in GUEST_PATH_KINDS:
        raise ValueError(f'Unknown guest path kind: {kind!r}')
    if isinstance(tagged, GuestPath):
        return tagged.path
    return posixpath.join(temp_dir, f'{kind}-{stable_hash(tagged.path)}')


def parse_tagged_path(raw: object) -> TaggedPath | None:
    """Convert the config form ``["host", path]`` / ``["guest", path]``."""
    if raw is None or raw == [] or raw == '':
        return None
    if isinstance(raw, (HostPath, GuestPath)):
        return raw
    if isinstance(raw, str):
        # A bare string is a host path, as in the config file shorthand.
        return HostPath(raw)
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        tag = str(raw[0]).strip().lower()
        path = str(raw[1])
        if tag == 'host':
            return HostPath(path)
        if tag in {'guest', 'vm'}:
            return GuestPath(path)
        raise ValueError(
            f'Path tag must be "host" or "guest", got {raw[0]!r}'
        )
    raise ValueError(f'Expected ["host"|"guest", path], got {raw!r}')


def dump_tagged_path(tagged: TaggedPath | None) -> list[str]:
    if tagged is None:
        return []
    return [tagged.tag, tagged.path]


def expand_host_path(path: str, root_path: str) -> str:
    """Absolute, user/env-expanded form of a host path relative to ``root_path``."""
    full = expand(path)
    if not os.path.isabs(full):
        full = os.path.join(expand(root_path), full)
    return os.path.abspath(full)
