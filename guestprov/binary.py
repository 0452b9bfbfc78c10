"""Locate the puppet binary on the guest, falling back to the AIO install prefix."""

from __future__ import annotations

import posixpath
import shlex
from dataclasses import dataclass

from loguru import logger

from .errors import BinaryNotDetectedError
from .remote import Communicator

log = logger

FALLBACK_PREFIX = '/opt/puppetlabs/bin'


@dataclass(frozen=True)
class ResolvedBinary:
    name: str
    prefix: str = ''
    fell_back: bool = False

    @property
    def path(self) -> str:
        if not self.prefix:
            return self.name
        return posixpath.join(self.prefix, self.name)


def locate_binary(comm: Communicator, binary: str, binary_path: str = '') -> ResolvedBinary:
    """
    Find ``binary`` on the guest.

    The configured ``binary_path`` (or the guest ``PATH``) is tried first.
    Only when that fails is ``FALLBACK_PREFIX`` probed for an executable with
    elevated privilege. The result carries the prefix the command must use;
    the configuration itself is left untouched.

    Raises:
        BinaryNotDetectedError: neither location has the binary. The error
            records the fallback prefix that was probed.
    """
    first = ResolvedBinary(binary, binary_path)
    probe = shlex.quote(f'command -v {first.path}')
    if comm.test(f'sh -c {probe}'):
        log.debug('Found {} via {}', binary, first.path)
        return first

    fallback = ResolvedBinary(binary, FALLBACK_PREFIX, fell_back=True)
    log.debug('{} not on PATH; probing {}', binary, fallback.path)
    if not comm.test(f'test -x {shlex.quote(fallback.path)}', sudo=True):
        raise BinaryNotDetectedError(binary, FALLBACK_PREFIX)
    log.info('Using puppet binary from fallback prefix {}', FALLBACK_PREFIX)
    return fallback
