"""Guest platform registry, capability hooks, and SSH argument helpers."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from loguru import logger

from .util import CmdError

log = logger


@dataclass(frozen=True)
class GuestPlatform:
    name: str
    windows: bool
    default_module_path: str
    module_path_sep: str
    hooks: frozenset[str] = field(default_factory=frozenset)


POSIX = GuestPlatform(
    name='linux',
    windows=False,
    default_module_path='/etc/puppet/modules',
    module_path_sep=':',
)

WINDOWS = GuestPlatform(
    name='windows',
    windows=True,
    default_module_path='/ProgramData/PuppetLabs/puppet/etc/modules',
    module_path_sep=';',
    hooks=frozenset({'wait_for_reboot'}),
)

GUEST_PLATFORMS: dict[str, GuestPlatform] = {
    'linux': POSIX,
    'windows': WINDOWS,
}


def guest_platform(name: str) -> GuestPlatform:
    try:
        return GUEST_PLATFORMS[name]
    except KeyError:
        raise ValueError(
            f'Unknown guest platform {name!r}; expected one of {sorted(GUEST_PLATFORMS)}'
        ) from None


def wait_for_reboot(comm, *, timeout_s: int = 600, poll_s: float = 2.0) -> None:
    """Block until the guest answers a trivial command again."""
    deadline = time.time() + timeout_s
    while time.time() < deadline:
        try:
            reachable = comm.test('true')
        except CmdError:
            reachable = False
        if reachable:
            log.debug('Guest is reachable after reboot check')
            return
        log.debug('Guest not reachable yet; waiting for reboot to finish')
        time.sleep(poll_s)
    raise TimeoutError(f'Timed out after {timeout_s}s waiting for guest reboot')


HOOK_IMPLS: dict[str, Callable[..., None]] = {
    'wait_for_reboot': wait_for_reboot,
}


def resolve_hooks(platform: GuestPlatform) -> dict[str, Callable[..., None]]:
    return {name: HOOK_IMPLS[name] for name in sorted(platform.hooks)}


def ssh_base_args(
    ident: str = '',
    *,
    port: int | None = None,
    strict_host_key_checking: str = 'accept-new',
    connect_timeout: int | None = None,
    batch_mode: bool = False,
    user_known_hosts_file: str | None = None,
) -> list[str]:
    args: list[str] = []
    if batch_mode:
        args.extend(['-o', 'BatchMode=yes'])
    if connect_timeout is not None:
        args.extend(['-o', f'ConnectTimeout={connect_timeout}'])
    args.extend(['-o', f'StrictHostKeyChecking={strict_host_key_checking}'])
    if user_known_hosts_file:
        args.extend(['-o', f'UserKnownHostsFile={user_known_hosts_file}'])
    if port is not None and port != 22:
        args.extend(['-p', str(port)])
    if ident:
        args.extend(['-i', ident])
    return args
